# products/serializers/stock_movement.py

"""
STOCK MOVEMENT SERIALIZERS

- StockMovementSerializer: read-only ledger rows (with product + actor names)
- StockMovementCreateSerializer: request shape only. Business validation
  (quantity > 0, kind exactly IN/OUT, stock checks) belongs to the movement
  processor so that API and service callers share one set of rules.

Compatibility:
- Accepts BOTH "kind" and the legacy "type" key on POST.
"""

from __future__ import annotations

from rest_framework import serializers

from products.models import Product, StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    user_name = serializers.CharField(source="performed_by.name", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "product_name",
            "performed_by",
            "user_name",
            "kind",
            "quantity",
            "reason",
            "created_at",
        ]
        read_only_fields = fields


class StockMovementCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    # Passed through untouched: the processor accepts exactly "IN" or "OUT"
    kind = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    # Legacy alias for kind
    type = serializers.CharField(
        required=False, allow_blank=True, trim_whitespace=False, write_only=True
    )
    quantity = serializers.IntegerField(max_value=Product.MAX_STOCK)
    reason = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=255
    )

    def validate(self, attrs):
        kind = attrs.pop("type", None)
        if "kind" not in attrs:
            if kind is None:
                raise serializers.ValidationError({"kind": "kind is required"})
            attrs["kind"] = kind
        return attrs
