# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Catalog CRUD for products.
- `stock` can be seeded on create; afterwards it moves only through stock
  movements, so updates reject it and never write the column.
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Category, Product


class ProductSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    category_name = serializers.CharField(source="category.name", read_only=True)

    stock = serializers.IntegerField(
        required=False, min_value=0, max_value=Product.MAX_STOCK, default=0
    )
    min_stock = serializers.IntegerField(
        required=False,
        min_value=0,
        max_value=Product.MAX_STOCK,
        default=Product.DEFAULT_MIN_STOCK,
    )
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, default=Decimal("0.00")
    )
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "min_stock",
            "is_low_stock",
            "category",
            "category_name",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "category_name",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]

    def validate_name(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name is required")
        return v

    def validate_price(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("price must be non-negative")
        return value

    def validate(self, attrs):
        if self.instance is not None and "stock" in self.initial_data:
            raise serializers.ValidationError(
                {
                    "stock": (
                        "stock cannot be edited directly. "
                        "Record an IN/OUT movement instead."
                    )
                }
            )
        return attrs

    def update(self, instance, validated_data):
        validated_data.pop("stock", None)

        for field, value in validated_data.items():
            setattr(instance, field, value)

        update_fields = [f for f in Product.CATALOG_FIELDS if f in validated_data]
        instance.save(update_fields=[*update_fields, "updated_at"])
        return instance
