# products/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- Created ONCE, by products.services.ledger, inside the same transaction
  as the product stock write
- id is a database sequence: strictly increasing in insert order
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .product import Product


class StockMovement(models.Model):
    class Kind(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    id = models.BigAutoField(primary_key=True)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stock_movements",
    )

    kind = models.CharField(max_length=3, choices=Kind.choices)
    quantity = models.PositiveIntegerField()
    reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-id"]
        indexes = [
            models.Index(fields=["kind"], name="products_st_kind_4c1e2b_idx"),
            models.Index(fields=["product", "-id"], name="products_st_product_8d7a51_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="stock_movement_quantity_positive",
            ),
            models.CheckConstraint(
                condition=Q(kind__in=["IN", "OUT"]),
                name="stock_movement_kind_valid",
            ),
        ]

    @property
    def signed_quantity(self) -> int:
        q = int(self.quantity or 0)
        return q if self.kind == self.Kind.IN else -q

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"#{self.id} {product_name} | {self.kind} {self.quantity}"
