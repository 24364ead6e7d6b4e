# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .category import Category


class Product(models.Model):
    """
    Represents a stocked product.

    STOCK MODEL (IMPORTANT):
    - `stock` is the on-hand counter, seeded once at creation.
    - After creation it is written ONLY by the movement processor
      (products.services.movements) inside the per-product update scope.
    - Catalog edits must save with explicit update_fields that exclude `stock`,
      otherwise a stale in-memory value could overwrite a committed movement.
    """

    DEFAULT_MIN_STOCK = 5

    # Largest value the stock column holds on every supported backend
    MAX_STOCK = 2147483647

    CATALOG_FIELDS = (
        "name",
        "description",
        "price",
        "min_stock",
        "category",
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    stock = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=DEFAULT_MIN_STOCK)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="products_pr_name_9ff0a3_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(stock__gte=0),
                name="product_stock_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(min_stock__gte=0),
                name="product_min_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} (stock: {self.stock})"

    def clean(self):
        if self.price is None or Decimal(self.price) < Decimal("0.00"):
            raise ValidationError("price must be non-negative")

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock or 0) <= int(self.min_stock or 0)
