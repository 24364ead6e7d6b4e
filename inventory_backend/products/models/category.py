# products/models/category.py

import uuid

from django.db import models


class Category(models.Model):
    """
    Product grouping for the catalog.

    Products hold a weak reference (SET_NULL): deleting a category never
    touches products or their stock.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name
