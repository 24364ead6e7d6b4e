# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (ledger-safe):

- Category: plain CRUD.
- Product: catalog fields editable; stock can be seeded on the add form only.
  Changes never write the stock column (a concurrent movement could be lost).
- StockMovement: view-only. Movements are recorded through the API / service,
  never created, edited or deleted from the admin.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Category, Product, StockMovement


# =====================================================
# CATEGORY
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)
    ordering = ("name",)


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "category",
        "price",
        "stock",
        "min_stock",
        "is_low_stock",
        "created_at",
    )
    list_filter = ("category", "created_at")
    search_fields = ("name",)
    ordering = ("-created_at",)

    def get_readonly_fields(self, request, obj=None):
        base = ("created_at", "updated_at")
        if obj is not None:
            return ("stock", *base)
        return base

    def save_model(self, request, obj, form, change):
        if not change:
            return super().save_model(request, obj, form, change)

        fields = [f for f in Product.CATALOG_FIELDS if f in form.changed_data]
        obj.save(update_fields=[*fields, "updated_at"])

    @admin.display(boolean=True, description="Low stock")
    def is_low_stock(self, obj):
        return obj.is_low_stock

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.stock_movements.exists():
            return False
        return super().has_delete_permission(request, obj)


# =====================================================
# STOCK MOVEMENT (VIEW-ONLY LEDGER)
# =====================================================

@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "kind", "quantity", "performed_by", "reason", "created_at")
    list_filter = ("kind", "created_at")
    search_fields = ("product__name", "performed_by__email", "reason")
    ordering = ("-id",)
    list_select_related = ("product", "performed_by")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
