# users/admin.py

"""
USERS ADMIN

- Email login, display name + role on the profile
- Movement count per user (actors are PROTECTed by the ledger, so a user
  with recorded movements can be deactivated but not deleted)
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.db.models import Count

from users.models import User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    ordering = ("email",)
    list_display = ("email", "name", "role", "is_active", "is_staff", "movement_count")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("email", "name")
    readonly_fields = ("last_login", "created_at", "updated_at")

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("name", "role")}),
        ("Access", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Activity", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("email", "name", "role", "password1", "password2"),
            },
        ),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(
            _movement_count=Count("stock_movements")
        )

    @admin.display(description="Movements", ordering="_movement_count")
    def movement_count(self, obj):
        return obj._movement_count

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.stock_movements.exists():
            return False
        return super().has_delete_permission(request, obj)
