"""
PATH: users/management/commands/ensure_superuser.py

Production-safe superuser bootstrap.

- Reads AUTO_ADMIN_EMAIL + AUTO_ADMIN_PASSWORD from env.
- Idempotent: creates superuser if missing; updates password if user exists.
- Does NOT print the password.
"""

from __future__ import annotations

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction


class Command(BaseCommand):
    help = "Create/update an initial superuser from env vars (idempotent)."

    def handle(self, *args, **options):
        email = (os.environ.get("AUTO_ADMIN_EMAIL") or "").strip()
        password = (os.environ.get("AUTO_ADMIN_PASSWORD") or "").strip()

        if not email or not password:
            self.stdout.write(self.style.WARNING("AUTO_ADMIN_* env vars not set. Skipping."))
            return

        User = get_user_model()

        with transaction.atomic():
            user = User.objects.select_for_update().filter(email__iexact=email).first()

            if user:
                user.is_active = True
                user.is_staff = True
                user.is_superuser = True
                user.role = User.ROLE_ADMIN
                user.set_password(password)
                user.save()
                self.stdout.write(self.style.SUCCESS(f"Superuser ensured: {email} (updated)"))
                return

            User.objects.create_superuser(email=email, password=password)
            self.stdout.write(self.style.SUCCESS(f"Superuser ensured: {email} (created)"))
