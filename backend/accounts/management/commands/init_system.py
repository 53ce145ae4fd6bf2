"""
Management command: init_system
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Bootstraps a fresh deployment:

    • creates the ``SystemSettings`` singleton (auto-routing off);
    • creates the first administrator, unless an admin already exists.

Admin details come from the flags, falling back to the ``ADMIN_EMAIL``,
``ADMIN_PASSWORD`` and ``ADMIN_NAME`` environment variables.  When no
password is supplied a random one is generated and printed once.

The command is **idempotent** — safe to run multiple times.

Usage::

    python manage.py init_system --email admin@example.com --name "Ops Admin"

Prerequisites::

    python manage.py makemigrations
    python manage.py migrate
"""

import os
import secrets

from django.core.management.base import BaseCommand
from django.db import transaction

from accounts.models import User, UserRole
from core.models import SystemSettings


class Command(BaseCommand):
    help = "Create the system settings row and the initial administrator."

    def add_arguments(self, parser):
        parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL", "admin@example.com"))
        parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
        parser.add_argument("--name", default=os.environ.get("ADMIN_NAME", "System Administrator"))

    @transaction.atomic
    def handle(self, *args, **options):
        SystemSettings.load()
        self.stdout.write("  ✓ System settings ready")

        existing = User.objects.filter(role=UserRole.ADMIN, is_active=True).order_by("pk").first()
        if existing is not None:
            self.stdout.write(
                self.style.WARNING(f"  ~ Admin already exists: {existing.email}")
            )
            return

        email = options["email"].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            self.stdout.write(
                self.style.ERROR(f"  ✗ A non-admin user already uses {email}; pass --email")
            )
            return

        password = options["password"]
        generated = not password
        if generated:
            password = secrets.token_urlsafe(12)

        User.objects.create_superuser(email=email, password=password, name=options["name"])
        self.stdout.write(self.style.SUCCESS(f"  + Created admin {email}"))
        if generated:
            self.stdout.write(self.style.WARNING(f"  ! Generated password: {password}"))
            self.stdout.write("    Change it after the first login.")
