"""Tests for the ``init_system`` management command."""

from __future__ import annotations

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from accounts.models import UserRole
from core.models import SystemSettings

User = get_user_model()


class TestInitSystem(TestCase):

    def _run(self, *args):
        out = StringIO()
        call_command("init_system", *args, stdout=out)
        return out.getvalue()

    def test_creates_settings_and_admin(self):
        output = self._run("--email", "Ops@Example.com", "--password", "s3cret-pass", "--name", "Ops")

        self.assertTrue(SystemSettings.objects.filter(pk=SystemSettings.SINGLETON_PK).exists())
        admin = User.objects.get(email="ops@example.com")
        self.assertEqual(admin.role, UserRole.ADMIN)
        self.assertTrue(admin.check_password("s3cret-pass"))
        self.assertIn("Created admin ops@example.com", output)

    def test_generates_password_when_missing(self):
        output = self._run("--email", "ops@example.com", "--password", "")

        self.assertIn("Generated password:", output)
        self.assertTrue(User.objects.filter(email="ops@example.com").exists())

    def test_idempotent(self):
        self._run("--email", "ops@example.com", "--password", "s3cret-pass")
        output = self._run("--email", "other@example.com", "--password", "s3cret-pass")

        self.assertIn("Admin already exists", output)
        self.assertEqual(User.objects.filter(role=UserRole.ADMIN).count(), 1)

    def test_refuses_email_of_existing_user(self):
        User.objects.create_user(email="ops@example.com", password="pass1234", name="Client")
        output = self._run("--email", "ops@example.com", "--password", "s3cret-pass")

        self.assertIn("already uses ops@example.com", output)
        self.assertFalse(User.objects.filter(role=UserRole.ADMIN).exists())
