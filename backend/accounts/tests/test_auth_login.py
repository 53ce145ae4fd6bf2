"""
Integration tests — e-mail + password login.

Endpoint under test:  POST /api/accounts/auth/login/
                      (named URL: accounts:login)
Request payload:      {"email": "...", "password": "..."}
Success response:     HTTP 200, {"access": "...", "refresh": "...", "user": {...}}
Failure response:     HTTP 401 for bad credentials or an inactive account
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import UserRole
from departments.models import Department

User = get_user_model()

# ── Constants ────────────────────────────────────────────────────────────────
_PASSWORD = "Str0ng!Pass99"


class TestLogin(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.manager = User.objects.create_user(
            email="max@example.com",
            password=_PASSWORD,
            name="Manager Max",
            role=UserRole.MANAGER,
        )
        cls.department = Department.objects.create(name="Support", manager=cls.manager)
        User.objects.filter(pk=cls.manager.pk).update(department=cls.department)

        cls.inactive = User.objects.create_user(
            email="gone@example.com",
            password=_PASSWORD,
            name="Former Client",
            is_active=False,
        )

    def setUp(self):
        self.client = APIClient()
        self.login_url = reverse("accounts:login")

    def _post_login(self, email: str, password: str):
        return self.client.post(
            self.login_url, {"email": email, "password": password}, format="json",
        )

    def test_login_returns_tokens_and_profile(self):
        resp = self._post_login("max@example.com", _PASSWORD)

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.assertIn("access", resp.data)
        self.assertIn("refresh", resp.data)
        self.assertEqual(resp.data["user"]["email"], "max@example.com")
        self.assertEqual(resp.data["user"]["department_name"], "Support")
        self.assertNotIn("password", resp.data["user"])

    def test_access_token_carries_role_claims(self):
        resp = self._post_login("max@example.com", _PASSWORD)
        token = AccessToken(resp.data["access"])

        self.assertEqual(token["role"], UserRole.MANAGER)
        self.assertEqual(token["name"], "Manager Max")
        self.assertEqual(token["department"], self.department.pk)

    def test_email_is_case_insensitive(self):
        resp = self._post_login("MAX@Example.com", _PASSWORD)
        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")

    def test_login_records_last_login(self):
        self._post_login("max@example.com", _PASSWORD)
        self.manager.refresh_from_db()
        self.assertIsNotNone(self.manager.last_login)

    def test_wrong_password_rejected(self):
        resp = self._post_login("max@example.com", "nope-nope")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertNotIn("access", resp.data)

    def test_rejection_carries_bearer_challenge(self):
        resp = self._post_login("max@example.com", "nope-nope")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn("Bearer", resp["WWW-Authenticate"])

    def test_unknown_email_rejected(self):
        resp = self._post_login("nobody@example.com", _PASSWORD)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_account_rejected(self):
        resp = self._post_login("gone@example.com", _PASSWORD)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_missing_fields_rejected(self):
        resp = self.client.post(self.login_url, {"email": "max@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_token_authenticates_me_endpoint(self):
        access = self._post_login("max@example.com", _PASSWORD).data["access"]
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")

        resp = client.get(reverse("accounts:me"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["id"], self.manager.pk)
