"""
Integration tests — administrative user management.

Endpoints under test:  /api/accounts/users/ (+ bulk/, team/)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import UserRole
from departments.models import Department

User = get_user_model()


class UserManagementBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="admin@example.com", password="pass1234", name="Admin Ada", role=UserRole.ADMIN,
        )
        cls.billing_manager = User.objects.create_user(
            email="bm@example.com", password="pass1234", name="Billing Boss", role=UserRole.MANAGER,
        )
        cls.it_manager = User.objects.create_user(
            email="im@example.com", password="pass1234", name="IT Boss", role=UserRole.MANAGER,
        )
        cls.billing = Department.objects.create(name="Billing", manager=cls.billing_manager)
        cls.it = Department.objects.create(name="IT", manager=cls.it_manager)
        User.objects.filter(pk=cls.billing_manager.pk).update(department=cls.billing)
        User.objects.filter(pk=cls.it_manager.pk).update(department=cls.it)
        cls.billing_manager.refresh_from_db()

        cls.billing_employee = User.objects.create_user(
            email="be@example.com", password="pass1234", name="Billing Bea",
            role=UserRole.EMPLOYEE, department=cls.billing,
        )
        cls.it_employee = User.objects.create_user(
            email="ie@example.com", password="pass1234", name="IT Ian",
            role=UserRole.EMPLOYEE, department=cls.it,
        )
        cls.carla = User.objects.create_user(
            email="carla@example.com", password="pass1234", name="Client Carla", phone="0300111",
        )

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)
        self.list_url = reverse("accounts:user-list")

    def detail_url(self, user):
        return reverse("accounts:user-detail", kwargs={"pk": user.pk})


class TestUserCrud(UserManagementBase):

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=self.billing_manager)
        resp = self.client.get(self.list_url)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        resp = self.client.get(self.list_url, {"role": UserRole.EMPLOYEE})
        self.assertEqual(
            {u["email"] for u in resp.data}, {"be@example.com", "ie@example.com"},
        )

        resp = self.client.get(self.list_url, {"department": self.it.pk})
        self.assertEqual({u["email"] for u in resp.data}, {"im@example.com", "ie@example.com"})

        resp = self.client.get(self.list_url, {"search": "0300"})
        self.assertEqual([u["email"] for u in resp.data], ["carla@example.com"])

    def test_inactive_hidden_by_default(self):
        User.objects.filter(pk=self.carla.pk).update(is_active=False)

        resp = self.client.get(self.list_url)
        self.assertNotIn(self.carla.pk, [u["id"] for u in resp.data])

        resp = self.client.get(self.list_url, {"include_inactive": "true"})
        self.assertIn(self.carla.pk, [u["id"] for u in resp.data])

    def test_create_employee(self):
        resp = self.client.post(
            self.list_url,
            {
                "email": "New.Hire@Example.com",
                "password": "pass1234",
                "name": "New Hire",
                "role": UserRole.EMPLOYEE,
                "department": self.billing.pk,
            },
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        self.assertEqual(resp.data["email"], "new.hire@example.com")
        self.assertEqual(resp.data["department_name"], "Billing")
        self.assertTrue(User.objects.get(pk=resp.data["id"]).check_password("pass1234"))

    def test_employee_requires_department(self):
        resp = self.client.post(
            self.list_url,
            {"email": "x@example.com", "password": "pass1234", "name": "No Dept", "role": UserRole.EMPLOYEE},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_client_department_is_dropped(self):
        resp = self.client.post(
            self.list_url,
            {
                "email": "c2@example.com",
                "password": "pass1234",
                "name": "Client Two",
                "department": self.billing.pk,
            },
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        self.assertIsNone(resp.data["department"])

    def test_duplicate_email_conflict(self):
        resp = self.client.post(
            self.list_url,
            {"email": "CARLA@example.com", "password": "pass1234", "name": "Dup"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_demote_employee_clears_department(self):
        resp = self.client.patch(
            self.detail_url(self.billing_employee), {"role": UserRole.CLIENT}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.assertIsNone(resp.data["department"])

    def test_update_password(self):
        resp = self.client.patch(
            self.detail_url(self.carla), {"password": "brand-new"}, format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.carla.refresh_from_db()
        self.assertTrue(self.carla.check_password("brand-new"))

    def test_cannot_delete_self(self):
        resp = self.client.delete(self.detail_url(self.admin))
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_user(self):
        resp = self.client.delete(self.detail_url(self.carla))

        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.carla.pk).exists())

    def test_unknown_user_404(self):
        resp = self.client.get(reverse("accounts:user-detail", kwargs={"pk": 999999}))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)


class TestUserBulkAndTeam(UserManagementBase):

    def test_bulk_delete_deactivates_and_skips_requester(self):
        resp = self.client.post(
            reverse("accounts:user-bulk"),
            {"action": "delete", "user_ids": [self.carla.pk, self.admin.pk]},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.assertEqual(resp.data["count"], 1)
        self.carla.refresh_from_db()
        self.admin.refresh_from_db()
        self.assertFalse(self.carla.is_active)
        self.assertTrue(self.admin.is_active)

    def test_bulk_activate(self):
        User.objects.filter(pk=self.carla.pk).update(is_active=False)
        resp = self.client.post(
            reverse("accounts:user-bulk"),
            {"action": "activate", "user_ids": [self.carla.pk]},
            format="json",
        )

        self.assertEqual(resp.data["count"], 1)
        self.carla.refresh_from_db()
        self.assertTrue(self.carla.is_active)

    def test_bulk_export(self):
        resp = self.client.post(
            reverse("accounts:user-bulk"),
            {"action": "export", "user_ids": [self.carla.pk, self.it_employee.pk]},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data["users"]), 2)

    def test_bulk_rejects_unknown_action(self):
        resp = self.client.post(
            reverse("accounts:user-bulk"),
            {"action": "promote", "user_ids": [self.carla.pk]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_sees_whole_team(self):
        resp = self.client.get(reverse("accounts:user-team"))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 4)

    def test_manager_sees_own_department(self):
        self.client.force_authenticate(user=self.billing_manager)
        resp = self.client.get(reverse("accounts:user-team"))

        self.assertEqual(
            {m["email"] for m in resp.data}, {"bm@example.com", "be@example.com"},
        )

    def test_client_cannot_view_team(self):
        self.client.force_authenticate(user=self.carla)
        resp = self.client.get(reverse("accounts:user-team"))
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
