"""
Integration tests — WhatsApp fan-out for complaint events.

Each scenario drives the real API, fires the ``on_commit`` callbacks and
inspects the HTTP calls the gateway client would have made.  The
``requests`` session and ``time.sleep`` are patched; nothing leaves the
process.
"""

from __future__ import annotations

from contextlib import contextmanager
from unittest import mock

from django.conf import settings
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import UserRole
from complaints.models import Complaint, ComplaintHistory, ComplaintStatus, NatureType
from departments.models import Department
from notifications.services import deliver_notification
from notifications.stakeholders import resolve_stakeholder_phones

User = get_user_model()

_PASSWORD = "Str0ngPass!"


class NotificationScenarioBase(TestCase):
    """
    Shared world:

    - Facilities department managed by Manager Max (03001234567), with a
      second manager Mia (03330000003) and employee Eve (03220000002).
    - Client Carla (03110000001).
    - Admin Ada (03009999999).
    """

    @classmethod
    def setUpTestData(cls):
        cls.manager = User.objects.create_user(
            email="max@example.com", password=_PASSWORD, name="Manager Max",
            role=UserRole.MANAGER, phone="03001234567",
        )
        cls.department = Department.objects.create(
            name="Facilities", manager=cls.manager, default_assignee=cls.manager,
        )
        cls.manager.department = cls.department
        cls.manager.save(update_fields=["department"])

        cls.other_manager = User.objects.create_user(
            email="mia@example.com", password=_PASSWORD, name="Manager Mia",
            role=UserRole.MANAGER, phone="03330000003", department=cls.department,
        )
        cls.employee = User.objects.create_user(
            email="eve@example.com", password=_PASSWORD, name="Employee Eve",
            role=UserRole.EMPLOYEE, phone="03220000002", department=cls.department,
        )
        cls.client_user = User.objects.create_user(
            email="carla@example.com", password=_PASSWORD, name="Client Carla",
            phone="03110000001",
        )
        cls.admin = User.objects.create_user(
            email="ada@example.com", password=_PASSWORD, name="Admin Ada",
            role=UserRole.ADMIN, phone="03009999999",
        )
        cls.nature_type = NatureType.objects.create(name="Maintenance", description="Upkeep")

    def setUp(self):
        self.client = APIClient()

    # ── Helpers ──────────────────────────────────────────────────────────────

    @contextmanager
    def gateway(self):
        """Configure the gateway and yield the mocked session and sleep."""
        configured = {
            **settings.NOTIFICATIONS,
            "EAGER": True,
            "WAAPI_INSTANCE_ID": "instance-1",
            "WAAPI_API_KEY": "api-key-0123456789",
            "SEND_DELAY_SECONDS": 1.0,
        }
        with self.settings(NOTIFICATIONS=configured), \
                mock.patch("notifications.gateway.requests.Session") as session_cls, \
                mock.patch("notifications.gateway.time.sleep") as sleep:
            session = session_cls.return_value
            session.post.return_value = mock.Mock(ok=True, status_code=200, text="")
            yield session, sleep

    @staticmethod
    def chat_ids(session):
        return [call.kwargs["json"]["chatId"] for call in session.post.call_args_list]

    @staticmethod
    def messages(session):
        return [call.kwargs["json"]["message"] for call in session.post.call_args_list]

    def make_complaint(self, assignee=None):
        assignee = assignee or self.employee
        return Complaint.objects.create(
            title="Leaking roof",
            description="Water in room 4",
            error_type="facility",
            error_screen="n/a",
            nature_type=self.nature_type,
            client=self.client_user,
            department=self.department,
            current_assignee=assignee,
            first_assignee=self.manager,
        )


class TestComplaintCreatedNotification(NotificationScenarioBase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        # One manager in the routed department.
        cls.other_manager.is_active = False
        cls.other_manager.save(update_fields=["is_active"])

    def _create(self):
        self.client.force_authenticate(user=self.client_user)
        return self.client.post(
            reverse("complaint-list"),
            {
                "title": "Leaking roof",
                "description": "Water in room 4",
                "error_type": "facility",
                "error_screen": "n/a",
                "nature_type": self.nature_type.pk,
            },
            format="json",
        )

    def test_created_notifies_manager_then_admin_one_second_apart(self):
        with self.gateway() as (session, sleep):
            with self.captureOnCommitCallbacks(execute=True):
                resp = self._create()

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        self.assertEqual(
            self.chat_ids(session),
            ["923001234567@c.us", "923009999999@c.us"],
        )
        self.assertEqual(sleep.call_args_list, [mock.call(1.0)])
        self.assertTrue(all("*New Complaint Created*" in m for m in self.messages(session)))
        self.assertIn("*Created by:* Client Carla", self.messages(session)[0])
        session.close.assert_called_once()

    def test_request_path_only_queues_the_event(self):
        dispatcher = mock.Mock()
        with self.gateway() as (session, _sleep), \
                mock.patch("notifications.services.get_dispatcher", return_value=dispatcher), \
                mock.patch(
                    "notifications.services.resolve_stakeholder_phones",
                    wraps=resolve_stakeholder_phones,
                ) as resolver:
            with self.captureOnCommitCallbacks(execute=True):
                resp = self._create()

            self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
            resolver.assert_not_called()
            session.post.assert_not_called()

            dispatcher.submit.assert_called_once()
            job = dispatcher.submit.call_args.args[0]
            self.assertEqual(job.event_type, "created")
            self.assertEqual(job.complaint_id, resp.data["id"])
            self.assertEqual(job.actor_id, self.client_user.pk)
            self.assertEqual(job.actor_role, UserRole.CLIENT)

            deliver_notification(job)

        resolver.assert_called_once()
        self.assertEqual(
            self.chat_ids(session),
            ["923001234567@c.us", "923009999999@c.us"],
        )
        self.assertIn("*Created by:* Client Carla", self.messages(session)[0])

    def test_unconfigured_gateway_sends_nothing(self):
        with mock.patch("notifications.gateway.requests.Session") as session_cls:
            with self.captureOnCommitCallbacks(execute=True):
                resp = self._create()

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        session_cls.return_value.post.assert_not_called()

    def test_pipeline_failure_does_not_fail_request(self):
        with self.gateway() as (session, _sleep), mock.patch(
            "notifications.services.resolve_stakeholder_phones",
            side_effect=RuntimeError("resolver down"),
        ):
            with self.assertLogs("notifications.services", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    resp = self._create()

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        session.post.assert_not_called()

    def test_failed_create_schedules_no_notification(self):
        self.nature_type.is_active = False
        self.nature_type.save()
        with self.captureOnCommitCallbacks() as callbacks:
            resp = self._create()

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, msg=f"Body: {resp.data}")
        self.assertEqual(callbacks, [])


class TestActivityNotifications(NotificationScenarioBase):

    def test_manager_comment_skips_all_managers(self):
        complaint = self.make_complaint()
        self.client.force_authenticate(user=self.manager)

        with self.gateway() as (session, _sleep):
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.client.post(
                    reverse("complaint-comment-list", kwargs={"complaint_pk": complaint.pk}),
                    {"content": "Roofer booked for Monday"},
                    format="json",
                )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        self.assertEqual(
            self.chat_ids(session),
            ["923110000001@c.us", "923220000002@c.us", "923009999999@c.us"],
        )
        message = self.messages(session)[0]
        self.assertIn("*Comment by:* Manager Max", message)
        self.assertIn("Roofer booked for Monday", message)

    def test_client_comment_skips_client(self):
        complaint = self.make_complaint()
        self.client.force_authenticate(user=self.client_user)

        with self.gateway() as (session, _sleep):
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.client.post(
                    reverse("complaint-comment-list", kwargs={"complaint_pk": complaint.pk}),
                    {"content": "Any update?"},
                    format="json",
                )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=f"Body: {resp.data}")
        self.assertNotIn("923110000001@c.us", self.chat_ids(session))
        self.assertEqual(
            self.chat_ids(session),
            ["923220000002@c.us", "923001234567@c.us", "923330000003@c.us", "923009999999@c.us"],
        )

    def test_status_change_by_employee(self):
        complaint = self.make_complaint()
        self.client.force_authenticate(user=self.employee)

        with self.gateway() as (session, _sleep):
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.client.patch(
                    reverse("complaint-change-status", kwargs={"pk": complaint.pk}),
                    {"status": ComplaintStatus.IN_PROGRESS},
                    format="json",
                )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.assertEqual(
            self.chat_ids(session),
            ["923110000001@c.us", "923001234567@c.us", "923330000003@c.us", "923009999999@c.us"],
        )
        self.assertIn("*Status:* New → *In Progress*", self.messages(session)[0])

    def test_invalid_status_rejected_without_notification(self):
        complaint = self.make_complaint()
        self.client.force_authenticate(user=self.admin)

        with self.captureOnCommitCallbacks() as callbacks:
            resp = self.client.patch(
                reverse("complaint-change-status", kwargs={"pk": complaint.pk}),
                {"status": "Reopened"},
                format="json",
            )

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST, msg=f"Body: {resp.data}")
        self.assertEqual(callbacks, [])
        complaint.refresh_from_db()
        self.assertEqual(complaint.status, ComplaintStatus.NEW)
        self.assertFalse(ComplaintHistory.objects.filter(complaint=complaint).exists())


class TestAssignmentNotifications(NotificationScenarioBase):

    @classmethod
    def setUpTestData(cls):
        super().setUpTestData()
        cls.it_manager = User.objects.create_user(
            email="ian@example.com", password=_PASSWORD, name="Manager Ian",
            role=UserRole.MANAGER, phone="03440000004",
        )
        cls.it_department = Department.objects.create(
            name="IT", manager=cls.it_manager, default_assignee=cls.it_manager,
        )
        cls.it_manager.department = cls.it_department
        cls.it_manager.save(update_fields=["department"])

    def test_reassign_notifies_new_assignee_and_admins(self):
        complaint = self.make_complaint()
        self.client.force_authenticate(user=self.admin)

        with self.gateway() as (session, _sleep):
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.client.post(
                    reverse("complaint-assign", kwargs={"pk": complaint.pk}),
                    {"department": self.it_department.pk},
                    format="json",
                )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.assertEqual(self.chat_ids(session), ["923440000004@c.us", "923009999999@c.us"])
        message = self.messages(session)[0]
        self.assertIn("🔄 *Complaint Reassigned*", message)
        self.assertIn("*From:* Employee Eve", message)
        self.assertIn("*To:* Manager Ian", message)
        self.assertIn("*Department:* IT", message)

    def test_assign_to_same_assignee_sends_assigned_event(self):
        complaint = self.make_complaint(assignee=self.it_manager)
        self.client.force_authenticate(user=self.admin)

        with self.gateway() as (session, _sleep):
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.client.post(
                    reverse("complaint-assign", kwargs={"pk": complaint.pk}),
                    {"department": self.it_department.pk},
                    format="json",
                )

        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=f"Body: {resp.data}")
        self.assertIn("👤 *Complaint Assigned*", self.messages(session)[0])
