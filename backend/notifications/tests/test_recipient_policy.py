"""
Unit tests — recipient policy.

Routing events reach assignee, managers and admins; activity events
skip the actor's whole role bucket.  Results are ordered, deduplicated
and free of blanks.
"""

from __future__ import annotations

from django.test import SimpleTestCase

from accounts.models import UserRole
from notifications import policy
from notifications.policy import resolve_recipients
from notifications.stakeholders import StakeholderPhones

PHONES = StakeholderPhones(
    client="0311-0000001",
    assignee="0322-0000002",
    managers=["0333-0000003", "0344-0000004"],
    admins=["0355-0000005"],
)


class TestRoutingEvents(SimpleTestCase):

    def test_created_reaches_assignee_managers_and_admins(self):
        for event in (policy.CREATED, policy.ASSIGNED, policy.REASSIGNED):
            with self.subTest(event=event):
                self.assertEqual(
                    resolve_recipients(event, UserRole.CLIENT, PHONES),
                    ["0322-0000002", "0333-0000003", "0344-0000004", "0355-0000005"],
                )

    def test_routing_ignores_actor_role(self):
        as_admin = resolve_recipients(policy.CREATED, UserRole.ADMIN, PHONES)
        as_client = resolve_recipients(policy.CREATED, UserRole.CLIENT, PHONES)
        self.assertEqual(as_admin, as_client)

    def test_client_never_hears_about_routing(self):
        recipients = resolve_recipients(policy.REASSIGNED, UserRole.ADMIN, PHONES)
        self.assertNotIn(PHONES.client, recipients)

    def test_duplicates_and_blanks_are_dropped(self):
        phones = StakeholderPhones(
            client=None,
            assignee="03001234567",
            managers=["03001234567", "", "  "],
            admins=[None, "03009999999", "03009999999"],
        )
        self.assertEqual(
            resolve_recipients(policy.CREATED, UserRole.CLIENT, phones),
            ["03001234567", "03009999999"],
        )


class TestActivityEvents(SimpleTestCase):

    def test_client_actor_skips_client(self):
        recipients = resolve_recipients(policy.COMMENT_ADDED, UserRole.CLIENT, PHONES)
        self.assertEqual(
            recipients,
            ["0322-0000002", "0333-0000003", "0344-0000004", "0355-0000005"],
        )

    def test_employee_actor_skips_assignee(self):
        recipients = resolve_recipients(policy.STATUS_CHANGED, UserRole.EMPLOYEE, PHONES)
        self.assertEqual(
            recipients,
            ["0311-0000001", "0333-0000003", "0344-0000004", "0355-0000005"],
        )

    def test_manager_actor_skips_every_manager(self):
        recipients = resolve_recipients(policy.COMMENT_ADDED, UserRole.MANAGER, PHONES)
        self.assertEqual(recipients, ["0311-0000001", "0322-0000002", "0355-0000005"])

    def test_admin_actor_skips_every_admin(self):
        phones = StakeholderPhones(
            client="0311-0000001",
            assignee=None,
            managers=[],
            admins=["0355-0000005", "0366-0000006"],
        )
        recipients = resolve_recipients(policy.STATUS_CHANGED, UserRole.ADMIN, phones)
        self.assertEqual(recipients, ["0311-0000001"])

    def test_assignee_who_is_also_manager_still_reached_through_assignee(self):
        phones = StakeholderPhones(
            client="0311-0000001",
            assignee="0333-0000003",
            managers=["0333-0000003"],
            admins=[],
        )
        recipients = resolve_recipients(policy.COMMENT_ADDED, UserRole.ADMIN, phones)
        self.assertEqual(recipients, ["0311-0000001", "0333-0000003"])


class TestUnknownEvents(SimpleTestCase):

    def test_unknown_event_reaches_managers_and_admins(self):
        recipients = resolve_recipients("escalated", UserRole.CLIENT, PHONES)
        self.assertEqual(recipients, ["0333-0000003", "0344-0000004", "0355-0000005"])

    def test_empty_stakeholders_give_empty_list(self):
        self.assertEqual(resolve_recipients(policy.CREATED, None, StakeholderPhones()), [])
