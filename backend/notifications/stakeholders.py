"""
Stakeholder resolution for complaint notifications.

Given a complaint, look up the phone numbers of everyone with a stake
in it: the client, the current assignee, the managers of its department
and every admin.  Each lookup is independent; a failing query degrades
to ``None`` / ``[]`` and is logged, so callers always get a usable
``StakeholderPhones``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from django.contrib.auth import get_user_model
from django.db import DatabaseError

from accounts.models import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StakeholderPhones:
    client: str | None = None
    assignee: str | None = None
    managers: list[str] = field(default_factory=list)
    admins: list[str] = field(default_factory=list)


def _clean(phone: str | None) -> str | None:
    if not phone:
        return None
    phone = phone.strip()
    return phone or None


def _user_phone(user_id: Any) -> str | None:
    if user_id is None:
        return None
    User = get_user_model()
    phone = User.objects.filter(pk=user_id).values_list("phone", flat=True).first()
    return _clean(phone)


def _role_phones(**filters: Any) -> list[str]:
    User = get_user_model()
    phones = (
        User.objects
        .filter(is_active=True, **filters)
        .exclude(phone="")
        .order_by("pk")
        .values_list("phone", flat=True)
    )
    return [cleaned for cleaned in (_clean(p) for p in phones) if cleaned]


def _guarded(label: str, fn, *args, default, **kwargs):
    try:
        return fn(*args, **kwargs)
    except DatabaseError:
        logger.exception("Stakeholder lookup '%s' failed", label)
        return default


def resolve_stakeholder_phones(complaint: Any) -> StakeholderPhones:
    """
    Return the phone numbers of ``complaint``'s stakeholders.

    Managers are active manager-role users of the complaint's department
    (zero or more); admins are all active admin-role users.  Users
    without a phone are skipped.  Never raises.
    """
    try:
        client = _guarded("client", _user_phone, complaint.client_id, default=None)
        assignee = _guarded("assignee", _user_phone, complaint.current_assignee_id, default=None)

        managers: list[str] = []
        if complaint.department_id is not None:
            managers = _guarded(
                "managers",
                _role_phones,
                role=UserRole.MANAGER,
                department_id=complaint.department_id,
                default=[],
            )
        admins = _guarded("admins", _role_phones, role=UserRole.ADMIN, default=[])
    except Exception:
        logger.exception(
            "Could not resolve stakeholders for complaint %s",
            getattr(complaint, "pk", None),
        )
        return StakeholderPhones()

    return StakeholderPhones(
        client=client,
        assignee=assignee,
        managers=managers,
        admins=admins,
    )
