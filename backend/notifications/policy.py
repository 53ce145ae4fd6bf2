"""
Recipient policy: which stakeholders hear about which event.

Routing events (``created``, ``assigned``, ``reassigned``) go to
everyone with operational responsibility.  Activity events
(``status_changed``, ``comment_added``) skip the actor's own role
bucket, i.e. a manager commenting suppresses *all* manager phones, not
just their own.  Anything else reaches managers and admins only.
"""

from __future__ import annotations

from typing import Iterable

from accounts.models import UserRole

from .stakeholders import StakeholderPhones

CREATED = "created"
ASSIGNED = "assigned"
REASSIGNED = "reassigned"
STATUS_CHANGED = "status_changed"
COMMENT_ADDED = "comment_added"

ROUTING_EVENTS = frozenset({CREATED, ASSIGNED, REASSIGNED})
ACTIVITY_EVENTS = frozenset({STATUS_CHANGED, COMMENT_ADDED})


def _dedupe(phones: Iterable[str | None]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for phone in phones:
        if not phone or not phone.strip():
            continue
        phone = phone.strip()
        if phone not in seen:
            seen.add(phone)
            result.append(phone)
    return result


def resolve_recipients(
    event_type: str,
    actor_role: str | None,
    phones: StakeholderPhones,
) -> list[str]:
    """
    Filter ``phones`` down to the recipients of ``event_type``.

    The result keeps first-seen order, holds no duplicates and no
    empty values.
    """
    if event_type in ROUTING_EVENTS:
        candidates = [phones.assignee, *phones.managers, *phones.admins]
    elif event_type in ACTIVITY_EVENTS:
        candidates = []
        if actor_role != UserRole.CLIENT:
            candidates.append(phones.client)
        if actor_role != UserRole.EMPLOYEE:
            candidates.append(phones.assignee)
        if actor_role != UserRole.MANAGER:
            candidates.extend(phones.managers)
        if actor_role != UserRole.ADMIN:
            candidates.extend(phones.admins)
    else:
        candidates = [*phones.managers, *phones.admins]

    return _dedupe(candidates)
