"""
core.domain.access — Capability-based authorization.

Every service asks one question before it touches data::

    can(actor, action, resource=None) -> bool

``action`` is a constant from ``core.permissions_constants``; the rule
bound to it inspects the actor's role (and, for object-level checks,
the resource).  ``require`` is the raising variant used by services.

╔══════════════════════════════════════════════════════════════════╗
║  Rules are pure functions of (actor, resource).  They never     ║
║  query the database; callers pass fully-loaded instances.       ║
╚══════════════════════════════════════════════════════════════════╝

Usage in an app's service layer::

    from core.domain.access import require
    from core.permissions_constants import ComplaintActions

    require(user, ComplaintActions.VIEW, complaint)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from accounts.models import UserRole
from core.domain.exceptions import PermissionDenied
from core.permissions_constants import (
    AdminActions,
    CommentActions,
    ComplaintActions,
)

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)

# A rule takes (actor, resource) and answers yes / no.
Rule = Callable[["User", Any], bool]


def get_user_role_name(user: User | None) -> str | None:
    """Return the role value of an authenticated user, or ``None``."""
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "role", None)


def is_admin(user: User) -> bool:
    return get_user_role_name(user) == UserRole.ADMIN


# ── Rule building blocks ────────────────────────────────────────────

def _admin_only(actor: User, resource: Any = None) -> bool:
    return actor.role == UserRole.ADMIN


def _admin_or_manager(actor: User, resource: Any = None) -> bool:
    return actor.role in (UserRole.ADMIN, UserRole.MANAGER)


def _not_client(actor: User, resource: Any = None) -> bool:
    return actor.role != UserRole.CLIENT


def _can_view_complaint(actor: User, complaint: Any) -> bool:
    """
    Role visibility over a single complaint:

    - admin    → every complaint
    - manager  → complaints of their department, or assigned to them
    - employee → complaints assigned to them
    - client   → complaints they own
    """
    if complaint is None:
        return False
    role = actor.role
    if role == UserRole.ADMIN:
        return True
    if role == UserRole.MANAGER:
        in_department = (
            actor.department_id is not None
            and complaint.department_id == actor.department_id
        )
        return in_department or complaint.current_assignee_id == actor.pk
    if role == UserRole.EMPLOYEE:
        return complaint.current_assignee_id == actor.pk
    if role == UserRole.CLIENT:
        return complaint.client_id == actor.pk
    return False


def _can_update_complaint(actor: User, complaint: Any) -> bool:
    return actor.role != UserRole.CLIENT and _can_view_complaint(actor, complaint)


def _can_modify_comment(actor: User, comment: Any) -> bool:
    """Author, any admin, or the manager of the complaint's department."""
    if comment is None:
        return False
    if actor.role == UserRole.ADMIN or comment.author_id == actor.pk:
        return True
    return (
        actor.role == UserRole.MANAGER
        and actor.department_id is not None
        and comment.complaint.department_id == actor.department_id
    )


_POLICY: dict[str, Rule] = {
    # Complaints
    ComplaintActions.VIEW:              _can_view_complaint,
    ComplaintActions.CHANGE_STATUS:     _can_view_complaint,
    ComplaintActions.UPDATE:            _can_update_complaint,
    ComplaintActions.DELETE:            _admin_only,
    ComplaintActions.ASSIGN:            _admin_only,
    ComplaintActions.BULK:              _admin_only,
    ComplaintActions.CREATE_FOR_CLIENT: _admin_or_manager,
    # Comments
    CommentActions.VIEW_INTERNAL:       _not_client,
    CommentActions.CREATE_INTERNAL:     _not_client,
    CommentActions.MODIFY:              _can_modify_comment,
    # Administration
    AdminActions.MANAGE_DEPARTMENTS:    _admin_only,
    AdminActions.MANAGE_USERS:          _admin_only,
    AdminActions.VIEW_TEAM:             _admin_or_manager,
    AdminActions.MANAGE_NATURE_TYPES:   _admin_only,
    AdminActions.MANAGE_SETTINGS:       _admin_only,
    AdminActions.LIST_UPLOADS:          _admin_only,
    AdminActions.MANAGE_WHATSAPP:       _admin_only,
}


def can(actor: User | None, action: str, resource: Any = None) -> bool:
    """
    Return ``True`` if ``actor`` may perform ``action`` on ``resource``.

    Anonymous and deactivated users can do nothing.  Unknown actions
    are denied (and logged, since that is a programming error).
    """
    if actor is None or not getattr(actor, "is_authenticated", False):
        return False
    if not actor.is_active:
        return False

    rule = _POLICY.get(action)
    if rule is None:
        logger.error("No authorization rule registered for action %r", action)
        return False
    return rule(actor, resource)


def require(
    actor: User | None,
    action: str,
    resource: Any = None,
    *,
    message: str = "",
) -> None:
    """
    Guard that raises ``PermissionDenied`` unless ``can(...)`` holds.

    Raises:
        core.domain.exceptions.PermissionDenied
    """
    if not can(actor, action, resource):
        raise PermissionDenied(
            message or "You do not have permission to perform this action."
        )
