"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the
result wrapped in a DRF ``Response``.

Architecture
------------
- ``UserManagementService`` — admin CRUD, bulk actions, team listing.
- ``CurrentUserService``    — "Me" profile and password change.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import ProtectedError, Q, QuerySet

from core.domain.access import require
from core.domain.exceptions import Conflict, DomainError, NotFound
from core.permissions_constants import AdminActions

from .models import DEPARTMENT_ROLES, UserRole

User = get_user_model()
logger = logging.getLogger(__name__)


def resolve_department_for_role(role: str, department):
    """
    Apply the role/department pairing rule.

    Employees and managers must belong to an active department; clients
    and admins never carry one (any supplied value is dropped).

    Raises
    ------
    DomainError
        If ``role`` requires a department and none (or an inactive one)
        was supplied.
    """
    if role not in DEPARTMENT_ROLES:
        return None
    if department is None:
        raise DomainError(f"Department is required for role '{role}'.")
    if not department.is_active:
        raise DomainError("Department not found")
    return department


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


class UserManagementService:
    """
    Administrative operations on users.

    Every public method starts by checking ``AdminActions.MANAGE_USERS``
    (or ``VIEW_TEAM`` for the team roster) through ``core.domain.access``.
    """

    @staticmethod
    def list_users(requesting_user: User, filters: dict[str, Any]) -> QuerySet:
        """
        Return users matching ``filters``.

        Inactive users are hidden unless ``include_inactive`` is set.
        """
        require(requesting_user, AdminActions.MANAGE_USERS)

        qs = User.objects.select_related("department").order_by("-created_at")
        if filters.get("role"):
            qs = qs.filter(role=filters["role"])
        if filters.get("department"):
            qs = qs.filter(department_id=filters["department"])
        if not filters.get("include_inactive"):
            qs = qs.filter(is_active=True)
        search = filters.get("search")
        if search:
            qs = qs.filter(
                Q(name__icontains=search)
                | Q(email__icontains=search)
                | Q(phone__icontains=search)
            )
        return qs

    @staticmethod
    def get_user(requesting_user: User, user_id: int) -> User:
        require(requesting_user, AdminActions.MANAGE_USERS)
        try:
            return User.objects.select_related("department").get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound("User not found")

    @staticmethod
    @transaction.atomic
    def create_user(requesting_user: User, validated_data: dict[str, Any]) -> User:
        """
        Create a user on behalf of an admin.

        Implementation Contract
        -----------------------
        1. Require ``MANAGE_USERS``.
        2. Reject a duplicate e-mail (case-insensitive) with ``Conflict``.
        3. Apply the role/department rule.
        4. Create via ``User.objects.create_user`` so the password is hashed.
        """
        require(requesting_user, AdminActions.MANAGE_USERS)

        data = dict(validated_data)
        email = data.pop("email").strip().lower()
        password = data.pop("password")

        if User.objects.filter(email__iexact=email).exists():
            raise Conflict("User with this email already exists")

        data["department"] = resolve_department_for_role(
            data.get("role", UserRole.CLIENT), data.get("department")
        )

        user = User.objects.create_user(email=email, password=password, **data)
        logger.info(
            "User %s (%s) created by %s", user.email, user.role, requesting_user.pk
        )
        return user

    @staticmethod
    @transaction.atomic
    def update_user(
        requesting_user: User,
        user_id: int,
        validated_data: dict[str, Any],
    ) -> User:
        """
        Apply an admin's partial update.

        The role/department rule is evaluated against the *resulting*
        role and department, so changing a manager into a client clears
        their department and changing a client into an employee requires
        one to be supplied.
        """
        require(requesting_user, AdminActions.MANAGE_USERS)
        user = UserManagementService.get_user(requesting_user, user_id)
        data = dict(validated_data)

        if "email" in data:
            email = data.pop("email").strip().lower()
            if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
                raise Conflict("Email already in use")
            user.email = email

        password = data.pop("password", None)
        if password:
            user.set_password(password)

        role = data.pop("role", user.role)
        department = data.pop("department", user.department)
        user.role = role
        user.department = resolve_department_for_role(role, department)

        for field, value in data.items():
            setattr(user, field, value)

        user.save()
        logger.info("User %s updated by %s", user.pk, requesting_user.pk)
        return user

    @staticmethod
    def delete_user(requesting_user: User, user_id: int) -> None:
        """
        Hard-delete a user.

        Raises ``DomainError`` for self-deletion and ``Conflict`` when the
        user is still referenced by complaints.
        """
        require(requesting_user, AdminActions.MANAGE_USERS)
        if int(user_id) == requesting_user.pk:
            raise DomainError("Cannot delete your own account")

        user = UserManagementService.get_user(requesting_user, user_id)
        try:
            user.delete()
        except ProtectedError:
            raise Conflict(
                "User is referenced by existing complaints; deactivate the account instead."
            )
        logger.info("User %s deleted by %s", user_id, requesting_user.pk)

    @staticmethod
    @transaction.atomic
    def bulk_action(
        requesting_user: User,
        action: str,
        user_ids: list[int],
    ) -> dict[str, Any]:
        """
        Apply ``action`` to many users at once.

        - ``delete``   → deactivate (never a hard delete); the requester
                         is skipped.
        - ``activate`` → reactivate.
        - ``export``   → return the selected users serialised.
        """
        require(requesting_user, AdminActions.MANAGE_USERS)
        qs = User.objects.filter(pk__in=user_ids)

        if action == "delete":
            count = qs.exclude(pk=requesting_user.pk).update(is_active=False)
            logger.info("Bulk-deactivated %d users (by %s)", count, requesting_user.pk)
            return {"message": f"{count} users deactivated successfully", "count": count}

        if action == "activate":
            count = qs.update(is_active=True)
            logger.info("Bulk-activated %d users (by %s)", count, requesting_user.pk)
            return {"message": f"{count} users activated successfully", "count": count}

        if action == "export":
            from .serializers import UserDetailSerializer

            users = qs.select_related("department")
            return {"users": UserDetailSerializer(users, many=True).data}

        raise DomainError("Invalid action. Supported actions: delete, activate, export")

    @staticmethod
    def list_team(requesting_user: User) -> QuerySet:
        """
        Active employees and managers.  Managers only see their own
        department's staff.
        """
        require(requesting_user, AdminActions.VIEW_TEAM)
        qs = (
            User.objects
            .select_related("department")
            .filter(is_active=True, role__in=[UserRole.EMPLOYEE, UserRole.MANAGER])
            .order_by("department__name", "name")
        )
        if requesting_user.role == UserRole.MANAGER:
            qs = qs.filter(department_id=requesting_user.department_id)
        return qs


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Operations a user performs on their own account."""

    @staticmethod
    def get_profile(user: User) -> User:
        return User.objects.select_related("department").get(pk=user.pk)

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """
        Update whitelisted profile fields.

        ``notification_preferences`` is merged into the stored dict so a
        client can toggle one channel without resending the other.
        """
        data = dict(validated_data)
        preferences = data.pop("notification_preferences", None)
        if preferences is not None:
            merged = dict(user.notification_preferences or {})
            merged.update(preferences)
            user.notification_preferences = merged

        for field, value in data.items():
            setattr(user, field, value)
        user.save()
        return user

    @staticmethod
    def change_password(user: User, current_password: str, new_password: str) -> None:
        if not user.check_password(current_password):
            raise DomainError("Current password is incorrect")
        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])
        logger.info("User %s changed their password", user.pk)
