"""
Departments Service Layer.

Owns department CRUD and the per-department complaint statistics.
The ``Complaint`` model is resolved lazily through ``apps.get_model``
because ``complaints`` itself depends on ``departments``.
"""

from __future__ import annotations

import logging
from typing import Any

from django.apps import apps
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import ProtectedError, QuerySet

from accounts.models import UserRole
from core.domain.access import can, require
from core.domain.exceptions import Conflict, DomainError, NotFound
from core.permissions_constants import AdminActions

from .models import Department

User = get_user_model()
logger = logging.getLogger(__name__)

RESOLVED_STATUSES = ("Completed", "Done", "Closed")
PENDING_STATUSES = ("New", "Assigned", "In Progress")


def _validate_manager(manager) -> None:
    if manager is None or manager.role != UserRole.MANAGER or not manager.is_active:
        raise DomainError("Invalid manager ID - user not found or not a manager")


def _validate_default_assignee(assignee) -> None:
    if assignee is not None and not assignee.is_active:
        raise DomainError("Invalid default assignee ID - user not found")


class DepartmentService:

    @staticmethod
    def list_departments(requesting_user, *, include_inactive: bool = False) -> QuerySet:
        """
        Active departments for everyone; admins may ask for inactive
        ones as well.
        """
        qs = Department.objects.select_related("manager", "default_assignee")
        if include_inactive and can(requesting_user, AdminActions.MANAGE_DEPARTMENTS):
            return qs
        return qs.filter(is_active=True)

    @staticmethod
    def get_department(pk) -> Department:
        try:
            return Department.objects.select_related("manager", "default_assignee").get(pk=pk)
        except Department.DoesNotExist:
            raise NotFound("Department not found")

    @staticmethod
    def get_department_detail(pk) -> Department:
        """
        Load a department and attach ``member_list``, ``member_count`` and
        ``statistics`` for ``DepartmentDetailSerializer``.

        ``member_list`` lists active users of the department other than the
        manager and default assignee; ``member_count`` counts those two
        back in.  ``avg_resolution_days`` averages ``updated_at -
        created_at`` over resolved complaints, rounded to one decimal.
        """
        department = DepartmentService.get_department(pk)
        Complaint = apps.get_model("complaints", "Complaint")

        leadership_ids = {
            user_id
            for user_id in (department.manager_id, department.default_assignee_id)
            if user_id
        }
        members = list(
            User.objects
            .filter(department=department, is_active=True)
            .exclude(pk__in=leadership_ids)
            .order_by("name")
        )

        complaints = Complaint.objects.filter(department=department)
        resolved = list(
            complaints.filter(status__in=RESOLVED_STATUSES).values_list("created_at", "updated_at")
        )
        avg_days = 0.0
        if resolved:
            total_days = sum(
                (updated - created).total_seconds() / 86400 for created, updated in resolved
            )
            avg_days = round(total_days / len(resolved), 1)

        department.member_list = members
        department.member_count = len(members) + len(leadership_ids)
        department.statistics = {
            "total_complaints": complaints.count(),
            "resolved_complaints": len(resolved),
            "pending_complaints": complaints.filter(status__in=PENDING_STATUSES).count(),
            "avg_resolution_days": avg_days,
        }
        return department

    @staticmethod
    @transaction.atomic
    def create_department(requesting_user, validated_data: dict[str, Any]) -> Department:
        """
        Create a department.

        Implementation Contract
        -----------------------
        1. Require ``MANAGE_DEPARTMENTS``.
        2. The manager must be an active manager-role user.
        3. Reject a duplicate name (case-insensitive) with ``Conflict``.
        4. ``default_assignee`` defaults to the manager.
        5. Move the manager into the new department.
        """
        require(requesting_user, AdminActions.MANAGE_DEPARTMENTS, message="Admin access required")

        manager = validated_data["manager"]
        _validate_manager(manager)
        default_assignee = validated_data.get("default_assignee") or manager
        _validate_default_assignee(default_assignee)

        name = validated_data["name"]
        if Department.objects.filter(name__iexact=name).exists():
            raise Conflict("Department with this name already exists")

        department = Department.objects.create(
            name=name,
            description=validated_data.get("description", ""),
            manager=manager,
            default_assignee=default_assignee,
            is_active=validated_data.get("is_active", True),
        )

        manager.department = department
        manager.save(update_fields=["department", "updated_at"])

        logger.info(
            "Department %s created with manager %s by %s",
            department.pk, manager.pk, requesting_user.pk,
        )
        return department

    @staticmethod
    @transaction.atomic
    def update_department(requesting_user, pk, validated_data: dict[str, Any]) -> Department:
        require(requesting_user, AdminActions.MANAGE_DEPARTMENTS, message="Admin access required")
        department = DepartmentService.get_department(pk)

        if "name" in validated_data:
            name = validated_data["name"]
            duplicate = (
                Department.objects
                .filter(name__iexact=name)
                .exclude(pk=department.pk)
                .exists()
            )
            if duplicate:
                raise Conflict("Department with this name already exists")
            department.name = name

        if "manager" in validated_data:
            manager = validated_data["manager"]
            _validate_manager(manager)
            department.manager = manager
            if manager.department_id != department.pk:
                manager.department = department
                manager.save(update_fields=["department", "updated_at"])

        if "default_assignee" in validated_data:
            assignee = validated_data["default_assignee"]
            _validate_default_assignee(assignee)
            department.default_assignee = assignee

        for field in ("description", "is_active"):
            if field in validated_data:
                setattr(department, field, validated_data[field])

        department.save()
        logger.info("Department %s updated by %s", department.pk, requesting_user.pk)
        return department

    @staticmethod
    def delete_department(requesting_user, pk) -> None:
        """
        Hard-delete a department.  Complaints protect their department,
        so a department that still owns complaints cannot be removed.
        """
        require(requesting_user, AdminActions.MANAGE_DEPARTMENTS, message="Admin access required")
        department = DepartmentService.get_department(pk)
        try:
            department.delete()
        except ProtectedError:
            raise Conflict(
                "Cannot delete department while complaints reference it; deactivate it instead."
            )
        logger.info("Department %s deleted by %s", pk, requesting_user.pk)
