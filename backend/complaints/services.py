"""
Complaints Service Layer.

This module is the **single source of truth** for complaint business
logic.  Views validate input, call one service method, and serialise
the result.

Architecture
------------
- ``NatureTypeService``       — nature-type catalogue (soft delete).
- ``ComplaintQueryService``   — role-scoped listing and single lookups.
- ``ComplaintRoutingService`` — department / manager selection for new
                                complaints.
- ``ComplaintService``        — create, update, status change, assign,
                                delete, bulk actions.
- ``CommentService``          — comment thread and reactions.

Every mutation that touches ``Complaint.status`` or the assignee also
appends a ``ComplaintHistory`` row inside the same ``transaction.atomic``
block.  Notifications are scheduled with ``transaction.on_commit`` so
they only fire for committed changes and never affect the response.
"""

from __future__ import annotations

import logging
import random
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Prefetch, Q, QuerySet
from django.utils import timezone

from accounts.models import UserRole
from core.domain.access import can, require
from core.domain.exceptions import Conflict, DomainError, NotFound, PermissionDenied
from core.domain.transactions import lock_for_update
from core.models import SystemSettings
from core.permissions_constants import AdminActions, CommentActions, ComplaintActions
from departments.models import Department
from notifications import policy as events
from notifications.services import notify_on_commit

from .models import (
    Comment,
    CommentReaction,
    Complaint,
    ComplaintHistory,
    ComplaintStatus,
    NatureType,
)

User = get_user_model()
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Nature Types
# ═══════════════════════════════════════════════════════════════════


class NatureTypeService:
    """Admin-managed catalogue of complaint classifications."""

    @staticmethod
    def list_nature_types(requesting_user, *, include_inactive: bool = False) -> QuerySet:
        qs = NatureType.objects.select_related("created_by")
        if include_inactive and can(requesting_user, AdminActions.MANAGE_NATURE_TYPES):
            return qs
        return qs.filter(is_active=True)

    @staticmethod
    def get_nature_type(pk) -> NatureType:
        try:
            return NatureType.objects.select_related("created_by").get(pk=pk)
        except NatureType.DoesNotExist:
            raise NotFound("Nature type not found")

    @staticmethod
    def _ensure_unique_name(name: str, exclude_pk=None) -> None:
        qs = NatureType.objects.filter(name__iexact=name)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        if qs.exists():
            raise Conflict("Nature type with this name already exists")

    @staticmethod
    def create_nature_type(requesting_user, validated_data: dict[str, Any]) -> NatureType:
        require(requesting_user, AdminActions.MANAGE_NATURE_TYPES, message="Admin access required")
        NatureTypeService._ensure_unique_name(validated_data["name"])
        nature_type = NatureType.objects.create(
            name=validated_data["name"],
            description=validated_data["description"],
            is_active=validated_data.get("is_active", True),
            created_by=requesting_user,
        )
        logger.info("Nature type %s created by %s", nature_type.pk, requesting_user.pk)
        return nature_type

    @staticmethod
    def update_nature_type(requesting_user, pk, validated_data: dict[str, Any]) -> NatureType:
        require(requesting_user, AdminActions.MANAGE_NATURE_TYPES, message="Admin access required")
        nature_type = NatureTypeService.get_nature_type(pk)
        if "name" in validated_data:
            NatureTypeService._ensure_unique_name(validated_data["name"], exclude_pk=nature_type.pk)
        for field, value in validated_data.items():
            setattr(nature_type, field, value)
        nature_type.save()
        return nature_type

    @staticmethod
    def deactivate_nature_type(requesting_user, pk) -> NatureType:
        """Soft delete: complaints keep pointing at the deactivated type."""
        require(requesting_user, AdminActions.MANAGE_NATURE_TYPES, message="Admin access required")
        nature_type = NatureTypeService.get_nature_type(pk)
        nature_type.is_active = False
        nature_type.save(update_fields=["is_active", "updated_at"])
        logger.info("Nature type %s deactivated by %s", nature_type.pk, requesting_user.pk)
        return nature_type

    @staticmethod
    def get_active(pk) -> NatureType:
        try:
            return NatureType.objects.get(pk=pk, is_active=True)
        except NatureType.DoesNotExist:
            raise DomainError("Invalid nature type")


# ═══════════════════════════════════════════════════════════════════
#  Queries
# ═══════════════════════════════════════════════════════════════════


class ComplaintQueryService:

    @staticmethod
    def base_queryset() -> QuerySet:
        return Complaint.objects.select_related(
            "nature_type",
            "department",
            "client",
            "current_assignee",
            "first_assignee",
        )

    @staticmethod
    def scoped_queryset(user) -> QuerySet:
        """
        Complaints visible to ``user`` in listings.

        - admin    → all
        - manager  → own department, or assigned to them
        - employee → assigned to them
        - client   → their own
        """
        qs = ComplaintQueryService.base_queryset()
        role = getattr(user, "role", None)
        if role == UserRole.ADMIN:
            return qs
        if role == UserRole.MANAGER:
            scope = Q(current_assignee=user)
            if user.department_id is not None:
                scope |= Q(department_id=user.department_id)
            return qs.filter(scope)
        if role == UserRole.EMPLOYEE:
            return qs.filter(current_assignee=user)
        if role == UserRole.CLIENT:
            return qs.filter(client=user)
        return qs.none()

    @staticmethod
    def list_complaints(user, filters: dict[str, Any]) -> QuerySet:
        qs = ComplaintQueryService.scoped_queryset(user)
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("department"):
            qs = qs.filter(department_id=filters["department"])
        if filters.get("nature_type"):
            qs = qs.filter(nature_type_id=filters["nature_type"])
        search = filters.get("search")
        if search:
            qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search))
        return qs.order_by("-created_at", "-id")

    @staticmethod
    def get_complaint(pk) -> Complaint:
        try:
            return ComplaintQueryService.base_queryset().get(pk=pk)
        except Complaint.DoesNotExist:
            raise NotFound("Complaint not found")

    @staticmethod
    def get_visible_complaint(user, pk) -> Complaint:
        """Load a complaint and enforce ``complaint.view``."""
        complaint = ComplaintQueryService.get_complaint(pk)
        require(user, ComplaintActions.VIEW, complaint, message="Access denied")
        return complaint

    @staticmethod
    def list_history(user, pk) -> QuerySet:
        complaint = ComplaintQueryService.get_visible_complaint(user, pk)
        return ComplaintHistory.objects.filter(complaint=complaint).select_related(
            "assigned_from", "assigned_to", "changed_by"
        )

    @staticmethod
    def get_complaint_detail(user, pk, *, enforce_access: bool = True) -> Complaint:
        if enforce_access:
            complaint = ComplaintQueryService.get_visible_complaint(user, pk)
        else:
            complaint = ComplaintQueryService.get_complaint(pk)
        history = ComplaintHistory.objects.select_related(
            "assigned_from", "assigned_to", "changed_by"
        )
        return (
            ComplaintQueryService.base_queryset()
            .prefetch_related(Prefetch("history", queryset=history))
            .get(pk=complaint.pk)
        )


# ═══════════════════════════════════════════════════════════════════
#  Routing
# ═══════════════════════════════════════════════════════════════════


class ComplaintRoutingService:
    """
    Picks the department (and therefore the manager) for a new complaint.

    Order of precedence:
        1. Auto-routing enabled with a non-empty department list →
           random active department from that list.
        2. The configured default department, if active.
        3. An admin-supplied department.
        4. The first active department.
    """

    @staticmethod
    def select_department(actor, requested_department_id=None) -> Department:
        system = SystemSettings.load()

        if system.auto_routing_enabled:
            candidates = list(system.auto_routing_departments.filter(is_active=True))
            if candidates:
                department = random.choice(candidates)
                logger.info("Auto-routing picked department %s", department.pk)
                return department

        default = system.default_department
        if default is not None and default.is_active:
            return default

        if requested_department_id and getattr(actor, "role", None) == UserRole.ADMIN:
            try:
                return Department.objects.get(pk=requested_department_id, is_active=True)
            except Department.DoesNotExist:
                raise DomainError("Invalid department")

        department = Department.objects.filter(is_active=True).order_by("pk").first()
        if department is None:
            raise DomainError("No active departments available. Please contact administrator.")
        return department

    @staticmethod
    def manager_for(department: Department):
        manager = department.manager
        if manager is None or not manager.is_active:
            raise DomainError(
                "No manager assigned to the selected department. Please contact administrator."
            )
        return manager


# ═══════════════════════════════════════════════════════════════════
#  Complaint lifecycle
# ═══════════════════════════════════════════════════════════════════


def _record_history(
    complaint: Complaint,
    *,
    changed_by,
    notes: str,
    assigned_from=None,
    assigned_to=None,
) -> ComplaintHistory:
    return ComplaintHistory.objects.create(
        complaint=complaint,
        status=complaint.status,
        assigned_from=assigned_from,
        assigned_to=assigned_to if assigned_to is not None else complaint.current_assignee,
        notes=notes,
        changed_by=changed_by,
    )


class ComplaintService:

    @staticmethod
    def _resolve_client(actor, client_id):
        if not client_id or client_id == actor.pk:
            return actor
        require(
            actor,
            ComplaintActions.CREATE_FOR_CLIENT,
            message="Only admins and managers can file complaints on behalf of a client.",
        )
        try:
            return User.objects.get(pk=client_id, role=UserRole.CLIENT, is_active=True)
        except User.DoesNotExist:
            raise DomainError("Invalid client")

    @staticmethod
    @transaction.atomic
    def create_complaint(actor, validated_data: dict[str, Any]) -> Complaint:
        """
        File a new complaint and route it.

        Implementation Contract
        -----------------------
        1. Resolve the client (actor, or a client chosen by admin/manager).
        2. The nature type must be active.
        3. Pick a department via ``ComplaintRoutingService``; its manager
           becomes first and current assignee.
        4. Save with status ``New`` and append the creation history row.
        5. Notify ``created`` after commit.
        """
        client = ComplaintService._resolve_client(actor, validated_data.get("client"))
        nature_type = NatureTypeService.get_active(validated_data["nature_type"])
        department = ComplaintRoutingService.select_department(
            actor, validated_data.get("department")
        )
        manager = ComplaintRoutingService.manager_for(department)

        complaint = Complaint.objects.create(
            title=validated_data["title"].strip(),
            description=validated_data["description"],
            error_type=validated_data["error_type"],
            error_screen=validated_data["error_screen"],
            nature_type=nature_type,
            client=client,
            department=department,
            first_assignee=manager,
            current_assignee=manager,
            status=ComplaintStatus.NEW,
            attachments=list(validated_data.get("attachments") or []),
        )
        _record_history(
            complaint,
            changed_by=actor,
            assigned_to=manager,
            notes=(
                f"Complaint created and auto-assigned to {department.name} department "
                f"manager. Nature Type: {nature_type.name}"
            ),
        )

        logger.info(
            "Complaint %s created by %s, routed to department %s (manager %s)",
            complaint.pk, actor.pk, department.pk, manager.pk,
        )
        notify_on_commit(complaint, actor, events.CREATED)
        return complaint

    @staticmethod
    @transaction.atomic
    def update_complaint(actor, pk, validated_data: dict[str, Any]) -> Complaint:
        """
        Edit complaint fields.  Clients may not edit; a status change here
        is audited and notified exactly like the dedicated status endpoint.
        """
        complaint = lock_for_update(Complaint, pk, label="Complaint")
        require(actor, ComplaintActions.UPDATE, complaint, message="You cannot update this complaint")

        data = dict(validated_data)
        if "nature_type" in data:
            data["nature_type"] = NatureTypeService.get_active(data["nature_type"])
        if "attachments" in data:
            data["attachments"] = list(data["attachments"])

        old_status = complaint.status
        new_status = data.pop("status", old_status)

        for field, value in data.items():
            setattr(complaint, field, value)
        complaint.status = new_status
        complaint.save()

        if new_status != old_status:
            _record_history(
                complaint,
                changed_by=actor,
                assigned_from=actor,
                notes=f"Status changed from {old_status} to {new_status} by {actor.name}",
            )
            logger.info(
                "Complaint %s status %s → %s by %s", complaint.pk, old_status, new_status, actor.pk
            )
            notify_on_commit(
                complaint,
                actor,
                events.STATUS_CHANGED,
                {"old_status": old_status, "new_status": new_status},
            )

        return complaint

    @staticmethod
    @transaction.atomic
    def change_status(actor, pk, new_status: str, remark: str | None = None) -> Complaint:
        """
        ``PATCH /complaints/{id}/status/``.

        The complaint row is locked so the status update and its history
        entry are one unit of work.
        """
        if new_status not in ComplaintStatus.values:
            raise DomainError("Invalid status")

        complaint = lock_for_update(Complaint, pk, label="Complaint")
        require(
            actor,
            ComplaintActions.CHANGE_STATUS,
            complaint,
            message="Not authorized to update this complaint",
        )

        old_status = complaint.status
        complaint.status = new_status
        update_fields = ["status", "updated_at"]
        if remark is not None:
            complaint.remark = remark
            update_fields.append("remark")
        complaint.save(update_fields=update_fields)

        _record_history(
            complaint,
            changed_by=actor,
            assigned_from=actor,
            notes=f"Status changed from {old_status} to {new_status} by {actor.name}",
        )
        logger.info(
            "Complaint %s status %s → %s by %s", complaint.pk, old_status, new_status, actor.pk
        )
        notify_on_commit(
            complaint,
            actor,
            events.STATUS_CHANGED,
            {"old_status": old_status, "new_status": new_status},
        )
        return complaint

    @staticmethod
    @transaction.atomic
    def assign_to_department(actor, pk, department_id, notes: str = "") -> Complaint:
        """
        Admin re-routing: move the complaint to another department and
        hand it to that department's default assignee (or manager).
        """
        require(actor, ComplaintActions.ASSIGN, message="Admin access required")
        complaint = lock_for_update(Complaint, pk, label="Complaint")

        try:
            department = Department.objects.select_related(
                "manager", "default_assignee"
            ).get(pk=department_id, is_active=True)
        except Department.DoesNotExist:
            raise DomainError("Invalid department")

        new_assignee = department.default_assignee
        if new_assignee is None or not new_assignee.is_active:
            new_assignee = department.manager
        if new_assignee is None or not new_assignee.is_active:
            raise DomainError(
                "No manager assigned to the selected department. Please contact administrator."
            )

        previous_department = complaint.department
        previous_assignee = complaint.current_assignee

        complaint.department = department
        complaint.current_assignee = new_assignee
        complaint.status = ComplaintStatus.ASSIGNED
        complaint.save(update_fields=["department", "current_assignee", "status", "updated_at"])

        _record_history(
            complaint,
            changed_by=actor,
            assigned_from=previous_assignee,
            assigned_to=new_assignee,
            notes=notes or (
                f"Complaint reassigned from {previous_department.name} to "
                f"{department.name} by {actor.name}"
            ),
        )
        logger.info(
            "Complaint %s assigned to department %s (assignee %s) by %s",
            complaint.pk, department.pk, new_assignee.pk, actor.pk,
        )

        moved = previous_assignee is not None and previous_assignee.pk != new_assignee.pk
        notify_on_commit(
            complaint,
            actor,
            events.REASSIGNED if moved else events.ASSIGNED,
            {
                "old_assignee": previous_assignee.name if previous_assignee else None,
                "new_assignee": new_assignee.name,
                "department": department.name,
            },
        )
        return complaint

    @staticmethod
    @transaction.atomic
    def delete_complaint(actor, pk) -> None:
        """Admin hard delete; history and comments cascade."""
        require(actor, ComplaintActions.DELETE, message="Admin access required")
        complaint = ComplaintQueryService.get_complaint(pk)
        complaint.delete()
        logger.info("Complaint %s deleted by %s", pk, actor.pk)

    @staticmethod
    @transaction.atomic
    def bulk_action(actor, action: str, complaint_ids: list[int], **options: Any) -> dict[str, Any]:
        """
        Admin bulk operations.  Bulk changes are audited but not notified.

        - ``delete``        → remove complaints (with history/comments)
        - ``export``        → serialised rows
        - ``update_status`` → set ``new_status`` on each
        - ``assign``        → hand each to ``assignee_id`` (status Assigned)
        """
        require(actor, ComplaintActions.BULK, message="Admin access required")
        qs = Complaint.objects.filter(pk__in=complaint_ids)

        if action == "delete":
            count = qs.count()
            qs.delete()
            logger.info("Bulk-deleted %d complaints (by %s)", count, actor.pk)
            return {"message": f"{count} complaints deleted successfully", "count": count}

        if action == "export":
            from .serializers import ComplaintListSerializer

            rows = ComplaintQueryService.base_queryset().filter(pk__in=complaint_ids)
            return {"complaints": ComplaintListSerializer(rows, many=True).data}

        if action == "update_status":
            new_status = options.get("new_status")
            if new_status not in ComplaintStatus.values:
                raise DomainError("Invalid status")
            complaints = list(qs.select_for_update().select_related("current_assignee"))
            for complaint in complaints:
                old_status = complaint.status
                complaint.status = new_status
                complaint.save(update_fields=["status", "updated_at"])
                _record_history(
                    complaint,
                    changed_by=actor,
                    assigned_from=actor,
                    notes=f"Bulk status update from {old_status} to {new_status} by {actor.name}",
                )
            logger.info("Bulk status → %s on %d complaints (by %s)", new_status, len(complaints), actor.pk)
            return {
                "message": f"{len(complaints)} complaints updated successfully",
                "count": len(complaints),
            }

        if action == "assign":
            try:
                assignee = User.objects.get(
                    pk=options.get("assignee_id"),
                    is_active=True,
                    role__in=[UserRole.EMPLOYEE, UserRole.MANAGER],
                )
            except User.DoesNotExist:
                raise DomainError("Invalid assignee")
            complaints = list(qs.select_for_update().select_related("current_assignee"))
            for complaint in complaints:
                previous = complaint.current_assignee
                complaint.current_assignee = assignee
                complaint.status = ComplaintStatus.ASSIGNED
                complaint.save(update_fields=["current_assignee", "status", "updated_at"])
                _record_history(
                    complaint,
                    changed_by=actor,
                    assigned_from=previous,
                    assigned_to=assignee,
                    notes=f"Bulk assigned to {assignee.name} by {actor.name}",
                )
            logger.info("Bulk-assigned %d complaints to %s (by %s)", len(complaints), assignee.pk, actor.pk)
            return {
                "message": f"{len(complaints)} complaints assigned successfully",
                "count": len(complaints),
            }

        raise DomainError("Invalid action")


# ═══════════════════════════════════════════════════════════════════
#  Comments
# ═══════════════════════════════════════════════════════════════════


class CommentService:
    """
    Comment thread on a complaint.  Access to the thread follows
    ``complaint.view``; internal comments are invisible to clients.
    """

    @staticmethod
    def _thread_queryset(user) -> QuerySet:
        reactions = CommentReaction.objects.only("id", "comment_id", "user_id", "type")
        replies = Comment.objects.select_related("author").prefetch_related(
            Prefetch("reactions", queryset=reactions)
        )
        hide_internal = not can(user, CommentActions.VIEW_INTERNAL)
        if hide_internal:
            replies = replies.filter(is_internal=False)
        qs = Comment.objects.select_related("author").prefetch_related(
            Prefetch("reactions", queryset=reactions),
            Prefetch("replies", queryset=replies),
        )
        if hide_internal:
            qs = qs.filter(is_internal=False)
        return qs

    @staticmethod
    def list_comments(user, complaint_pk) -> QuerySet:
        complaint = ComplaintQueryService.get_visible_complaint(user, complaint_pk)
        return (
            CommentService._thread_queryset(user)
            .filter(complaint=complaint, parent__isnull=True)
            .order_by("-created_at", "-id")
        )

    @staticmethod
    def get_comment(user, complaint_pk, comment_pk) -> Comment:
        complaint = ComplaintQueryService.get_visible_complaint(user, complaint_pk)
        try:
            return CommentService._thread_queryset(user).get(pk=comment_pk, complaint=complaint)
        except Comment.DoesNotExist:
            raise NotFound("Comment not found")

    @staticmethod
    @transaction.atomic
    def create_comment(user, complaint_pk, validated_data: dict[str, Any]) -> Comment:
        complaint = ComplaintQueryService.get_visible_complaint(user, complaint_pk)

        is_internal = validated_data.get("is_internal", False)
        if is_internal and not can(user, CommentActions.CREATE_INTERNAL):
            raise PermissionDenied("Clients cannot post internal comments")

        parent = None
        parent_id = validated_data.get("parent")
        if parent_id:
            try:
                parent = Comment.objects.get(pk=parent_id, complaint=complaint)
            except Comment.DoesNotExist:
                raise DomainError("Parent comment does not belong to this complaint")
            if parent.parent_id is not None:
                parent = parent.parent

        attachments = [
            {**attachment, "uploaded_by": attachment.get("uploaded_by", user.pk)}
            for attachment in validated_data.get("attachments") or []
        ]
        comment = Comment.objects.create(
            complaint=complaint,
            parent=parent,
            author=user,
            content=validated_data.get("content", ""),
            attachments=attachments,
            is_internal=is_internal,
        )
        logger.info("Comment %s added to complaint %s by %s", comment.pk, complaint.pk, user.pk)

        notify_on_commit(
            complaint,
            user,
            events.COMMENT_ADDED,
            {"comment": comment.content, "comment_author": user.name},
        )
        return comment

    @staticmethod
    def update_comment(user, complaint_pk, comment_pk, content: str) -> Comment:
        comment = CommentService.get_comment(user, complaint_pk, comment_pk)
        require(user, CommentActions.MODIFY, comment, message="You can only edit your own comments")
        comment.content = content
        comment.is_edited = True
        comment.edited_at = timezone.now()
        comment.save(update_fields=["content", "is_edited", "edited_at", "updated_at"])
        return comment

    @staticmethod
    def delete_comment(user, complaint_pk, comment_pk) -> None:
        """Deletes the comment and (via cascade) its replies."""
        comment = CommentService.get_comment(user, complaint_pk, comment_pk)
        require(user, CommentActions.MODIFY, comment, message="You can only delete your own comments")
        comment.delete()
        logger.info("Comment %s deleted by %s", comment_pk, user.pk)

    @staticmethod
    @transaction.atomic
    def react(user, complaint_pk, comment_pk, reaction_type: str) -> Comment:
        """
        Toggle a reaction: same type again removes it, a different type
        replaces it, otherwise a new reaction is added.
        """
        comment = CommentService.get_comment(user, complaint_pk, comment_pk)
        existing = CommentReaction.objects.select_for_update().filter(
            comment=comment, user=user
        ).first()

        if existing is None:
            CommentReaction.objects.create(comment=comment, user=user, type=reaction_type)
        elif existing.type == reaction_type:
            existing.delete()
        else:
            existing.type = reaction_type
            existing.save(update_fields=["type", "updated_at"])

        return CommentService._thread_queryset(user).get(pk=comment.pk)
