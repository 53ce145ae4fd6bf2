"""
Complaints app models.

Contains the complaint record, its append-only history trail, the
nature-type classification and the comment thread (with replies and
reactions).

``Complaint.status`` is the single source of truth for lifecycle stage;
every change to it (and every re-assignment) appends one
``ComplaintHistory`` row inside the same transaction.
"""

from django.conf import settings
from django.db import models
from django.db.models.functions import Lower

from core.constants import COMPLAINT_SHORT_ID_LENGTH
from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choices
# ────────────────────────────────────────────────────────────────────

class ComplaintStatus(models.TextChoices):
    NEW = "New", "New"
    ASSIGNED = "Assigned", "Assigned"
    IN_PROGRESS = "In Progress", "In Progress"
    COMPLETED = "Completed", "Completed"
    DONE = "Done", "Done"
    CLOSED = "Closed", "Closed"


class ReactionType(models.TextChoices):
    LIKE = "like", "Like"
    HELPFUL = "helpful", "Helpful"
    RESOLVED = "resolved", "Resolved"


# ────────────────────────────────────────────────────────────────────
# Nature type
# ────────────────────────────────────────────────────────────────────

class NatureType(TimeStampedModel):
    """
    Classification tag for complaints (e.g. "Billing", "Bug").

    Names are unique case-insensitively.  Nature types are never removed;
    deleting one flips ``is_active`` so historical complaints keep their
    label while new complaints can no longer pick it.
    """

    name = models.CharField(max_length=100, verbose_name="Name")
    description = models.TextField(verbose_name="Description")
    is_active = models.BooleanField(default=True, db_index=True, verbose_name="Active")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_nature_types",
        verbose_name="Created By",
    )

    class Meta:
        verbose_name = "Nature Type"
        verbose_name_plural = "Nature Types"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                name="unique_nature_type_name_ci",
            ),
        ]

    def __str__(self):
        return self.name


# ────────────────────────────────────────────────────────────────────
# Complaint
# ────────────────────────────────────────────────────────────────────

class Complaint(TimeStampedModel):
    """
    A single complaint raised by (or on behalf of) a client.

    ``first_assignee`` records who the complaint was originally routed
    to; ``current_assignee`` moves with every (re)assignment.
    """

    title = models.CharField(max_length=255, verbose_name="Title")
    description = models.TextField(verbose_name="Description")
    error_type = models.CharField(max_length=100, verbose_name="Error Type")
    error_screen = models.CharField(max_length=255, verbose_name="Error Screen")
    nature_type = models.ForeignKey(
        NatureType,
        on_delete=models.PROTECT,
        related_name="complaints",
        verbose_name="Nature Type",
    )
    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaints",
        verbose_name="Client",
    )
    department = models.ForeignKey(
        "departments.Department",
        on_delete=models.PROTECT,
        related_name="complaints",
        verbose_name="Department",
    )
    current_assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="assigned_complaints",
        verbose_name="Current Assignee",
    )
    first_assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="first_assigned_complaints",
        verbose_name="First Assignee",
    )
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.NEW,
        db_index=True,
        verbose_name="Status",
    )
    attachments = models.JSONField(default=list, blank=True, verbose_name="Attachments")
    remark = models.TextField(blank=True, default="", verbose_name="Remark")

    class Meta:
        verbose_name = "Complaint"
        verbose_name_plural = "Complaints"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["department", "status"]),
            models.Index(fields=["current_assignee", "status"]),
            models.Index(fields=["client", "-created_at"]),
        ]

    def __str__(self):
        return f"#{self.short_id} {self.title} [{self.status}]"

    @property
    def short_id(self) -> str:
        """Last characters of the primary key, used in messages and UI."""
        return str(self.pk)[-COMPLAINT_SHORT_ID_LENGTH:] if self.pk else ""


class ComplaintHistory(models.Model):
    """
    Append-only audit row: one per status change or (re)assignment.

    Rows are never edited; they disappear only when the parent complaint
    is deleted.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="history",
        verbose_name="Complaint",
    )
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        verbose_name="Status",
    )
    assigned_from = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Assigned From",
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Assigned To",
    )
    notes = models.TextField(blank=True, default="", verbose_name="Notes")
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name="Changed By",
    )
    timestamp = models.DateTimeField(auto_now_add=True, verbose_name="Timestamp")

    class Meta:
        verbose_name = "Complaint History"
        verbose_name_plural = "Complaint History"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["complaint", "-timestamp"]),
        ]

    def __str__(self):
        return f"Complaint #{self.complaint_id} → {self.status}"


# ────────────────────────────────────────────────────────────────────
# Comments
# ────────────────────────────────────────────────────────────────────

class Comment(TimeStampedModel):
    """
    A message on a complaint thread.

    ``is_internal`` comments are staff-only and hidden from clients.
    Replies point at their parent; deleting a comment removes its
    replies.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="comments",
        verbose_name="Complaint",
    )
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="replies",
        verbose_name="Parent Comment",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="complaint_comments",
        verbose_name="Author",
    )
    content = models.TextField(blank=True, default="", verbose_name="Content")
    attachments = models.JSONField(default=list, blank=True, verbose_name="Attachments")
    is_internal = models.BooleanField(default=False, verbose_name="Internal")
    is_edited = models.BooleanField(default=False, verbose_name="Edited")
    edited_at = models.DateTimeField(null=True, blank=True, verbose_name="Edited At")

    class Meta:
        verbose_name = "Comment"
        verbose_name_plural = "Comments"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["complaint", "created_at"]),
        ]

    def __str__(self):
        return f"Comment by {self.author_id} on complaint #{self.complaint_id}"


class CommentReaction(TimeStampedModel):
    """One reaction per user per comment."""

    comment = models.ForeignKey(
        Comment,
        on_delete=models.CASCADE,
        related_name="reactions",
        verbose_name="Comment",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="comment_reactions",
        verbose_name="User",
    )
    type = models.CharField(
        max_length=20,
        choices=ReactionType.choices,
        verbose_name="Reaction Type",
    )

    class Meta:
        verbose_name = "Comment Reaction"
        verbose_name_plural = "Comment Reactions"
        constraints = [
            models.UniqueConstraint(
                fields=["comment", "user"],
                name="unique_reaction_per_user",
            ),
        ]

    def __str__(self):
        return f"{self.type} by {self.user_id} on comment {self.comment_id}"
