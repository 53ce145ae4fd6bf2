"""
Complaints app serializers.

Organised in sections:
    1. Nature types
    2. Complaint filters / reads
    3. Complaint writes (create, update, status, assign, bulk)
    4. Comments and reactions

Request serializers only check shape and enum membership; anything that
needs the database (active nature type, department routing, access
rules) is decided in ``services.py``.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import (
    Comment,
    Complaint,
    ComplaintHistory,
    ComplaintStatus,
    NatureType,
    ReactionType,
)


# ═══════════════════════════════════════════════════════════════════
#  1. Nature Types
# ═══════════════════════════════════════════════════════════════════


class NatureTypeSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = NatureType
        fields = ["id", "name", "description", "is_active", "created_by", "created_at", "updated_at"]
        read_only_fields = fields


class NatureTypeWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField()
    is_active = serializers.BooleanField(required=False)

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name cannot be blank.")
        return value


class NatureTypeFilterSerializer(serializers.Serializer):
    include_inactive = serializers.BooleanField(required=False, default=False)


class NatureTypeBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = NatureType
        fields = ["id", "name", "description"]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  2. Complaint Filters / Reads
# ═══════════════════════════════════════════════════════════════════


class ComplaintFilterSerializer(serializers.Serializer):
    """
    Validates query-parameter filters for ``GET /api/complaints/``.

    ``page`` and ``limit`` are consumed by ``ComplaintPagination``.
    """

    status = serializers.ChoiceField(
        choices=ComplaintStatus.choices,
        required=False,
        help_text="Filter by status. Options: " + ", ".join(c[0] for c in ComplaintStatus.choices) + ".",
    )
    department = serializers.IntegerField(required=False, min_value=1)
    nature_type = serializers.IntegerField(required=False, min_value=1)
    search = serializers.CharField(
        required=False,
        max_length=255,
        help_text="Free-text search against title and description.",
    )


class DepartmentBriefSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)


class ComplaintHistorySerializer(serializers.ModelSerializer):
    assigned_from = UserSummarySerializer(read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    changed_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = ComplaintHistory
        fields = ["id", "status", "assigned_from", "assigned_to", "notes", "changed_by", "timestamp"]
        read_only_fields = fields


class ComplaintListSerializer(serializers.ModelSerializer):
    short_id = serializers.CharField(read_only=True)
    nature_type = NatureTypeBriefSerializer(read_only=True)
    department = DepartmentBriefSerializer(read_only=True)
    client = UserSummarySerializer(read_only=True)
    current_assignee = UserSummarySerializer(read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "short_id",
            "title",
            "status",
            "error_type",
            "nature_type",
            "department",
            "client",
            "current_assignee",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ComplaintDetailSerializer(ComplaintListSerializer):
    first_assignee = UserSummarySerializer(read_only=True)
    history = ComplaintHistorySerializer(many=True, read_only=True)

    class Meta(ComplaintListSerializer.Meta):
        fields = ComplaintListSerializer.Meta.fields + [
            "description",
            "error_screen",
            "first_assignee",
            "attachments",
            "remark",
            "history",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  3. Complaint Writes
# ═══════════════════════════════════════════════════════════════════


class AttachmentSerializer(serializers.Serializer):
    """File metadata as returned by the upload endpoint."""

    filename = serializers.CharField(max_length=255)
    original_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    url = serializers.CharField(max_length=500)
    size = serializers.IntegerField(min_value=0, required=False)
    mime_type = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def to_internal_value(self, data: Any) -> dict[str, Any]:
        return dict(super().to_internal_value(data))


class ComplaintCreateSerializer(serializers.Serializer):
    """
    ``POST /api/complaints/``

    ``client`` may only be supplied by admins and managers filing on a
    client's behalf; ``department`` is honoured only for admins and only
    when no routing rule picked one.
    """

    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    error_type = serializers.CharField(max_length=100)
    error_screen = serializers.CharField(max_length=255)
    nature_type = serializers.IntegerField(min_value=1)
    department = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    client = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    attachments = AttachmentSerializer(many=True, required=False)


class ComplaintUpdateSerializer(serializers.Serializer):
    """``PATCH /api/complaints/{id}/`` — every field optional."""

    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False)
    error_type = serializers.CharField(max_length=100, required=False)
    error_screen = serializers.CharField(max_length=255, required=False)
    nature_type = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=ComplaintStatus.choices, required=False)
    remark = serializers.CharField(required=False, allow_blank=True)
    attachments = AttachmentSerializer(many=True, required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if not attrs:
            raise serializers.ValidationError("No valid fields to update.")
        return attrs


class ComplaintStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ComplaintStatus.choices)
    remark = serializers.CharField(required=False, allow_blank=True)


class ComplaintAssignSerializer(serializers.Serializer):
    department = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ComplaintBulkActionSerializer(serializers.Serializer):
    ACTIONS = ("delete", "export", "update_status", "assign")

    action = serializers.ChoiceField(choices=ACTIONS)
    complaint_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
    )
    new_status = serializers.ChoiceField(choices=ComplaintStatus.choices, required=False)
    assignee_id = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["action"] == "update_status" and not attrs.get("new_status"):
            raise serializers.ValidationError({"new_status": "Required for update_status."})
        if attrs["action"] == "assign" and not attrs.get("assignee_id"):
            raise serializers.ValidationError({"assignee_id": "Required for assign."})
        return attrs


# ═══════════════════════════════════════════════════════════════════
#  4. Comments and Reactions
# ═══════════════════════════════════════════════════════════════════


class CommentSerializer(serializers.ModelSerializer):
    """
    A comment with reaction counts and (one level of) replies.

    Context keys:
        ``request``        — for ``my_reaction``.
        ``hide_internal``  — drop internal replies (client viewers).
    """

    author = UserSummarySerializer(read_only=True)
    reactions = serializers.SerializerMethodField()
    my_reaction = serializers.SerializerMethodField()
    replies = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = [
            "id",
            "complaint",
            "parent",
            "author",
            "content",
            "attachments",
            "is_internal",
            "is_edited",
            "edited_at",
            "reactions",
            "my_reaction",
            "replies",
            "created_at",
        ]
        read_only_fields = fields

    def get_reactions(self, obj: Comment) -> dict[str, int]:
        counts = Counter(reaction.type for reaction in obj.reactions.all())
        return {choice: counts.get(choice, 0) for choice in ReactionType.values}

    def get_my_reaction(self, obj: Comment) -> str | None:
        request = self.context.get("request")
        if request is None:
            return None
        for reaction in obj.reactions.all():
            if reaction.user_id == request.user.pk:
                return reaction.type
        return None

    def get_replies(self, obj: Comment) -> list[dict[str, Any]]:
        if obj.parent_id is not None:
            return []
        replies = obj.replies.all()
        if self.context.get("hide_internal"):
            replies = [reply for reply in replies if not reply.is_internal]
        return CommentSerializer(replies, many=True, context=self.context).data


class CommentCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="")
    attachments = AttachmentSerializer(many=True, required=False, default=list)
    is_internal = serializers.BooleanField(required=False, default=False)
    parent = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        attrs["content"] = attrs.get("content", "").strip()
        if not attrs["content"] and not attrs.get("attachments"):
            raise serializers.ValidationError("Comment content or attachments are required")
        return attrs


class CommentUpdateSerializer(serializers.Serializer):
    content = serializers.CharField()

    def validate_content(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Comment content cannot be empty.")
        return value


class ReactionSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ReactionType.choices)
