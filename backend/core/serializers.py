"""
Core app serializers.

Sections:
    1. System settings (routing configuration)
    2. Uploads
    3. System constants
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers

from core.constants import UPLOAD_DIRECTORIES


# ════════════════════════════════════════════════════════════════════
#  System Settings
# ════════════════════════════════════════════════════════════════════

class AutoRoutingSerializer(serializers.Serializer):
    enabled = serializers.BooleanField()
    departments = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        default=list,
        help_text="Department IDs a new complaint may be routed to at random.",
    )


class SystemSettingsSerializer(serializers.Serializer):
    """
    Shape shared by ``GET`` and ``PUT``/``POST /api/core/settings/``::

        {
            "auto_routing": {"enabled": true, "departments": [1, 3]},
            "default_department": 2
        }
    """

    auto_routing = AutoRoutingSerializer()
    default_department = serializers.IntegerField(
        min_value=1,
        required=False,
        allow_null=True,
        default=None,
    )

    def to_representation(self, instance: Any) -> dict[str, Any]:
        if isinstance(instance, dict):
            return super().to_representation(instance)
        return {
            "auto_routing": {
                "enabled": instance.auto_routing_enabled,
                "departments": sorted(
                    instance.auto_routing_departments.values_list("pk", flat=True)
                ),
            },
            "default_department": instance.default_department_id,
        }


# ════════════════════════════════════════════════════════════════════
#  Uploads
# ════════════════════════════════════════════════════════════════════

class UploadSerializer(serializers.Serializer):
    file = serializers.FileField(allow_empty_file=False)
    type = serializers.ChoiceField(
        choices=sorted(UPLOAD_DIRECTORIES),
        required=False,
        default="complaint",
    )


class BulkUploadSerializer(serializers.Serializer):
    files = serializers.ListField(
        child=serializers.FileField(allow_empty_file=False),
        allow_empty=False,
    )
    type = serializers.ChoiceField(
        choices=sorted(UPLOAD_DIRECTORIES),
        required=False,
        default="complaint",
    )


class UploadedFileSerializer(serializers.Serializer):
    filename = serializers.CharField()
    original_name = serializers.CharField()
    url = serializers.CharField()
    size = serializers.IntegerField()
    mime_type = serializers.CharField()
    uploaded_at = serializers.DateTimeField()


class StoredFileSerializer(serializers.Serializer):
    filename = serializers.CharField()
    directory = serializers.CharField()
    url = serializers.CharField()
    size = serializers.IntegerField()
    uploaded_at = serializers.DateTimeField(allow_null=True)


# ════════════════════════════════════════════════════════════════════
#  System Constants / Enums
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "In Progress", "label": "In Progress"}
    """

    value = serializers.CharField(help_text="Machine-readable value to send in API requests.")
    label = serializers.CharField(help_text="Human-readable display label for the UI.")


class SystemConstantsSerializer(serializers.Serializer):
    complaint_statuses = ChoiceItemSerializer(many=True)
    user_roles = ChoiceItemSerializer(many=True)
    reaction_types = ChoiceItemSerializer(many=True)
    upload_types = ChoiceItemSerializer(many=True)
