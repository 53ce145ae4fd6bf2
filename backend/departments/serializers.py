"""
Departments app serializers.

Request serializers validate shape only; manager eligibility and name
uniqueness are checked in ``services.py``.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer

from .models import Department

User = get_user_model()


class DepartmentListSerializer(serializers.ModelSerializer):
    manager = UserSummarySerializer(read_only=True)
    default_assignee = UserSummarySerializer(read_only=True)

    class Meta:
        model = Department
        fields = [
            "id",
            "name",
            "description",
            "manager",
            "default_assignee",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DepartmentStatisticsSerializer(serializers.Serializer):
    total_complaints = serializers.IntegerField()
    resolved_complaints = serializers.IntegerField()
    pending_complaints = serializers.IntegerField()
    avg_resolution_days = serializers.FloatField()


class DepartmentDetailSerializer(DepartmentListSerializer):
    """
    Department plus its active members and complaint statistics.

    ``member_list`` and ``statistics`` are attached to the instance by
    ``DepartmentService.get_department_detail``.
    """

    members = UserSummarySerializer(source="member_list", many=True, read_only=True)
    member_count = serializers.IntegerField(read_only=True)
    statistics = DepartmentStatisticsSerializer(read_only=True)

    class Meta(DepartmentListSerializer.Meta):
        fields = DepartmentListSerializer.Meta.fields + [
            "members",
            "member_count",
            "statistics",
        ]
        read_only_fields = fields


class DepartmentFilterSerializer(serializers.Serializer):
    include_inactive = serializers.BooleanField(required=False, default=False)


class DepartmentWriteSerializer(serializers.Serializer):
    """
    Create / update payload.  On create ``name`` and ``manager`` are
    required; on update every field is optional.
    """

    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True)
    manager = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    default_assignee = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True,
    )
    is_active = serializers.BooleanField(required=False)

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name cannot be blank.")
        return value
