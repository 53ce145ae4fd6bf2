"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — cross-record
rules (unique e-mail, role/department pairing, self-deletion) are
delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from core.constants import PASSWORD_MIN_LENGTH, USER_NAME_MIN_LENGTH
from departments.models import Department

from .models import UserRole

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    SimpleJWT serializer keyed on ``email`` + ``password``.

    Adds ``role``, ``name`` and ``department`` claims to the access
    token so the frontend can route by role without an extra call.
    The authenticated user is exposed as ``self.user`` for the view.
    """

    username_field = "email"

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["role"] = user.role
        token["name"] = user.name
        token["department"] = user.department_id
        return token


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact user reference nested inside complaints, comments, etc."""

    class Meta:
        model = User
        fields = ["id", "name", "email", "role"]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation returned by profile and admin endpoints.
    """

    department_name = serializers.CharField(
        source="department.name",
        read_only=True,
        default=None,
    )

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "department",
            "department_name",
            "phone",
            "address",
            "bio",
            "profile_image",
            "notification_preferences",
            "is_active",
            "last_login",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


# ═══════════════════════════════════════════════════════════════════
#  Profile ("Me") Serializers
# ═══════════════════════════════════════════════════════════════════


class NotificationPreferencesSerializer(serializers.Serializer):
    email = serializers.BooleanField(required=False)
    whatsapp = serializers.BooleanField(required=False)


class ProfileUpdateSerializer(serializers.Serializer):
    """
    Fields a user may change on their own profile.  Role, department,
    e-mail and activation are admin-only and silently absent here.
    """

    name = serializers.CharField(min_length=USER_NAME_MIN_LENGTH, max_length=150, required=False)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True)
    profile_image = serializers.CharField(max_length=500, required=False, allow_blank=True)
    notification_preferences = NotificationPreferencesSerializer(required=False)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
    )
    new_password = serializers.CharField(
        write_only=True,
        min_length=PASSWORD_MIN_LENGTH,
        style={"input_type": "password"},
        help_text=f"Minimum {PASSWORD_MIN_LENGTH} characters.",
    )


# ═══════════════════════════════════════════════════════════════════
#  User Management Serializers
# ═══════════════════════════════════════════════════════════════════


class UserFilterSerializer(serializers.Serializer):
    """Query parameters accepted by ``GET /users/``."""

    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    department = serializers.IntegerField(required=False, min_value=1)
    include_inactive = serializers.BooleanField(required=False, default=False)
    search = serializers.CharField(required=False, allow_blank=True)


class UserCreateSerializer(serializers.Serializer):
    """
    Admin-side user creation.

    The role/department pairing is enforced by the service so that
    create and update share one rule.
    """

    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True,
        min_length=PASSWORD_MIN_LENGTH,
        style={"input_type": "password"},
    )
    name = serializers.CharField(min_length=USER_NAME_MIN_LENGTH, max_length=150)
    role = serializers.ChoiceField(choices=UserRole.choices, default=UserRole.CLIENT)
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(),
        required=False,
        allow_null=True,
    )
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    is_active = serializers.BooleanField(required=False, default=True)


class UserUpdateSerializer(serializers.Serializer):
    """Admin-side partial update; every field is optional."""

    email = serializers.EmailField(required=False)
    password = serializers.CharField(
        write_only=True,
        required=False,
        min_length=PASSWORD_MIN_LENGTH,
        style={"input_type": "password"},
    )
    name = serializers.CharField(min_length=USER_NAME_MIN_LENGTH, max_length=150, required=False)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(),
        required=False,
        allow_null=True,
    )
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if not attrs:
            raise serializers.ValidationError("No valid fields to update.")
        return attrs


class UserBulkActionSerializer(serializers.Serializer):
    ACTIONS = ("delete", "activate", "export")

    action = serializers.ChoiceField(choices=ACTIONS)
    user_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
    )


class TeamMemberSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(
        source="department.name",
        read_only=True,
        default=None,
    )

    class Meta:
        model = User
        fields = ["id", "name", "email", "role", "department", "department_name"]
        read_only_fields = fields
