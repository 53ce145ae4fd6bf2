"""
Core app service layer.

- ``SystemSettingsService``  — read / replace the routing configuration.
- ``UploadService``          — validate and store uploaded files.
- ``SystemConstantsService`` — enumerations for frontend dropdowns.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from typing import Any

from django.apps import apps
from django.conf import settings
from django.core.files.storage import default_storage
from django.db import transaction
from django.utils import timezone

from core.constants import (
    UPLOAD_ALLOWED_MIME_TYPES,
    UPLOAD_DIRECTORIES,
    UPLOAD_IMAGE_MIME_TYPES,
)
from core.domain.access import require
from core.domain.exceptions import DomainError
from core.models import SystemSettings
from core.permissions_constants import AdminActions

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════
#  System Settings
# ════════════════════════════════════════════════════════════════════

class SystemSettingsService:

    @staticmethod
    def get_settings(requesting_user) -> SystemSettings:
        require(requesting_user, AdminActions.MANAGE_SETTINGS, message="Admin access required")
        return SystemSettings.load()

    @staticmethod
    @transaction.atomic
    def update_settings(requesting_user, validated_data: dict[str, Any]) -> SystemSettings:
        """
        Replace the routing configuration.

        Implementation Contract
        -----------------------
        1. Admin only.
        2. Every referenced department must exist (400 otherwise).
        3. Overwrite the flag, the department list and the default.
        """
        require(requesting_user, AdminActions.MANAGE_SETTINGS, message="Admin access required")
        Department = apps.get_model("departments", "Department")

        routing = validated_data["auto_routing"]
        department_ids = list(dict.fromkeys(routing.get("departments") or []))
        departments = list(Department.objects.filter(pk__in=department_ids))
        if len(departments) != len(department_ids):
            raise DomainError("One or more auto-routing departments do not exist")

        default_id = validated_data.get("default_department")
        default = None
        if default_id is not None:
            default = Department.objects.filter(pk=default_id).first()
            if default is None:
                raise DomainError("Default department does not exist")

        system = SystemSettings.load()
        system.auto_routing_enabled = routing["enabled"]
        system.default_department = default
        system.save()
        system.auto_routing_departments.set(departments)

        logger.info(
            "System settings updated by %s: auto_routing=%s departments=%s default=%s",
            requesting_user.pk, system.auto_routing_enabled, department_ids, default_id,
        )
        return system


# ════════════════════════════════════════════════════════════════════
#  Uploads
# ════════════════════════════════════════════════════════════════════

class UploadService:
    """
    Stores files under ``MEDIA_ROOT`` via ``default_storage``.

    Complaint uploads accept images, PDFs, Office documents and plain
    text up to ``UPLOAD_MAX_SIZE``; profile uploads accept images only,
    up to ``PROFILE_UPLOAD_MAX_SIZE``.
    """

    @staticmethod
    def _mime_type(uploaded_file) -> str:
        content_type = getattr(uploaded_file, "content_type", None)
        if content_type:
            return content_type.split(";")[0].strip().lower()
        guessed, _ = mimetypes.guess_type(uploaded_file.name)
        return guessed or "application/octet-stream"

    @staticmethod
    def validate(uploaded_file, upload_type: str = "complaint") -> str:
        """Return the file's MIME type, or raise ``DomainError``."""
        mime_type = UploadService._mime_type(uploaded_file)
        if upload_type == "profile":
            allowed = UPLOAD_IMAGE_MIME_TYPES
            max_size = settings.PROFILE_UPLOAD_MAX_SIZE
        else:
            allowed = UPLOAD_ALLOWED_MIME_TYPES
            max_size = settings.UPLOAD_MAX_SIZE

        if mime_type not in allowed:
            if upload_type == "profile":
                raise DomainError("Only image files are allowed for profile pictures")
            raise DomainError(f"File type {mime_type} is not allowed")
        if uploaded_file.size > max_size:
            raise DomainError(
                f"File size exceeds the {max_size // (1024 * 1024)}MB limit"
            )
        return mime_type

    @staticmethod
    def store(uploaded_file, upload_type: str = "complaint") -> dict[str, Any]:
        mime_type = UploadService.validate(uploaded_file, upload_type)

        original_name = os.path.basename(uploaded_file.name)
        stem, ext = os.path.splitext(original_name)
        stem = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in stem)[:50] or "file"
        directory = UPLOAD_DIRECTORIES[upload_type]
        target = f"{directory}/{stem}_{uuid.uuid4().hex}{ext.lower()}"

        saved_path = default_storage.save(target, uploaded_file)
        logger.info("Stored upload %s (%s, %d bytes)", saved_path, mime_type, uploaded_file.size)
        return {
            "filename": os.path.basename(saved_path),
            "original_name": original_name,
            "url": default_storage.url(saved_path),
            "size": uploaded_file.size,
            "mime_type": mime_type,
            "uploaded_at": timezone.now(),
        }

    @staticmethod
    def store_many(files, upload_type: str = "complaint") -> dict[str, list]:
        """Store each file independently; failures are reported per file."""
        stored, errors = [], []
        for uploaded_file in files:
            try:
                stored.append(UploadService.store(uploaded_file, upload_type))
            except DomainError as exc:
                errors.append({"filename": uploaded_file.name, "error": exc.message})
        return {"files": stored, "errors": errors}

    @staticmethod
    def list_files(requesting_user) -> list[dict[str, Any]]:
        require(requesting_user, AdminActions.LIST_UPLOADS, message="Admin access required")
        listing = []
        for directory in UPLOAD_DIRECTORIES.values():
            if not default_storage.exists(directory):
                continue
            _, filenames = default_storage.listdir(directory)
            for filename in sorted(filenames):
                path = f"{directory}/{filename}"
                try:
                    uploaded_at = default_storage.get_created_time(path)
                except NotImplementedError:
                    uploaded_at = None
                listing.append({
                    "filename": filename,
                    "directory": directory,
                    "url": default_storage.url(path),
                    "size": default_storage.size(path),
                    "uploaded_at": uploaded_at,
                })
        return listing


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers the choice enumerations the frontend needs to render
    dropdowns and labels.  Stateless and public.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        from accounts.models import UserRole
        from complaints.models import ComplaintStatus, ReactionType

        to_list = SystemConstantsService._choices_to_list
        return {
            "complaint_statuses": to_list(ComplaintStatus),
            "user_roles": to_list(UserRole),
            "reaction_types": to_list(ReactionType),
            "upload_types": [
                {"value": key, "label": key.title()} for key in sorted(UPLOAD_DIRECTORIES)
            ],
        }

    @staticmethod
    def _choices_to_list(choices_class: type) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]
