"""
Action Constants — **Single Source of Truth**

Every authorization check in the project goes through
``core.domain.access.can(actor, action, resource)``.  The ``action``
argument MUST be one of the constants defined here; the rule bound to
each constant lives in ``core.domain.access._POLICY``.

Adding a new guarded operation requires:
    1. Add the constant below.
    2. Register a rule for it in ``core.domain.access._POLICY``.
    3. Call ``require(...)`` (raises) or ``can(...)`` (bool) from the
       owning service.

All constants use the ``<resource>.<verb>`` form.
"""


# ════════════════════════════════════════════════════════════════════
#  COMPLAINTS
# ════════════════════════════════════════════════════════════════════

class ComplaintActions:
    """Operations on a single complaint or the complaint collection."""

    VIEW = "complaint.view"
    UPDATE = "complaint.update"
    CHANGE_STATUS = "complaint.change_status"
    DELETE = "complaint.delete"
    ASSIGN = "complaint.assign"
    BULK = "complaint.bulk"
    CREATE_FOR_CLIENT = "complaint.create_for_client"


class CommentActions:
    """Operations on complaint comments."""

    VIEW_INTERNAL = "comment.view_internal"
    CREATE_INTERNAL = "comment.create_internal"
    MODIFY = "comment.modify"


# ════════════════════════════════════════════════════════════════════
#  ADMINISTRATION
# ════════════════════════════════════════════════════════════════════

class AdminActions:
    """Admin-console operations (directory data, settings, gateway)."""

    MANAGE_DEPARTMENTS = "department.manage"
    MANAGE_USERS = "user.manage"
    VIEW_TEAM = "user.team"
    MANAGE_NATURE_TYPES = "nature_type.manage"
    MANAGE_SETTINGS = "settings.manage"
    LIST_UPLOADS = "upload.list"
    MANAGE_WHATSAPP = "whatsapp.manage"
