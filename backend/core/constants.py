"""
Core constants — **Single Source of Truth** for project-wide magic numbers.

Any business rule that references a fixed value should import it from
here instead of hardcoding it.
"""

# ── Complaints ──────────────────────────────────────────────────────
# Human-facing short reference: the last N characters of the primary key.
COMPLAINT_SHORT_ID_LENGTH: int = 6

# Default / maximum page size for complaint listings.
COMPLAINT_PAGE_SIZE: int = 20
COMPLAINT_MAX_PAGE_SIZE: int = 100

# ── Notifications ───────────────────────────────────────────────────
# Comment bodies longer than this are truncated inside WhatsApp messages.
NOTIFICATION_COMMENT_PREVIEW_LENGTH: int = 200

# Suffix the gateway expects on every chat id.
WHATSAPP_CHAT_SUFFIX: str = "@c.us"

# ── Users ───────────────────────────────────────────────────────────
USER_NAME_MIN_LENGTH: int = 2
PASSWORD_MIN_LENGTH: int = 6

# ── Uploads ─────────────────────────────────────────────────────────
UPLOAD_ALLOWED_MIME_TYPES: frozenset[str] = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
})

UPLOAD_IMAGE_MIME_TYPES: frozenset[str] = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
})

UPLOAD_DIRECTORIES: dict[str, str] = {
    "profile": "uploads/profiles",
    "complaint": "uploads/complaints",
}
