"""
WhatsApp message templates for complaint events.

Messages use WhatsApp's ``*bold*`` markup.  Each template carries the
complaint's short id, its title, the actor's name and a deep link back
to the admin detail page.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from django.conf import settings
from django.utils import timezone

from core.constants import (
    COMPLAINT_SHORT_ID_LENGTH,
    NOTIFICATION_COMMENT_PREVIEW_LENGTH,
)

from . import policy

UNKNOWN = "Unknown"

EVENT_EMOJIS: dict[str, str] = {
    policy.CREATED: "🆕",
    policy.ASSIGNED: "👤",
    policy.STATUS_CHANGED: "📋",
    policy.COMMENT_ADDED: "💬",
    policy.REASSIGNED: "🔄",
}
DEFAULT_EMOJI = "📢"


def complaint_url(complaint: Any) -> str:
    return f"{settings.SITE_URL}/admin/complaints/{complaint.pk}"


def short_id(complaint: Any) -> str:
    return str(complaint.pk)[-COMPLAINT_SHORT_ID_LENGTH:]


def truncate_comment(text: str | None) -> str:
    """Comment preview; empty text means the comment only carried files."""
    if not text:
        return "Attachment added"
    if len(text) > NOTIFICATION_COMMENT_PREVIEW_LENGTH:
        return text[:NOTIFICATION_COMMENT_PREVIEW_LENGTH] + "..."
    return text


def _name(obj: Any) -> str:
    return getattr(obj, "name", None) or UNKNOWN


def format_message(
    complaint: Any,
    actor: Any,
    event_type: str,
    details: dict[str, Any] | None = None,
) -> str:
    """Render the notification text for ``event_type``."""
    details = details or {}
    emoji = EVENT_EMOJIS.get(event_type, DEFAULT_EMOJI)
    sid = short_id(complaint)
    url = complaint_url(complaint)
    department = details.get("department") or _name(complaint.department)

    if event_type == policy.CREATED:
        lines = [
            f"{emoji} *New Complaint Created*",
            "",
            f"*ID:* #{sid}",
            f"*Title:* {complaint.title}",
            f"*Client:* {_name(complaint.client)}",
            f"*Department:* {department}",
            f"*Status:* {complaint.status}",
            f"*Created by:* {_name(actor)}",
            "",
            "*Description:*",
            complaint.description,
        ]
    elif event_type == policy.ASSIGNED:
        lines = [
            f"{emoji} *Complaint Assigned*",
            "",
            f"*ID:* #{sid}",
            f"*Title:* {complaint.title}",
            f"*Assigned to:* {details.get('new_assignee') or UNKNOWN}",
            f"*Department:* {department}",
            f"*Status:* {complaint.status}",
            f"*Assigned by:* {_name(actor)}",
        ]
    elif event_type == policy.STATUS_CHANGED:
        lines = [
            f"{emoji} *Complaint Status Updated*",
            "",
            f"*ID:* #{sid}",
            f"*Title:* {complaint.title}",
            f"*Status:* {details.get('old_status')} → *{details.get('new_status')}*",
            f"*Updated by:* {_name(actor)}",
            f"*Assigned to:* {_name(complaint.current_assignee)}",
        ]
    elif event_type == policy.COMMENT_ADDED:
        lines = [
            f"{emoji} *New Comment Added*",
            "",
            f"*ID:* #{sid}",
            f"*Title:* {complaint.title}",
            f"*Comment by:* {details.get('comment_author') or _name(actor)}",
            f"*Status:* {complaint.status}",
            "",
            "*Comment:*",
            truncate_comment(details.get("comment")),
        ]
    elif event_type == policy.REASSIGNED:
        lines = [
            f"{emoji} *Complaint Reassigned*",
            "",
            f"*ID:* #{sid}",
            f"*Title:* {complaint.title}",
            f"*From:* {details.get('old_assignee') or UNKNOWN}",
            f"*To:* {details.get('new_assignee') or UNKNOWN}",
            f"*Department:* {department}",
            f"*Reassigned by:* {_name(actor)}",
        ]
    else:
        lines = [
            f"{DEFAULT_EMOJI} *Complaint Update*",
            "",
            f"*ID:* #{sid}",
            f"*Title:* {complaint.title}",
            f"*Status:* {complaint.status}",
            f"*Updated by:* {_name(actor)}",
        ]

    lines.extend(["", f"View details: {url}"])
    return "\n".join(lines)


def format_test_message(message: str, sender: Any, sent_at: datetime | None = None) -> str:
    """Body used by the admin "send test message" endpoint."""
    sent_at = sent_at or timezone.now()
    return "\n".join([
        "🧪 *TEST MESSAGE*",
        "",
        message,
        "",
        f"✅ Sent at: {sent_at:%Y-%m-%d %H:%M:%S %Z}",
        "📱 From: Complaint Management System",
        f"👤 By: {_name(sender)}",
    ])
