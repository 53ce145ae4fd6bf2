"""
Notification entry point for complaint events.

``notify_complaint_event`` is what complaint/comment services call once
their transaction has committed.  It only records the event and hands
it to the background dispatcher, so the request thread never touches
stakeholder data or the gateway.  ``deliver_notification`` is the
dispatcher's handler: it reloads the complaint, resolves stakeholders,
applies the recipient policy, renders the message and sends it.

Neither function raises: a notification problem is logged and the
business operation carries on.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from django.apps import apps
from django.contrib.auth import get_user_model
from django.db import transaction

from core.domain.access import get_user_role_name

from .dispatcher import NotificationDispatcher, NotificationJob
from .formatter import format_message
from .gateway import WhatsAppClient
from .policy import resolve_recipients
from .stakeholders import resolve_stakeholder_phones

logger = logging.getLogger(__name__)


def _load_complaint(complaint_id: Any) -> Any:
    Complaint = apps.get_model("complaints", "Complaint")
    return (
        Complaint.objects
        .select_related("client", "department", "current_assignee", "nature_type")
        .get(pk=complaint_id)
    )


def _load_actor(actor_id: Any) -> Any:
    if actor_id is None:
        return None
    return get_user_model().objects.filter(pk=actor_id).first()


def deliver_notification(job: NotificationJob) -> None:
    """
    Resolve, filter, render and send one queued complaint event.

    Steps:
        1. Reload the complaint with its relations, and the actor.
        2. Resolve stakeholder phones.
        3. Apply the recipient policy for the actor's role.
        4. Render the message.
        5. Send the batch through a short-lived gateway client.
    """
    try:
        complaint = _load_complaint(job.complaint_id)
        phones = resolve_stakeholder_phones(complaint)
        recipients = resolve_recipients(job.event_type, job.actor_role, phones)
        if not recipients:
            logger.info(
                "No recipients for %s on complaint %s", job.event_type, job.complaint_id
            )
            return
        actor = _load_actor(job.actor_id)
        message = format_message(complaint, actor, job.event_type, job.details)
        with WhatsAppClient() as client:
            report = client.send_bulk(recipients, message)
        logger.info(
            "Notification %s for complaint %s: %d/%d delivered",
            job.event_type, job.complaint_id, report.sent, report.attempted,
        )
    except Exception:
        logger.exception(
            "Failed to deliver %s notification for complaint %s",
            job.event_type, job.complaint_id,
        )


_dispatcher: NotificationDispatcher | None = None
_dispatcher_lock = threading.Lock()


def get_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher, created on first use."""
    global _dispatcher
    with _dispatcher_lock:
        if _dispatcher is None:
            _dispatcher = NotificationDispatcher(deliver_notification)
        return _dispatcher


def notify_complaint_event(
    complaint: Any,
    actor: Any,
    event_type: str,
    details: dict[str, Any] | None = None,
) -> None:
    """Queue ``event_type`` on ``complaint`` for background delivery."""
    complaint_id = getattr(complaint, "pk", None)
    try:
        job = NotificationJob(
            event_type=event_type,
            complaint_id=complaint_id,
            actor_id=getattr(actor, "pk", None),
            actor_role=get_user_role_name(actor),
            details=dict(details or {}),
        )
        if get_dispatcher().submit(job):
            logger.info("Queued %s notification for complaint %s", event_type, complaint_id)
    except Exception:
        logger.exception(
            "Failed to queue %s notification for complaint %s", event_type, complaint_id
        )


def notify_on_commit(
    complaint: Any,
    actor: Any,
    event_type: str,
    details: dict[str, Any] | None = None,
) -> None:
    """Schedule ``notify_complaint_event`` for after the current transaction commits."""
    transaction.on_commit(
        lambda: notify_complaint_event(complaint, actor, event_type, details)
    )
