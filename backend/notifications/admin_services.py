"""
Admin-facing WhatsApp operations: connection check, masked settings,
and synchronous one-off sends.  All of them require
``AdminActions.MANAGE_WHATSAPP``.
"""

from __future__ import annotations

import logging
from typing import Any

from core.domain.access import require
from core.permissions_constants import AdminActions

from .formatter import format_test_message
from .gateway import WhatsAppClient

logger = logging.getLogger(__name__)


class WhatsAppAdminService:

    @staticmethod
    def _client() -> WhatsAppClient:
        return WhatsAppClient()

    @staticmethod
    def connection_status(actor) -> dict[str, Any]:
        require(actor, AdminActions.MANAGE_WHATSAPP, message="Admin access required")
        with WhatsAppAdminService._client() as client:
            result = client.is_connected()
            return {"configured": client.is_configured, **result}

    @staticmethod
    def masked_settings(actor) -> dict[str, Any]:
        require(actor, AdminActions.MANAGE_WHATSAPP, message="Admin access required")
        with WhatsAppAdminService._client() as client:
            return client.masked_settings()

    @staticmethod
    def send(actor, phone: str, message: str, *, as_test: bool = False) -> dict[str, Any]:
        """
        Send one message right away and report the gateway's verdict.

        ``as_test`` wraps ``message`` in the test template.
        """
        require(actor, AdminActions.MANAGE_WHATSAPP, message="Admin access required")
        with WhatsAppAdminService._client() as client:
            chat_id = client.normalize(phone)
            body = format_test_message(message, actor) if as_test else message
            result = client.send_message(chat_id, body)

        logger.info(
            "Admin %s sent %s WhatsApp message to %s: %s",
            actor.pk, "test" if as_test else "direct", chat_id, "ok" if result.ok else "failed",
        )
        return {
            "success": result.ok,
            "chat_id": chat_id,
            "status_code": result.status_code,
            "error": result.error,
        }
