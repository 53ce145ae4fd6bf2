"""
WhatsApp gateway client (WAAPI).

Thin ``requests`` wrapper around the two gateway calls the app needs:

    POST {base}/instances/{instance}/client/action/send-message
    GET  {base}/instances/{instance}/client/action/is-connected

Sending is a no-op (with a warning) until both the instance id and the
API key are configured.  ``send_bulk`` is the dispatch loop: strictly
serial, fixed pause between messages, one recipient's failure never
stops the rest.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Iterable

import requests
from django.conf import settings

from core.constants import WHATSAPP_CHAT_SUFFIX

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")
# Leading digits that already look like a country calling code.
_INTERNATIONAL_PREFIX = re.compile(r"^(?:[1-8][0-9]|9[0-5])")


def looks_international(digits: str) -> bool:
    return bool(_INTERNATIONAL_PREFIX.match(digits))


def normalize_phone(phone: str | None, country_code: str = "92") -> str:
    """
    Convert a user-entered phone number to a gateway chat id.

    - Non-digits are stripped; nothing left means ``""``.
    - A leading ``0`` (local trunk prefix) becomes ``country_code``.
    - A bare 10-digit number without a recognisable calling code gets
      ``country_code`` prepended.
    - Anything else is assumed to be international already.

    ``"0300-1234567"`` → ``"923001234567@c.us"``
    """
    digits = _NON_DIGITS.sub("", phone or "")
    if not digits:
        return ""
    if digits.startswith("0"):
        digits = country_code + digits[1:]
    elif len(digits) == 10 and not looks_international(digits):
        digits = country_code + digits
    return digits + WHATSAPP_CHAT_SUFFIX


@dataclass(frozen=True)
class SendResult:
    ok: bool
    status_code: int | None = None
    error: str = ""


@dataclass(frozen=True)
class BulkSendReport:
    attempted: int = 0
    sent: int = 0
    failed: int = 0
    skipped: bool = False


class WhatsAppClient:
    """
    Gateway client configured from ``settings.NOTIFICATIONS``.

    ``session`` and ``sleep`` are injectable so tests can observe HTTP
    calls and inter-message pauses without touching the network or the
    clock.
    """

    def __init__(
        self,
        *,
        instance_id: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        country_code: str | None = None,
        timeout: float | None = None,
        send_delay: float | None = None,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        conf = settings.NOTIFICATIONS
        self.instance_id = instance_id if instance_id is not None else conf["WAAPI_INSTANCE_ID"]
        self.api_key = api_key if api_key is not None else conf["WAAPI_API_KEY"]
        self.base_url = (base_url or conf["WAAPI_BASE_URL"]).rstrip("/")
        self.country_code = country_code or conf["DEFAULT_COUNTRY_CODE"]
        self.timeout = timeout if timeout is not None else conf["REQUEST_TIMEOUT"]
        self.send_delay = send_delay if send_delay is not None else conf["SEND_DELAY_SECONDS"]
        self._owns_session = session is None
        self.session = session or requests.Session()
        self._sleep = sleep or time.sleep

    def close(self) -> None:
        """Release the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "WhatsAppClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Configuration ────────────────────────────────────────────────

    @property
    def is_configured(self) -> bool:
        return bool(self.instance_id and self.api_key)

    def _action_url(self, action: str) -> str:
        return f"{self.base_url}/instances/{self.instance_id}/client/action/{action}"

    def _headers(self) -> dict[str, str]:
        return {
            "accept": "application/json",
            "authorization": f"Bearer {self.api_key}",
            "content-type": "application/json",
        }

    def masked_settings(self) -> dict[str, object]:
        """Current configuration with the API key redacted."""
        key = self.api_key or ""
        masked_key = f"{key[:4]}...{key[-4:]}" if len(key) > 8 else ("***" if key else "")
        return {
            "configured": self.is_configured,
            "instance_id": self.instance_id or "",
            "api_key": masked_key,
            "base_url": self.base_url,
            "default_country_code": self.country_code,
        }

    def normalize(self, phone: str | None) -> str:
        return normalize_phone(phone, self.country_code)

    # ── Gateway calls ────────────────────────────────────────────────

    def send_message(self, chat_id: str, message: str) -> SendResult:
        """POST a single message.  Never raises."""
        if not self.is_configured:
            logger.warning("WhatsApp gateway not configured; message to %s skipped", chat_id)
            return SendResult(ok=False, error="not configured")

        try:
            response = self.session.post(
                self._action_url("send-message"),
                json={"chatId": chat_id, "message": message},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("WhatsApp send to %s failed: %s", chat_id, exc)
            return SendResult(ok=False, error=str(exc))

        if not response.ok:
            logger.error(
                "WhatsApp send to %s rejected: HTTP %s %s",
                chat_id, response.status_code, response.text[:500],
            )
            return SendResult(ok=False, status_code=response.status_code, error=response.text[:500])

        logger.debug("WhatsApp message delivered to %s", chat_id)
        return SendResult(ok=True, status_code=response.status_code)

    def send_bulk(self, phones: Iterable[str | None], message: str) -> BulkSendReport:
        """
        Send ``message`` to every phone, one at a time.

        Phones that normalize to nothing are dropped first; the pause of
        ``send_delay`` seconds is taken between consecutive sends only.
        """
        if not self.is_configured:
            logger.warning("WhatsApp gateway not configured; skipping notification batch")
            return BulkSendReport(skipped=True)

        chat_ids = [chat_id for chat_id in (self.normalize(p) for p in phones) if chat_id]
        if not chat_ids:
            logger.info("No valid WhatsApp recipients; nothing to send")
            return BulkSendReport()

        sent = failed = 0
        for index, chat_id in enumerate(chat_ids):
            if index:
                self._sleep(self.send_delay)
            result = self.send_message(chat_id, message)
            if result.ok:
                sent += 1
            else:
                failed += 1

        logger.info(
            "WhatsApp batch finished: %d sent, %d failed of %d",
            sent, failed, len(chat_ids),
        )
        return BulkSendReport(attempted=len(chat_ids), sent=sent, failed=failed)

    def is_connected(self) -> dict[str, object]:
        """
        Ask the gateway whether the WhatsApp instance is online.

        Returns ``{"success": bool, "connected": bool | None, "message": str}``.
        """
        if not self.is_configured:
            return {
                "success": False,
                "connected": None,
                "message": (
                    "WhatsApp API not configured. Please set WAAPI_INSTANCE_ID "
                    "and WAAPI_API_KEY environment variables."
                ),
            }
        try:
            response = self.session.get(
                self._action_url("is-connected"),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("WhatsApp connection check failed: %s", exc)
            return {"success": False, "connected": None, "message": f"Connection error: {exc}"}

        if not response.ok:
            return {
                "success": False,
                "connected": None,
                "message": f"API Error: {response.status_code} {response.reason}",
            }

        try:
            connected = bool(response.json().get("connected"))
        except ValueError:
            connected = False
        state = "connected" if connected else "disconnected"
        return {"success": True, "connected": connected, "message": f"WhatsApp instance is {state}"}
