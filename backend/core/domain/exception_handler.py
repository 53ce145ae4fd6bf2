"""
core.domain.exception_handler — DRF-compatible global exception handler.

Maps domain exceptions from ``core.domain.exceptions`` to proper
DRF ``Response`` objects so that views don't need per-endpoint
try/except boilerplate.  Anything else that escapes a view (database
or operational errors) becomes a JSON 500; the stack trace is only
echoed back while ``DEBUG`` is on.

Register in ``settings.py``::

    REST_FRAMEWORK = {
        ...
        'EXCEPTION_HANDLER': 'core.domain.exception_handler.domain_exception_handler',
    }
"""

from __future__ import annotations

import logging
import traceback

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_default_handler

from core.domain.exceptions import (
    Conflict,
    DomainError,
    NotFound,
    PermissionDenied,
)

logger = logging.getLogger(__name__)

# Domain exception → HTTP status code
_STATUS_MAP: dict[type, int] = {
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    NotFound:         status.HTTP_404_NOT_FOUND,
    Conflict:         status.HTTP_409_CONFLICT,
    DomainError:      status.HTTP_400_BAD_REQUEST,  # catch-all base class last
}


def domain_exception_handler(exc: Exception, context: dict) -> Response:
    """
    DRF exception handler that also handles ``core.domain.exceptions``.

    The default DRF handler is called first.  If it returns ``None``
    (meaning DRF doesn't recognise the exception), domain exceptions are
    mapped through ``_STATUS_MAP``; everything else is logged and turned
    into a 500 envelope.
    """
    # Let DRF handle its own exceptions (ValidationError, AuthN, etc.)
    response = drf_default_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    view_name = type(view).__name__ if view is not None else "unknown"

    # Most specific first
    for exc_class, status_code in _STATUS_MAP.items():
        if isinstance(exc, exc_class):
            logger.warning(
                "Domain exception [%s] in %s: %s",
                exc_class.__name__,
                view_name,
                exc,
            )
            return Response({"detail": str(exc)}, status=status_code)

    logger.exception("Unhandled error in %s", view_name, exc_info=exc)

    payload = {"detail": "Internal server error"}
    if settings.DEBUG:
        payload["error"] = str(exc)
        payload["traceback"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return Response(payload, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
