"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations raised inside the
service layers.  They are **not** DRF exceptions so that
services stay framework-agnostic; ``core.domain.exception_handler``
maps them onto HTTP responses.

Mapping cheatsheet
------------------
┌─────────────────────┬──────┐
│ Domain Exception    │ Code │
├─────────────────────┼──────┤
│ DomainError         │ 400  │
│ PermissionDenied    │ 403  │
│ NotFound            │ 404  │
│ Conflict            │ 409  │
└─────────────────────┴──────┘

Usage inside a service::

    from core.domain.exceptions import DomainError

    if not nature_type.is_active:
        raise DomainError("Invalid nature type")
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Converted to a 400 Bad Request at the view boundary.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class PermissionDenied(DomainError):
    """
    The authenticated user's role does not allow this operation.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested resource does not exist (or is not visible to the
    requesting user given their role scope).

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Typical usage: duplicate name / email, deleting a row that is still
    referenced.  Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)
