"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF handler turning those exceptions into JSON envelopes.
access             ``can`` / ``require`` capability checks.
transactions       Row-locking helper for ``transaction.atomic`` blocks.

Usage from any app::

    from core.domain.exceptions import DomainError, NotFound
    from core.domain.access import can, require
    from core.domain.transactions import lock_for_update
"""
