"""
core.domain.transactions — Helpers for safe multi-row writes.

A complaint mutation and its ``ComplaintHistory`` row form one unit of
work: services wrap both in ``transaction.atomic`` and lock the
complaint row first so two concurrent status changes cannot interleave
their history entries.

Usage::

    from django.db import transaction
    from core.domain.transactions import lock_for_update

    with transaction.atomic():
        complaint = lock_for_update(Complaint, pk, label="Complaint")
        ...
"""

from __future__ import annotations

from typing import Any, TypeVar

from django.db import models

from core.domain.exceptions import NotFound

M = TypeVar("M", bound=models.Model)


def lock_for_update(model_class: type[M], pk: Any, *, label: str | None = None) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Args:
        model_class: The Django model class.
        pk:          Primary key value.
        label:       Name used in the not-found message (defaults to
                     the model class name).

    Returns:
        The locked model instance.

    Raises:
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except (model_class.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label or model_class.__name__} not found")
