"""
Background hand-off for complaint notifications.

Request handlers must never wait on stakeholder lookups or the
messaging gateway, so only the event itself (complaint id, actor,
event type, details) is pushed onto a bounded queue.  A single daemon
worker thread drains it and calls the dispatcher's handler for each
job; the handler resolves recipients, renders the message and sends.
One worker keeps all sends process-wide serial.

There are no retries and no persistence.  A full
queue drops the job with a warning; jobs still queued at process exit
are lost.

With ``settings.NOTIFICATIONS["EAGER"]`` set, jobs run inline in the
caller's thread (tests, management commands).
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from django.conf import settings
from django.db import close_old_connections, connections

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationJob:
    event_type: str
    complaint_id: Any
    actor_id: Any = None
    actor_role: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


class NotificationDispatcher:
    """Bounded queue consumed by one lazily started daemon thread."""

    _STOP = object()

    def __init__(
        self,
        handler: Callable[[NotificationJob], None],
        *,
        maxsize: int | None = None,
    ) -> None:
        self._handler = handler
        self._maxsize = maxsize if maxsize is not None else settings.NOTIFICATIONS["QUEUE_MAXSIZE"]
        self._queue: queue.Queue = queue.Queue(maxsize=self._maxsize)
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def eager(self) -> bool:
        return bool(settings.NOTIFICATIONS.get("EAGER"))

    def submit(self, job: NotificationJob) -> bool:
        """
        Hand ``job`` to the worker without blocking.

        Returns ``False`` if the job was dropped because the queue is full.
        """
        if self.eager:
            self._run(job)
            return True

        self._ensure_worker()
        try:
            self._queue.put_nowait(job)
        except queue.Full:
            logger.warning(
                "Notification queue full (%d); dropping %s for complaint %s",
                self._maxsize, job.event_type, job.complaint_id,
            )
            return False
        return True

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(
                target=self._drain,
                name="notification-dispatcher",
                daemon=True,
            )
            self._worker.start()

    def _drain(self) -> None:
        # The worker owns its own DB connection; recycle it around each job.
        try:
            while True:
                job = self._queue.get()
                try:
                    if job is self._STOP:
                        return
                    close_old_connections()
                    self._run(job)
                    close_old_connections()
                finally:
                    self._queue.task_done()
        finally:
            connections.close_all()

    def _run(self, job: NotificationJob) -> None:
        try:
            self._handler(job)
        except Exception:
            logger.exception(
                "Notification %s for complaint %s crashed",
                job.event_type, job.complaint_id,
            )

    def join(self) -> None:
        """Block until every queued job has been processed."""
        self._queue.join()

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop the worker after it drains the jobs already queued."""
        with self._lock:
            worker = self._worker
            if worker is None or not worker.is_alive():
                return
            self._queue.put(self._STOP)
            self._worker = None
        if wait:
            worker.join()
