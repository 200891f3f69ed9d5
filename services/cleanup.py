"""
Background removal of expired and long-revoked session rows.

The scheduler is owned by the process entrypoint, not by the Flask app,
and shares nothing with request handling but the database. A failed
sweep is logged and the next one runs on schedule.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from models.base_model import utcnow
from services.session_store import PurgeReport, SessionStore

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run ``fn`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(self, name: str, interval: float, fn: Callable[[], object]):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = interval
        self.fn = fn
        self._thread: Optional[threading.Thread] = None
        self._stop: Optional[threading.Event] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        # A fresh event per start makes the task restartable after stop()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop,), name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        if self._stop is not None:
            self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None

    def _loop(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            try:
                self.fn()
            except Exception:
                logger.exception("Periodic task %s failed", self.name)


class CleanupScheduler:
    def __init__(self, storage, store: SessionStore,
                 daily_interval: timedelta = timedelta(hours=24),
                 hourly_interval: timedelta = timedelta(hours=1),
                 clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.store = store
        self.clock = clock
        self._tasks = [
            PeriodicTask("session-cleanup-daily", daily_interval.total_seconds(), lambda: self._scheduled_run("daily")),
            PeriodicTask("session-cleanup-hourly", hourly_interval.total_seconds(), lambda: self._scheduled_run("hourly")),
        ]

    @property
    def running(self) -> bool:
        return any(task.running for task in self._tasks)

    def run_once(self, label: str = "manual") -> Optional[PurgeReport]:
        """One sweep. Never raises; returns None when the sweep failed."""
        try:
            report = self.store.purge(self.clock())
        except Exception:
            logger.exception("Session cleanup (%s) failed", label)
            return None
        if report.total:
            logger.info(
                "Session cleanup (%s) removed %d expired and %d revoked sessions",
                label, report.expired, report.revoked,
            )
        else:
            logger.debug("Session cleanup (%s) found nothing to remove", label)
        return report

    def _scheduled_run(self, label: str) -> None:
        try:
            self.run_once(label)
        finally:
            # Each run gets its own scoped session; nothing is held between runs
            self.storage.close()

    def start(self) -> None:
        for task in self._tasks:
            task.start()
        logger.info("Session cleanup scheduler started")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        for task in self._tasks:
            task.stop(timeout)
        logger.info("Session cleanup scheduler stopped")
