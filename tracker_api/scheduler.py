from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from .config import settings
from .logging_config import get_logger
from .reminders import ReminderScanner, ScanResult
from .store import NotificationStore

logger = get_logger(__name__)


class ReminderScheduler:
    """Background jobs for the API process: the reminder scan and the notification purge.

    Built and started by the app's startup hook and shut down with it. Tests
    call ``run_scan``/``run_purge`` directly instead of starting the threads.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        scan_interval_seconds: Optional[int] = None,
        purge_interval_minutes: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.scan_interval_seconds = scan_interval_seconds or settings.REMINDER_SCAN_INTERVAL_SECONDS
        self.purge_interval_minutes = purge_interval_minutes or settings.NOTIFICATION_PURGE_INTERVAL_MINUTES
        self.scanner = ReminderScanner(session_factory, clock=clock)
        self._scheduler: BackgroundScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        self._scheduler = BackgroundScheduler()
        # max_instances=1: a slow scan is never overlapped by the next tick in this process
        self._scheduler.add_job(
            self.run_scan,
            IntervalTrigger(seconds=self.scan_interval_seconds),
            id="reminder_scan",
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.add_job(
            self.run_purge,
            IntervalTrigger(minutes=self.purge_interval_minutes),
            id="notification_purge",
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(
            "Scheduled reminder scan every %ss and notification purge every %sm",
            self.scan_interval_seconds, self.purge_interval_minutes,
        )

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Reminder scheduler stopped")
        self._scheduler = None

    def run_scan(self) -> ScanResult:
        return self.scanner.run(self.clock())

    def run_purge(self) -> int:
        # Use a fresh session per run; never reuse request-scoped sessions
        db = self.session_factory()
        try:
            return NotificationStore(db).purge_expired(self.clock())
        except Exception:
            db.rollback()
            logger.exception("notification purge failed")
            return 0
        finally:
            db.close()
