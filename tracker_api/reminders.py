"""Deadline and interview reminder scan.

One pass looks at every reminder-enabled job with a deadline and every
interview with a date. Items due exactly one or two calendar days from
today (local time) get a reminder notification for their owner; the store
keeps that to one row per (user, message, day), so running the scan every
minute is harmless.

Items due today or already overdue produce nothing.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from .logging_config import get_logger
from .repositories import JobRepository
from .store import NotificationStore

logger = get_logger(__name__)

REMINDER_OFFSETS = {1: "tomorrow", 2: "in 2 days"}


def format_short_date(value: date) -> str:
    """Month/day/year without zero padding, e.g. 3/11/2024."""
    return f"{value.month}/{value.day}/{value.year}"


def days_until(target: datetime | date, today: date) -> int:
    if isinstance(target, datetime):
        target = target.date()
    return (target - today).days


def deadline_message(role: str, company: str, deadline: datetime | date, days: int) -> str:
    when = REMINDER_OFFSETS[days]
    return f"Reminder: Deadline for {role} at {company} is {when} on {format_short_date(deadline)}."


def interview_message(role: str, company: str, round_name: str, interview_date: datetime | date, days: int) -> str:
    when = REMINDER_OFFSETS[days]
    return (
        f"Reminder: Interview for {role} at {company} (Round: {round_name}) "
        f"is {when} on {format_short_date(interview_date)}."
    )


@dataclass
class ScanResult:
    created: int = 0
    skipped: int = 0
    failed: int = 0


class ReminderScanner:
    """Runs one reminder pass against a fresh session from ``session_factory``."""

    def __init__(self, session_factory: Callable[[], Session], clock: Callable[[], datetime] = datetime.now):
        self.session_factory = session_factory
        self.clock = clock

    def run(self, now: Optional[datetime] = None) -> ScanResult:
        """Scan once. Never raises; failures are logged and the next run starts clean."""
        now = now or self.clock()
        result = ScanResult()
        db = self.session_factory()
        try:
            self._scan(db, now, result)
        except Exception:
            db.rollback()
            logger.exception("reminder scan aborted")
        finally:
            db.close()
        if result.created or result.failed:
            logger.info(
                "reminder scan created=%d skipped=%d failed=%d",
                result.created, result.skipped, result.failed,
            )
        return result

    def _scan(self, db: Session, now: datetime, result: ScanResult) -> None:
        today = now.date()
        jobs = JobRepository(db)
        store = NotificationStore(db)

        for job in jobs.find_reminder_eligible_jobs():
            try:
                days = days_until(job.deadline_date, today)
                if days not in REMINDER_OFFSETS:
                    continue
                message = deadline_message(job.role, job.company_name, job.deadline_date, days)
                self._notify(store, job.user_id, message, today, now, result)
            except Exception:
                db.rollback()
                result.failed += 1
                logger.exception("reminder scan skipped job id=%s", getattr(job, "id", None))

        for interview in jobs.find_all_interviews_with_date():
            try:
                days = days_until(interview.interview_date, today)
                if days not in REMINDER_OFFSETS:
                    continue
                job = interview.job
                message = interview_message(job.role, job.company_name, interview.round, interview.interview_date, days)
                self._notify(store, job.user_id, message, today, now, result)
            except Exception:
                db.rollback()
                result.failed += 1
                logger.exception("reminder scan skipped interview id=%s", getattr(interview, "id", None))

    @staticmethod
    def _notify(store: NotificationStore, user_id: int, message: str, today: date, now: datetime, result: ScanResult) -> None:
        if store.insert_once(user_id, message, today, created_at=now):
            result.created += 1
        else:
            result.skipped += 1
