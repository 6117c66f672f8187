"""Notification persistence.

Thin wrapper over the ``notifications`` table. Every read and write that
takes a ``user_id`` is scoped to that owner, so a wrong owner looks exactly
like a missing row.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from .config import settings
from .logging_config import get_logger
from .models import NotificationORM

logger = get_logger(__name__)

_CONFLICT_COLUMNS = ["user_id", "message", "reminder_day"]
_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


class NotificationStore:
    def __init__(self, db: Session, retention_days: int | None = None):
        self.db = db
        self.retention = timedelta(days=retention_days or settings.NOTIFICATION_RETENTION_DAYS)

    def insert(self, user_id: int, message: str, *, created_at: Optional[datetime] = None) -> NotificationORM:
        row = NotificationORM(user_id=user_id, message=message, created_at=created_at or datetime.now())
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def insert_once(self, user_id: int, message: str, day: date, *, created_at: Optional[datetime] = None) -> bool:
        """Insert a reminder unless one with the same message exists for this user and day.

        Returns True when a row was written. Relies on the
        (user_id, message, reminder_day) unique constraint, so two scanners
        racing on the same item cannot both insert.
        """
        values = {
            "user_id": user_id,
            "message": message,
            "is_read": False,
            "created_at": created_at or datetime.now(),
            "reminder_day": day,
        }
        dialect = self.db.get_bind().dialect.name
        insert = _INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"insert_once needs ON CONFLICT support, not available for {dialect!r}")
        stmt = insert(NotificationORM).values(values).on_conflict_do_nothing(index_elements=_CONFLICT_COLUMNS)
        result = self.db.execute(stmt)
        self.db.commit()
        return (result.rowcount or 0) > 0

    def find_one(self, user_id: int, message: str, start: datetime, end: datetime) -> Optional[NotificationORM]:
        """First notification for this user and message created in [start, end).

        Reminder dedup goes through insert_once; this lookup stays for callers
        that need to ask whether a message was already sent in a time window.
        """
        stmt = (
            select(NotificationORM)
            .where(
                NotificationORM.user_id == user_id,
                NotificationORM.message == message,
                NotificationORM.created_at >= start,
                NotificationORM.created_at < end,
            )
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def list_by_user(self, user_id: int, limit: int | None = None) -> List[NotificationORM]:
        stmt = (
            select(NotificationORM)
            .where(NotificationORM.user_id == user_id)
            .order_by(NotificationORM.created_at.desc(), NotificationORM.id.desc())
            .limit(limit or settings.NOTIFICATION_LIST_LIMIT)
        )
        return list(self.db.execute(stmt).scalars().all())

    def _get_owned(self, notification_id: int, user_id: int) -> Optional[NotificationORM]:
        stmt = select(NotificationORM).where(
            NotificationORM.id == notification_id,
            NotificationORM.user_id == user_id,
        )
        return self.db.execute(stmt).scalars().first()

    def mark_read(self, notification_id: int, user_id: int) -> Optional[NotificationORM]:
        row = self._get_owned(notification_id, user_id)
        if row is None:
            return None
        row.is_read = True
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, notification_id: int, user_id: int) -> Optional[NotificationORM]:
        row = self._get_owned(notification_id, user_id)
        if row is None:
            return None
        self.db.delete(row)
        self.db.commit()
        return row

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete notifications older than the retention window. Returns rows removed."""
        cutoff = (now or datetime.now()) - self.retention
        result = self.db.execute(delete(NotificationORM).where(NotificationORM.created_at < cutoff))
        self.db.commit()
        removed = result.rowcount or 0
        if removed:
            logger.info("purged %d notifications older than %s", removed, cutoff.isoformat(timespec="seconds"))
        return removed
