"""
Tests for ReminderScheduler
"""
from datetime import datetime, timedelta

from tracker_api.models import JobORM, NotificationORM
from tracker_api.scheduler import ReminderScheduler
from tracker_api.store import NotificationStore

NOW = datetime(2024, 3, 10, 8, 0)


def test_run_scan_uses_injected_clock(db, user, session_factory):
    db.add(JobORM(user_id=user.id, company_name="Acme", role="SRE", reminder_on=True,
                  deadline_date=datetime(2024, 3, 11)))
    db.commit()

    scheduler = ReminderScheduler(session_factory, clock=lambda: NOW)
    assert scheduler.run_scan().created == 1
    assert scheduler.run_scan().created == 0


def test_run_purge(db, user, session_factory):
    NotificationStore(db).insert(user.id, "stale", created_at=NOW - timedelta(days=30))
    scheduler = ReminderScheduler(session_factory, clock=lambda: NOW)
    assert scheduler.run_purge() == 1
    db.expire_all()
    assert db.query(NotificationORM).count() == 0


def test_start_and_shutdown_register_both_jobs(session_factory):
    scheduler = ReminderScheduler(session_factory, scan_interval_seconds=3600, purge_interval_minutes=60)
    scheduler.start()
    try:
        assert scheduler.running
        job_ids = {job.id for job in scheduler._scheduler.get_jobs()}
        assert job_ids == {"reminder_scan", "notification_purge"}
        scheduler.start()  # second start is a no-op
        assert len(scheduler._scheduler.get_jobs()) == 2
    finally:
        scheduler.shutdown()
    assert not scheduler.running
    scheduler.shutdown()  # idempotent
