"""
Tests for the reminder scan
"""
from datetime import date, datetime
from unittest.mock import patch

import pytest
from sqlalchemy import select

from tracker_api.models import InterviewORM, JobORM, NotificationORM
from tracker_api.reminders import (
    ReminderScanner,
    days_until,
    deadline_message,
    format_short_date,
    interview_message,
)

NOW = datetime(2024, 3, 10, 9, 30)


def add_job(db, user, *, deadline=None, reminder_on=True, role="Backend Engineer", company="Acme"):
    job = JobORM(
        user_id=user.id,
        company_name=company,
        role=role,
        deadline_date=deadline,
        reminder_on=reminder_on,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def add_interview(db, job, when, round_name="HR"):
    interview = InterviewORM(job_id=job.id, round=round_name, interview_date=when)
    db.add(interview)
    db.commit()
    return interview


def messages(db, user=None):
    db.expire_all()
    stmt = select(NotificationORM).order_by(NotificationORM.id)
    if user is not None:
        stmt = stmt.where(NotificationORM.user_id == user.id)
    return [n.message for n in db.execute(stmt).scalars()]


@pytest.fixture
def scanner(session_factory):
    return ReminderScanner(session_factory, clock=lambda: NOW)


class TestHelpers:
    def test_format_short_date_has_no_padding(self):
        assert format_short_date(date(2024, 3, 1)) == "3/1/2024"
        assert format_short_date(datetime(2024, 12, 25, 23, 59)) == "12/25/2024"

    def test_days_until_ignores_time_of_day(self):
        today = date(2024, 3, 10)
        assert days_until(datetime(2024, 3, 11, 0, 0), today) == 1
        assert days_until(datetime(2024, 3, 11, 23, 59), today) == 1
        assert days_until(datetime(2024, 3, 10, 23, 59), today) == 0
        assert days_until(date(2024, 3, 8), today) == -2

    def test_message_templates(self):
        assert deadline_message("SRE", "Initech", date(2024, 3, 11), 1) == (
            "Reminder: Deadline for SRE at Initech is tomorrow on 3/11/2024."
        )
        assert interview_message("SRE", "Initech", "Technical", date(2024, 3, 12), 2) == (
            "Reminder: Interview for SRE at Initech (Round: Technical) is in 2 days on 3/12/2024."
        )


class TestDeadlineReminders:
    def test_deadline_tomorrow_creates_one_notification(self, db, user, scanner):
        add_job(db, user, deadline=datetime(2024, 3, 11, 17, 0), role="Data Analyst", company="Globex")

        result = scanner.run()

        assert result.created == 1
        assert messages(db, user) == [
            "Reminder: Deadline for Data Analyst at Globex is tomorrow on 3/11/2024."
        ]

    def test_deadline_in_two_days(self, db, user, scanner):
        add_job(db, user, deadline=datetime(2024, 3, 12))
        scanner.run()
        [message] = messages(db, user)
        assert "in 2 days" in message
        assert message.endswith("on 3/12/2024.")

    @pytest.mark.parametrize("deadline", [
        datetime(2024, 3, 10, 18, 0),   # due today
        datetime(2024, 3, 9),           # overdue
        datetime(2024, 3, 13),          # 3 days out
        datetime(2024, 3, 14),
    ])
    def test_outside_window_is_ignored(self, db, user, scanner, deadline):
        add_job(db, user, deadline=deadline)
        assert scanner.run().created == 0
        assert messages(db) == []

    def test_reminder_flag_off_is_ignored(self, db, user, scanner):
        add_job(db, user, deadline=datetime(2024, 3, 11), reminder_on=False)
        scanner.run()
        assert messages(db) == []

    def test_job_without_deadline_is_ignored(self, db, user, scanner):
        add_job(db, user, deadline=None)
        scanner.run()
        assert messages(db) == []


class TestInterviewReminders:
    def test_interview_reminder_ignores_job_reminder_flag(self, db, user, scanner):
        job = add_job(db, user, deadline=None, reminder_on=False, role="QA", company="Hooli")
        add_interview(db, job, datetime(2024, 3, 12, 14, 0), round_name="HR")

        scanner.run()

        assert messages(db, user) == [
            "Reminder: Interview for QA at Hooli (Round: HR) is in 2 days on 3/12/2024."
        ]

    def test_interview_tomorrow(self, db, user, scanner):
        job = add_job(db, user, reminder_on=False)
        add_interview(db, job, datetime(2024, 3, 11, 8, 0), round_name="Coding")
        scanner.run()
        [message] = messages(db, user)
        assert "(Round: Coding) is tomorrow on 3/11/2024." in message

    @pytest.mark.parametrize("when", [datetime(2024, 3, 10, 16), datetime(2024, 3, 13), datetime(2024, 2, 1)])
    def test_interview_outside_window(self, db, user, scanner, when):
        job = add_job(db, user, reminder_on=True)
        add_interview(db, job, when)
        scanner.run()
        assert messages(db) == []

    def test_notification_goes_to_job_owner(self, db, user, other_user, scanner):
        job = add_job(db, other_user, reminder_on=False)
        add_interview(db, job, datetime(2024, 3, 11))
        scanner.run()
        assert messages(db, user) == []
        assert len(messages(db, other_user)) == 1


class TestIdempotence:
    def test_repeated_runs_same_day_do_not_duplicate(self, db, user, session_factory):
        job = add_job(db, user, deadline=datetime(2024, 3, 11))
        add_interview(db, job, datetime(2024, 3, 12))

        first = ReminderScanner(session_factory, clock=lambda: NOW).run()
        later = ReminderScanner(session_factory, clock=lambda: NOW.replace(hour=23, minute=59))
        for _ in range(3):
            again = later.run()
            assert again.created == 0
            assert again.skipped == 2

        assert first.created == 2
        assert len(messages(db, user)) == 2

    def test_next_day_produces_a_new_reminder(self, db, user, session_factory):
        add_job(db, user, deadline=datetime(2024, 3, 12))

        ReminderScanner(session_factory, clock=lambda: NOW).run()
        ReminderScanner(session_factory, clock=lambda: datetime(2024, 3, 11, 7, 0)).run()

        assert messages(db, user) == [
            "Reminder: Deadline for Backend Engineer at Acme is in 2 days on 3/12/2024.",
            "Reminder: Deadline for Backend Engineer at Acme is tomorrow on 3/12/2024.",
        ]

    def test_user_action_notification_does_not_block_reminder(self, db, user, scanner):
        job = add_job(db, user, deadline=datetime(2024, 3, 11))
        message = deadline_message(job.role, job.company_name, job.deadline_date, 1)
        db.add(NotificationORM(user_id=user.id, message=message, created_at=NOW))
        db.commit()

        assert scanner.run().created == 1
        assert messages(db, user) == [message, message]


class TestFailures:
    def test_store_failure_is_swallowed(self, db, user, scanner):
        add_job(db, user, deadline=datetime(2024, 3, 11))
        with patch("tracker_api.reminders.JobRepository.find_reminder_eligible_jobs", side_effect=RuntimeError("down")):
            result = scanner.run()
        assert result.created == 0
        assert messages(db) == []

    def test_bad_item_does_not_stop_the_scan(self, db, user, scanner):
        add_job(db, user, deadline=datetime(2024, 3, 11), role="First")
        add_job(db, user, deadline=datetime(2024, 3, 11), role="Second")

        real = deadline_message

        def flaky(role, *args):
            if role == "First":
                raise ValueError("malformed")
            return real(role, *args)

        with patch("tracker_api.reminders.deadline_message", side_effect=flaky):
            result = scanner.run()

        assert result.failed == 1
        assert result.created == 1
        assert messages(db, user) == ["Reminder: Deadline for Second at Acme is tomorrow on 3/11/2024."]
