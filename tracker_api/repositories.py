"""
Job repository
Owner-scoped job/interview access for the jobs router plus the two read
filters the reminder scan runs against.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.orm import Session, joinedload, selectinload

from .exceptions import ResourceNotFoundException, ValidationException
from .models import InterviewORM, InterviewStatus, JobORM, PriorityLevel
from .schemas import InterviewIn, JobIn

_PRIORITY_RANK = case(
    (JobORM.priority_level == PriorityLevel.HIGH.value, 3),
    (JobORM.priority_level == PriorityLevel.MEDIUM.value, 2),
    (JobORM.priority_level == PriorityLevel.LOW.value, 1),
    else_=0,
)

_SORTS = {
    "applicationDate-desc": (JobORM.application_date.desc(),),
    "applicationDate-asc": (JobORM.application_date.asc(),),
    "deadlineDate-asc": (JobORM.deadline_date.asc(),),
    "priorityLevel-desc": (_PRIORITY_RANK.desc(), JobORM.company_name.asc()),
}


class JobRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---- reminder scan filters ----
    def find_reminder_eligible_jobs(self) -> List[JobORM]:
        stmt = select(JobORM).where(JobORM.reminder_on.is_(True), JobORM.deadline_date.is_not(None))
        return list(self.db.execute(stmt).scalars().all())

    def find_all_interviews_with_date(self) -> List[InterviewORM]:
        stmt = (
            select(InterviewORM)
            .options(joinedload(InterviewORM.job))
            .where(InterviewORM.interview_date.is_not(None))
        )
        return list(self.db.execute(stmt).scalars().all())

    # ---- owner-scoped CRUD ----
    def get_owned(self, job_id: int, user_id: int) -> JobORM:
        stmt = (
            select(JobORM)
            .options(selectinload(JobORM.interviews))
            .where(JobORM.id == job_id, JobORM.user_id == user_id)
        )
        job = self.db.execute(stmt).scalars().first()
        if job is None:
            raise ResourceNotFoundException("Job")
        return job

    def list_for_user(
        self,
        user_id: int,
        *,
        status: Optional[str] = None,
        priority_level: Optional[str] = None,
        is_pinned: Optional[str] = None,
        search: Optional[str] = None,
        source: Optional[str] = None,
        location: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[JobORM]:
        stmt = select(JobORM).options(selectinload(JobORM.interviews)).where(JobORM.user_id == user_id)
        # "All" is what the frontend dropdowns send for "no filter"
        if status and status != "All":
            stmt = stmt.where(JobORM.status == status)
        if priority_level and priority_level != "All":
            stmt = stmt.where(JobORM.priority_level == priority_level)
        if is_pinned and is_pinned != "All":
            stmt = stmt.where(JobORM.is_pinned.is_(is_pinned == "Pinned"))
        if search:
            stmt = stmt.where(or_(JobORM.company_name.ilike(f"%{search}%"), JobORM.role.ilike(f"%{search}%")))
        if source:
            stmt = stmt.where(JobORM.source.ilike(f"%{source}%"))
        if location:
            stmt = stmt.where(JobORM.location.ilike(f"%{location}%"))
        order = _SORTS.get(sort or "", _SORTS["applicationDate-desc"])
        stmt = stmt.order_by(*order, JobORM.id.desc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, user_id: int, payload: JobIn) -> JobORM:
        job = JobORM(user_id=user_id)
        self._apply(job, payload)
        job.resume_path = payload.resume_path or ""
        job.notes = payload.notes or ""
        job.interviews = self._build_interviews(payload.interviews)
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)
        return job

    def replace(self, job: JobORM, payload: JobIn) -> JobORM:
        """Overwrite every field and recreate the interview set from scratch."""
        interviews = self._build_interviews(payload.interviews)
        self._apply(job, payload)
        job.resume_path = payload.resume_path or job.resume_path or ""
        job.notes = payload.notes or job.notes or ""
        # delete-orphan drops the previous interviews on flush
        job.interviews = interviews
        self.db.commit()
        self.db.refresh(job)
        return job

    def delete(self, job: JobORM) -> None:
        self.db.delete(job)
        self.db.commit()

    def set_reminder(self, job: JobORM, reminder_on: bool) -> JobORM:
        job.reminder_on = reminder_on
        self.db.commit()
        return job

    def toggle_pin(self, job: JobORM) -> JobORM:
        job.is_pinned = not job.is_pinned
        self.db.commit()
        return job

    def count_for_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(JobORM).where(JobORM.user_id == user_id)
        return int(self.db.execute(stmt).scalar_one())

    def set_reminders_for_user(self, user_id: int, reminder_on: bool) -> int:
        """Flip the reminder flag on every job the user owns. Returns rows changed."""
        result = self.db.execute(
            update(JobORM)
            .where(JobORM.user_id == user_id, JobORM.reminder_on != reminder_on)
            .values(reminder_on=reminder_on)
        )
        self.db.commit()
        return result.rowcount or 0

    # ---- helpers ----
    @staticmethod
    def _apply(job: JobORM, payload: JobIn) -> None:
        job.company_name = payload.company_name
        job.role = payload.role
        job.status = payload.status.value
        job.application_date = payload.application_date or job.application_date or datetime.now()
        job.deadline_date = payload.deadline_date
        job.source = payload.source
        job.source_link = payload.source_link
        job.priority_level = payload.priority_level.value
        job.job_description = payload.job_description
        job.reminder_on = bool(payload.reminder_on)
        job.location = payload.location
        job.stipend_or_salary = payload.stipend_or_salary

    @staticmethod
    def _build_interviews(items: List[InterviewIn]) -> List[InterviewORM]:
        built = []
        for item in items:
            if item.round is None or item.interview_date is None:
                raise ValidationException("Invalid interview data: round and interview date are required")
            built.append(InterviewORM(
                round=item.round.value,
                interview_date=item.interview_date,
                status=(item.status or InterviewStatus.SCHEDULED).value,
                comments=item.comments or "",
            ))
        return built
