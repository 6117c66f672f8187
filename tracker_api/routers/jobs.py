from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..deps import get_current_user, get_db
from ..exceptions import AuthorizationException, ValidationException
from ..logging_config import get_logger
from ..models import UserORM
from ..repositories import JobRepository
from ..schemas import (
    JobDetails,
    JobIn,
    JobOut,
    MessageResponse,
    PinToggleResponse,
    ReminderToggle,
    ReminderToggleResponse,
)
from ..store import NotificationStore

router = APIRouter(prefix="/jobs", tags=["jobs"])
logger = get_logger(__name__)


@router.post("", response_model=JobOut, status_code=201)
def add_job(payload: JobIn, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    job = JobRepository(db).create(user.id, payload)
    store = NotificationStore(db)
    store.insert(user.id, f"Job added: {job.role} at {job.company_name}")
    if job.interviews:
        store.insert(user.id, f"Added {len(job.interviews)} interviews for {job.role} at {job.company_name}")
    logger.info("job created id=%s user=%s interviews=%d", job.id, user.id, len(job.interviews))
    return job


@router.get("", response_model=List[JobOut])
def list_jobs(
    status: str | None = Query(None),
    priority_level: str | None = Query(None, alias="priorityLevel"),
    is_pinned: str | None = Query(None, alias="isPinned", description="Pinned | Unpinned | All"),
    search: str | None = Query(None, description="search in company name and role"),
    source: str | None = Query(None),
    location: str | None = Query(None),
    sort: str | None = Query(None, description="applicationDate-desc | applicationDate-asc | deadlineDate-asc | priorityLevel-desc"),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return JobRepository(db).list_for_user(
        user.id,
        status=status,
        priority_level=priority_level,
        is_pinned=is_pinned,
        search=search,
        source=source,
        location=location,
        sort=sort,
    )


@router.get("/disable-notifications", response_model=MessageResponse)
def disable_notifications(
    email: str | None = Query(None),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not email:
        raise ValidationException("Email is required")
    # only the caller's own address is accepted
    if email.strip().lower() != user.email:
        raise AuthorizationException("You can only change notifications for your own account")

    repo = JobRepository(db)
    if repo.count_for_user(user.id) == 0:
        return {"message": "No jobs found to disable notifications"}
    changed = repo.set_reminders_for_user(user.id, False)
    return {"message": f"Disabled notifications for all jobs ({changed} jobs updated)"}


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: int, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    return JobRepository(db).get_owned(job_id, user.id)


@router.get("/{job_id}/details", response_model=JobDetails)
def get_job_details(job_id: int, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"job": JobRepository(db).get_owned(job_id, user.id)}


@router.put("/{job_id}", response_model=JobOut)
def update_job(job_id: int, payload: JobIn, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = JobRepository(db)
    job = repo.replace(repo.get_owned(job_id, user.id), payload)
    store = NotificationStore(db)
    store.insert(user.id, f"Job updated: {job.role} at {job.company_name}")
    if job.interviews:
        store.insert(user.id, f"Updated {len(job.interviews)} interviews for {job.role} at {job.company_name}")
    return job


@router.delete("/{job_id}", response_model=MessageResponse)
def delete_job(job_id: int, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = JobRepository(db)
    repo.delete(repo.get_owned(job_id, user.id))
    return {"message": "Job deleted"}


@router.patch("/{job_id}/reminder", response_model=ReminderToggleResponse)
def toggle_reminder(
    job_id: int,
    payload: ReminderToggle,
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    repo = JobRepository(db)
    job = repo.set_reminder(repo.get_owned(job_id, user.id), payload.reminder_on)
    return {
        "message": f"Reminder {'enabled' if job.reminder_on else 'disabled'}",
        "reminder_on": job.reminder_on,
    }


@router.patch("/{job_id}/pin", response_model=PinToggleResponse)
def toggle_pin(job_id: int, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = JobRepository(db)
    job = repo.toggle_pin(repo.get_owned(job_id, user.id))
    return {
        "message": f"Job {'pinned' if job.is_pinned else 'unpinned'}: {job.role} at {job.company_name}",
        "is_pinned": job.is_pinned,
    }
