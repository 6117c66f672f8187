from collections import Counter
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..deps import get_current_user, get_db
from ..models import JobORM, JobStatus, UserORM
from ..schemas import PeriodCount, SourceCount, StageRate, StatusCount

router = APIRouter(prefix="/analytics", tags=["analytics"])


class JobFilters:
    """Shared query params: role/company substring match (case-insensitive), exact source."""

    def __init__(
        self,
        job_title: Optional[str] = Query(None, alias="jobTitle"),
        company: Optional[str] = Query(None),
        source: Optional[str] = Query(None),
    ):
        self.job_title = job_title
        self.company = company
        self.source = source

    def conditions(self, user_id: int) -> list:
        conds = [JobORM.user_id == user_id]
        if self.job_title:
            conds.append(JobORM.role.ilike(f"%{self.job_title}%"))
        if self.company:
            conds.append(JobORM.company_name.ilike(f"%{self.company}%"))
        if self.source:
            conds.append(JobORM.source == self.source)
        return conds


@router.get("/status-distribution", response_model=List[StatusCount])
def status_distribution(
    filters: JobFilters = Depends(),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = db.execute(
        select(JobORM.status.label("status"), func.count().label("total"))
        .where(*filters.conditions(user.id))
        .group_by(JobORM.status)
    ).all()
    return [{"status": r.status, "count": int(r.total)} for r in rows]


@router.get("/applications-by-source", response_model=List[SourceCount])
def applications_by_source(
    filters: JobFilters = Depends(),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = db.execute(
        select(JobORM.source.label("source"), func.count().label("total"))
        .where(*filters.conditions(user.id))
        .group_by(JobORM.source)
    ).all()
    return [{"source": r.source, "count": int(r.total)} for r in rows]


@router.get("/applications-over-time", response_model=List[PeriodCount])
def applications_over_time(
    filters: JobFilters = Depends(),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # bucket by month in python; date formatting functions differ per backend
    dates = db.execute(select(JobORM.application_date).where(*filters.conditions(user.id))).scalars().all()
    months = Counter(d.strftime("%Y-%m") for d in dates if d is not None)
    return [{"date": month, "count": months[month]} for month in sorted(months)]


@router.get("/success-rates", response_model=List[StageRate])
def success_rates(
    filters: JobFilters = Depends(),
    user: UserORM = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = db.execute(
        select(JobORM.status, func.count())
        .where(*filters.conditions(user.id))
        .group_by(JobORM.status)
    ).all()
    by_status = {status: int(total) for status, total in rows}
    total = sum(by_status.values())
    if total == 0:
        return []
    stages = [
        ("Applied to Interview", JobStatus.INTERVIEW),
        ("Applied to Offered", JobStatus.OFFERED),
        ("Applied to Accepted", JobStatus.ACCEPTED),
    ]
    return [
        {"stage": label, "rate": by_status.get(status.value, 0) / total * 100}
        for label, status in stages
    ]
