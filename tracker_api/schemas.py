from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import InterviewRound, InterviewStatus, JobStatus, PriorityLevel


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Store datetimes as naive local time; offsets from the client are converted first."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class CamelModel(BaseModel):
    # the frontend speaks camelCase; python code keeps snake_case attributes
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---- Users ----
class RegisterRequest(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=256)
    email: EmailStr
    password: str = Field(..., min_length=8)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class ProfileUpdate(CamelModel):
    full_name: Optional[str] = Field(None, max_length=256)


class PasswordUpdate(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=8)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)
    password: str = Field(..., min_length=8)


class UserOut(CamelModel):
    id: int
    full_name: str
    email: str
    created_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    user: UserOut
    token: str


class ProfileResponse(CamelModel):
    user: UserOut


# ---- Jobs & interviews ----
class InterviewIn(CamelModel):
    # round and date are checked by the repository so the error text matches the other job errors
    round: Optional[InterviewRound] = None
    interview_date: Optional[datetime] = None
    status: Optional[InterviewStatus] = None
    comments: Optional[str] = None

    localize_interview_date = field_validator("interview_date")(to_local_naive)


class InterviewOut(CamelModel):
    id: int
    round: str
    interview_date: datetime
    status: str
    comments: str = ""


class JobIn(CamelModel):
    company_name: str = Field(..., min_length=1, max_length=256)
    role: str = Field(..., min_length=1, max_length=256)
    status: JobStatus = JobStatus.APPLIED
    application_date: Optional[datetime] = None
    deadline_date: Optional[datetime] = None
    source: Optional[str] = None
    source_link: Optional[str] = None
    priority_level: PriorityLevel = PriorityLevel.MEDIUM
    job_description: Optional[str] = None
    resume_path: Optional[str] = None
    reminder_on: bool = False
    interviews: List[InterviewIn] = []
    notes: Optional[str] = None
    location: Optional[str] = None
    stipend_or_salary: Optional[float] = Field(None, ge=0)

    localize_dates = field_validator("application_date", "deadline_date")(to_local_naive)

    @field_validator("company_name", "role")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class JobOut(CamelModel):
    id: int
    company_name: str
    role: str
    status: str
    application_date: Optional[datetime] = None
    deadline_date: Optional[datetime] = None
    source: Optional[str] = None
    source_link: Optional[str] = None
    priority_level: str
    job_description: Optional[str] = None
    resume_path: str = ""
    is_pinned: bool = False
    notes: str = ""
    reminder_on: bool = False
    location: Optional[str] = None
    stipend_or_salary: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    interviews: List[InterviewOut] = []


class JobDetails(CamelModel):
    job: JobOut


class ReminderToggle(CamelModel):
    reminder_on: bool


class ReminderToggleResponse(CamelModel):
    message: str
    reminder_on: bool


class PinToggleResponse(CamelModel):
    message: str
    is_pinned: bool


# ---- Notifications ----
class NotificationOut(CamelModel):
    id: int
    message: str
    is_read: bool
    created_at: datetime


class MessageResponse(BaseModel):
    message: str


# ---- Analytics ----
class StatusCount(BaseModel):
    status: str
    count: int


class SourceCount(BaseModel):
    source: Optional[str] = None
    count: int


class PeriodCount(BaseModel):
    date: str
    count: int


class StageRate(BaseModel):
    stage: str
    rate: float


__all__ = [
    "to_local_naive",
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdate",
    "PasswordUpdate",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UserOut",
    "AuthResponse",
    "ProfileResponse",
    "InterviewIn",
    "InterviewOut",
    "JobIn",
    "JobOut",
    "JobDetails",
    "ReminderToggle",
    "ReminderToggleResponse",
    "PinToggleResponse",
    "NotificationOut",
    "MessageResponse",
    "StatusCount",
    "SourceCount",
    "PeriodCount",
    "StageRate",
]
