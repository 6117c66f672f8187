import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


class JobStatus(str, enum.Enum):
    APPLIED = "Applied"
    INTERVIEW = "Interview"
    OFFERED = "Offered"
    REJECTED = "Rejected"
    ACCEPTED = "Accepted"


class PriorityLevel(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class InterviewRound(str, enum.Enum):
    CODING = "Coding"
    TECHNICAL = "Technical"
    APTITUDE = "Aptitude"
    GROUP_DISCUSSION = "Group Discussion"
    HR = "HR"
    SYSTEM_DESIGN = "System Design"
    BEHAVIORAL = "Behavioral"
    FINAL = "Final"
    OTHER = "Other"


class InterviewStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class UserORM(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    full_name = Column(String(256), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)
    reset_code = Column(String(6), nullable=True)
    reset_code_expiry = Column(DateTime, nullable=True)
    reset_attempts = Column(JSON, nullable=False, default=list)  # epoch millis
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.now)

    jobs = relationship("JobORM", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("NotificationORM", back_populates="user", cascade="all, delete-orphan")


class JobORM(Base):
    __tablename__ = "jobs"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    company_name = Column(String(256), nullable=False)
    role = Column(String(256), nullable=False)
    status = Column(String(32), nullable=False, default=JobStatus.APPLIED.value)
    application_date = Column(DateTime, nullable=False, default=datetime.now)
    deadline_date = Column(DateTime, nullable=True)
    source = Column(String(128), nullable=True)
    source_link = Column(Text, nullable=True)            # often long
    priority_level = Column(String(16), nullable=False, default=PriorityLevel.MEDIUM.value)
    job_description = Column(Text, nullable=True)
    resume_path = Column(Text, nullable=False, default="")
    is_pinned = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=False, default="")
    reminder_on = Column(Boolean, nullable=False, default=False)
    location = Column(String(256), nullable=True)
    stipend_or_salary = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.now)

    user = relationship("UserORM", back_populates="jobs")
    interviews = relationship(
        "InterviewORM",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="InterviewORM.id",
    )

    __table_args__ = (
        Index("ix_jobs_user_deadline_status", "user_id", "deadline_date", "status"),
    )


class InterviewORM(Base):
    __tablename__ = "interviews"
    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    round = Column(String(32), nullable=False)
    interview_date = Column(DateTime, nullable=False)
    status = Column(String(16), nullable=False, default=InterviewStatus.SCHEDULED.value)
    comments = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    job = relationship("JobORM", back_populates="interviews")


class NotificationORM(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    # Set only on scheduled reminders; NULLs never collide in the unique constraint
    reminder_day = Column(Date, nullable=True)

    user = relationship("UserORM", back_populates="notifications")

    __table_args__ = (
        UniqueConstraint("user_id", "message", "reminder_day", name="uq_notifications_user_message_day"),
        Index("ix_notifications_user_created", "user_id", "created_at"),
    )
