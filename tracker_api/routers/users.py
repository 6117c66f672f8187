import secrets
import time
from datetime import datetime, timedelta

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..deps import get_current_user, get_db
from ..exceptions import (
    AuthenticationException,
    DuplicateResourceException,
    RateLimitException,
    ResourceNotFoundException,
    ValidationException,
)
from ..logging_config import get_logger
from ..mailer import render_reset_password, send_email
from ..models import UserORM
from ..repositories import JobRepository
from ..schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordUpdate,
    ProfileResponse,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    UserOut,
)
from ..security import create_access_token, hash_password, verify_password

router = APIRouter(prefix="/users", tags=["users"])
logger = get_logger(__name__)

_HOUR_MS = 60 * 60 * 1000


def check_email_allowed(email: str) -> None:
    """Reject disposable domains and, when enabled, domains without a mail server."""
    domain = email.rsplit("@", 1)[-1].lower()
    if domain in {d.lower() for d in settings.DISPOSABLE_EMAIL_DOMAINS}:
        raise ValidationException("Disposable emails are not allowed")
    if settings.EMAIL_CHECK_DELIVERABILITY:
        try:
            validate_email(email, check_deliverability=True)
        except EmailNotValidError:
            raise ValidationException("Invalid email domain. Please use a trusted email provider.")


def _find_by_email(db: Session, email: str) -> UserORM | None:
    return db.execute(select(UserORM).where(UserORM.email == email.strip().lower())).scalars().first()


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    check_email_allowed(email)
    if _find_by_email(db, email) is not None:
        raise DuplicateResourceException("Email address is already registered")

    user = UserORM(
        full_name=payload.full_name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        reset_attempts=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("registered user id=%s", user.id)
    return {"user": user, "token": create_access_token(user.id)}


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = _find_by_email(db, payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise AuthenticationException("Invalid email or password")
    return {"user": user, "token": create_access_token(user.id)}


@router.get("/me", response_model=UserOut)
def me(user: UserORM = Depends(get_current_user)):
    return user


@router.put("/profile", response_model=ProfileResponse)
def update_profile(payload: ProfileUpdate, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    if payload.full_name and payload.full_name.strip():
        user.full_name = payload.full_name.strip()
        db.commit()
        db.refresh(user)
    return {"user": user}


@router.put("/password", response_model=MessageResponse)
def update_password(payload: PasswordUpdate, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    if not verify_password(payload.current_password, user.password_hash):
        raise AuthenticationException("Current password is incorrect")
    user.password_hash = hash_password(payload.new_password)
    db.commit()
    return {"message": "Password updated successfully"}


@router.delete("/delete", response_model=MessageResponse)
def delete_account(user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    # jobs, their interviews and notifications go with the user (ORM cascade)
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info("deleted user id=%s", user_id)
    return {"message": "Account deleted successfully"}


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    check_email_allowed(payload.email)
    user = _find_by_email(db, payload.email)
    if user is None:
        raise ResourceNotFoundException("User")

    # sliding one-hour window of request timestamps (epoch millis)
    now_ms = int(time.time() * 1000)
    recent = [t for t in (user.reset_attempts or []) if t > now_ms - _HOUR_MS]
    if len(recent) >= settings.RESET_MAX_ATTEMPTS_PER_HOUR:
        raise RateLimitException("Too many reset attempts. Try again after 1 hour.")

    code = str(100000 + secrets.randbelow(900000))
    user.reset_code = code
    user.reset_code_expiry = datetime.now() + timedelta(minutes=settings.RESET_CODE_TTL_MINUTES)
    user.reset_attempts = recent + [now_ms]
    db.commit()

    send_email(user.email, "Password Reset Request", render_reset_password(user.full_name, code))
    return {"message": "A 6-digit reset code has been sent to your email"}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = db.execute(
        select(UserORM).where(
            UserORM.email == payload.email.strip().lower(),
            UserORM.reset_code == payload.code,
            UserORM.reset_code_expiry > datetime.now(),
        )
    ).scalars().first()
    if user is None:
        raise ValidationException("Invalid or expired reset code")

    user.password_hash = hash_password(payload.password)
    user.reset_code = None
    user.reset_code_expiry = None
    user.reset_attempts = []
    db.commit()
    return {"message": "Password has been reset successfully"}


@router.post("/notification-settings", response_model=MessageResponse)
def enable_notifications(user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = JobRepository(db)
    if repo.count_for_user(user.id) == 0:
        return {"message": "No jobs found to enable notifications"}
    changed = repo.set_reminders_for_user(user.id, True)
    return {"message": f"Enabled notifications for all jobs ({changed} jobs updated)"}
