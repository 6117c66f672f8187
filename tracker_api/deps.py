# tracker_api/deps.py
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .db import SessionLocal
from .exceptions import AuthenticationException
from .models import UserORM
from .security import decode_access_token


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> UserORM:
    """Resolve the caller from an ``Authorization: Bearer <token>`` header.

    - Missing or malformed header -> 401.
    - Invalid/expired token, or a token for a deleted user -> 401.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationException("Authentication token is required")

    user_id = decode_access_token(authorization.split(" ", 1)[1].strip())
    user = db.get(UserORM, user_id)
    if user is None:
        raise AuthenticationException("User not found")
    return user
