from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import settings
from ..deps import get_current_user, get_db
from ..exceptions import ResourceNotFoundException
from ..models import UserORM
from ..schemas import MessageResponse, NotificationOut
from ..store import NotificationStore

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
def list_notifications(user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    return NotificationStore(db).list_by_user(user.id, settings.NOTIFICATION_LIST_LIMIT)


@router.put("/{notification_id}/read", response_model=MessageResponse)
def mark_as_read(notification_id: int, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    if NotificationStore(db).mark_read(notification_id, user.id) is None:
        raise ResourceNotFoundException("Notification")
    return {"message": "Notification marked as read"}


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, user: UserORM = Depends(get_current_user), db: Session = Depends(get_db)):
    if NotificationStore(db).delete(notification_id, user.id) is None:
        raise ResourceNotFoundException("Notification")
    return {"message": "Notification deleted"}
