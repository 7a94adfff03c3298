from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas import ActionResult, MarkReadRequest, NotificationRead
from services import notification_service
from utils.auth import get_current_user_id
from utils.results import raise_for_result

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=List[NotificationRead])
def get_notifications(
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Caller's notifications, newest first. Empty when not signed in.
    """
    return notification_service.get_notifications(db, current_user_id).data


@router.get("/unread-count")
def get_unread_count(
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return {"unread": notification_service.get_unread_count(db, current_user_id).data}


@router.post("/read", response_model=ActionResult)
def mark_notifications_as_read(
    payload: MarkReadRequest,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Mark notifications as read. Unknown ids are ignored.
    """
    result = notification_service.mark_notifications_as_read(db, current_user_id, payload.notification_ids)
    return raise_for_result(result)
