from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from featureforge.database.session import get_db
from featureforge.models import User
from featureforge.auth.dependencies import get_current_user
from featureforge.utils import notification_service
from featureforge.utils.common import success_response
from featureforge.constants import SuccessMessages

router = APIRouter(prefix="/notifications", tags=["Notifications"])

@router.get("")
def get_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    type: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Retrieves the current user's notifications, newest first.
    """
    return success_response(
        notification_service.get_user_notifications(db, current_user.id, page, limit, unread_only, type)
    )

@router.get("/unread-count")
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response({"unread_count": notification_service.get_unread_count(db, current_user.id)})

@router.put("/read-all")
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = notification_service.mark_all_as_read(db, current_user.id)
    return success_response({"updated_count": updated})

@router.put("/{notification_id}/read")
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Marks a notification as read.
    """
    return success_response(notification_service.mark_as_read(db, notification_id, current_user.id))

@router.delete("/{notification_id}")
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    notification_service.delete_notification(db, notification_id, current_user.id)
    return success_response(message=SuccessMessages.NOTIFICATION_DELETED)
