import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload

from featureforge.config.settings import settings
from featureforge.constants import ErrorMessages
from featureforge.models import Notification
from featureforge.utils.utils import notification_to_dict

logger = logging.getLogger(__name__)

def create_notification(
    db: Session,
    user_id: int,
    type: str,
    related_id: int,
    related_type: str,
    message: str,
    triggered_by: int,
    metadata: Optional[dict] = None,
    commit: bool = True
):
    """
    Creates a new notification for a user.

    Args:
        db: Database session
        user_id: Recipient user ID
        type: mention, reply or feature_update
        related_id: ID of the comment or feature the notification is about
        related_type: comment or feature
        message: Notification message body
        triggered_by: User whose action produced the notification
        metadata: Extra context for the client
        commit: Commit immediately; pass False to join the caller's transaction

    Returns:
        Notification: The created notification entry
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        related_id=related_id,
        related_type=related_type,
        message=message,
        triggered_by=triggered_by,
        meta_data=metadata or {}
    )
    db.add(notification)
    if commit:
        db.commit()
        db.refresh(notification)
    return notification

def get_unread_count(db: Session, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False)
    ).count()

def get_user_notifications(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
    type: Optional[str] = None
):
    """
    Retrieves a page of a user's notifications, newest first.

    Returns:
        dict: notifications plus pagination and unread counters
    """
    page = max(page, 1)
    limit = max(limit, 1)

    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    if type:
        query = query.filter(Notification.type == type)

    total_count = query.count()
    notifications = (
        query.options(joinedload(Notification.trigger))
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "notifications": [notification_to_dict(n) for n in notifications],
        "total_count": total_count,
        "total_pages": math.ceil(total_count / limit),
        "current_page": page,
        "unread_count": get_unread_count(db, user_id),
    }

def _get_own_notification(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id
    ).first()
    if not notification:
        raise HTTPException(status_code=404, detail=ErrorMessages.NOTIFICATION_NOT_FOUND)
    return notification

def mark_as_read(db: Session, notification_id: int, user_id: int):
    """
    Marks one of the user's notifications as read.

    Raises:
        HTTPException: If the notification does not exist or belongs to someone else
    """
    notification = _get_own_notification(db, notification_id, user_id)
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification_to_dict(notification)

def mark_all_as_read(db: Session, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False)
    ).update({Notification.is_read: True}, synchronize_session=False)
    db.commit()
    return updated

def delete_notification(db: Session, notification_id: int, user_id: int):
    notification = _get_own_notification(db, notification_id, user_id)
    db.delete(notification)
    db.commit()
    return True

def cleanup_old_notifications(db: Session, days: Optional[int] = None) -> int:
    """
    Deletes notifications older than the retention window.

    Maintenance routine; nothing schedules it.

    Args:
        db: Database session
        days: Age threshold, defaults to NOTIFICATION_RETENTION_DAYS

    Returns:
        int: Number of deleted notifications
    """
    days = settings.NOTIFICATION_RETENTION_DAYS if days is None else days
    cutoff = datetime.utcnow() - timedelta(days=days)
    deleted = db.query(Notification).filter(
        Notification.created_at < cutoff
    ).delete(synchronize_session=False)
    db.commit()
    logger.info(f"🧹 Removed {deleted} notifications older than {days} days")
    return deleted
