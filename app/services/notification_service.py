"""
In-app notification inbox
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.errors import Forbidden, NotFound
from app.models.notification import Notification, NotificationType
from app.utils.datetime_utils import now_utc
from app.utils.json_serializer import sanitize_for_json

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    recipient_id: int,
    type: NotificationType,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
    priority: str = "medium",
) -> Notification:
    notification = Notification(
        recipient_id=recipient_id,
        type=type.value if isinstance(type, NotificationType) else type,
        title=title,
        message=message,
        data=sanitize_for_json(data) if data is not None else None,
        priority=priority,
        is_read=False,
        created_at=now_utc(),
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    logger.info(
        "Notification created: id=%s recipient_id=%s type=%s",
        notification.id, recipient_id, notification.type,
    )
    return notification


def list_notifications(
    db: Session,
    recipient_id: int,
    unread_only: bool = False,
) -> List[Notification]:
    """Newest first"""
    query = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def mark_read(db: Session, notification_id: int, recipient_id: int) -> Notification:
    """
    Mark a notification as read. Only its recipient may do this.

    Raises:
        NotFound: unknown notification
        Forbidden: caller is not the recipient
    """
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFound("Notification not found")
    if notification.recipient_id != recipient_id:
        raise Forbidden("You can only update your own notifications")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = now_utc()
        db.commit()
        db.refresh(notification)
    return notification
