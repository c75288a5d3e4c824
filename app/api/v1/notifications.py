"""
Notification inbox endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user
from app.models.employee import Employee
from app.schemas.notification import (
    NotificationListResponse,
    NotificationOut,
    NotificationResponse,
)
from app.services import notification_service

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_my_notifications(
    unread_only: bool = Query(False, description="Only return unread notifications"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Current user's notifications, newest first"""
    notifications = notification_service.list_notifications(db, current_user.id, unread_only=unread_only)
    return NotificationListResponse(
        message="Notifications retrieved",
        data=[NotificationOut.model_validate(n) for n in notifications],
        unread_count=sum(1 for n in notifications if not n.is_read),
    )


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    notification = notification_service.mark_read(db, notification_id, current_user.id)
    return NotificationResponse(
        message="Notification marked as read",
        data=NotificationOut.model_validate(notification),
    )
