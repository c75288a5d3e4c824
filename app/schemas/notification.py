"""
Notification schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer
from app.utils.datetime_utils import iso_8601_utc


class NotificationOut(BaseModel):
    id: int
    recipient_id: int
    type: str
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    priority: str
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("read_at", "created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class NotificationListResponse(BaseModel):
    success: bool = True
    message: str
    data: List[NotificationOut]
    unread_count: int = 0


class NotificationResponse(BaseModel):
    success: bool = True
    message: str
    data: NotificationOut
