"""
Notification model (in-app inbox; delivery transport is out of scope)
"""
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from app.db.base import Base


class NotificationType(str, enum.Enum):
    LEAVE_REQUEST = "LEAVE_REQUEST"
    LEAVE_RESPONSE = "LEAVE_RESPONSE"
    LEAVE_CANCELLED = "LEAVE_CANCELLED"
    LEAVE_REQUEST_UPDATE = "LEAVE_REQUEST_UPDATE"
    LEAVE_REQUEST_UPDATED = "LEAVE_REQUEST_UPDATED"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)
    priority = Column(String, nullable=False, default="medium")  # low, medium, high, urgent
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    recipient = relationship("Employee")

    __table_args__ = (
        Index("ix_notifications_recipient_read", "recipient_id", "is_read"),
    )
