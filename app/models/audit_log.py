"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from app.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    action = Column(String, nullable=False, index=True)  # e.g. "LEAVE_REQUEST_CREATED"
    entity_type = Column(String, nullable=False)  # e.g. "leave_requests"
    entity_id = Column(Integer, nullable=True)  # no FK: deleted requests keep their trail
    meta_json = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
