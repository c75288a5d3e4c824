"""
Audit logging service
"""
from sqlalchemy.orm import Session
from app.models.audit_log import AuditLog
from app.utils.datetime_utils import now_utc
from app.utils.json_serializer import sanitize_for_json
from typing import Optional, Dict, Any

LEAVE_ENTITY_TYPE = "leave_requests"


def log_audit(
    db: Session,
    actor_id: int,
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    meta: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor_id: ID of the user performing the action
        action: Action type (e.g., "LOGIN", "LEAVE_REQUEST_CREATED")
        entity_type: Type of entity (e.g., "employees", "leave_requests")
        entity_id: ID of the affected entity (optional)
        meta: Additional metadata as dictionary (optional)

    Returns:
        Created AuditLog instance
    """
    # Serialize meta to JSON-safe values
    safe_meta = sanitize_for_json(meta) if meta is not None else None

    # Explicitly set created_at to avoid SQLite issues with server_default
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_json=safe_meta,
        created_at=now_utc()
    )
    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)
    return audit_log


def log_leave_action(
    db: Session,
    user_id: int,
    action: str,
    leave_request_id: Optional[int],
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """Audit an action on a leave request"""
    return log_audit(
        db,
        actor_id=user_id,
        action=action,
        entity_type=LEAVE_ENTITY_TYPE,
        entity_id=leave_request_id,
        meta=details,
    )
