"""
Emit the side effects produced by the leave workflow.

Runs after the leave request itself has been committed. Each effect is
independent: a failing notification or audit write is logged and never
undoes or blocks the state transition that produced it.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.services.audit_service import log_leave_action
from app.services.leave_workflow import AuditEffect, Effect, NotificationEffect
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)


def dispatch_effects(db: Session, leave_request_id: Optional[int], effects: Iterable[Effect]) -> int:
    """
    Returns:
        Number of effects emitted successfully
    """
    delivered = 0
    for effect in effects:
        try:
            if isinstance(effect, NotificationEffect):
                create_notification(
                    db,
                    recipient_id=effect.recipient_id,
                    type=effect.type,
                    title=effect.title,
                    message=effect.message,
                    data={**effect.data, "leave_request_id": leave_request_id},
                    priority=effect.priority,
                )
            elif isinstance(effect, AuditEffect):
                log_leave_action(
                    db,
                    user_id=effect.actor_id,
                    action=effect.action,
                    leave_request_id=leave_request_id,
                    details=effect.details,
                )
            else:
                logger.warning("Unknown effect type %s ignored", type(effect).__name__)
                continue
            delivered += 1
        except Exception:
            db.rollback()
            logger.error(
                "Failed to emit %s for leave_request_id=%s",
                type(effect).__name__, leave_request_id, exc_info=True,
            )
    return delivered
