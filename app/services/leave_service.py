"""
Leave service - persistence and role-scoped queries around the leave workflow

State-transition rules live in leave_workflow; this module loads and saves
requests, emits the effects returned by the workflow and implements the
read views.
"""
import logging
import math
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from app.constants import (
    DEFAULT_LEAVE_ALLOCATIONS,
    LEVEL_HOD,
    LEVEL_MANAGER,
    LEVEL_SUPER_ADMIN,
    PENDING_APPROVALS_LIMIT,
)
from app.core.errors import Forbidden, NotFound
from app.models.employee import Employee
from app.models.leave import (
    BLOCKING_LEAVE_STATUSES,
    LeaveApproval,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
)
from app.services import leave_workflow as workflow
from app.services.directory_service import SqlDirectory
from app.services.effect_dispatcher import dispatch_effects

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _leave_query(db: Session):
    return db.query(LeaveRequest).options(
        joinedload(LeaveRequest.employee),
        joinedload(LeaveRequest.department),
        joinedload(LeaveRequest.current_approver),
        selectinload(LeaveRequest.approvals).joinedload(LeaveApproval.approver),
    )


def _sees_everything(user: Employee) -> bool:
    return user.role_level >= LEVEL_SUPER_ADMIN or user.is_hr_hod


def _scoped(query, user: Employee):
    """
    Restrict a LeaveRequest query to what ``user`` may see.

    Super Admin and HR HOD: everything. Other HODs and Managers: their
    department plus their own requests. Everyone else: their own requests.
    """
    if _sees_everything(user):
        return query
    if user.role_level >= LEVEL_MANAGER:
        return query.filter(or_(
            LeaveRequest.department_id == user.department_id,
            LeaveRequest.employee_id == user.id,
        ))
    return query.filter(LeaveRequest.employee_id == user.id)


def _newest_first(query):
    return query.order_by(LeaveRequest.submitted_at.desc(), LeaveRequest.id.desc())


def paginate(query, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
    """
    Paginate an ordered query.

    Returns:
        Dict with docs, totalDocs, limit, page, totalPages, hasNextPage,
        hasPrevPage, nextPage, prevPage
    """
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    total = query.order_by(None).count()
    total_pages = max(1, math.ceil(total / limit))
    docs = query.offset((page - 1) * limit).limit(limit).all()

    has_next = page < total_pages
    has_prev = page > 1
    return {
        "docs": docs,
        "totalDocs": total,
        "limit": limit,
        "page": page,
        "totalPages": total_pages,
        "hasNextPage": has_next,
        "hasPrevPage": has_prev,
        "nextPage": page + 1 if has_next else None,
        "prevPage": page - 1 if has_prev else None,
    }


def find_overlapping_leave(
    db: Session,
    employee_id: int,
    start_date: date,
    end_date: date,
    exclude_leave_id: Optional[int] = None
) -> Optional[LeaveRequest]:
    """
    First PENDING or APPROVED request of the employee whose range intersects
    [start_date, end_date], ignoring ``exclude_leave_id`` (for updates).
    """
    # Overlap: existing.end_date >= new.start_date AND existing.start_date <= new.end_date
    query = db.query(LeaveRequest).filter(
        LeaveRequest.employee_id == employee_id,
        LeaveRequest.status.in_(BLOCKING_LEAVE_STATUSES),
        LeaveRequest.end_date >= start_date,
        LeaveRequest.start_date <= end_date
    )
    if exclude_leave_id:
        query = query.filter(LeaveRequest.id != exclude_leave_id)
    return query.first()


def get_leave_or_404(db: Session, leave_request_id: int) -> LeaveRequest:
    leave_request = _leave_query(db).filter(LeaveRequest.id == leave_request_id).first()
    if not leave_request:
        raise NotFound(f"Leave request with id {leave_request_id} not found")
    return leave_request


def _reload(db: Session, leave_request_id: int) -> LeaveRequest:
    db.expire_all()
    return get_leave_or_404(db, leave_request_id)


def create_leave_request(
    db: Session,
    employee: Employee,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    days: float,
    reason: str,
) -> LeaveRequest:
    """
    Submit a leave request for ``employee``.

    Raises:
        Forbidden, LeaveValidationError, Conflict, NoApproverFound
    """
    transition = workflow.plan_creation(
        employee,
        SqlDirectory(db),
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        days=Decimal(str(days)),
        reason=reason,
        find_overlap=lambda s, e: find_overlapping_leave(db, employee.id, s, e),
    )

    leave_request = transition.leave_request
    db.add(leave_request)
    db.commit()
    db.refresh(leave_request)
    workflow.log_transition(leave_request, transition.before, "create")

    dispatch_effects(db, leave_request.id, transition.effects)
    return _reload(db, leave_request.id)


def decide_leave_request(
    db: Session,
    leave_request_id: int,
    actor: Employee,
    action: str,
    comment: Optional[str] = None,
) -> LeaveRequest:
    """
    Approve or reject a leave request.

    Raises:
        NotFound, InvalidState, Forbidden, NoApproverFound
    """
    leave_request = get_leave_or_404(db, leave_request_id)

    transition = workflow.plan_decision(
        leave_request,
        actor,
        leave_request.employee,
        SqlDirectory(db),
        action=action,
        comment=comment,
    )
    db.commit()

    dispatch_effects(db, leave_request_id, transition.effects)
    return _reload(db, leave_request_id)


def update_leave_request(
    db: Session,
    leave_request_id: int,
    actor: Employee,
    changes: Dict[str, Any],
) -> LeaveRequest:
    """
    Edit the requester's own pending request.

    Raises:
        NotFound, Forbidden, InvalidState, LeaveValidationError, Conflict
    """
    leave_request = get_leave_or_404(db, leave_request_id)

    if changes.get("days") is not None:
        changes = {**changes, "days": Decimal(str(changes["days"]))}

    transition = workflow.plan_update(
        leave_request,
        actor,
        changes,
        find_overlap=lambda s, e: find_overlapping_leave(
            db, leave_request.employee_id, s, e, exclude_leave_id=leave_request_id
        ),
    )
    db.commit()
    logger.info("leave request updated: leave_request_id=%s fields=%s", leave_request_id, sorted(changes))

    dispatch_effects(db, leave_request_id, transition.effects)
    return _reload(db, leave_request_id)


def cancel_leave_request(
    db: Session,
    leave_request_id: int,
    actor: Employee,
    reason: Optional[str] = None,
) -> LeaveRequest:
    """
    Raises:
        NotFound, Forbidden, InvalidState
    """
    leave_request = get_leave_or_404(db, leave_request_id)

    transition = workflow.plan_cancellation(leave_request, actor, reason)
    db.commit()

    dispatch_effects(db, leave_request_id, transition.effects)
    return _reload(db, leave_request_id)


def delete_leave_request(db: Session, leave_request_id: int, actor: Employee) -> None:
    """
    Hard-delete the requester's own pending request. The audit entry is
    written before the row disappears.

    Raises:
        NotFound, Forbidden, InvalidState
    """
    leave_request = get_leave_or_404(db, leave_request_id)

    transition = workflow.plan_deletion(leave_request, actor)
    dispatch_effects(db, leave_request_id, transition.effects)

    leave_request = get_leave_or_404(db, leave_request_id)
    db.delete(leave_request)
    db.commit()
    logger.info("leave request deleted: leave_request_id=%s by=%s", leave_request_id, actor.id)


def get_leave_request(db: Session, leave_request_id: int, user: Employee) -> LeaveRequest:
    """
    Single request, visible to the Super Admin, the HR HOD, the requester,
    the current approver, or a Manager/HOD of the request's department.

    Raises:
        NotFound, Forbidden
    """
    leave_request = get_leave_or_404(db, leave_request_id)

    allowed = (
        _sees_everything(user)
        or leave_request.employee_id == user.id
        or leave_request.current_approver_id == user.id
        or (user.role_level >= LEVEL_MANAGER and user.department_id == leave_request.department_id)
    )
    if not allowed:
        raise Forbidden("You don't have permission to view this leave request")
    return leave_request


def list_leave_requests(
    db: Session,
    user: Employee,
    status: Optional[LeaveStatus] = None,
    leave_type: Optional[LeaveType] = None,
    department_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    """
    Role-scoped, filtered, paginated list (newest first).

    ``department_id`` is only honoured for HOD level and above.
    """
    query = _scoped(_leave_query(db), user)

    if status:
        query = query.filter(LeaveRequest.status == status)
    if leave_type:
        query = query.filter(LeaveRequest.leave_type == leave_type)
    if department_id and user.role_level >= LEVEL_HOD:
        query = query.filter(LeaveRequest.department_id == department_id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.join(Employee, LeaveRequest.employee_id == Employee.id).filter(or_(
            Employee.first_name.ilike(pattern),
            Employee.last_name.ilike(pattern),
            Employee.email.ilike(pattern),
            Employee.employee_code.ilike(pattern),
        ))

    return paginate(_newest_first(query), page, limit)


def list_my_leave_requests(
    db: Session,
    user: Employee,
    status: Optional[LeaveStatus] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    query = _leave_query(db).filter(LeaveRequest.employee_id == user.id)
    if status:
        query = query.filter(LeaveRequest.status == status)
    return paginate(_newest_first(query), page, limit)


def list_department_leave_requests(
    db: Session,
    user: Employee,
    status: Optional[LeaveStatus] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Dict[str, Any]:
    """Company-wide for Super Admin / HR HOD, otherwise the caller's department"""
    query = _leave_query(db)
    if not _sees_everything(user):
        query = query.filter(LeaveRequest.department_id == user.department_id)
    if status:
        query = query.filter(LeaveRequest.status == status)
    return paginate(_newest_first(query), page, limit)


def list_pending_approvals(db: Session, user: Employee) -> List[LeaveRequest]:
    """
    Pending requests awaiting the caller (every pending request for a Super
    Admin), newest first, capped.
    """
    query = _leave_query(db).filter(LeaveRequest.status == LeaveStatus.PENDING)
    if user.role_level < LEVEL_SUPER_ADMIN:
        query = query.filter(LeaveRequest.current_approver_id == user.id)
    return _newest_first(query).limit(PENDING_APPROVALS_LIMIT).all()


def get_leave_stats(db: Session, user: Employee) -> Dict[str, int]:
    """Counts per status, scoped like the list view"""
    query = _scoped(
        db.query(LeaveRequest.status, func.count(LeaveRequest.id)),
        user,
    ).group_by(LeaveRequest.status)

    stats = {status.value.lower(): 0 for status in LeaveStatus}
    for status, count in query.all():
        key = status.value.lower() if isinstance(status, LeaveStatus) else str(status).lower()
        stats[key] = count
    stats["total"] = sum(stats.values())
    return stats


def get_available_leave_types() -> List[Dict[str, Any]]:
    return [
        {
            "value": leave_type,
            "label": f"{leave_type.value} Leave",
            "default_allocation": DEFAULT_LEAVE_ALLOCATIONS[leave_type.value],
        }
        for leave_type in LeaveType
    ]


def get_leave_balance(db: Session, user: Employee) -> Dict[str, Any]:
    """
    Allocation vs. approved usage per leave type.

    ``used`` sums days over the caller's Approved requests; ``remaining``
    never goes below zero.
    """
    rows = (
        db.query(LeaveRequest.leave_type, func.sum(LeaveRequest.days))
        .filter(
            LeaveRequest.employee_id == user.id,
            LeaveRequest.status == LeaveStatus.APPROVED,
        )
        .group_by(LeaveRequest.leave_type)
        .all()
    )
    used_by_type = {
        (leave_type.value if isinstance(leave_type, LeaveType) else leave_type): float(used or 0)
        for leave_type, used in rows
    }

    balances = {}
    for leave_type in LeaveType:
        allocated = float(DEFAULT_LEAVE_ALLOCATIONS[leave_type.value])
        used = used_by_type.get(leave_type.value, 0.0)
        balances[leave_type.value] = {
            "allocated": allocated,
            "used": used,
            "remaining": max(0.0, allocated - used),
        }

    return {
        "employee_id": user.id,
        "balances": balances,
        "totalRemaining": sum(b["remaining"] for b in balances.values()),
    }
