"""
Leave workflow engine - state transitions for leave requests

Pending -> Approved | Rejected | Cancelled (all terminal). While Pending the
current approver may be re-targeted (escalation from a Department HOD to the
HR HOD) without a status change.

Every transition mutates the LeaveRequest in place and returns the side
effects (notifications, audit entries) it wants emitted. Nothing here touches
the database: persistence and effect dispatch belong to leave_service, and
directory lookups go through the injected Directory.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union

from app.constants import LEVEL_HOD, LEVEL_SUPER_ADMIN, LEVEL_VIEWER, LEVEL_MANAGER
from app.core.errors import (
    Conflict,
    Forbidden,
    InvalidState,
    LeaveValidationError,
    NoApproverFound,
)
from app.models.employee import Employee
from app.models.leave import ApprovalStatus, LeaveRequest, LeaveStatus, LeaveType
from app.models.notification import NotificationType
from app.services.approval_chain import get_approval_chain, get_next_approver
from app.services.directory_service import Directory
from app.utils.datetime_utils import now_utc
from app.utils.roles import role_name

logger = logging.getLogger(__name__)

ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"

# Approval level of a request created directly in Approved by a Super Admin
AUTO_APPROVED_LEVEL = 3
# Approval level of every other new request
INITIAL_APPROVAL_LEVEL = 2

EDITABLE_FIELDS = ("leave_type", "start_date", "end_date", "days", "reason")

OverlapFinder = Callable[[date, date], Optional[LeaveRequest]]


@dataclass(frozen=True)
class NotificationEffect:
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    priority: str = "medium"


@dataclass(frozen=True)
class AuditEffect:
    actor_id: int
    action: str
    details: Dict[str, Any] = field(default_factory=dict)


Effect = Union[NotificationEffect, AuditEffect]


@dataclass
class Transition:
    """A mutated (or newly built) request plus the effects to emit after saving it"""
    leave_request: LeaveRequest
    before: Optional[LeaveStatus]
    effects: List[Effect] = field(default_factory=list)

    @property
    def notifications(self) -> List[NotificationEffect]:
        return [e for e in self.effects if isinstance(e, NotificationEffect)]

    @property
    def audits(self) -> List[AuditEffect]:
        return [e for e in self.effects if isinstance(e, AuditEffect)]

    def notified(self, recipient_id: int) -> List[NotificationEffect]:
        return [e for e in self.notifications if e.recipient_id == recipient_id]


def log_transition(leave_request: LeaveRequest, before, action: str) -> None:
    logger.info(
        "leave status transition: leave_request_id=%s before=%s after=%s action=%s",
        leave_request.id,
        before.value if before is not None else None,
        leave_request.status.value,
        action,
    )


def _summary(leave_request: LeaveRequest, employee: Employee) -> Dict[str, Any]:
    return {
        "employee_name": employee.full_name,
        "employee_role": role_name(employee.role_level),
        "employee_department": employee.department.name if employee.department else None,
        "leave_type": leave_request.leave_type,
        "start_date": leave_request.start_date,
        "end_date": leave_request.end_date,
        "days": leave_request.days,
    }


def _describe(leave_request: LeaveRequest) -> str:
    return (
        f"{leave_request.leave_type.value} leave "
        f"({leave_request.start_date} to {leave_request.end_date})"
    )


def _with_comment(message: str, comment: Optional[str]) -> str:
    return f"{message} Comment: {comment}" if comment else message


def validate_leave_window(start_date: date, end_date: date, today: date) -> None:
    """
    Raises:
        LeaveValidationError: if the range is empty/inverted or starts in the past
    """
    if start_date >= end_date:
        raise LeaveValidationError("End date must be after start date")
    if start_date < today:
        raise LeaveValidationError("Cannot request leave for past dates")


def _check_overlap(find_overlap: OverlapFinder, start_date: date, end_date: date) -> None:
    overlapping = find_overlap(start_date, end_date)
    if overlapping is not None:
        raise Conflict(
            f"You have an overlapping leave request from {overlapping.start_date} "
            f"to {overlapping.end_date}"
        )


def can_approve(actor: Employee, leave_request: LeaveRequest) -> bool:
    """
    Department-level approval authority.

    Super Admins and the HR HOD may act on any request; other HODs and
    Managers only on requests from their own department.
    """
    level = actor.role_level
    if level >= LEVEL_SUPER_ADMIN:
        return True
    if level == LEVEL_HOD and actor.in_hr_department:
        return True
    if level in (LEVEL_HOD, LEVEL_MANAGER):
        return actor.department_id == leave_request.department_id
    return False


def can_override(actor_level: int, approval_level: int) -> bool:
    """Whether a non-current approver may still act at this approval level"""
    return (
        actor_level >= LEVEL_SUPER_ADMIN
        or (actor_level == LEVEL_HOD and approval_level <= 2)
        or (actor_level == LEVEL_MANAGER and approval_level == 1)
    )


def check_decision_authority(actor: Employee, leave_request: LeaveRequest) -> None:
    """
    Raises:
        Forbidden: if the actor may not approve/reject this request
    """
    if actor.id == leave_request.employee_id:
        raise Forbidden("You cannot approve or reject your own leave request")

    if not can_approve(actor, leave_request):
        raise Forbidden("You don't have permission to approve this request")

    is_current_approver = leave_request.current_approver_id == actor.id
    if not is_current_approver and not can_override(actor.role_level, leave_request.approval_level):
        raise Forbidden("You are not authorized to approve this request")


def plan_creation(
    employee: Employee,
    directory: Directory,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    days: Decimal,
    reason: str,
    find_overlap: OverlapFinder,
    now: Optional[datetime] = None,
) -> Transition:
    """
    Build a new leave request for ``employee``.

    Super Admin requests are created already Approved (no approval step);
    everything else starts Pending with the first approver resolved from the
    employee's role and department.

    Raises:
        Forbidden: Viewers cannot request leave
        LeaveValidationError: bad date range or past start date
        Conflict: an overlapping Pending/Approved request exists
        NoApproverFound: no approver could be resolved
    """
    now = now or now_utc()

    if employee.role_level <= LEVEL_VIEWER:
        raise Forbidden("Viewers cannot request leave")

    validate_leave_window(start_date, end_date, now.date())
    _check_overlap(find_overlap, start_date, end_date)

    department_name = employee.department.name if employee.department else None
    leave_request = LeaveRequest(
        employee_id=employee.id,
        department_id=employee.department_id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        days=days,
        reason=reason,
        submitted_at=now,
    )

    if employee.role_level >= LEVEL_SUPER_ADMIN:
        return _plan_auto_approval(leave_request, employee, directory, now)

    chain = get_approval_chain(employee.role_level, department_name)
    approver = get_next_approver(directory, employee.role_level, employee.department_id, department_name)
    if approver is not None and approver.id == employee.id:
        # The HR HOD cannot approve their own request; it goes to the Super Admin
        approver = directory.find_super_admin()
        chain = ["Super Admin"]
    if approver is None:
        raise NoApproverFound("No approver found for your request")

    leave_request.status = LeaveStatus.PENDING
    leave_request.current_approver_id = approver.id
    leave_request.approval_level = INITIAL_APPROVAL_LEVEL
    leave_request.approval_chain = chain
    leave_request.total_approval_steps = len(chain)
    leave_request.record_approval(approver.id, role_name(approver.role_level), ApprovalStatus.PENDING, now=now)

    summary = _summary(leave_request, employee)
    chain_preview = " -> ".join(chain)
    effects: List[Effect] = [
        NotificationEffect(
            recipient_id=approver.id,
            type=NotificationType.LEAVE_REQUEST,
            title="New Leave Request",
            message=(
                f"{employee.full_name} has submitted a {_describe(leave_request)} "
                f"request that requires your approval"
            ),
            data={**summary, "reason": reason, "action": "approval_required",
                  "approval_chain": chain, "total_approval_steps": len(chain)},
            priority="high",
        ),
        NotificationEffect(
            recipient_id=employee.id,
            type=NotificationType.LEAVE_REQUEST_UPDATE,
            title="Leave Request Submitted",
            message=(
                f"Your {_describe(leave_request)} request has been submitted and sent to "
                f"{approver.full_name}. Approval path: {chain_preview}"
            ),
            data={**summary, "status": LeaveStatus.PENDING, "approval_chain": chain,
                  "total_approval_steps": len(chain), "next_approver": approver.full_name},
        ),
    ]

    super_admin = directory.find_super_admin()
    if super_admin is not None and super_admin.id != approver.id:
        effects.append(NotificationEffect(
            recipient_id=super_admin.id,
            type=NotificationType.LEAVE_REQUEST,
            title="New Leave Request Submitted",
            message=(
                f"{employee.full_name} ({role_name(employee.role_level)}) submitted a "
                f"{_describe(leave_request)} request, awaiting {approver.full_name}"
            ),
            data={**summary, "is_super_admin_notification": True, "approval_chain": chain},
            priority="low",
        ))

    effects.append(AuditEffect(
        actor_id=employee.id,
        action="LEAVE_REQUEST_CREATED",
        details={**summary, "status": LeaveStatus.PENDING, "approval_chain": chain,
                 "current_approver_id": approver.id},
    ))

    logger.info(
        "leave request planned: employee_id=%s approver_id=%s chain=%s",
        employee.id, approver.id, chain,
    )
    return Transition(leave_request=leave_request, before=None, effects=effects)


def _plan_auto_approval(
    leave_request: LeaveRequest,
    employee: Employee,
    directory: Directory,
    now: datetime,
) -> Transition:
    chain = get_approval_chain(employee.role_level, None)
    leave_request.status = LeaveStatus.APPROVED
    leave_request.current_approver_id = None
    leave_request.approval_level = AUTO_APPROVED_LEVEL
    leave_request.approval_chain = chain
    leave_request.total_approval_steps = len(chain)
    leave_request.approved_at = now
    leave_request.record_approval(
        employee.id, role_name(employee.role_level), ApprovalStatus.APPROVED,
        comment="Auto-approved (Super Admin request)", now=now,
    )

    summary = _summary(leave_request, employee)
    effects: List[Effect] = [
        NotificationEffect(
            recipient_id=employee.id,
            type=NotificationType.LEAVE_RESPONSE,
            title="Leave Request Auto-Approved",
            message=f"Your {_describe(leave_request)} request has been automatically approved",
            data={**summary, "status": LeaveStatus.APPROVED, "is_super_admin_request": True},
        ),
    ]

    hr_hod = directory.find_hr_hod()
    if hr_hod is not None:
        effects.append(NotificationEffect(
            recipient_id=hr_hod.id,
            type=NotificationType.LEAVE_REQUEST_UPDATE,
            title="Super Admin Leave (For Your Records)",
            message=(
                f"{employee.full_name} (Super Admin) is taking {_describe(leave_request)}. "
                f"No approval is required."
            ),
            data={**summary, "status": LeaveStatus.APPROVED, "is_super_admin_request": True},
            priority="low",
        ))

    effects.append(AuditEffect(
        actor_id=employee.id,
        action="LEAVE_REQUEST_CREATED",
        details={**summary, "status": LeaveStatus.APPROVED, "auto_approved": True},
    ))
    return Transition(leave_request=leave_request, before=None, effects=effects)


def plan_decision(
    leave_request: LeaveRequest,
    actor: Employee,
    employee: Employee,
    directory: Directory,
    action: str,
    comment: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Transition:
    """
    Approve or reject a pending request.

    A Super Admin or HR HOD approval is final. A Department HOD approval
    escalates the request to the HR HOD and leaves it Pending.

    Args:
        leave_request: Request being acted on
        actor: Employee approving/rejecting
        employee: The requester
        directory: Directory used to find the HR HOD and Super Admin
        action: "approve" or "reject"
        comment: Optional comment stored on the approval entry

    Raises:
        LeaveValidationError: unknown action
        InvalidState: request is not Pending
        Forbidden: actor lacks approval authority
        NoApproverFound: escalation needed but there is no HR HOD
    """
    now = now or now_utc()

    if action not in (ACTION_APPROVE, ACTION_REJECT):
        raise LeaveValidationError("action must be 'approve' or 'reject'")
    if leave_request.status != LeaveStatus.PENDING:
        raise InvalidState(
            f"Cannot {action} leave request with status {leave_request.status.value}"
        )
    check_decision_authority(actor, leave_request)

    before = leave_request.status
    actor_role = role_name(actor.role_level)

    if action == ACTION_REJECT:
        leave_request.record_approval(actor.id, actor_role, ApprovalStatus.REJECTED, comment, now)
        leave_request.status = LeaveStatus.REJECTED
        leave_request.rejected_at = now
        leave_request.current_approver_id = None
        effects = _rejection_effects(leave_request, actor, employee, directory, comment)
        audit_action = "LEAVE_REQUEST_REJECTED"
    else:
        is_final_approval = actor.role_level >= LEVEL_SUPER_ADMIN or actor.is_hr_hod
        hr_hod = None
        if not is_final_approval:
            hr_hod = directory.find_hr_hod()
            if hr_hod is None:
                raise NoApproverFound("No HR HOD found to complete the approval")

        leave_request.record_approval(actor.id, actor_role, ApprovalStatus.APPROVED, comment, now)
        if is_final_approval:
            leave_request.status = LeaveStatus.APPROVED
            leave_request.approved_at = now
            leave_request.current_approver_id = None
            effects = _final_approval_effects(leave_request, actor, employee, directory, comment)
        elif leave_request.current_approver_id == hr_hod.id:
            # Already waiting on the HR HOD (peer HOD approving an HOD's request)
            effects = _peer_approval_effects(leave_request, actor, employee, hr_hod, comment)
        else:
            leave_request.current_approver_id = hr_hod.id
            leave_request.approval_level = (leave_request.approval_level or 0) + 1
            leave_request.record_approval(hr_hod.id, role_name(hr_hod.role_level), ApprovalStatus.PENDING, now=now)
            effects = _escalation_effects(leave_request, actor, employee, hr_hod, comment)
        audit_action = "LEAVE_REQUEST_APPROVED"

    effects.append(AuditEffect(
        actor_id=actor.id,
        action=audit_action,
        details={
            "employee_id": leave_request.employee_id,
            "leave_type": leave_request.leave_type,
            "status": leave_request.status,
            "approval_level": leave_request.approval_level,
            "current_approver_id": leave_request.current_approver_id,
            "actor_role": actor_role,
            "comment": comment,
        },
    ))

    log_transition(leave_request, before, action)
    return Transition(leave_request=leave_request, before=before, effects=effects)


def _oversight_effect(
    directory: Directory,
    actor: Employee,
    title: str,
    message: str,
    data: Dict[str, Any],
) -> List[Effect]:
    if actor.role_level >= LEVEL_SUPER_ADMIN:
        return []
    super_admin = directory.find_super_admin()
    if super_admin is None:
        return []
    return [NotificationEffect(
        recipient_id=super_admin.id,
        type=NotificationType.LEAVE_RESPONSE,
        title=title,
        message=message,
        data={**data, "is_super_admin_notification": True},
        priority="low",
    )]


def _rejection_effects(
    leave_request: LeaveRequest,
    actor: Employee,
    employee: Employee,
    directory: Directory,
    comment: Optional[str],
) -> List[Effect]:
    data = {
        **_summary(leave_request, employee),
        "status": LeaveStatus.REJECTED,
        "rejecter_name": actor.full_name,
        "rejecter_department": actor.department.name if actor.department else None,
        "comment": comment,
    }
    effects: List[Effect] = []

    if actor.is_hr_hod:
        message = (
            f"Your {_describe(leave_request)} request was rejected by HR HOD "
            f"{actor.full_name} at the final approval stage."
        )
        data["rejection_level"] = "final"
        # Let the Department HOD who already approved it know it did not go through
        for entry in leave_request.approvals:
            if (
                entry.approver_id not in (actor.id, employee.id)
                and entry.status == ApprovalStatus.APPROVED
                and entry.role == role_name(LEVEL_HOD)
            ):
                effects.append(NotificationEffect(
                    recipient_id=entry.approver_id,
                    type=NotificationType.LEAVE_RESPONSE,
                    title="Approved Leave Request Rejected by HR",
                    message=(
                        f"The {_describe(leave_request)} request from {employee.full_name} "
                        f"that you approved was rejected by HR HOD {actor.full_name}."
                    ),
                    data=dict(data),
                ))
    elif actor.role_level == LEVEL_HOD:
        message = (
            f"Your {_describe(leave_request)} request was rejected by your Department HOD "
            f"{actor.full_name}. It will not proceed to HR."
        )
        data["rejection_level"] = "department"
    else:
        message = f"Your {_describe(leave_request)} request was rejected by {actor.full_name}."

    effects.insert(0, NotificationEffect(
        recipient_id=employee.id,
        type=NotificationType.LEAVE_RESPONSE,
        title="Leave Request Rejected",
        message=_with_comment(message, comment),
        data=data,
        priority="high",
    ))
    effects.extend(_oversight_effect(
        directory, actor,
        title="Leave Request Rejected",
        message=f"{actor.full_name} rejected the {_describe(leave_request)} request from {employee.full_name}",
        data=data,
    ))
    return effects


def _final_approval_effects(
    leave_request: LeaveRequest,
    actor: Employee,
    employee: Employee,
    directory: Directory,
    comment: Optional[str],
) -> List[Effect]:
    data = {
        **_summary(leave_request, employee),
        "status": LeaveStatus.APPROVED,
        "approver_name": actor.full_name,
        "approver_role": role_name(actor.role_level),
        "is_final_approval": True,
        "comment": comment,
    }
    effects: List[Effect] = [NotificationEffect(
        recipient_id=employee.id,
        type=NotificationType.LEAVE_RESPONSE,
        title="Leave Request Approved",
        message=_with_comment(
            f"Your {_describe(leave_request)} request has been fully approved by {actor.full_name}.",
            comment,
        ),
        data=data,
        priority="high",
    )]
    effects.extend(_oversight_effect(
        directory, actor,
        title="Leave Request Approved",
        message=f"{actor.full_name} gave final approval to the {_describe(leave_request)} request from {employee.full_name}",
        data=data,
    ))
    return effects


def _escalation_effects(
    leave_request: LeaveRequest,
    actor: Employee,
    employee: Employee,
    hr_hod: Employee,
    comment: Optional[str],
) -> List[Effect]:
    data = {
        **_summary(leave_request, employee),
        "status": LeaveStatus.PENDING,
        "previous_approver": actor.full_name,
        "previous_approver_role": role_name(actor.role_level),
        "next_approver": hr_hod.full_name,
        "approval_chain": list(leave_request.approval_chain or []),
        "is_first_approval": True,
        "comment": comment,
    }
    return [
        NotificationEffect(
            recipient_id=hr_hod.id,
            type=NotificationType.LEAVE_REQUEST,
            title="Leave Request Requires Final Approval",
            message=(
                f"The {_describe(leave_request)} request from {employee.full_name} was approved "
                f"by Department HOD {actor.full_name} and needs your final approval."
            ),
            data={**data, "action": "final_approval_required", "is_final_approval": True},
            priority="high",
        ),
        NotificationEffect(
            recipient_id=employee.id,
            type=NotificationType.LEAVE_REQUEST_UPDATE,
            title="Leave Request Progress",
            message=_with_comment(
                f"Your {_describe(leave_request)} request was approved by Department HOD "
                f"{actor.full_name} and is now waiting for HR HOD {hr_hod.full_name}.",
                comment,
            ),
            data=data,
        ),
    ]


def _peer_approval_effects(
    leave_request: LeaveRequest,
    actor: Employee,
    employee: Employee,
    hr_hod: Employee,
    comment: Optional[str],
) -> List[Effect]:
    """Approval recorded, request still waiting on the HR HOD: only the requester hears about it"""
    return [NotificationEffect(
        recipient_id=employee.id,
        type=NotificationType.LEAVE_REQUEST_UPDATE,
        title="Leave Request Progress",
        message=_with_comment(
            f"Your {_describe(leave_request)} request was approved by {actor.full_name} "
            f"and is still waiting for HR HOD {hr_hod.full_name}.",
            comment,
        ),
        data={
            **_summary(leave_request, employee),
            "status": LeaveStatus.PENDING,
            "previous_approver": actor.full_name,
            "next_approver": hr_hod.full_name,
            "comment": comment,
        },
    )]


def plan_update(
    leave_request: LeaveRequest,
    actor: Employee,
    changes: Dict[str, Any],
    find_overlap: OverlapFinder,
    now: Optional[datetime] = None,
) -> Transition:
    """
    Edit a pending request in place. The approval chain is not re-resolved.

    Raises:
        Forbidden: actor is not the requester
        InvalidState: request is not Pending
        LeaveValidationError / Conflict: as for creation
    """
    now = now or now_utc()

    if actor.id != leave_request.employee_id:
        raise Forbidden("You can only edit your own leave requests")
    if leave_request.status != LeaveStatus.PENDING:
        raise InvalidState("Only pending leave requests can be edited")

    changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
    start_date = changes.get("start_date", leave_request.start_date)
    end_date = changes.get("end_date", leave_request.end_date)
    validate_leave_window(start_date, end_date, now.date())
    _check_overlap(find_overlap, start_date, end_date)

    for name, value in changes.items():
        setattr(leave_request, name, value)

    effects: List[Effect] = []
    if leave_request.current_approver_id is not None:
        effects.append(NotificationEffect(
            recipient_id=leave_request.current_approver_id,
            type=NotificationType.LEAVE_REQUEST_UPDATED,
            title="Leave Request Updated",
            message=f"{actor.full_name} updated their {_describe(leave_request)} request",
            data={**_summary(leave_request, actor), "updated_fields": sorted(changes)},
        ))
    effects.append(AuditEffect(
        actor_id=actor.id,
        action="LEAVE_REQUEST_UPDATED",
        details={"updated_fields": changes},
    ))
    return Transition(leave_request=leave_request, before=leave_request.status, effects=effects)


def plan_cancellation(
    leave_request: LeaveRequest,
    actor: Employee,
    reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Transition:
    """
    Cancel a pending request (requester or Super Admin only).

    Raises:
        Forbidden: actor is neither the requester nor a Super Admin
        InvalidState: request is not Pending
    """
    now = now or now_utc()

    if not (actor.role_level >= LEVEL_SUPER_ADMIN or actor.id == leave_request.employee_id):
        raise Forbidden("You don't have permission to cancel this request")
    if leave_request.status != LeaveStatus.PENDING:
        raise InvalidState("Only pending requests can be cancelled")

    before = leave_request.status
    prior_approver_id = leave_request.current_approver_id

    leave_request.status = LeaveStatus.CANCELLED
    leave_request.cancelled_at = now
    leave_request.cancelled_by_id = actor.id
    leave_request.cancellation_reason = reason
    leave_request.current_approver_id = None

    data = {
        "leave_type": leave_request.leave_type,
        "start_date": leave_request.start_date,
        "end_date": leave_request.end_date,
        "cancelled_by": actor.full_name,
        "cancellation_reason": reason,
    }
    effects: List[Effect] = []
    if prior_approver_id is not None and prior_approver_id != actor.id:
        effects.append(NotificationEffect(
            recipient_id=prior_approver_id,
            type=NotificationType.LEAVE_CANCELLED,
            title="Leave Request Cancelled",
            message=(
                f"The {_describe(leave_request)} request awaiting your approval "
                f"was cancelled by {actor.full_name}"
            ),
            data=data,
        ))
    if actor.id != leave_request.employee_id:
        effects.append(NotificationEffect(
            recipient_id=leave_request.employee_id,
            type=NotificationType.LEAVE_CANCELLED,
            title="Leave Request Cancelled",
            message=f"Your {_describe(leave_request)} request was cancelled by {actor.full_name}",
            data=data,
        ))
    effects.append(AuditEffect(
        actor_id=actor.id,
        action="LEAVE_REQUEST_CANCELLED",
        details={**data, "previous_approver_id": prior_approver_id},
    ))

    log_transition(leave_request, before, "cancel")
    return Transition(leave_request=leave_request, before=before, effects=effects)


def plan_deletion(leave_request: LeaveRequest, actor: Employee) -> Transition:
    """
    Raises:
        Forbidden: actor is not the requester
        InvalidState: request is not Pending
    """
    if actor.id != leave_request.employee_id:
        raise Forbidden("You can only delete your own leave requests")
    if leave_request.status != LeaveStatus.PENDING:
        raise InvalidState("Only pending leave requests can be deleted")

    return Transition(
        leave_request=leave_request,
        before=leave_request.status,
        effects=[AuditEffect(
            actor_id=actor.id,
            action="LEAVE_REQUEST_DELETED",
            details={
                "leave_type": leave_request.leave_type,
                "start_date": leave_request.start_date,
                "end_date": leave_request.end_date,
                "days": leave_request.days,
                "current_approver_id": leave_request.current_approver_id,
            },
        )],
    )
