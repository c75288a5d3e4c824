"""
Leave endpoints

Fixed paths are declared before /{leave_request_id} so they are not captured
by the id route.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.constants import LEVEL_HOD, LEVEL_MANAGER, LEVEL_STAFF, LEVEL_VIEWER
from app.core.deps import get_db, require_level
from app.models.employee import Employee
from app.models.leave import LeaveStatus, LeaveType
from app.schemas.leave import (
    BalanceMeResponse,
    CancelRequest,
    DecisionRequest,
    LeaveCreate,
    LeaveListResponse,
    LeaveOut,
    LeavePageResponse,
    LeaveResponse,
    LeaveStatsResponse,
    LeaveTypesResponse,
    LeaveUpdate,
    MessageResponse,
)
from app.services import leave_service

router = APIRouter()


def _page(result: dict) -> dict:
    return {**result, "docs": [LeaveOut.model_validate(doc) for doc in result["docs"]]}


@router.post("", response_model=LeaveResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    leave_data: LeaveCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_STAFF)),
):
    """
    Submit a leave request for the current user

    Super Admin requests are approved immediately; all others start Pending
    with the first approver resolved from the requester's role and department.
    """
    leave_request = leave_service.create_leave_request(
        db,
        current_user,
        leave_type=leave_data.leave_type,
        start_date=leave_data.start_date,
        end_date=leave_data.end_date,
        days=leave_data.days,
        reason=leave_data.reason,
    )
    message = (
        "Leave request auto-approved"
        if leave_request.status == LeaveStatus.APPROVED
        else "Leave request submitted successfully"
    )
    return LeaveResponse(message=message, data=LeaveOut.model_validate(leave_request))


@router.get("", response_model=LeavePageResponse)
async def list_leave_requests(
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    leave_type: Optional[LeaveType] = Query(None),
    department_id: Optional[int] = Query(None, description="Honoured for HOD level and above"),
    search: Optional[str] = Query(None, description="Employee name, email or code"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_VIEWER)),
):
    """Role-scoped list of leave requests, newest first"""
    result = leave_service.list_leave_requests(
        db,
        current_user,
        status=status_filter,
        leave_type=leave_type,
        department_id=department_id,
        search=search,
        page=page,
        limit=limit,
    )
    return {"success": True, "message": "Leave requests retrieved", "data": _page(result)}


@router.get("/my-requests", response_model=LeavePageResponse)
async def my_leave_requests(
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_VIEWER)),
):
    result = leave_service.list_my_leave_requests(
        db, current_user, status=status_filter, page=page, limit=limit
    )
    return {"success": True, "message": "Your leave requests retrieved", "data": _page(result)}


@router.get("/department-requests", response_model=LeavePageResponse)
async def department_leave_requests(
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_HOD)),
):
    """Department view for HODs (company-wide for the HR HOD and Super Admin)"""
    result = leave_service.list_department_leave_requests(
        db, current_user, status=status_filter, page=page, limit=limit
    )
    return {"success": True, "message": "Department leave requests retrieved", "data": _page(result)}


@router.get("/stats/overview", response_model=LeaveStatsResponse)
async def leave_stats(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_VIEWER)),
):
    stats = leave_service.get_leave_stats(db, current_user)
    return {"success": True, "message": "Leave statistics retrieved", "data": stats}


@router.get("/pending/approvals", response_model=LeaveListResponse)
async def pending_approvals(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_MANAGER)),
):
    """Pending requests waiting on the current user"""
    leave_requests = leave_service.list_pending_approvals(db, current_user)
    return {
        "success": True,
        "message": "Pending approvals retrieved",
        "data": [LeaveOut.model_validate(lr) for lr in leave_requests],
    }


@router.get("/types/available", response_model=LeaveTypesResponse)
async def available_leave_types(
    current_user: Employee = Depends(require_level(LEVEL_VIEWER)),
):
    return {
        "success": True,
        "message": "Leave types retrieved",
        "data": leave_service.get_available_leave_types(),
    }


@router.get("/balance/me", response_model=BalanceMeResponse)
async def balance_me(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_VIEWER)),
):
    """Allocated, used and remaining days per leave type for the current user"""
    return {
        "success": True,
        "message": "Leave balance retrieved",
        "data": leave_service.get_leave_balance(db, current_user),
    }


@router.get("/{leave_request_id}", response_model=LeaveResponse)
async def get_leave_request(
    leave_request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_VIEWER)),
):
    leave_request = leave_service.get_leave_request(db, leave_request_id, current_user)
    return LeaveResponse(message="Leave request retrieved", data=LeaveOut.model_validate(leave_request))


@router.put("/{leave_request_id}", response_model=LeaveResponse)
async def update_leave_request(
    leave_request_id: int,
    leave_data: LeaveUpdate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_STAFF)),
):
    """Edit your own pending request; the approval chain is kept as is"""
    leave_request = leave_service.update_leave_request(
        db, leave_request_id, current_user, leave_data.model_dump(exclude_none=True)
    )
    return LeaveResponse(message="Leave request updated successfully", data=LeaveOut.model_validate(leave_request))


@router.delete("/{leave_request_id}", response_model=MessageResponse)
async def delete_leave_request(
    leave_request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_STAFF)),
):
    leave_service.delete_leave_request(db, leave_request_id, current_user)
    return MessageResponse(message="Leave request deleted successfully")


@router.put("/{leave_request_id}/approve", response_model=LeaveResponse)
async def decide_leave_request(
    leave_request_id: int,
    decision: DecisionRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_MANAGER)),
):
    """
    Approve or reject a leave request

    A Department HOD approval forwards the request to the HR HOD; an HR HOD
    or Super Admin approval is final.
    """
    leave_request = leave_service.decide_leave_request(
        db, leave_request_id, current_user, decision.action, decision.comment
    )
    if decision.action == "reject":
        message = "Leave request rejected"
    elif leave_request.status == LeaveStatus.APPROVED:
        message = "Leave request approved"
    else:
        message = "Leave request approved and forwarded for final approval"
    return LeaveResponse(message=message, data=LeaveOut.model_validate(leave_request))


@router.put("/{leave_request_id}/cancel", response_model=LeaveResponse)
async def cancel_leave_request(
    leave_request_id: int,
    cancel_data: Optional[CancelRequest] = None,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_level(LEVEL_STAFF)),
):
    reason = cancel_data.reason if cancel_data else None
    leave_request = leave_service.cancel_leave_request(db, leave_request_id, current_user, reason)
    return LeaveResponse(message="Leave request cancelled successfully", data=LeaveOut.model_validate(leave_request))
