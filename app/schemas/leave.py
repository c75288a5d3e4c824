"""
Leave schemas
"""
from datetime import date, datetime
from typing import Optional, List, Dict, Literal
from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator
from pydantic import ConfigDict
from app.utils.datetime_utils import iso_8601_utc
from app.models.leave import LeaveType, LeaveStatus, ApprovalStatus


class LeaveCreate(BaseModel):
    """Schema for submitting a leave request"""
    leave_type: LeaveType = Field(..., description="Type of leave")
    start_date: date = Field(..., description="First day of leave")
    end_date: date = Field(..., description="Last day of leave (must be after start_date)")
    days: float = Field(..., gt=0, description="Number of days requested")
    reason: str = Field(..., min_length=1, description="Reason for leave")

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason must not be blank")
        return v.strip()


class LeaveUpdate(BaseModel):
    """Schema for editing a pending leave request (all fields optional)"""
    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    days: Optional[float] = Field(None, gt=0)
    reason: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("reason must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def at_least_one_field(self) -> "LeaveUpdate":
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


class DecisionRequest(BaseModel):
    """Body of PUT /leave/{id}/approve"""
    action: Literal["approve", "reject"] = Field(..., description="approve or reject")
    comment: Optional[str] = Field(None, description="Optional comment")


class CancelRequest(BaseModel):
    """Body of PUT /leave/{id}/cancel"""
    reason: Optional[str] = Field(None, description="Why the request is cancelled")


class EmployeeRef(BaseModel):
    id: int
    employee_code: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    role_level: int
    department_id: int

    model_config = ConfigDict(from_attributes=True)


class DepartmentRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ApprovalOut(BaseModel):
    """One entry of a request's approval history"""
    approver_id: int
    approver: Optional[EmployeeRef] = None
    role: str
    status: ApprovalStatus
    comment: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("approved_at", "created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveOut(BaseModel):
    """Leave request with approval state and history"""
    id: int
    employee_id: int
    employee: Optional[EmployeeRef] = None
    department_id: int
    department: Optional[DepartmentRef] = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    days: float
    reason: str
    status: LeaveStatus
    current_approver_id: Optional[int] = None
    current_approver: Optional[EmployeeRef] = None
    approval_level: int
    approval_chain: List[str]
    total_approval_steps: int
    approvals: List[ApprovalOut] = []
    submitted_at: datetime
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_id: Optional[int] = None
    cancellation_reason: Optional[str] = None
    is_active: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer(
        "submitted_at", "approved_at", "rejected_at", "cancelled_at", "created_at", "updated_at",
        when_used="always",
    )
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveResponse(BaseModel):
    success: bool = True
    message: str
    data: LeaveOut


class LeavePage(BaseModel):
    """Paginated leave list"""
    docs: List[LeaveOut]
    totalDocs: int
    limit: int
    page: int
    totalPages: int
    hasNextPage: bool
    hasPrevPage: bool
    nextPage: Optional[int] = None
    prevPage: Optional[int] = None


class LeavePageResponse(BaseModel):
    success: bool = True
    message: str
    data: LeavePage


class LeaveListResponse(BaseModel):
    success: bool = True
    message: str
    data: List[LeaveOut]


class LeaveStats(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0
    total: int = 0


class LeaveStatsResponse(BaseModel):
    success: bool = True
    message: str
    data: LeaveStats


class LeaveTypeOut(BaseModel):
    value: LeaveType
    label: str
    default_allocation: int


class LeaveTypesResponse(BaseModel):
    success: bool = True
    message: str
    data: List[LeaveTypeOut]


class BalanceTypeOut(BaseModel):
    """Per-type allocation, usage and what is left"""
    allocated: float
    used: float
    remaining: float


class BalanceMe(BaseModel):
    """GET /leave/balance/me payload. balances keyed by leave type value."""
    employee_id: int
    balances: Dict[str, BalanceTypeOut]
    totalRemaining: float


class BalanceMeResponse(BaseModel):
    success: bool = True
    message: str
    data: BalanceMe


class MessageResponse(BaseModel):
    success: bool = True
    message: str
