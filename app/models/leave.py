"""
Leave models
"""
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    ForeignKey,
    String,
    Text,
    Numeric,
    JSON,
    Enum as SQLEnum,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
import enum
from app.db.base import Base
from app.utils.datetime_utils import now_utc, today_utc


class LeaveType(str, enum.Enum):
    ANNUAL = "Annual"
    SICK = "Sick"
    PERSONAL = "Personal"
    MATERNITY = "Maternity"
    PATERNITY = "Paternity"
    STUDY = "Study"
    BEREAVEMENT = "Bereavement"


class LeaveStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class ApprovalStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


# Statuses that block an overlapping request for the same employee
BLOCKING_LEAVE_STATUSES = (LeaveStatus.PENDING, LeaveStatus.APPROVED)


def _enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=False, index=True)
    leave_type = Column(SQLEnum(LeaveType, name="leavetype", values_callable=_enum_values), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    days = Column(Numeric(5, 2), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(
        SQLEnum(LeaveStatus, name="leavestatus", values_callable=_enum_values),
        nullable=False,
        server_default=text("'Pending'"),
    )
    current_approver_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    approval_level = Column(Integer, nullable=False, default=1)
    approval_chain = Column(JSON, nullable=False, default=list)
    total_approval_steps = Column(Integer, nullable=False, default=1)
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    # Relationships
    employee = relationship("Employee", foreign_keys=[employee_id])
    department = relationship("Department")
    current_approver = relationship("Employee", foreign_keys=[current_approver_id])
    cancelled_by = relationship("Employee", foreign_keys=[cancelled_by_id])
    approvals = relationship(
        "LeaveApproval",
        back_populates="leave_request",
        cascade="all, delete-orphan",
        order_by="LeaveApproval.id",
    )

    __table_args__ = (
        Index("ix_leave_requests_employee_status", "employee_id", "status"),
        Index("ix_leave_requests_department_status", "department_id", "status"),
        Index("ix_leave_requests_approver_status", "current_approver_id", "status"),
        Index("ix_leave_requests_dates", "start_date", "end_date"),
        CheckConstraint("start_date < end_date", name="check_start_date_lt_end_date"),
    )

    @property
    def is_active(self) -> bool:
        """True while an approved leave is in progress"""
        today = today_utc()
        return (
            self.status == LeaveStatus.APPROVED
            and self.start_date <= today
            and self.end_date >= today
        )

    def approvals_by_approver(self) -> Dict[int, "LeaveApproval"]:
        """Approval entries keyed by approver id (at most one per approver)"""
        return {entry.approver_id: entry for entry in self.approvals}

    def record_approval(
        self,
        approver_id: int,
        role: str,
        status: ApprovalStatus,
        comment: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "LeaveApproval":
        """
        Add or update the approval entry for an approver.

        An existing entry is only overwritten while it is still Pending or when
        a new comment is supplied, so revisiting an approver never produces a
        second entry or double-counts a decision.
        """
        now = now or now_utc()
        existing = self.approvals_by_approver().get(approver_id)

        if existing is not None:
            if existing.status == ApprovalStatus.PENDING or (comment and comment != existing.comment):
                existing.status = status
                existing.comment = comment or existing.comment
                existing.approved_at = now if status != ApprovalStatus.PENDING else None
            return existing

        entry = LeaveApproval(
            approver_id=approver_id,
            role=role,
            status=status,
            comment=comment,
            approved_at=now if status != ApprovalStatus.PENDING else None,
            created_at=now,
        )
        self.approvals.append(entry)
        return entry


class LeaveApproval(Base):
    __tablename__ = "leave_approvals"

    id = Column(Integer, primary_key=True, index=True)
    leave_request_id = Column(
        Integer, ForeignKey("leave_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    approver_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    role = Column(String, nullable=False)  # SUPER_ADMIN, HOD, MANAGER
    status = Column(
        SQLEnum(ApprovalStatus, name="approvalstatus", values_callable=_enum_values),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    comment = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    leave_request = relationship("LeaveRequest", back_populates="approvals")
    approver = relationship("Employee", foreign_keys=[approver_id])

    __table_args__ = (
        UniqueConstraint("leave_request_id", "approver_id", name="uq_leave_approvals_request_approver"),
    )
