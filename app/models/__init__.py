"""
Database models
"""
from app.models.department import Department
from app.models.role import RoleModel
from app.models.employee import Employee
from app.models.audit_log import AuditLog
from app.models.notification import Notification, NotificationType
from app.models.leave import (
    LeaveRequest,
    LeaveApproval,
    LeaveType,
    LeaveStatus,
    ApprovalStatus,
)

__all__ = [
    "Department",
    "RoleModel",
    "Employee",
    "AuditLog",
    "Notification",
    "NotificationType",
    "LeaveRequest",
    "LeaveApproval",
    "LeaveType",
    "LeaveStatus",
    "ApprovalStatus",
]
