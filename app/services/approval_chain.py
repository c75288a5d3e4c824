"""
Approval-chain resolution

Maps (role level, is-HR-department) to a ChainPolicy once; both the
descriptive chain and the concrete next approver are derived from it.
"""
import enum
from typing import List, Optional

from app.constants import (
    HR_DEPARTMENT_NAME,
    LEVEL_HOD,
    LEVEL_MANAGER,
    LEVEL_STAFF,
    LEVEL_SUPER_ADMIN,
)
from app.models.employee import Employee
from app.services.directory_service import Directory


class ChainPolicy(str, enum.Enum):
    AUTO_APPROVED = "AUTO_APPROVED"
    HR_HOD_ONLY = "HR_HOD_ONLY"
    DEPT_HOD_THEN_HR_HOD = "DEPT_HOD_THEN_HR_HOD"
    UNKNOWN = "UNKNOWN"


CHAIN_LABELS = {
    ChainPolicy.AUTO_APPROVED: ["Auto-approved"],
    ChainPolicy.HR_HOD_ONLY: ["HR HOD"],
    ChainPolicy.DEPT_HOD_THEN_HR_HOD: ["Department HOD", "HR HOD"],
    ChainPolicy.UNKNOWN: ["Unknown"],
}


def resolve_policy(role_level: int, is_hr_department: bool) -> ChainPolicy:
    if role_level == LEVEL_SUPER_ADMIN:
        return ChainPolicy.AUTO_APPROVED
    if role_level == LEVEL_HOD:
        return ChainPolicy.HR_HOD_ONLY
    if role_level in (LEVEL_MANAGER, LEVEL_STAFF):
        if is_hr_department:
            return ChainPolicy.HR_HOD_ONLY
        return ChainPolicy.DEPT_HOD_THEN_HR_HOD
    # Viewers and unrecognised levels have no valid chain
    return ChainPolicy.UNKNOWN


def get_approval_chain(role_level: int, department_name: Optional[str]) -> List[str]:
    """
    Describe the approval path for an employee.

    Args:
        role_level: Employee role level
        department_name: Name of the employee's department

    Returns:
        Ordered list of approver role labels, e.g. ["Department HOD", "HR HOD"]
    """
    policy = resolve_policy(role_level, department_name == HR_DEPARTMENT_NAME)
    return list(CHAIN_LABELS[policy])


def get_next_approver(
    directory: Directory,
    role_level: int,
    department_id: int,
    department_name: Optional[str],
) -> Optional[Employee]:
    """
    Resolve the concrete first approver for a new request.

    Returns None for Super Admins (auto-approve) and when nobody suitable
    exists; callers treat the latter as NoApproverFound. A department without
    a HOD falls back to the HR HOD.
    """
    policy = resolve_policy(role_level, department_name == HR_DEPARTMENT_NAME)

    if policy == ChainPolicy.HR_HOD_ONLY:
        return directory.find_hr_hod()
    if policy == ChainPolicy.DEPT_HOD_THEN_HR_HOD:
        return directory.find_hod(department_id) or directory.find_hr_hod()
    return None
