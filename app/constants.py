"""
Constants for the organisational directory and leave policy
"""

# Role levels (authority ladder, higher = more authority)
LEVEL_SUPER_ADMIN = 1000
LEVEL_HOD = 700
LEVEL_MANAGER = 600
LEVEL_STAFF = 300
LEVEL_VIEWER = 100

ROLE_LEVELS = {
    "SUPER_ADMIN": LEVEL_SUPER_ADMIN,
    "HOD": LEVEL_HOD,
    "MANAGER": LEVEL_MANAGER,
    "STAFF": LEVEL_STAFF,
    "VIEWER": LEVEL_VIEWER,
}

# The regulatory department whose HOD is the universal final approver
HR_DEPARTMENT_NAME = "Human Resources"

# Default annual allocation per leave type, in days
DEFAULT_LEAVE_ALLOCATIONS = {
    "Annual": 21,
    "Sick": 12,
    "Personal": 5,
    "Maternity": 90,
    "Paternity": 14,
    "Study": 10,
    "Bereavement": 5,
}

PENDING_APPROVALS_LIMIT = 50
