"""
Database initialization

Seeds the role ladder, the Human Resources department and an initial Super
Admin. Safe to run repeatedly: existing rows are left untouched.
"""
import logging
from typing import Dict

from sqlalchemy.orm import Session

from app.constants import HR_DEPARTMENT_NAME, LEVEL_SUPER_ADMIN, ROLE_LEVELS
from app.core.config import settings
from app.core.security import hash_password
from app.models.department import Department
from app.models.employee import Employee
from app.models.role import RoleModel
from app.utils.roles import role_display_name

logger = logging.getLogger(__name__)

SUPER_ADMIN_EMPLOYEE_CODE = "SA-001"


def seed_roles(db: Session) -> Dict[str, RoleModel]:
    roles = {}
    for name, level in ROLE_LEVELS.items():
        role = db.query(RoleModel).filter(RoleModel.name == name).first()
        if not role:
            role = RoleModel(name=name, level=level, description=role_display_name(level), is_active=True)
            db.add(role)
            logger.info("Created role %s (level %s)", name, level)
        roles[name] = role
    db.flush()
    return roles


def seed_hr_department(db: Session) -> Department:
    department = db.query(Department).filter(Department.name == HR_DEPARTMENT_NAME).first()
    if not department:
        department = Department(name=HR_DEPARTMENT_NAME, active=True)
        db.add(department)
        db.flush()
        logger.info("Created department: %s", HR_DEPARTMENT_NAME)
    return department


def init_db(db: Session) -> None:
    """
    Ensure roles, the HR department and at least one Super Admin exist
    """
    roles = seed_roles(db)
    hr_department = seed_hr_department(db)

    super_admin = (
        db.query(Employee)
        .join(RoleModel, Employee.role_id == RoleModel.id)
        .filter(RoleModel.level == LEVEL_SUPER_ADMIN)
        .first()
    )
    if super_admin:
        db.commit()
        logger.info("Super Admin already exists, skipping initial bootstrap")
        return

    super_admin = Employee(
        employee_code=SUPER_ADMIN_EMPLOYEE_CODE,
        first_name="System",
        last_name="Administrator",
        email=settings.INITIAL_SUPER_ADMIN_EMAIL,
        role_id=roles["SUPER_ADMIN"].id,
        department_id=hr_department.id,
        password_hash=hash_password(settings.INITIAL_SUPER_ADMIN_PASSWORD),
        active=True,
    )
    db.add(super_admin)
    db.commit()

    logger.info("Initial Super Admin created: %s", settings.INITIAL_SUPER_ADMIN_EMAIL)
    logger.info("Password: [set via INITIAL_SUPER_ADMIN_PASSWORD environment variable]")
