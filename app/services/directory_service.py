"""
Organisational directory lookups used by the leave workflow

The workflow engine only depends on the ``Directory`` protocol, so it can be
driven by ``SqlDirectory`` in the API and by an in-memory fake in tests.
"""
import logging
from typing import Optional, Protocol

from sqlalchemy.orm import Session

from app.constants import HR_DEPARTMENT_NAME, LEVEL_HOD, LEVEL_SUPER_ADMIN
from app.models.department import Department
from app.models.employee import Employee
from app.models.role import RoleModel

logger = logging.getLogger(__name__)


class Directory(Protocol):
    def find_hod(self, department_id: int) -> Optional[Employee]:
        ...

    def find_hr_hod(self) -> Optional[Employee]:
        ...

    def find_super_admin(self) -> Optional[Employee]:
        ...


class SqlDirectory:
    """
    Directory backed by the employees/roles/departments tables.

    Only active employees are considered. When several employees hold the same
    position (e.g. two HODs in one department) the earliest-created one wins,
    ties broken by lowest id.
    """

    def __init__(self, db: Session):
        self.db = db

    def _with_level(self, level: int):
        return (
            self.db.query(Employee)
            .join(RoleModel, Employee.role_id == RoleModel.id)
            .filter(RoleModel.level == level, Employee.active == True)  # noqa: E712
        )

    @staticmethod
    def _earliest(query) -> Optional[Employee]:
        return query.order_by(Employee.created_at.asc(), Employee.id.asc()).first()

    def find_hod(self, department_id: int) -> Optional[Employee]:
        return self._earliest(
            self._with_level(LEVEL_HOD).filter(Employee.department_id == department_id)
        )

    def find_hr_hod(self) -> Optional[Employee]:
        hod = self._earliest(
            self._with_level(LEVEL_HOD)
            .join(Department, Employee.department_id == Department.id)
            .filter(Department.name == HR_DEPARTMENT_NAME)
        )
        if hod is None:
            logger.warning("No active HOD found for department %r", HR_DEPARTMENT_NAME)
        return hod

    def find_super_admin(self) -> Optional[Employee]:
        return self._earliest(self._with_level(LEVEL_SUPER_ADMIN))
