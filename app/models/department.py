"""
Department model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, text
from app.constants import HR_DEPARTMENT_NAME
from app.db.base import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    @property
    def is_hr(self) -> bool:
        return self.name == HR_DEPARTMENT_NAME
