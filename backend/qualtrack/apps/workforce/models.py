# backend/qualtrack/apps/workforce/models.py

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)

from ...database import Base
from ...identifiers import prefixed


# ---------------------------------------------------------------------------
# EMPLOYEE DIRECTORY
# ---------------------------------------------------------------------------


class Employee(Base):
    """
    Directory entry for an employee.

    Job titles and departments are reference data owned elsewhere; only their
    ids are stored here.
    """

    __tablename__ = "employees"
    __table_args__ = (
        Index("idx_employees_department_active", "department_id", "is_active"),
        Index("idx_employees_supervisor", "supervisor_id"),
    )

    id = Column(String(36), primary_key=True, default=prefixed("EMP"))

    full_name = Column(String(255), nullable=False, index=True)
    job_title_id = Column(String(64), nullable=True, index=True)
    department_id = Column(String(64), nullable=True, index=True)
    supervisor_id = Column(
        String(36),
        ForeignKey("employees.id", ondelete="SET NULL"),
        nullable=True,
    )

    is_active = Column(Boolean, nullable=False, default=True)

    is_trainer = Column(
        Boolean,
        nullable=False,
        default=False,
        doc="Display cache only. Authorization lives in qualification_trainers.",
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    def __repr__(self) -> str:
        return f"<Employee {self.id} {self.full_name!r} job_title={self.job_title_id}>"


# ---------------------------------------------------------------------------
# ADDITIONAL SKILLS (ZUSATZFUNKTIONEN)
# ---------------------------------------------------------------------------


class EmployeeSkillAssignment(Base):
    __tablename__ = "employee_skill_assignments"
    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "additional_skill_id",
            name="uq_employee_skill_assignments_employee_skill",
        ),
    )

    id = Column(String(36), primary_key=True, default=prefixed("SKA"))

    employee_id = Column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    additional_skill_id = Column(String(64), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<EmployeeSkillAssignment employee={self.employee_id} skill={self.additional_skill_id}>"
