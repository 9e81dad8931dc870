from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ...errors import NotFound
from . import models


def get_employee(db: Session, employee_id: str) -> models.Employee:
    employee = db.query(models.Employee).filter(models.Employee.id == employee_id).first()
    if not employee:
        raise NotFound("Employee", employee_id)
    return employee


def list_employees(
    db: Session,
    *,
    department_id: Optional[str] = None,
    supervisor_id: Optional[str] = None,
    employee_ids: Optional[Iterable[str]] = None,
    active_only: bool = True,
) -> Sequence[models.Employee]:
    """
    Employee directory lookup. The caller's own visibility (e.g. a supervisor's
    direct reports) is expressed through `supervisor_id`.
    """
    query = db.query(models.Employee)
    if active_only:
        query = query.filter(models.Employee.is_active.is_(True))
    if department_id:
        query = query.filter(models.Employee.department_id == department_id)
    if supervisor_id:
        query = query.filter(models.Employee.supervisor_id == supervisor_id)
    if employee_ids is not None:
        ids = list(employee_ids)
        if not ids:
            return []
        query = query.filter(models.Employee.id.in_(ids))
    return query.order_by(models.Employee.full_name.asc(), models.Employee.id.asc()).all()


def list_skill_assignments(
    db: Session,
    *,
    employee_ids: Optional[Iterable[str]] = None,
) -> List[Tuple[str, str]]:
    query = db.query(
        models.EmployeeSkillAssignment.employee_id,
        models.EmployeeSkillAssignment.additional_skill_id,
    )
    if employee_ids is not None:
        ids = list(employee_ids)
        if not ids:
            return []
        query = query.filter(models.EmployeeSkillAssignment.employee_id.in_(ids))
    return [(employee_id, skill_id) for employee_id, skill_id in query.all()]


def assign_skill(db: Session, *, employee_id: str, additional_skill_id: str) -> models.EmployeeSkillAssignment:
    get_employee(db, employee_id)
    existing = (
        db.query(models.EmployeeSkillAssignment)
        .filter(
            models.EmployeeSkillAssignment.employee_id == employee_id,
            models.EmployeeSkillAssignment.additional_skill_id == additional_skill_id,
        )
        .first()
    )
    if existing:
        return existing
    assignment = models.EmployeeSkillAssignment(
        employee_id=employee_id,
        additional_skill_id=additional_skill_id,
    )
    db.add(assignment)
    db.flush()
    return assignment
