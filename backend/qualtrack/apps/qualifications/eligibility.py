"""
Which employees may legitimately hold or receive a qualification.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from qualtrack.apps.workforce import models as workforce_models
from qualtrack.apps.workforce import services as workforce_services

from . import models
from .registry import get_qualification


def is_eligible(
    qualification: models.Qualification,
    employee: workforce_models.Employee,
    skill_ids: Iterable[str] = (),
) -> bool:
    if qualification.origin == models.QualificationOrigin.MANDATORY:
        return True
    if qualification.origin == models.QualificationOrigin.JOB_TITLE:
        return employee.job_title_id is not None and employee.job_title_id == qualification.job_title_id
    if qualification.origin == models.QualificationOrigin.ADDITIONAL_SKILL:
        return qualification.additional_skill_id in set(skill_ids)
    return False


def resolve_eligible(
    qualification: models.Qualification,
    roster: Iterable[workforce_models.Employee],
    skill_assignments: Iterable[Tuple[str, str]] = (),
) -> List[workforce_models.Employee]:
    """
    Pure filter over an already-scoped roster. Ordered by name (then id) so
    the result is deterministic; an empty list is a normal answer.
    """
    skills_by_employee: dict = {}
    for employee_id, skill_id in skill_assignments:
        skills_by_employee.setdefault(employee_id, set()).add(skill_id)

    eligible = [
        employee
        for employee in roster
        if is_eligible(qualification, employee, skills_by_employee.get(employee.id, ()))
    ]
    return sorted(eligible, key=lambda employee: ((employee.full_name or "").lower(), employee.id))


def eligible_employees(
    db: Session,
    *,
    qualification_id: str,
    roster: Optional[Sequence[workforce_models.Employee]] = None,
    department_id: Optional[str] = None,
    supervisor_id: Optional[str] = None,
) -> List[workforce_models.Employee]:
    """
    Directory-backed variant. When `roster` is omitted, active employees are
    loaded from the directory, narrowed by department and/or supervisor.
    """
    qualification = get_qualification(db, qualification_id)
    if roster is None:
        roster = workforce_services.list_employees(
            db,
            department_id=department_id,
            supervisor_id=supervisor_id,
        )

    skill_assignments: Iterable[Tuple[str, str]] = ()
    if qualification.origin == models.QualificationOrigin.ADDITIONAL_SKILL:
        skill_assignments = workforce_services.list_skill_assignments(
            db,
            employee_ids=[employee.id for employee in roster],
        )
    return resolve_eligible(qualification, roster, skill_assignments)
