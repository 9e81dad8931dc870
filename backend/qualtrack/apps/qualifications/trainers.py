"""
Trainer registry: which employee may train which qualification.

The per-qualification entry is the unit of authorization. The employee's
`is_trainer` column is a display cache kept in step with the registry.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from qualtrack.apps.audit import services as audit_services
from qualtrack.apps.workflow import apply_transition
from qualtrack.apps.workforce import services as workforce_services
from qualtrack.errors import NotFound

from . import models
from .registry import get_qualification

logger = logging.getLogger(__name__)


def _entry_count(db: Session, employee_id: str) -> int:
    return (
        db.query(models.QualificationTrainer)
        .filter(models.QualificationTrainer.employee_id == employee_id)
        .count()
    )


def get_assignment(db: Session, assignment_id: str) -> models.QualificationTrainer:
    assignment = (
        db.query(models.QualificationTrainer)
        .filter(models.QualificationTrainer.id == assignment_id)
        .first()
    )
    if not assignment:
        raise NotFound("Trainer assignment", assignment_id)
    return assignment


def find_assignment(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
) -> Optional[models.QualificationTrainer]:
    return (
        db.query(models.QualificationTrainer)
        .filter(
            models.QualificationTrainer.employee_id == employee_id,
            models.QualificationTrainer.qualification_id == qualification_id,
        )
        .first()
    )


def add_trainer(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
    actor_id: Optional[str] = None,
) -> models.QualificationTrainer:
    """
    Authorise an employee to train a qualification. Idempotent per pair.
    """
    employee = workforce_services.get_employee(db, employee_id)
    get_qualification(db, qualification_id)

    existing = find_assignment(db, employee_id=employee_id, qualification_id=qualification_id)
    if existing:
        return existing

    assignment = models.QualificationTrainer(
        employee_id=employee_id,
        qualification_id=qualification_id,
    )
    db.add(assignment)
    employee.is_trainer = True
    db.add(employee)
    db.flush()
    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="qualification_trainer",
        entity_id=assignment.id,
        action="trainer_add",
        after={"employee_id": employee_id, "qualification_id": qualification_id},
        metadata={"module": "qualifications"},
    )
    return assignment


def remove_trainer(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
    actor_id: Optional[str] = None,
) -> None:
    """
    Withdraw one trainer authorization. The employee's cached flag is
    cleared together with their last remaining entry.
    """
    assignment = find_assignment(db, employee_id=employee_id, qualification_id=qualification_id)
    if not assignment:
        raise NotFound("Trainer assignment", f"{employee_id}/{qualification_id}")

    assignment_id = assignment.id
    db.delete(assignment)
    db.flush()
    employee = workforce_services.get_employee(db, employee_id)
    if employee.is_trainer and _entry_count(db, employee_id) == 0:
        employee.is_trainer = False
        db.add(employee)
        db.flush()
        logger.info("Trainer flag for %s cleared with its last assignment", employee_id)
    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="qualification_trainer",
        entity_id=assignment_id,
        action="trainer_remove",
        before={"employee_id": employee_id, "qualification_id": qualification_id},
        metadata={"module": "qualifications"},
    )


def list_trainers_for(db: Session, qualification_id: str) -> Sequence[models.QualificationTrainer]:
    return (
        db.query(models.QualificationTrainer)
        .filter(models.QualificationTrainer.qualification_id == qualification_id)
        .order_by(models.QualificationTrainer.created_at.asc())
        .all()
    )


def list_qualifications_for_trainer(db: Session, employee_id: str) -> Sequence[models.Qualification]:
    return (
        db.query(models.Qualification)
        .join(
            models.QualificationTrainer,
            models.QualificationTrainer.qualification_id == models.Qualification.id,
        )
        .filter(models.QualificationTrainer.employee_id == employee_id)
        .order_by(models.Qualification.name.asc())
        .all()
    )


def can_toggle_global_trainer_flag(db: Session, employee_id: str) -> bool:
    return _entry_count(db, employee_id) == 0


def is_trainer(db: Session, employee_id: str) -> bool:
    """Trainer status as the registry sees it; the employee column is only a display cache."""
    workforce_services.get_employee(db, employee_id)
    return _entry_count(db, employee_id) > 0


def set_trainer_flag(
    db: Session,
    *,
    employee_id: str,
    value: bool,
    actor_id: Optional[str] = None,
):
    """
    Set the employee's cached trainer flag by hand.

    Raises InvalidStateTransition while the employee still holds any
    qualification-level trainer assignment, and for promotion to trainer,
    which only `add_trainer` may do.
    """
    employee = workforce_services.get_employee(db, employee_id)
    from_state = "TRAINER" if employee.is_trainer else "NOT_TRAINER"
    to_state = "TRAINER" if value else "NOT_TRAINER"

    apply_transition(
        db,
        actor_id=actor_id,
        entity_type="trainer_flag",
        entity_id=employee.id,
        from_state=from_state,
        to_state=to_state,
        before_obj={"employee_id": employee.id},
        after_obj={"employee_id": employee.id},
        critical=False,
    )

    employee.is_trainer = value
    db.add(employee)
    db.flush()
    logger.info("Trainer flag for %s set to %s", employee.id, value)
    return employee
