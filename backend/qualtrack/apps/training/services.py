"""
Training lifecycle: creation, roster management and the completion saga.

Completion is the only path by which a qualification's validity window
advances. The status flip is committed before any ledger grant is written,
so a crash in between is visible to `reconcile()` and repaired by calling
`complete()` again with the same date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from qualtrack.apps.audit import services as audit_services
from qualtrack.apps.qualifications import eligibility as eligibility_services
from qualtrack.apps.qualifications import ledger as ledger_services
from qualtrack.apps.qualifications import models as qualification_models
from qualtrack.apps.qualifications import registry as qualification_registry
from qualtrack.apps.qualifications import trainers as trainer_registry
from qualtrack.apps.workflow import apply_transition
from qualtrack.apps.workforce import models as workforce_models
from qualtrack.apps.workforce import services as workforce_services
from qualtrack.errors import (
    AlreadyCompleted,
    DataIntegrityError,
    FutureDate,
    InvalidStateTransition,
    InvalidTrainer,
    NoDocuments,
    NotFound,
    PartialFailure,
)

from . import models

logger = logging.getLogger(__name__)


@dataclass
class CompletionOutcome:
    training_id: str
    completed_date: date
    granted_employee_ids: List[str] = field(default_factory=list)
    skipped_employee_ids: List[str] = field(default_factory=list)
    failed_employee_ids: List[str] = field(default_factory=list)
    step: models.CompletionStep = models.CompletionStep.STATUS_RECORDED

    @property
    def partial(self) -> bool:
        return bool(self.failed_employee_ids)


@dataclass
class ReconciliationReport:
    training_id: str
    participant_count: int
    entries_written: int
    missing_employee_ids: List[str]

    @property
    def consistent(self) -> bool:
        return not self.missing_employee_ids


def _unique(ids: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for employee_id in ids:
        if employee_id and employee_id not in seen:
            seen.add(employee_id)
            result.append(employee_id)
    return result


def _require_employees(db: Session, employee_ids: Sequence[str]) -> None:
    found = {
        employee.id
        for employee in workforce_services.list_employees(db, employee_ids=employee_ids, active_only=False)
    }
    for employee_id in employee_ids:
        if employee_id not in found:
            raise NotFound("Employee", employee_id)


def resolve_roster(
    manual_employee_ids: Optional[Iterable[str]],
    assign_all_eligible: bool,
    eligible_employee_ids: Iterable[str] = (),
) -> List[str]:
    """
    Manual selection wins outright when non-empty; otherwise the mass flag
    takes the full eligible population; otherwise the roster is empty.
    """
    manual = _unique(manual_employee_ids or ())
    if manual:
        return manual
    if assign_all_eligible:
        return _unique(eligible_employee_ids)
    return []


# ---------------------------------------------------------------------------
# READS
# ---------------------------------------------------------------------------


def get_training(db: Session, training_id: str) -> models.Training:
    training = db.query(models.Training).filter(models.Training.id == training_id).first()
    if not training:
        raise NotFound("Training", training_id)
    return training


def list_trainings(
    db: Session,
    *,
    completed: Optional[bool] = None,
    qualification_id: Optional[str] = None,
    employee_id: Optional[str] = None,
) -> Sequence[models.Training]:
    query = db.query(models.Training)
    if completed is not None:
        status = models.TrainingStatus.COMPLETED if completed else models.TrainingStatus.PENDING
        query = query.filter(models.Training.status == status)
    if qualification_id:
        query = query.filter(models.Training.qualification_id == qualification_id)
    if employee_id:
        query = query.join(models.TrainingParticipant).filter(
            models.TrainingParticipant.employee_id == employee_id
        )
    return query.order_by(models.Training.training_date.desc(), models.Training.created_at.desc()).all()


def _require_qualification(db: Session, training: models.Training) -> qualification_models.Qualification:
    if not training.qualification_id:
        raise DataIntegrityError(f"Training '{training.id}' does not reference a qualification.")
    try:
        return qualification_registry.get_qualification(db, training.qualification_id)
    except NotFound as exc:
        raise DataIntegrityError(
            f"Training '{training.id}' references missing qualification '{training.qualification_id}'."
        ) from exc


def _require_trainer(db: Session, training: models.Training) -> qualification_models.QualificationTrainer:
    if not training.trainer_assignment_id:
        raise DataIntegrityError(f"Training '{training.id}' does not reference a trainer assignment.")
    try:
        return trainer_registry.get_assignment(db, training.trainer_assignment_id)
    except NotFound as exc:
        raise DataIntegrityError(
            f"Training '{training.id}' references a trainer assignment that no longer exists."
        ) from exc


# ---------------------------------------------------------------------------
# CREATE / ROSTER
# ---------------------------------------------------------------------------


def create_training(
    db: Session,
    *,
    name: str,
    qualification_id: str,
    trainer_assignment_id: str,
    training_date: date,
    description: Optional[str] = None,
    employee_ids: Optional[Iterable[str]] = None,
    assign_all_eligible: bool = False,
    department_id: Optional[str] = None,
    roster: Optional[Sequence[workforce_models.Employee]] = None,
    actor_id: Optional[str] = None,
) -> models.Training:
    """
    Create a pending training.

    `roster` is the caller's already-scoped candidate list for mass assignment;
    when omitted, active employees of `department_id` (or everyone) are used.
    """
    qualification = qualification_registry.get_qualification(db, qualification_id)

    try:
        assignment = trainer_registry.get_assignment(db, trainer_assignment_id)
    except NotFound:
        assignment = None
    if assignment is None or assignment.qualification_id != qualification.id:
        raise InvalidTrainer(
            "The selected trainer is not authorised to train "
            f"'{qualification.name}'. Choose a trainer registered for this qualification."
        )

    manual = _unique(employee_ids or ())
    eligible_ids: List[str] = []
    if not manual and assign_all_eligible:
        eligible_ids = [
            employee.id
            for employee in eligibility_services.eligible_employees(
                db,
                qualification_id=qualification.id,
                roster=roster,
                department_id=department_id,
            )
        ]
    resolved = resolve_roster(manual, assign_all_eligible, eligible_ids)
    if manual:
        _require_employees(db, resolved)

    training = models.Training(
        name=name,
        description=description,
        qualification_id=qualification.id,
        trainer_assignment_id=assignment.id,
        training_date=training_date,
        status=models.TrainingStatus.PENDING,
        completion_step=models.CompletionStep.NOT_STARTED,
        department_id=department_id,
        is_for_entire_department=bool(assign_all_eligible and not manual),
        created_by_id=actor_id,
    )
    training.participants = [models.TrainingParticipant(employee_id=employee_id) for employee_id in resolved]
    db.add(training)
    db.flush()

    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="training",
        entity_id=training.id,
        action="training_create",
        after={
            "name": name,
            "qualification_id": qualification.id,
            "trainer_assignment_id": assignment.id,
            "training_date": training_date.isoformat(),
            "participant_count": len(resolved),
            "mass_assignment": training.is_for_entire_department,
        },
        metadata={"module": "training"},
    )
    logger.info("Created training %s for %s with %d participant(s)", training.id, qualification.id, len(resolved))
    return training


def assign_employees(
    db: Session,
    *,
    training_id: str,
    employee_ids: Iterable[str],
    actor_id: Optional[str] = None,
) -> models.Training:
    training = get_training(db, training_id)
    if training.completed:
        raise InvalidStateTransition(
            f"Training '{training.name}' is already completed; participants can no longer be added."
        )

    requested = _unique(employee_ids)
    _require_employees(db, requested)

    present = set(training.employee_ids)
    added = [employee_id for employee_id in requested if employee_id not in present]
    for employee_id in added:
        training.participants.append(models.TrainingParticipant(employee_id=employee_id))
    db.add(training)
    db.flush()

    if added:
        audit_services.log_event(
            db,
            actor_id=actor_id,
            entity_type="training",
            entity_id=training.id,
            action="participants_add",
            after={"employee_ids": added},
            metadata={"module": "training"},
        )
    return training


def remove_participant(
    db: Session,
    *,
    training_id: str,
    employee_id: str,
    actor_id: Optional[str] = None,
) -> Optional[models.Training]:
    """
    Remove one participant. Removing the last one deletes the training;
    returns None in that case.
    """
    training = get_training(db, training_id)
    participant = next((p for p in training.participants if p.employee_id == employee_id), None)
    if participant is None:
        raise NotFound("Training participant", f"{training_id}/{employee_id}")

    training.participants.remove(participant)
    if not training.participants:
        db.delete(training)
        db.flush()
        audit_services.log_event(
            db,
            actor_id=actor_id,
            entity_type="training",
            entity_id=training_id,
            action="training_delete",
            before={"last_employee_id": employee_id},
            metadata={"module": "training", "reason": "last participant removed"},
        )
        logger.info("Deleted training %s after its last participant was removed", training_id)
        return None

    db.add(training)
    db.flush()
    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="training",
        entity_id=training.id,
        action="participant_remove",
        before={"employee_id": employee_id},
        metadata={"module": "training"},
    )
    return training


# ---------------------------------------------------------------------------
# COMPLETION
# ---------------------------------------------------------------------------


def complete(
    db: Session,
    *,
    training_id: str,
    completion_date: date,
    document_count: int,
    today: Optional[date] = None,
    actor_id: Optional[str] = None,
) -> CompletionOutcome:
    """
    Handle the document-upload completion event for a training.

    Safe to call again with the same date: participants that already hold a
    ledger entry for that date are skipped, so nobody is granted twice.
    Raises PartialFailure (after committing the successful subset) when any
    participant grant fails.
    """
    if document_count is None or document_count < 1:
        raise NoDocuments("Attach at least one training document to complete the training.")

    today = today or date.today()
    if completion_date > today:
        raise FutureDate("The completion date cannot be in the future.")

    training = get_training(db, training_id)
    qualification = _require_qualification(db, training)
    _require_trainer(db, training)

    if training.completed:
        if training.completed_date != completion_date:
            raise AlreadyCompleted(
                f"Training '{training.name}' was already completed on "
                f"{training.completed_date.isoformat()}."
            )
        logger.info("Resuming completion of training %s for %s", training.id, completion_date)
    else:
        if not training.participants:
            raise InvalidStateTransition(
                f"Training '{training.name}' has no participants; assign employees before completing it."
            )
        apply_transition(
            db,
            actor_id=actor_id,
            entity_type="training",
            entity_id=training.id,
            from_state=models.TrainingStatus.PENDING.value,
            to_state=models.TrainingStatus.COMPLETED.value,
            before_obj={"completed_date": None},
            after_obj={"completed_date": completion_date.isoformat(), "document_count": document_count},
            critical=True,
        )
        training.status = models.TrainingStatus.COMPLETED
        training.completed_date = completion_date
        training.training_date = completion_date
        training.document_count = document_count
        training.completion_step = models.CompletionStep.STATUS_RECORDED
        db.add(training)
        db.commit()

    outcome = CompletionOutcome(training_id=training.id, completed_date=completion_date)
    for employee_id in sorted(training.employee_ids):
        existing = ledger_services.find_entry(
            db,
            employee_id=employee_id,
            qualification_id=qualification.id,
            qualified_from=completion_date,
        )
        if existing is not None:
            outcome.skipped_employee_ids.append(employee_id)
            continue
        try:
            with db.begin_nested():
                ledger_services.grant(
                    db,
                    employee_id=employee_id,
                    qualification_id=qualification.id,
                    qualified_from=completion_date,
                    training_id=training.id,
                    actor_id=actor_id,
                )
        except Exception:
            logger.warning(
                "Ledger grant failed during training completion",
                exc_info=True,
                extra={"training_id": training.id, "employee_id": employee_id},
            )
            outcome.failed_employee_ids.append(employee_id)
        else:
            outcome.granted_employee_ids.append(employee_id)

    if not outcome.failed_employee_ids:
        training.completion_step = models.CompletionStep.GRANTS_APPLIED
        db.add(training)
    outcome.step = training.completion_step

    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="training",
        entity_id=training.id,
        action="training_complete",
        after={
            "completed_date": completion_date.isoformat(),
            "granted": outcome.granted_employee_ids,
            "skipped": outcome.skipped_employee_ids,
            "failed": outcome.failed_employee_ids,
        },
        metadata={"module": "training", "step": training.completion_step.value},
    )
    db.commit()

    if outcome.partial:
        raise PartialFailure(training.id, outcome.failed_employee_ids, outcome=outcome)
    return outcome


def reconcile(db: Session, *, training_id: str) -> ReconciliationReport:
    """
    Compare participants against ledger entries written for the completion
    date. Pending trainings have nothing to reconcile.
    """
    training = get_training(db, training_id)
    participants = sorted(training.employee_ids)
    if not training.completed:
        return ReconciliationReport(
            training_id=training.id,
            participant_count=len(participants),
            entries_written=0,
            missing_employee_ids=[],
        )

    qualification = _require_qualification(db, training)
    missing = [
        employee_id
        for employee_id in participants
        if ledger_services.find_entry(
            db,
            employee_id=employee_id,
            qualification_id=qualification.id,
            qualified_from=training.completed_date,
        )
        is None
    ]
    if missing:
        logger.warning(
            "Training %s is completed but %d participant(s) lack a ledger entry",
            training.id,
            len(missing),
        )
    return ReconciliationReport(
        training_id=training.id,
        participant_count=len(participants),
        entries_written=len(participants) - len(missing),
        missing_employee_ids=missing,
    )
