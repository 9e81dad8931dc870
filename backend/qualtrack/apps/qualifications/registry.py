"""
Qualification registry: canonical definitions and origin classification.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from qualtrack.apps.audit import services as audit_services
from qualtrack.errors import DataIntegrityError, InvalidStateTransition, NotFound

from . import models, schemas

# Fields that change what a pending training will grant.
_FROZEN_WHILE_PENDING = ("validity_months", "origin")


def is_never_expiring(qualification: models.Qualification) -> bool:
    return qualification.never_expires


def get_qualification(db: Session, qualification_id: str) -> models.Qualification:
    qualification = (
        db.query(models.Qualification)
        .filter(models.Qualification.id == qualification_id)
        .first()
    )
    if not qualification:
        raise NotFound("Qualification", qualification_id)
    return qualification


def list_qualifications(
    db: Session,
    *,
    origin: Optional[models.QualificationOrigin] = None,
) -> Sequence[models.Qualification]:
    query = db.query(models.Qualification)
    if origin is not None:
        query = query.filter(models.Qualification.origin == origin)
    return query.order_by(models.Qualification.name.asc(), models.Qualification.id.asc()).all()


def list_without_trainers(
    db: Session,
    trainer_snapshot: Optional[Iterable[models.QualificationTrainer]] = None,
) -> Sequence[models.Qualification]:
    """
    Qualifications nobody may currently train; used to block their selection
    when planning a training. Pass `trainer_snapshot` to evaluate against an
    already loaded registry instead of querying it.
    """
    if trainer_snapshot is None:
        covered = {
            qualification_id
            for (qualification_id,) in db.query(models.QualificationTrainer.qualification_id).distinct()
        }
    else:
        covered = {entry.qualification_id for entry in trainer_snapshot}
    return [q for q in list_qualifications(db) if q.id not in covered]


def create_qualification(
    db: Session,
    *,
    data: schemas.QualificationCreate,
    actor_id: Optional[str] = None,
) -> models.Qualification:
    qualification = models.Qualification(**data.model_dump())
    db.add(qualification)
    db.flush()
    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="qualification",
        entity_id=qualification.id,
        action="qualification_create",
        after=data.model_dump(mode="json"),
        metadata={"module": "qualifications"},
    )
    return qualification


def update_qualification(
    db: Session,
    *,
    qualification_id: str,
    data: schemas.QualificationUpdate,
    actor_id: Optional[str] = None,
) -> models.Qualification:
    from qualtrack.apps.training import models as training_models

    qualification = get_qualification(db, qualification_id)
    changes = data.model_dump(exclude_unset=True)

    frozen = [
        field
        for field in _FROZEN_WHILE_PENDING
        if field in changes and changes[field] != getattr(qualification, field)
    ]
    if frozen:
        pending = (
            db.query(training_models.Training)
            .filter(
                training_models.Training.qualification_id == qualification.id,
                training_models.Training.status == training_models.TrainingStatus.PENDING,
            )
            .count()
        )
        if pending:
            raise InvalidStateTransition(
                f"Cannot change {', '.join(frozen)} while {pending} pending training(s) "
                "grant this qualification. Complete or remove them first."
            )

    origin = changes.get("origin", qualification.origin)
    job_title_id = changes.get("job_title_id", qualification.job_title_id)
    additional_skill_id = changes.get("additional_skill_id", qualification.additional_skill_id)
    problem = schemas.check_origin_target(origin, job_title_id, additional_skill_id)
    if problem:
        raise DataIntegrityError(problem)

    before = {field: _jsonable(getattr(qualification, field)) for field in changes}
    for field, value in changes.items():
        setattr(qualification, field, value)
    db.add(qualification)
    db.flush()
    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="qualification",
        entity_id=qualification.id,
        action="qualification_update",
        before=before,
        after={field: _jsonable(value) for field, value in changes.items()},
        metadata={"module": "qualifications"},
    )
    return qualification


def _jsonable(value):
    return value.value if isinstance(value, models.QualificationOrigin) else value
