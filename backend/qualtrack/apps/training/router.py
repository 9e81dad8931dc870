from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...errors import ComplianceError
from ...http_errors import to_http_exception
from . import schemas as training_schemas
from . import services as training_services

router = APIRouter(prefix="/trainings", tags=["trainings"])


@router.get("", response_model=List[training_schemas.TrainingRead], summary="List trainings")
def list_trainings(
    completed: Optional[bool] = None,
    qualification_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
):
    return training_services.list_trainings(
        db,
        completed=completed,
        qualification_id=qualification_id,
        employee_id=employee_id,
    )


@router.get("/{training_id}", response_model=training_schemas.TrainingRead)
def get_training(training_id: str, db: Session = Depends(get_read_db)):
    try:
        return training_services.get_training(db, training_id)
    except ComplianceError as exc:
        raise to_http_exception(exc)


@router.post(
    "",
    response_model=training_schemas.TrainingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Plan a training (manual roster wins over mass assignment)",
)
def create_training(payload: training_schemas.TrainingCreate, db: Session = Depends(get_db)):
    try:
        training = training_services.create_training(
            db,
            name=payload.name,
            description=payload.description,
            qualification_id=payload.qualification_id,
            trainer_assignment_id=payload.trainer_assignment_id,
            training_date=payload.training_date,
            employee_ids=payload.employee_ids,
            assign_all_eligible=payload.assign_all_eligible,
            department_id=payload.department_id,
        )
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()
    db.refresh(training)
    return training


@router.post("/{training_id}/participants", response_model=training_schemas.TrainingRead)
def add_participants(
    training_id: str,
    payload: training_schemas.TrainingParticipantsAdd,
    db: Session = Depends(get_db),
):
    try:
        training = training_services.assign_employees(db, training_id=training_id, employee_ids=payload.employee_ids)
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()
    db.refresh(training)
    return training


@router.delete(
    "/{training_id}/participants/{employee_id}",
    response_model=training_schemas.ParticipantRemovalRead,
    summary="Remove a participant; removing the last one deletes the training",
)
def remove_participant(training_id: str, employee_id: str, db: Session = Depends(get_db)):
    try:
        training = training_services.remove_participant(db, training_id=training_id, employee_id=employee_id)
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()
    if training is None:
        return {"training_id": training_id, "training_deleted": True, "training": None}
    db.refresh(training)
    return {"training_id": training_id, "training_deleted": False, "training": training}


@router.post(
    "/{training_id}/complete",
    response_model=training_schemas.CompletionOutcomeRead,
    summary="Completion event from the document upload (extends every participant's validity)",
)
def complete_training(
    training_id: str,
    payload: training_schemas.TrainingCompletionRequest,
    db: Session = Depends(get_db),
):
    try:
        outcome = training_services.complete(
            db,
            training_id=training_id,
            completion_date=payload.completion_date,
            document_count=payload.document_count,
        )
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    return training_schemas.CompletionOutcomeRead.model_validate(outcome)


@router.get("/{training_id}/reconciliation", response_model=training_schemas.ReconciliationReportRead)
def reconcile_training(training_id: str, db: Session = Depends(get_read_db)):
    try:
        report = training_services.reconcile(db, training_id=training_id)
    except ComplianceError as exc:
        raise to_http_exception(exc)
    return training_schemas.ReconciliationReportRead.model_validate(report)
