from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...errors import ComplianceError
from ...http_errors import to_http_exception
from ..workforce import schemas as workforce_schemas
from ..workforce import services as workforce_services
from . import eligibility, ledger, models, registry, schemas, trainers

router = APIRouter(prefix="/qualifications", tags=["qualifications"])
trainers_router = APIRouter(prefix="/trainers", tags=["trainers"])
ledger_router = APIRouter(prefix="/ledger", tags=["ledger"])


# ---------------------------------------------------------------------------
# QUALIFICATIONS
# ---------------------------------------------------------------------------


@router.get("", response_model=List[schemas.QualificationRead], summary="List qualifications")
def list_qualifications(
    origin: Optional[models.QualificationOrigin] = None,
    db: Session = Depends(get_read_db),
):
    return registry.list_qualifications(db, origin=origin)


@router.get(
    "/without-trainers",
    response_model=List[schemas.QualificationRead],
    summary="Qualifications nobody is authorised to train yet",
)
def list_qualifications_without_trainers(db: Session = Depends(get_read_db)):
    return registry.list_without_trainers(db)


@router.get("/{qualification_id}", response_model=schemas.QualificationRead)
def get_qualification(qualification_id: str, db: Session = Depends(get_read_db)):
    try:
        return registry.get_qualification(db, qualification_id)
    except ComplianceError as exc:
        raise to_http_exception(exc)


@router.post(
    "",
    response_model=schemas.QualificationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a qualification",
)
def create_qualification(payload: schemas.QualificationCreate, db: Session = Depends(get_db)):
    qualification = registry.create_qualification(db, data=payload)
    db.commit()
    db.refresh(qualification)
    return qualification


@router.patch("/{qualification_id}", response_model=schemas.QualificationRead)
def update_qualification(
    qualification_id: str,
    payload: schemas.QualificationUpdate,
    db: Session = Depends(get_db),
):
    try:
        qualification = registry.update_qualification(db, qualification_id=qualification_id, data=payload)
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()
    db.refresh(qualification)
    return qualification


@router.get(
    "/{qualification_id}/eligible-employees",
    response_model=List[workforce_schemas.EmployeeRead],
    summary="Employees who may hold this qualification (by origin rule)",
)
def list_eligible_employees(
    qualification_id: str,
    department_id: Optional[str] = None,
    supervisor_id: Optional[str] = None,
    db: Session = Depends(get_read_db),
):
    try:
        return eligibility.eligible_employees(
            db,
            qualification_id=qualification_id,
            department_id=department_id,
            supervisor_id=supervisor_id,
        )
    except ComplianceError as exc:
        raise to_http_exception(exc)


@router.get(
    "/{qualification_id}/trainers",
    response_model=List[schemas.TrainerAssignmentRead],
    summary="Trainer registry entries selectable for a training of this qualification",
)
def list_trainers(qualification_id: str, db: Session = Depends(get_read_db)):
    try:
        registry.get_qualification(db, qualification_id)
    except ComplianceError as exc:
        raise to_http_exception(exc)
    return trainers.list_trainers_for(db, qualification_id)


# ---------------------------------------------------------------------------
# TRAINER REGISTRY
# ---------------------------------------------------------------------------


def _trainer_status(db: Session, employee_id: str) -> schemas.TrainerStatusRead:
    count = len(trainers.list_qualifications_for_trainer(db, employee_id))
    return schemas.TrainerStatusRead(
        employee_id=employee_id,
        is_trainer=trainers.is_trainer(db, employee_id),
        assignment_count=count,
        can_toggle_flag=count == 0,
    )


@trainers_router.post(
    "",
    response_model=schemas.TrainerAssignmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Authorise an employee to train a qualification",
)
def add_trainer(payload: schemas.TrainerAssignmentCreate, db: Session = Depends(get_db)):
    try:
        assignment = trainers.add_trainer(
            db,
            employee_id=payload.employee_id,
            qualification_id=payload.qualification_id,
        )
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()
    db.refresh(assignment)
    return assignment


@trainers_router.delete(
    "/{employee_id}/{qualification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Withdraw a trainer authorization",
)
def remove_trainer(employee_id: str, qualification_id: str, db: Session = Depends(get_db)):
    try:
        trainers.remove_trainer(db, employee_id=employee_id, qualification_id=qualification_id)
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()


@trainers_router.get("/employees/{employee_id}", response_model=schemas.TrainerStatusRead)
def get_trainer_status(employee_id: str, db: Session = Depends(get_read_db)):
    try:
        return _trainer_status(db, employee_id)
    except ComplianceError as exc:
        raise to_http_exception(exc)


@trainers_router.put(
    "/employees/{employee_id}/flag",
    response_model=schemas.TrainerStatusRead,
    summary="Toggle the global trainer flag (only when no trainer assignments exist)",
)
def set_trainer_flag(employee_id: str, payload: schemas.TrainerFlagUpdate, db: Session = Depends(get_db)):
    try:
        trainers.set_trainer_flag(db, employee_id=employee_id, value=payload.is_trainer)
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()
    return _trainer_status(db, employee_id)


# ---------------------------------------------------------------------------
# LEDGER / STATUS
# ---------------------------------------------------------------------------


@ledger_router.post(
    "/grants",
    response_model=schemas.LedgerEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Assign an additional-skill qualification with a deadline",
)
def grant_additional_qualification(payload: schemas.LedgerGrantCreate, db: Session = Depends(get_db)):
    try:
        entry = ledger.grant_additional_qualification(
            db,
            employee_id=payload.employee_id,
            qualification_id=payload.qualification_id,
            qualified_from=payload.qualified_from,
            to_qualify_until=payload.to_qualify_until,
        )
    except ComplianceError as exc:
        db.rollback()
        raise to_http_exception(exc)
    db.commit()
    db.refresh(entry)
    return entry


@ledger_router.get(
    "/employees/{employee_id}/qualifications/{qualification_id}",
    response_model=schemas.StatusReportRead,
    summary="Derived status of one qualification for one employee",
)
def get_status(
    employee_id: str,
    qualification_id: str,
    as_of: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    try:
        qualification = registry.get_qualification(db, qualification_id)
    except ComplianceError as exc:
        raise to_http_exception(exc)
    entry = ledger.latest_entry(db, employee_id=employee_id, qualification_id=qualification_id)
    return ledger.describe_status(entry, qualification, as_of or date.today(), employee_id=employee_id)


@ledger_router.get(
    "/employees/{employee_id}/qualifications/{qualification_id}/history",
    response_model=List[schemas.LedgerEntryRead],
)
def get_history(employee_id: str, qualification_id: str, db: Session = Depends(get_read_db)):
    return ledger.history(db, employee_id=employee_id, qualification_id=qualification_id)


@ledger_router.get(
    "/overview",
    response_model=List[schemas.StatusReportRead],
    summary="Status of every applicable qualification for the visible employees",
)
def get_overview(
    department_id: Optional[str] = None,
    supervisor_id: Optional[str] = None,
    as_of: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    employees = workforce_services.list_employees(db, department_id=department_id, supervisor_id=supervisor_id)
    overview = ledger.status_overview(db, employees=employees, as_of=as_of)
    return [report for employee in employees for report in overview.get(employee.id, [])]


@ledger_router.get("/summary", response_model=schemas.StatusSummaryRead)
def get_summary(
    department_id: Optional[str] = None,
    supervisor_id: Optional[str] = None,
    as_of: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    employees = workforce_services.list_employees(db, department_id=department_id, supervisor_id=supervisor_id)
    return ledger.status_summary(db, employees=employees, as_of=as_of)
