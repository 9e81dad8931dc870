# backend/qualtrack/apps/qualifications/schemas.py

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .models import QualificationOrigin, QualificationStatus


def check_origin_target(
    origin: QualificationOrigin,
    job_title_id: Optional[str],
    additional_skill_id: Optional[str],
) -> Optional[str]:
    """
    Return a problem description when origin and target ids disagree, else None.
    """
    if origin == QualificationOrigin.MANDATORY:
        if job_title_id or additional_skill_id:
            return "Mandatory qualifications must not reference a job title or additional skill."
    elif origin == QualificationOrigin.JOB_TITLE:
        if not job_title_id:
            return "Job-title qualifications require job_title_id."
        if additional_skill_id:
            return "Job-title qualifications must not reference an additional skill."
    elif origin == QualificationOrigin.ADDITIONAL_SKILL:
        if not additional_skill_id:
            return "Additional-skill qualifications require additional_skill_id."
        if job_title_id:
            return "Additional-skill qualifications must not reference a job title."
    return None


# ---------------------------------------------------------------------------
# QUALIFICATIONS
# ---------------------------------------------------------------------------


class QualificationBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    validity_months: int = Field(
        ...,
        gt=0,
        description="Validity in months after completion. 999 means the qualification never expires.",
    )
    origin: QualificationOrigin = QualificationOrigin.MANDATORY
    job_title_id: Optional[str] = None
    additional_skill_id: Optional[str] = None

    @model_validator(mode="after")
    def _origin_matches_target(self):
        problem = check_origin_target(self.origin, self.job_title_id, self.additional_skill_id)
        if problem:
            raise ValueError(problem)
        return self


class QualificationCreate(QualificationBase):
    pass


class QualificationUpdate(BaseModel):
    """
    Partial update. The origin invariant is re-checked by the service
    against the merged record.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    validity_months: Optional[int] = Field(None, gt=0)
    origin: Optional[QualificationOrigin] = None
    job_title_id: Optional[str] = None
    additional_skill_id: Optional[str] = None


class QualificationRead(QualificationBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    never_expires: bool
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# TRAINERS
# ---------------------------------------------------------------------------


class TrainerAssignmentCreate(BaseModel):
    employee_id: str
    qualification_id: str


class TrainerAssignmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    qualification_id: str
    created_at: datetime


class TrainerFlagUpdate(BaseModel):
    is_trainer: bool


class TrainerStatusRead(BaseModel):
    employee_id: str
    is_trainer: bool
    assignment_count: int
    can_toggle_flag: bool


# ---------------------------------------------------------------------------
# LEDGER
# ---------------------------------------------------------------------------


class LedgerGrantCreate(BaseModel):
    """
    Manual grant of an additional-skill qualification. The expiry date is a
    deadline to qualify by and is stored as provisional.
    """

    employee_id: str
    qualification_id: str
    qualified_from: date
    to_qualify_until: Optional[date] = None


class LedgerEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    qualification_id: str
    qualified_from: date
    expiry_date: Optional[date] = None
    is_provisional: bool
    qualified_until: Optional[date] = None
    to_qualify_until: Optional[date] = None
    training_id: Optional[str] = None
    created_at: datetime


class StatusReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: str
    qualification_id: str
    qualification_name: str
    status: QualificationStatus
    never_expires: bool
    qualified_from: Optional[date] = None
    expiry_date: Optional[date] = None
    is_provisional: bool = False
    days_until_expiry: Optional[int] = None
    days_since_expiry: Optional[int] = None
    label: str


class StatusSummaryRead(BaseModel):
    as_of: date
    employee_count: int
    counts: Dict[QualificationStatus, int]
    fully_compliant_employee_ids: List[str] = Field(default_factory=list)
