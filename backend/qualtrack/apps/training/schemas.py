# backend/qualtrack/apps/training/schemas.py

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import CompletionStep, TrainingStatus


class TrainingCreate(BaseModel):
    """
    Roster priority: `employee_ids` (if non-empty) wins; otherwise
    `assign_all_eligible` takes every eligible employee, narrowed by
    `department_id` when given; otherwise the training starts empty.
    """

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    qualification_id: str
    trainer_assignment_id: str = Field(..., description="Trainer registry entry, not an employee id.")
    training_date: date
    employee_ids: List[str] = Field(default_factory=list)
    assign_all_eligible: bool = False
    department_id: Optional[str] = None


class TrainingParticipantsAdd(BaseModel):
    employee_ids: List[str] = Field(..., min_length=1)


class TrainingCompletionRequest(BaseModel):
    """Completion event emitted by the document-upload subsystem."""

    completion_date: date
    document_count: int = Field(..., ge=0)


class TrainingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    qualification_id: Optional[str] = None
    trainer_assignment_id: Optional[str] = None
    training_date: date
    status: TrainingStatus
    completed: bool
    completed_date: Optional[date] = None
    document_count: int
    completion_step: CompletionStep
    department_id: Optional[str] = None
    is_for_entire_department: bool
    employee_ids: List[str]
    created_at: datetime


class CompletionOutcomeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    training_id: str
    completed_date: date
    granted_employee_ids: List[str]
    skipped_employee_ids: List[str]
    failed_employee_ids: List[str]
    step: CompletionStep
    partial: bool


class ReconciliationReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    training_id: str
    participant_count: int
    entries_written: int
    missing_employee_ids: List[str]
    consistent: bool


class ParticipantRemovalRead(BaseModel):
    training_id: str
    training_deleted: bool
    training: Optional[TrainingRead] = None
