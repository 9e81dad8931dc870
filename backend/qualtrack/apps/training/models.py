# backend/qualtrack/apps/training/models.py

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...identifiers import prefixed


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class TrainingStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class CompletionStep(str, enum.Enum):
    """
    Last durable step of the completion saga.
    - NOT_STARTED: training still pending
    - STATUS_RECORDED: training flipped to COMPLETED, grants may be missing
    - GRANTS_APPLIED: every participant has a ledger entry for the completion date
    """

    NOT_STARTED = "NOT_STARTED"
    STATUS_RECORDED = "STATUS_RECORDED"
    GRANTS_APPLIED = "GRANTS_APPLIED"


# ---------------------------------------------------------------------------
# TRAININGS
# ---------------------------------------------------------------------------


class Training(Base):
    """
    A training session that grants exactly one qualification.

    The trainer is referenced through the trainer registry entry, never a bare
    employee id, so authorization is checked against the qualification.
    """

    __tablename__ = "trainings"
    __table_args__ = (
        Index("idx_trainings_qualification_status", "qualification_id", "status"),
        Index("idx_trainings_date", "training_date"),
    )

    id = Column(String(36), primary_key=True, default=prefixed("TRN"))

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    qualification_id = Column(
        String(36),
        ForeignKey("qualifications.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    trainer_assignment_id = Column(
        String(36),
        ForeignKey("qualification_trainers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    training_date = Column(Date, nullable=False)

    status = Column(
        Enum(TrainingStatus, name="training_status_enum"),
        nullable=False,
        default=TrainingStatus.PENDING,
        index=True,
    )
    completed_date = Column(Date, nullable=True)
    document_count = Column(Integer, nullable=False, default=0)
    completion_step = Column(
        Enum(CompletionStep, name="training_completion_step_enum"),
        nullable=False,
        default=CompletionStep.NOT_STARTED,
    )

    department_id = Column(String(64), nullable=True, index=True)
    is_for_entire_department = Column(
        Boolean,
        nullable=False,
        default=False,
        doc="Roster was taken from the full eligible population (mass assignment).",
    )

    created_by_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    qualification = relationship("Qualification", lazy="joined")
    trainer_assignment = relationship("QualificationTrainer", lazy="joined")
    participants = relationship(
        "TrainingParticipant",
        back_populates="training",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def completed(self) -> bool:
        return self.status == TrainingStatus.COMPLETED

    @property
    def employee_ids(self):
        return [participant.employee_id for participant in self.participants]

    def __repr__(self) -> str:
        return f"<Training {self.id} qualification={self.qualification_id} status={self.status}>"


class TrainingParticipant(Base):
    __tablename__ = "training_participants"
    __table_args__ = (
        UniqueConstraint(
            "training_id",
            "employee_id",
            name="uq_training_participants_training_employee",
        ),
        Index("idx_training_participants_employee", "employee_id"),
    )

    id = Column(String(36), primary_key=True, default=prefixed("TPA"))

    training_id = Column(
        String(36),
        ForeignKey("trainings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id = Column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    training = relationship("Training", back_populates="participants")

    def __repr__(self) -> str:
        return f"<TrainingParticipant training={self.training_id} employee={self.employee_id}>"
