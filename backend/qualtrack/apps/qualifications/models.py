# backend/qualtrack/apps/qualifications/models.py

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
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

NEVER_EXPIRES_MONTHS = 999


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class QualificationOrigin(str, enum.Enum):
    """
    Why a qualification applies to someone (Herkunft).
    - MANDATORY: everyone
    - JOB_TITLE: holders of one job title
    - ADDITIONAL_SKILL: holders of one additional skill / function
    """

    MANDATORY = "MANDATORY"
    JOB_TITLE = "JOB_TITLE"
    ADDITIONAL_SKILL = "ADDITIONAL_SKILL"


class QualificationStatus(str, enum.Enum):
    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"
    EXPIRING = "EXPIRING"
    EXPIRED = "EXPIRED"


# ---------------------------------------------------------------------------
# QUALIFICATION MASTER
# ---------------------------------------------------------------------------


class Qualification(Base):
    """
    Canonical qualification definition.

    - validity_months = recurrence interval; 999 means "never expires"
    - origin + job_title_id / additional_skill_id decide who needs it
    """

    __tablename__ = "qualifications"
    __table_args__ = (
        CheckConstraint("validity_months > 0", name="ck_qualifications_validity_positive"),
        CheckConstraint(
            "(origin = 'MANDATORY' AND job_title_id IS NULL AND additional_skill_id IS NULL)"
            " OR (origin = 'JOB_TITLE' AND job_title_id IS NOT NULL AND additional_skill_id IS NULL)"
            " OR (origin = 'ADDITIONAL_SKILL' AND additional_skill_id IS NOT NULL AND job_title_id IS NULL)",
            name="ck_qualifications_origin_target",
        ),
        Index("idx_qualifications_origin", "origin"),
    )

    id = Column(String(36), primary_key=True, default=prefixed("QUA"))

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)

    validity_months = Column(
        Integer,
        nullable=False,
        doc="Validity in months after a completed training; 999 = never expires.",
    )

    origin = Column(
        Enum(QualificationOrigin, name="qualification_origin_enum"),
        nullable=False,
        default=QualificationOrigin.MANDATORY,
    )
    job_title_id = Column(String(64), nullable=True, index=True)
    additional_skill_id = Column(String(64), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    trainers = relationship(
        "QualificationTrainer",
        back_populates="qualification",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def never_expires(self) -> bool:
        return (self.validity_months or 0) >= NEVER_EXPIRES_MONTHS

    def __repr__(self) -> str:
        return f"<Qualification {self.id} {self.name!r} origin={self.origin}>"


# ---------------------------------------------------------------------------
# TRAINER REGISTRY
# ---------------------------------------------------------------------------


class QualificationTrainer(Base):
    """
    One employee authorised to train one qualification.
    """

    __tablename__ = "qualification_trainers"
    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "qualification_id",
            name="uq_qualification_trainers_employee_qualification",
        ),
    )

    id = Column(String(36), primary_key=True, default=prefixed("QTR"))

    employee_id = Column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    qualification_id = Column(
        String(36),
        ForeignKey("qualifications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    qualification = relationship("Qualification", back_populates="trainers", lazy="joined")
    employee = relationship("Employee", lazy="joined")

    def __repr__(self) -> str:
        return f"<QualificationTrainer employee={self.employee_id} qualification={self.qualification_id}>"


# ---------------------------------------------------------------------------
# EMPLOYEE QUALIFICATION LEDGER
# ---------------------------------------------------------------------------


class EmployeeQualification(Base):
    """
    Append-only ledger entry: one dated grant of a qualification.

    A single `expiry_date` is stored. When `is_provisional` is set the date is
    a deadline to qualify by (`to_qualify_until`); otherwise it is the end of
    a completed validity window (`qualified_until`).
    """

    __tablename__ = "employee_qualifications"
    __table_args__ = (
        Index(
            "idx_employee_qualifications_latest",
            "employee_id",
            "qualification_id",
            "qualified_from",
        ),
        Index("idx_employee_qualifications_expiry", "expiry_date"),
    )

    id = Column(String(36), primary_key=True, default=prefixed("EQL"))

    employee_id = Column(
        String(36),
        ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    qualification_id = Column(
        String(36),
        ForeignKey("qualifications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    qualified_from = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=True)
    is_provisional = Column(Boolean, nullable=False, default=False)

    training_id = Column(
        String(36),
        ForeignKey("trainings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Training whose completion wrote this entry, if any.",
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    qualification = relationship("Qualification", lazy="joined")

    @property
    def qualified_until(self):
        return None if self.is_provisional else self.expiry_date

    @property
    def to_qualify_until(self):
        return self.expiry_date if self.is_provisional else None

    def __repr__(self) -> str:
        return (
            f"<EmployeeQualification employee={self.employee_id} qualification={self.qualification_id} "
            f"from={self.qualified_from} expiry={self.expiry_date}>"
        )
