"""
Employee qualification ledger and status derivation.

Entries are append-only. The current status of an (employee, qualification)
pair is always derived from the latest entry by `qualified_from`.
"""

from __future__ import annotations

import logging
import os
from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from qualtrack.apps.audit import services as audit_services
from qualtrack.apps.workforce import models as workforce_models
from qualtrack.apps.workforce import services as workforce_services
from qualtrack.errors import InvalidStateTransition

from . import models
from .dates import add_months
from .eligibility import is_eligible
from .registry import get_qualification

logger = logging.getLogger(__name__)

# Display-only buffer for "days since expiry"; status classification ignores it.
GRACE_PERIOD_DAYS = int(os.getenv("QUALTRACK_GRACE_PERIOD_DAYS", "14"))
EXPIRING_WINDOW_MONTHS = int(os.getenv("QUALTRACK_EXPIRING_WINDOW_MONTHS", "2"))
NEVER_EXPIRES_YEARS = int(os.getenv("QUALTRACK_NEVER_EXPIRES_YEARS", "100"))


@dataclass(frozen=True)
class StatusReport:
    employee_id: str
    qualification_id: str
    qualification_name: str
    status: models.QualificationStatus
    never_expires: bool
    qualified_from: Optional[date]
    expiry_date: Optional[date]
    is_provisional: bool
    days_until_expiry: Optional[int]
    days_since_expiry: Optional[int]
    label: str


# ---------------------------------------------------------------------------
# VALIDITY WINDOWS
# ---------------------------------------------------------------------------


def never_expires_date(qualified_from: date) -> date:
    return add_months(qualified_from, NEVER_EXPIRES_YEARS * 12)


def validity_end(qualification: models.Qualification, qualified_from: date) -> date:
    """
    End of the validity window that starts at `qualified_from`. Never-expiring
    qualifications still get a concrete far-future date so comparisons stay total.
    """
    if qualification.never_expires:
        return never_expires_date(qualified_from)
    return add_months(qualified_from, qualification.validity_months)


# ---------------------------------------------------------------------------
# PURE STATUS DERIVATION
# ---------------------------------------------------------------------------


def derive_status_from_entry(
    entry: Optional[models.EmployeeQualification],
    validity_months: int,
    as_of: date,
) -> models.QualificationStatus:
    if entry is None:
        return models.QualificationStatus.INACTIVE
    if (validity_months or 0) >= models.NEVER_EXPIRES_MONTHS:
        return models.QualificationStatus.ACTIVE

    expiry = entry.expiry_date
    if expiry is None:
        return models.QualificationStatus.INACTIVE
    if expiry < as_of:
        return models.QualificationStatus.EXPIRED
    if expiry <= add_months(as_of, EXPIRING_WINDOW_MONTHS):
        return models.QualificationStatus.EXPIRING
    return models.QualificationStatus.ACTIVE


def days_since_expiry(expiry: date, as_of: date) -> int:
    """Days past the end of the grace period (negative while still inside it)."""
    return (as_of - (expiry + timedelta(days=GRACE_PERIOD_DAYS))).days


def describe_status(
    entry: Optional[models.EmployeeQualification],
    qualification: models.Qualification,
    as_of: date,
    *,
    employee_id: Optional[str] = None,
) -> StatusReport:
    status = derive_status_from_entry(entry, qualification.validity_months, as_of)
    expiry = entry.expiry_date if entry is not None else None

    until: Optional[int] = None
    since: Optional[int] = None
    if status == models.QualificationStatus.INACTIVE:
        label = "Inactive"
    elif status == models.QualificationStatus.ACTIVE:
        label = "Active (never expires)" if qualification.never_expires else "Active"
        if expiry is not None and not qualification.never_expires:
            until = (expiry - as_of).days
    elif status == models.QualificationStatus.EXPIRING:
        until = (expiry - as_of).days
        label = f"Expiring in {until} day{'' if until == 1 else 's'}"
    else:
        since = days_since_expiry(expiry, as_of)
        if since < 0:
            label = f"Expired, {-since} day{'' if since == -1 else 's'} of grace period left"
        else:
            label = (
                f"Expired {since} day{'' if since == 1 else 's'} ago "
                f"(incl. {GRACE_PERIOD_DAYS}-day grace period)"
            )

    return StatusReport(
        employee_id=employee_id or (entry.employee_id if entry is not None else ""),
        qualification_id=qualification.id,
        qualification_name=qualification.name,
        status=status,
        never_expires=qualification.never_expires,
        qualified_from=entry.qualified_from if entry is not None else None,
        expiry_date=expiry,
        is_provisional=bool(entry.is_provisional) if entry is not None else False,
        days_until_expiry=until,
        days_since_expiry=since,
        label=label,
    )


# ---------------------------------------------------------------------------
# LEDGER READS
# ---------------------------------------------------------------------------


def history(db: Session, *, employee_id: str, qualification_id: str) -> Sequence[models.EmployeeQualification]:
    return (
        db.query(models.EmployeeQualification)
        .filter(
            models.EmployeeQualification.employee_id == employee_id,
            models.EmployeeQualification.qualification_id == qualification_id,
        )
        .order_by(
            models.EmployeeQualification.qualified_from.desc(),
            models.EmployeeQualification.created_at.desc(),
        )
        .all()
    )


def latest_entry(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
) -> Optional[models.EmployeeQualification]:
    return (
        db.query(models.EmployeeQualification)
        .filter(
            models.EmployeeQualification.employee_id == employee_id,
            models.EmployeeQualification.qualification_id == qualification_id,
        )
        .order_by(
            models.EmployeeQualification.qualified_from.desc(),
            models.EmployeeQualification.created_at.desc(),
        )
        .first()
    )


def find_entry(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
    qualified_from: date,
) -> Optional[models.EmployeeQualification]:
    return (
        db.query(models.EmployeeQualification)
        .filter(
            models.EmployeeQualification.employee_id == employee_id,
            models.EmployeeQualification.qualification_id == qualification_id,
            models.EmployeeQualification.qualified_from == qualified_from,
            models.EmployeeQualification.is_provisional.is_(False),
        )
        .first()
    )


def derive_status(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
    as_of: Optional[date] = None,
) -> models.QualificationStatus:
    qualification = get_qualification(db, qualification_id)
    entry = latest_entry(db, employee_id=employee_id, qualification_id=qualification_id)
    return derive_status_from_entry(entry, qualification.validity_months, as_of or date.today())


# ---------------------------------------------------------------------------
# LEDGER WRITES
# ---------------------------------------------------------------------------


def grant(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
    qualified_from: date,
    expiry_date: Optional[date] = None,
    provisional: bool = False,
    training_id: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> models.EmployeeQualification:
    """
    Append a ledger entry. When `expiry_date` is omitted it is computed from
    the qualification's validity; never-expiring qualifications always get the
    far-future date.
    """
    qualification = get_qualification(db, qualification_id)
    if qualification.never_expires:
        expiry_date = never_expires_date(qualified_from)
    elif expiry_date is None:
        expiry_date = validity_end(qualification, qualified_from)

    entry = models.EmployeeQualification(
        employee_id=employee_id,
        qualification_id=qualification.id,
        qualified_from=qualified_from,
        expiry_date=expiry_date,
        is_provisional=provisional,
        training_id=training_id,
    )
    db.add(entry)
    db.flush()
    audit_services.log_event(
        db,
        actor_id=actor_id,
        entity_type="employee_qualification",
        entity_id=entry.id,
        action="ledger_grant",
        after={
            "employee_id": employee_id,
            "qualification_id": qualification.id,
            "qualified_from": qualified_from.isoformat(),
            "expiry_date": expiry_date.isoformat() if expiry_date else None,
            "is_provisional": provisional,
            "training_id": training_id,
        },
        metadata={"module": "ledger"},
    )
    return entry


def grant_additional_qualification(
    db: Session,
    *,
    employee_id: str,
    qualification_id: str,
    qualified_from: date,
    to_qualify_until: Optional[date] = None,
    actor_id: Optional[str] = None,
) -> models.EmployeeQualification:
    """
    Hand-assign an additional-skill qualification with a deadline to qualify by.

    Mandatory and job-title qualifications follow from the employee's record
    and can only advance through training completion.
    """
    workforce_services.get_employee(db, employee_id)
    qualification = get_qualification(db, qualification_id)
    if qualification.origin != models.QualificationOrigin.ADDITIONAL_SKILL:
        raise InvalidStateTransition(
            "Only additional-skill qualifications can be assigned by hand; "
            "complete a training to grant this qualification."
        )
    return grant(
        db,
        employee_id=employee_id,
        qualification_id=qualification_id,
        qualified_from=qualified_from,
        expiry_date=to_qualify_until,
        provisional=True,
        actor_id=actor_id,
    )


# ---------------------------------------------------------------------------
# OVERVIEWS
# ---------------------------------------------------------------------------


def _latest_entries(
    db: Session,
    employee_ids: Iterable[str],
) -> Dict[tuple, models.EmployeeQualification]:
    ids = list(employee_ids)
    if not ids:
        return {}
    rows = (
        db.query(models.EmployeeQualification)
        .filter(models.EmployeeQualification.employee_id.in_(ids))
        .order_by(
            models.EmployeeQualification.qualified_from.asc(),
            models.EmployeeQualification.created_at.asc(),
        )
        .all()
    )
    latest: Dict[tuple, models.EmployeeQualification] = {}
    for row in rows:
        latest[(row.employee_id, row.qualification_id)] = row
    return latest


def status_overview(
    db: Session,
    *,
    employees: Sequence[workforce_models.Employee],
    as_of: Optional[date] = None,
) -> Dict[str, List[StatusReport]]:
    """
    Per employee, one report for every qualification that applies to them by
    origin or that appears in their ledger.
    """
    as_of = as_of or date.today()
    qualifications = db.query(models.Qualification).order_by(models.Qualification.name.asc()).all()
    latest = _latest_entries(db, [employee.id for employee in employees])

    skills: Dict[str, set] = {}
    for employee_id, skill_id in workforce_services.list_skill_assignments(
        db, employee_ids=[employee.id for employee in employees]
    ):
        skills.setdefault(employee_id, set()).add(skill_id)

    overview: Dict[str, List[StatusReport]] = {}
    for employee in employees:
        reports = []
        for qualification in qualifications:
            entry = latest.get((employee.id, qualification.id))
            if entry is None and not is_eligible(qualification, employee, skills.get(employee.id, ())):
                continue
            reports.append(describe_status(entry, qualification, as_of, employee_id=employee.id))
        overview[employee.id] = reports
    return overview


def status_summary(
    db: Session,
    *,
    employees: Sequence[workforce_models.Employee],
    as_of: Optional[date] = None,
) -> dict:
    as_of = as_of or date.today()
    overview = status_overview(db, employees=employees, as_of=as_of)

    counts: Counter = Counter({status: 0 for status in models.QualificationStatus})
    compliant: List[str] = []
    for employee_id, reports in overview.items():
        counts.update(report.status for report in reports)
        if reports and all(report.status == models.QualificationStatus.ACTIVE for report in reports):
            compliant.append(employee_id)

    logger.debug("Computed status summary for %d employees as of %s", len(employees), as_of)
    return {
        "as_of": as_of,
        "employee_count": len(employees),
        "counts": dict(counts),
        "fully_compliant_employee_ids": compliant,
    }
