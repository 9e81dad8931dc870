from __future__ import annotations

from datetime import date, timedelta

import pytest

from qualtrack.apps.qualifications import ledger, models
from qualtrack.apps.qualifications.dates import add_months
from qualtrack.apps.workforce import models as workforce_models
from qualtrack.apps.workforce import services as workforce_services
from qualtrack.errors import InvalidStateTransition

Status = models.QualificationStatus


def _entry(qualified_from, expiry_date, provisional=False) -> models.EmployeeQualification:
    return models.EmployeeQualification(
        employee_id="EMP-1",
        qualification_id="QUA-1",
        qualified_from=qualified_from,
        expiry_date=expiry_date,
        is_provisional=provisional,
    )


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 11, 15), 14) == date(2026, 1, 15)


def test_add_months_handles_leap_day_and_negative_offsets():
    assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)
    assert add_months(date(2024, 2, 29), 48) == date(2028, 2, 29)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert add_months(date(2024, 1, 15), -13) == date(2022, 12, 15)
    assert add_months(date(2024, 5, 5), 0) == date(2024, 5, 5)


@pytest.mark.parametrize("validity_months", [1, 6, 12, 36, 998, 999])
@pytest.mark.parametrize("offset_days", [-4000, -400, -30, 0, 30, 59, 61, 400, 4000])
def test_status_derivation_is_total(validity_months, offset_days):
    qualified_from = date(2020, 6, 15)
    entry = _entry(qualified_from, add_months(qualified_from, validity_months))
    as_of = entry.expiry_date + timedelta(days=offset_days)

    status = ledger.derive_status_from_entry(entry, validity_months, as_of)

    assert status in set(Status)


def test_status_without_entry_is_inactive():
    assert ledger.derive_status_from_entry(None, 12, date(2025, 1, 1)) == Status.INACTIVE


def test_status_without_expiry_is_inactive():
    assert ledger.derive_status_from_entry(_entry(date(2024, 1, 1), None), 12, date(2025, 1, 1)) == Status.INACTIVE


def test_status_windows():
    entry = _entry(date(2024, 3, 1), date(2025, 3, 1))

    assert ledger.derive_status_from_entry(entry, 12, date(2024, 12, 1)) == Status.ACTIVE
    assert ledger.derive_status_from_entry(entry, 12, date(2025, 1, 15)) == Status.EXPIRING
    assert ledger.derive_status_from_entry(entry, 12, date(2025, 3, 1)) == Status.EXPIRING
    assert ledger.derive_status_from_entry(entry, 12, date(2025, 3, 2)) == Status.EXPIRED


def test_never_expiring_is_always_active():
    ancient = _entry(date(1970, 1, 1), date(1971, 1, 1))

    assert ledger.derive_status_from_entry(ancient, 999, date(2090, 1, 1)) == Status.ACTIVE


def test_describe_status_grace_period_labels():
    qualification = models.Qualification(id="QUA-1", name="Forklift", validity_months=12)
    entry = _entry(date(2024, 1, 1), date(2025, 1, 1))

    within_grace = ledger.describe_status(entry, qualification, date(2025, 1, 5))
    past_grace = ledger.describe_status(entry, qualification, date(2025, 2, 1))

    assert within_grace.status == Status.EXPIRED
    assert within_grace.days_since_expiry == -10
    assert within_grace.label == "Expired, 10 days of grace period left"
    assert past_grace.days_since_expiry == 17
    assert past_grace.label == "Expired 17 days ago (incl. 14-day grace period)"


def test_describe_status_expiring_and_never_expiring():
    forklift = models.Qualification(id="QUA-1", name="Forklift", validity_months=12)
    induction = models.Qualification(id="QUA-2", name="Induction", validity_months=999)

    expiring = ledger.describe_status(_entry(date(2024, 2, 1), date(2025, 2, 1)), forklift, date(2025, 1, 31))
    forever = ledger.describe_status(_entry(date(2000, 1, 1), date(2100, 1, 1)), induction, date(2025, 1, 1))
    missing = ledger.describe_status(None, forklift, date(2025, 1, 1), employee_id="EMP-9")

    assert expiring.label == "Expiring in 1 day"
    assert expiring.days_until_expiry == 1
    assert forever.label == "Active (never expires)"
    assert forever.days_until_expiry is None
    assert missing.status == Status.INACTIVE
    assert missing.employee_id == "EMP-9"


def _people(db_session):
    anna = workforce_models.Employee(full_name="Anna", job_title_id="JT-DRIVER")
    bert = workforce_models.Employee(full_name="Bert", job_title_id="JT-WELDER")
    safety = models.Qualification(name="Safety", validity_months=12)
    driving = models.Qualification(
        name="Driving",
        validity_months=24,
        origin=models.QualificationOrigin.JOB_TITLE,
        job_title_id="JT-DRIVER",
    )
    first_aid = models.Qualification(
        name="First aid",
        validity_months=24,
        origin=models.QualificationOrigin.ADDITIONAL_SKILL,
        additional_skill_id="SKL-FIRST-AID",
    )
    induction = models.Qualification(name="Induction", validity_months=999)
    db_session.add_all([anna, bert, safety, driving, first_aid, induction])
    db_session.flush()
    return anna, bert, safety, driving, first_aid, induction


def test_grant_computes_expiry_and_latest_entry_wins(db_session):
    anna, _, safety, _, _, _ = _people(db_session)

    ledger.grant(db_session, employee_id=anna.id, qualification_id=safety.id, qualified_from=date(2024, 5, 1))
    ledger.grant(db_session, employee_id=anna.id, qualification_id=safety.id, qualified_from=date(2023, 5, 1))
    db_session.commit()

    latest = ledger.latest_entry(db_session, employee_id=anna.id, qualification_id=safety.id)
    entries = ledger.history(db_session, employee_id=anna.id, qualification_id=safety.id)

    assert latest.qualified_from == date(2024, 5, 1)
    assert latest.qualified_until == date(2025, 5, 1)
    assert latest.to_qualify_until is None
    assert [entry.qualified_from for entry in entries] == [date(2024, 5, 1), date(2023, 5, 1)]
    assert (
        ledger.derive_status(db_session, employee_id=anna.id, qualification_id=safety.id, as_of=date(2024, 6, 1))
        == Status.ACTIVE
    )


def test_grant_of_never_expiring_uses_far_future_date(db_session):
    anna, _, _, _, _, induction = _people(db_session)

    entry = ledger.grant(
        db_session,
        employee_id=anna.id,
        qualification_id=induction.id,
        qualified_from=date(2024, 1, 10),
        expiry_date=date(2024, 2, 1),
    )

    assert entry.expiry_date == date(2124, 1, 10)


def test_manual_grant_only_for_additional_skill(db_session):
    anna, _, safety, driving, first_aid, _ = _people(db_session)

    for qualification in (safety, driving):
        with pytest.raises(InvalidStateTransition):
            ledger.grant_additional_qualification(
                db_session,
                employee_id=anna.id,
                qualification_id=qualification.id,
                qualified_from=date(2025, 1, 1),
            )

    entry = ledger.grant_additional_qualification(
        db_session,
        employee_id=anna.id,
        qualification_id=first_aid.id,
        qualified_from=date(2025, 1, 1),
        to_qualify_until=date(2025, 2, 1),
    )
    db_session.commit()

    assert entry.is_provisional is True
    assert entry.to_qualify_until == date(2025, 2, 1)
    assert entry.qualified_until is None
    assert (
        ledger.derive_status(db_session, employee_id=anna.id, qualification_id=first_aid.id, as_of=date(2025, 1, 10))
        == Status.EXPIRING
    )


def test_status_overview_lists_applicable_qualifications(db_session):
    anna, bert, safety, driving, first_aid, induction = _people(db_session)
    workforce_services.assign_skill(db_session, employee_id=bert.id, additional_skill_id="SKL-FIRST-AID")
    ledger.grant(db_session, employee_id=anna.id, qualification_id=safety.id, qualified_from=date(2024, 6, 1))
    ledger.grant(db_session, employee_id=anna.id, qualification_id=driving.id, qualified_from=date(2024, 6, 1))
    ledger.grant(db_session, employee_id=anna.id, qualification_id=induction.id, qualified_from=date(2010, 6, 1))
    db_session.commit()

    overview = ledger.status_overview(db_session, employees=[anna, bert], as_of=date(2024, 12, 1))

    anna_reports = {report.qualification_name: report.status for report in overview[anna.id]}
    bert_reports = {report.qualification_name: report.status for report in overview[bert.id]}
    assert anna_reports == {"Driving": Status.ACTIVE, "Induction": Status.ACTIVE, "Safety": Status.ACTIVE}
    assert bert_reports == {"First aid": Status.INACTIVE, "Induction": Status.INACTIVE, "Safety": Status.INACTIVE}

    summary = ledger.status_summary(db_session, employees=[anna, bert], as_of=date(2024, 12, 1))
    assert summary["employee_count"] == 2
    assert summary["counts"][Status.ACTIVE] == 3
    assert summary["counts"][Status.INACTIVE] == 3
    assert summary["counts"][Status.EXPIRED] == 0
    assert summary["fully_compliant_employee_ids"] == [anna.id]
