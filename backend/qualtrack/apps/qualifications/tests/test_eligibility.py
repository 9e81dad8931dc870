from __future__ import annotations

from qualtrack.apps.qualifications import eligibility, models
from qualtrack.apps.workforce import models as workforce_models
from qualtrack.apps.workforce import services as workforce_services


def _roster():
    return [
        workforce_models.Employee(id="EMP-D", full_name="dora", job_title_id="JT-WELDER"),
        workforce_models.Employee(id="EMP-A", full_name="Anna", job_title_id="JT-DRIVER"),
        workforce_models.Employee(id="EMP-C", full_name="Carl", job_title_id=None),
        workforce_models.Employee(id="EMP-B", full_name="bert", job_title_id="JT-DRIVER"),
    ]


def test_mandatory_applies_to_everyone_sorted_by_name():
    qualification = models.Qualification(
        id="QUA-1", name="Safety", validity_months=12, origin=models.QualificationOrigin.MANDATORY
    )

    result = eligibility.resolve_eligible(qualification, _roster())

    assert [employee.id for employee in result] == ["EMP-A", "EMP-B", "EMP-C", "EMP-D"]


def test_job_title_filters_on_matching_title():
    qualification = models.Qualification(
        id="QUA-2",
        name="Driving",
        validity_months=12,
        origin=models.QualificationOrigin.JOB_TITLE,
        job_title_id="JT-DRIVER",
    )

    result = eligibility.resolve_eligible(qualification, _roster())

    assert [employee.id for employee in result] == ["EMP-A", "EMP-B"]


def test_additional_skill_uses_skill_assignments():
    qualification = models.Qualification(
        id="QUA-3",
        name="First aid",
        validity_months=24,
        origin=models.QualificationOrigin.ADDITIONAL_SKILL,
        additional_skill_id="SKL-FIRST-AID",
    )
    assignments = [("EMP-C", "SKL-FIRST-AID"), ("EMP-A", "SKL-FIRE-WARDEN")]

    result = eligibility.resolve_eligible(qualification, _roster(), assignments)

    assert [employee.id for employee in result] == ["EMP-C"]


def test_empty_result_is_not_an_error():
    qualification = models.Qualification(
        id="QUA-4",
        name="Crane",
        validity_months=12,
        origin=models.QualificationOrigin.JOB_TITLE,
        job_title_id="JT-CRANE",
    )

    assert eligibility.resolve_eligible(qualification, _roster()) == []
    assert eligibility.resolve_eligible(qualification, []) == []


def test_eligible_employees_reads_directory_and_skills(db_session):
    qualification = models.Qualification(
        name="First aid",
        validity_months=24,
        origin=models.QualificationOrigin.ADDITIONAL_SKILL,
        additional_skill_id="SKL-FIRST-AID",
    )
    anna = workforce_models.Employee(full_name="Anna", department_id="DEP-1")
    bert = workforce_models.Employee(full_name="Bert", department_id="DEP-2")
    carl = workforce_models.Employee(full_name="Carl", department_id="DEP-1")
    db_session.add_all([qualification, anna, bert, carl])
    db_session.flush()
    workforce_services.assign_skill(db_session, employee_id=anna.id, additional_skill_id="SKL-FIRST-AID")
    workforce_services.assign_skill(db_session, employee_id=bert.id, additional_skill_id="SKL-FIRST-AID")
    db_session.commit()

    everyone = eligibility.eligible_employees(db_session, qualification_id=qualification.id)
    department = eligibility.eligible_employees(db_session, qualification_id=qualification.id, department_id="DEP-1")

    assert [employee.full_name for employee in everyone] == ["Anna", "Bert"]
    assert [employee.full_name for employee in department] == ["Anna"]
