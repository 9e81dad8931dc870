from __future__ import annotations

import pytest

from qualtrack.apps.workforce import models as workforce_models
from qualtrack.apps.workforce import services as workforce_services
from qualtrack.errors import NotFound


def _employee(db_session, name, **kwargs) -> workforce_models.Employee:
    employee = workforce_models.Employee(full_name=name, **kwargs)
    db_session.add(employee)
    db_session.flush()
    return employee


def test_get_employee_raises_not_found(db_session):
    with pytest.raises(NotFound) as excinfo:
        workforce_services.get_employee(db_session, "EMP-MISSING")
    assert excinfo.value.entity_id == "EMP-MISSING"


def test_list_employees_scopes_and_orders_by_name(db_session):
    lead = _employee(db_session, "Lea Lead", department_id="DEP-1")
    _employee(db_session, "Zora", department_id="DEP-1", supervisor_id=lead.id)
    _employee(db_session, "Anton", department_id="DEP-1", supervisor_id=lead.id)
    _employee(db_session, "Bert", department_id="DEP-2")
    _employee(db_session, "Inactive", department_id="DEP-1", is_active=False)
    db_session.commit()

    department = workforce_services.list_employees(db_session, department_id="DEP-1")
    assert [employee.full_name for employee in department] == ["Anton", "Lea Lead", "Zora"]

    reports = workforce_services.list_employees(db_session, supervisor_id=lead.id)
    assert [employee.full_name for employee in reports] == ["Anton", "Zora"]

    everyone = workforce_services.list_employees(db_session, department_id="DEP-1", active_only=False)
    assert "Inactive" in [employee.full_name for employee in everyone]


def test_list_employees_with_empty_id_list_returns_nothing(db_session):
    _employee(db_session, "Anton")
    db_session.commit()

    assert workforce_services.list_employees(db_session, employee_ids=[]) == []


def test_assign_skill_is_idempotent(db_session):
    employee = _employee(db_session, "Anton")

    first = workforce_services.assign_skill(db_session, employee_id=employee.id, additional_skill_id="SKL-FIRST-AID")
    second = workforce_services.assign_skill(db_session, employee_id=employee.id, additional_skill_id="SKL-FIRST-AID")
    db_session.commit()

    assert first.id == second.id
    assert workforce_services.list_skill_assignments(db_session, employee_ids=[employee.id]) == [
        (employee.id, "SKL-FIRST-AID")
    ]
