from __future__ import annotations

import pytest

from qualtrack.apps.audit import models as audit_models
from qualtrack.apps.qualifications import models as qualification_models
from qualtrack.apps.workflow import TransitionError, apply_transition
from qualtrack.apps.workforce import models as workforce_models
from qualtrack.errors import InvalidStateTransition


def test_apply_transition_allows_training_completion(db_session):
    apply_transition(
        db_session,
        actor_id=None,
        entity_type="training",
        entity_id="TRN-1",
        from_state="PENDING",
        to_state="COMPLETED",
        before_obj={"completed_date": None},
        after_obj={"completed_date": "2025-03-10", "document_count": 2},
        critical=True,
    )

    event = (
        db_session.query(audit_models.AuditEvent)
        .filter(audit_models.AuditEvent.entity_type == "training", audit_models.AuditEvent.action == "transition")
        .first()
    )
    assert event is not None
    assert event.before["status"] == "PENDING"
    assert event.after["status"] == "COMPLETED"


def test_apply_transition_rejects_completion_without_documents(db_session):
    with pytest.raises(TransitionError) as excinfo:
        apply_transition(
            db_session,
            actor_id=None,
            entity_type="training",
            entity_id="TRN-1",
            from_state="PENDING",
            to_state="COMPLETED",
            before_obj={},
            after_obj={"completed_date": None, "document_count": 0},
        )

    assert excinfo.value.code == "missing_requirements"
    assert {item["field"] for item in excinfo.value.detail} == {"completed_date", "document_count"}


def test_apply_transition_rejects_reopening_a_training(db_session):
    with pytest.raises(TransitionError) as excinfo:
        apply_transition(
            db_session,
            actor_id=None,
            entity_type="training",
            entity_id="TRN-1",
            from_state="COMPLETED",
            to_state="PENDING",
            before_obj={},
            after_obj={},
        )

    assert excinfo.value.code == "invalid_transition"
    assert isinstance(excinfo.value, InvalidStateTransition)


def test_apply_transition_rejects_unknown_workflow(db_session):
    with pytest.raises(TransitionError) as excinfo:
        apply_transition(
            db_session,
            actor_id=None,
            entity_type="payroll",
            entity_id="X-1",
            from_state="A",
            to_state="B",
            before_obj={},
            after_obj={},
        )
    assert excinfo.value.code == "invalid_transition"


def test_trainer_flag_guard_blocks_while_assignments_exist(db_session):
    employee = workforce_models.Employee(full_name="Tina Trainer", is_trainer=True)
    qualification = qualification_models.Qualification(name="Crane", validity_months=12)
    db_session.add_all([employee, qualification])
    db_session.flush()
    db_session.add(
        qualification_models.QualificationTrainer(employee_id=employee.id, qualification_id=qualification.id)
    )
    db_session.flush()

    with pytest.raises(TransitionError) as excinfo:
        apply_transition(
            db_session,
            actor_id=None,
            entity_type="trainer_flag",
            entity_id=employee.id,
            from_state="TRAINER",
            to_state="NOT_TRAINER",
            before_obj={"employee_id": employee.id},
            after_obj={"employee_id": employee.id},
        )

    assert excinfo.value.code == "missing_requirements"
    assert excinfo.value.detail[0]["field"] == "qualification_trainers"


def test_trainer_flag_has_no_manual_promotion(db_session):
    employee = workforce_models.Employee(full_name="Nick Newcomer")
    db_session.add(employee)
    db_session.flush()

    with pytest.raises(TransitionError) as excinfo:
        apply_transition(
            db_session,
            actor_id=None,
            entity_type="trainer_flag",
            entity_id=employee.id,
            from_state="NOT_TRAINER",
            to_state="TRAINER",
            before_obj={"employee_id": employee.id},
            after_obj={"employee_id": employee.id},
        )

    assert excinfo.value.code == "invalid_transition"
