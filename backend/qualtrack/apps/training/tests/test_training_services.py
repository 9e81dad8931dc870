from __future__ import annotations

from datetime import date

import pytest

from qualtrack.apps.qualifications import models as qualification_models
from qualtrack.apps.qualifications import trainers
from qualtrack.apps.training import models, services
from qualtrack.apps.workforce import models as workforce_models
from qualtrack.errors import InvalidStateTransition, InvalidTrainer, NotFound


@pytest.fixture()
def setup(db_session):
    people = {
        name: workforce_models.Employee(full_name=name, department_id="DEP-1")
        for name in ("Anna", "Bert", "Carl", "Dora")
    }
    trainer = workforce_models.Employee(full_name="Tina Trainer", department_id="DEP-2")
    forklift = qualification_models.Qualification(name="Forklift", validity_months=12)
    crane = qualification_models.Qualification(name="Crane", validity_months=24)
    db_session.add_all([*people.values(), trainer, forklift, crane])
    db_session.flush()
    assignment = trainers.add_trainer(db_session, employee_id=trainer.id, qualification_id=forklift.id)
    db_session.commit()
    return people, trainer, forklift, crane, assignment


def test_resolve_roster_priority():
    assert services.resolve_roster(["A", "B"], True, ["A", "B", "C", "D"]) == ["A", "B"]
    assert services.resolve_roster([], True, ["A", "B", "C", "D"]) == ["A", "B", "C", "D"]
    assert services.resolve_roster(None, False, ["A", "B"]) == []
    assert services.resolve_roster(["A", "A", "B"], False) == ["A", "B"]


def test_manual_selection_wins_over_mass_assignment(db_session, setup):
    people, _, forklift, _, assignment = setup

    training = services.create_training(
        db_session,
        name="Forklift refresher",
        qualification_id=forklift.id,
        trainer_assignment_id=assignment.id,
        training_date=date(2025, 3, 1),
        employee_ids=[people["Anna"].id, people["Bert"].id],
        assign_all_eligible=True,
        department_id="DEP-1",
    )
    db_session.commit()

    assert set(training.employee_ids) == {people["Anna"].id, people["Bert"].id}
    assert training.is_for_entire_department is False
    assert training.status == models.TrainingStatus.PENDING


def test_mass_assignment_takes_eligible_population(db_session, setup):
    people, _, forklift, _, assignment = setup

    training = services.create_training(
        db_session,
        name="Forklift for everyone",
        qualification_id=forklift.id,
        trainer_assignment_id=assignment.id,
        training_date=date(2025, 3, 1),
        assign_all_eligible=True,
        department_id="DEP-1",
    )

    assert set(training.employee_ids) == {employee.id for employee in people.values()}
    assert training.is_for_entire_department is True


def test_trainer_must_be_registered_for_the_qualification(db_session, setup):
    people, _, _, crane, assignment = setup

    with pytest.raises(InvalidTrainer):
        services.create_training(
            db_session,
            name="Crane basics",
            qualification_id=crane.id,
            trainer_assignment_id=assignment.id,
            training_date=date(2025, 3, 1),
            employee_ids=[people["Anna"].id],
        )


def test_unknown_participant_is_rejected(db_session, setup):
    _, _, forklift, _, assignment = setup

    with pytest.raises(NotFound):
        services.create_training(
            db_session,
            name="Forklift refresher",
            qualification_id=forklift.id,
            trainer_assignment_id=assignment.id,
            training_date=date(2025, 3, 1),
            employee_ids=["EMP-GHOST"],
        )


def test_assign_employees_skips_existing_participants(db_session, setup):
    people, _, forklift, _, assignment = setup
    training = services.create_training(
        db_session,
        name="Forklift refresher",
        qualification_id=forklift.id,
        trainer_assignment_id=assignment.id,
        training_date=date(2025, 3, 1),
        employee_ids=[people["Anna"].id],
    )

    services.assign_employees(
        db_session,
        training_id=training.id,
        employee_ids=[people["Anna"].id, people["Carl"].id],
    )
    db_session.commit()

    assert sorted(training.employee_ids) == sorted([people["Anna"].id, people["Carl"].id])


def test_removing_last_participant_deletes_training(db_session, setup):
    people, _, forklift, _, assignment = setup
    training = services.create_training(
        db_session,
        name="Forklift refresher",
        qualification_id=forklift.id,
        trainer_assignment_id=assignment.id,
        training_date=date(2025, 3, 1),
        employee_ids=[people["Anna"].id, people["Bert"].id],
    )
    db_session.commit()
    training_id = training.id

    remaining = services.remove_participant(db_session, training_id=training_id, employee_id=people["Anna"].id)
    assert remaining is not None
    assert remaining.employee_ids == [people["Bert"].id]

    assert services.remove_participant(db_session, training_id=training_id, employee_id=people["Bert"].id) is None
    db_session.commit()

    with pytest.raises(NotFound):
        services.get_training(db_session, training_id)


def test_list_trainings_filters(db_session, setup):
    people, _, forklift, _, assignment = setup
    first = services.create_training(
        db_session,
        name="Early",
        qualification_id=forklift.id,
        trainer_assignment_id=assignment.id,
        training_date=date(2025, 1, 1),
        employee_ids=[people["Anna"].id],
    )
    second = services.create_training(
        db_session,
        name="Late",
        qualification_id=forklift.id,
        trainer_assignment_id=assignment.id,
        training_date=date(2025, 2, 1),
        employee_ids=[people["Bert"].id],
    )
    db_session.commit()

    assert [t.id for t in services.list_trainings(db_session, qualification_id=forklift.id)] == [second.id, first.id]
    assert [t.id for t in services.list_trainings(db_session, employee_id=people["Anna"].id)] == [first.id]
    assert services.list_trainings(db_session, completed=True) == []


def test_participants_cannot_be_added_after_completion(db_session, setup):
    people, _, forklift, _, assignment = setup
    training = services.create_training(
        db_session,
        name="Forklift refresher",
        qualification_id=forklift.id,
        trainer_assignment_id=assignment.id,
        training_date=date(2025, 3, 1),
        employee_ids=[people["Anna"].id],
    )
    db_session.commit()
    services.complete(
        db_session,
        training_id=training.id,
        completion_date=date(2025, 3, 1),
        document_count=1,
        today=date(2025, 3, 5),
    )

    with pytest.raises(InvalidStateTransition):
        services.assign_employees(db_session, training_id=training.id, employee_ids=[people["Bert"].id])
