from __future__ import annotations

from .guards import guard_trainer_flag_unassigned, guard_training_complete

WORKFLOWS = {
    "training": {
        "transitions": {
            "PENDING": {"COMPLETED": [guard_training_complete]},
            "COMPLETED": {},
        }
    },
    "trainer_flag": {
        "transitions": {
            "NOT_TRAINER": {
                "NOT_TRAINER": [guard_trainer_flag_unassigned],
            },
            "TRAINER": {
                "TRAINER": [],
                "NOT_TRAINER": [guard_trainer_flag_unassigned],
            },
        }
    },
}
