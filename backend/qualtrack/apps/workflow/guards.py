from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy.orm import Session

GuardResult = List[Dict[str, str]]


def _get_value(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def guard_trainer_flag_unassigned(
    db: Session,
    *,
    before_obj: Any,
    after_obj: Any,
    from_state: str,
    to_state: str,
) -> GuardResult:
    from qualtrack.apps.qualifications import models as qualification_models

    employee_id = _get_value(after_obj, "employee_id") or _get_value(before_obj, "employee_id")
    if not employee_id:
        return [{"field": "employee_id", "reason": "employee identifier required"}]

    assignments = (
        db.query(qualification_models.QualificationTrainer)
        .filter(qualification_models.QualificationTrainer.employee_id == employee_id)
        .count()
    )
    if assignments > 0:
        return [
            {
                "field": "qualification_trainers",
                "reason": (
                    f"employee is trainer for {assignments} qualification(s); "
                    "remove every trainer assignment first"
                ),
            }
        ]
    return []


def guard_training_complete(
    db: Session,
    *,
    before_obj: Any,
    after_obj: Any,
    from_state: str,
    to_state: str,
) -> GuardResult:
    completed_date = _get_value(after_obj, "completed_date")
    document_count = _get_value(after_obj, "document_count") or 0

    missing = []
    if not completed_date:
        missing.append({"field": "completed_date", "reason": "completion date required"})
    if document_count < 1:
        missing.append({"field": "document_count", "reason": "at least one document required"})
    return missing
