# backend/qualtrack/errors.py
"""
Error taxonomy for the qualification / training engine.

Services raise these; routers translate them to HTTP responses. Every error
carries a stable `code` and a human-readable `message` that a caller can show
to the user as-is.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class ComplianceError(Exception):
    code = "compliance_error"

    def __init__(self, message: str, *, detail: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or []

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class NotFound(ComplianceError):
    code = "not_found"

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type} '{entity_id}' was not found.")
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidStateTransition(ComplianceError):
    code = "invalid_state_transition"


class AlreadyCompleted(InvalidStateTransition):
    code = "already_completed"


class InvalidTrainer(ComplianceError):
    code = "invalid_trainer"


class NoDocuments(ComplianceError):
    code = "no_documents"


class FutureDate(ComplianceError):
    code = "future_date"


class DataIntegrityError(ComplianceError):
    code = "data_integrity_error"


class PartialFailure(ComplianceError):
    """
    Raised by training completion when some participant grants failed.

    The successful subset is already committed; `failed_employee_ids` is the
    exact set to retry by calling `complete()` again with the same date.
    """

    code = "partial_failure"

    def __init__(self, training_id: str, failed_employee_ids: Sequence[str], *, outcome: Any = None):
        failed = sorted(failed_employee_ids)
        super().__init__(
            f"Training '{training_id}' was completed but {len(failed)} participant "
            f"qualification(s) could not be updated. Retry completion to apply the rest.",
            detail=[{"employee_id": employee_id, "reason": "ledger grant failed"} for employee_id in failed],
        )
        self.training_id = training_id
        self.failed_employee_ids = failed
        self.outcome = outcome
