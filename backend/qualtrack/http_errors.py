from __future__ import annotations

from fastapi import HTTPException, status

from .errors import (
    ComplianceError,
    DataIntegrityError,
    FutureDate,
    InvalidStateTransition,
    InvalidTrainer,
    NoDocuments,
    NotFound,
    PartialFailure,
)

_STATUS_BY_ERROR = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (PartialFailure, status.HTTP_207_MULTI_STATUS),
    (InvalidStateTransition, status.HTTP_409_CONFLICT),
    (DataIntegrityError, status.HTTP_409_CONFLICT),
    (InvalidTrainer, status.HTTP_400_BAD_REQUEST),
    (NoDocuments, status.HTTP_400_BAD_REQUEST),
    (FutureDate, status.HTTP_400_BAD_REQUEST),
)


def to_http_exception(exc: ComplianceError) -> HTTPException:
    """
    Translate a service error into the HTTPException the routers raise.
    """
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    detail = exc.to_dict()
    if isinstance(exc, PartialFailure):
        detail["failed_employee_ids"] = exc.failed_employee_ids
    return HTTPException(status_code=status_code, detail=detail)
