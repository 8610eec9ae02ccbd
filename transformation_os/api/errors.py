"""Translation of service exceptions into HTTP errors."""
from __future__ import annotations

from fastapi import HTTPException, status

from transformation_os.services.errors import (
    BadRequestError,
    DuplicateEnrollmentError,
    ForbiddenError,
    MentoringError,
    NotFoundError,
)

_STATUS_BY_ERROR: tuple[tuple[type[MentoringError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (DuplicateEnrollmentError, status.HTTP_409_CONFLICT),
    (BadRequestError, status.HTTP_400_BAD_REQUEST),
)


def http_error(exc: MentoringError) -> HTTPException:
    """Map a service exception onto the matching HTTP status."""

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


__all__ = ["http_error"]
