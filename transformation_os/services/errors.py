"""Exceptions raised by the service layer."""
from __future__ import annotations


class MentoringError(RuntimeError):
    """Base exception for service errors."""


class NotFoundError(MentoringError):
    """Raised when a record does not resolve inside the caller's tenant or scope."""


class ForbiddenError(MentoringError):
    """Raised when the caller lacks a record-level right."""


class BadRequestError(MentoringError):
    """Raised for input that is well formed but not acceptable."""


class DuplicatePrepError(BadRequestError):
    """Raised when a session already has a prep submission."""


class DuplicateEnrollmentError(MentoringError):
    """Raised when a user is already enrolled in a program."""


class TenantAccessError(ForbiddenError):
    """Raised when a tenant user addresses a tenant other than their own."""


__all__ = [
    "BadRequestError",
    "DuplicateEnrollmentError",
    "DuplicatePrepError",
    "ForbiddenError",
    "MentoringError",
    "NotFoundError",
    "TenantAccessError",
]
