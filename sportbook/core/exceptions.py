# sportbook/core/exceptions.py
"""
Domain-specific exceptions for the Sportbook booking core.

These exceptions provide clear, business-focused error messages. Services
raise them internally; public operations with a domain failure mode catch
them at the boundary and return a result object instead.
"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    kind: str = "backend"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "kind": self.kind,
            "details": self.details,
        }


class ValidationException(DomainException):
    """Raised when business validation fails."""

    kind = "validation"


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    kind = "not_found"


class ForbiddenException(DomainException):
    """Raised when an actor lacks permission for an action."""

    kind = "forbidden"


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    kind = "conflict"


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    kind = "backend"


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking conflicts with existing bookings."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot conflicts with an existing booking",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class AlreadyReviewedException(ConflictException):
    """Raised when the store rejects a second review for the same booking."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="You have already reviewed this session",
            code="ALREADY_REVIEWED",
            details={"booking_id": booking_id},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues or query failures.
    """


def is_unique_violation(exc: BaseException) -> bool:
    """
    Check if a store error is a unique-constraint violation.

    PostgreSQL reports SQLSTATE 23505; SQLite reports "UNIQUE constraint failed".
    """
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if pgcode == "23505":
        return True
    text = str(orig if orig is not None else exc).lower()
    return "unique constraint" in text or "duplicate key" in text or "23505" in text
