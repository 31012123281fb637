"""Domain-specific exceptions for the peoplehub core.

Every error carries a stable code, a human message and optional structured
details, so calling layers can map them to status codes without inspecting
internals.
"""

from datetime import date
from enum import StrEnum
from typing import Any
from uuid import UUID


class ErrorKind(StrEnum):
    """Coarse error categories shared by all domain errors."""

    VALIDATION = "validation"
    PERMISSION_DENIED = "permission_denied"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    DELETED_STATE = "deleted_state"
    EXTERNAL_SERVICE = "external_service"
    SYSTEM = "system"


class DomainError(Exception):
    """Base exception for all peoplehub domain errors."""

    code: str = "DOMAIN_ERROR"
    http_status: int = 500
    kind: ErrorKind = ErrorKind.SYSTEM

    def __init__(self, message: str = "An error occurred", details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serializable representation used outside the process."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(DomainError):
    """Base class for invariant and input validation errors."""

    code = "VALID_FAILED"
    http_status = 400
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None) -> None:
        details = dict(details or {})
        if field:
            details.setdefault("fields", [field])
        super().__init__(message, details)


class InvalidEmailError(ValidationError):
    """Raised when an email address is malformed."""

    code = "VALID_INVALID_EMAIL"

    def __init__(self, email: str, reason: str = "Invalid email format") -> None:
        super().__init__(reason, field="email", details={"email": email})


class InvalidDateRangeError(ValidationError):
    """Raised when a date range breaks its rules."""

    code = "VALID_INVALID_DATE_RANGE"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid date range: {reason}", field="date_range")


class FeedbackSelfError(ValidationError):
    """Raised when a user tries to give feedback to themselves."""

    code = "FEEDBACK_SELF"

    def __init__(self) -> None:
        super().__init__("You cannot give feedback to yourself", field="receiver_id")


class AbsenceStatusError(ValidationError):
    """Raised when an absence transition is not allowed from its status."""

    code = "ABSENCE_INVALID_STATUS"

    def __init__(self, action: str, current_status: str) -> None:
        super().__init__(
            f"Cannot {action} absence with status: {current_status}",
            details={"action": action, "status": current_status},
        )


class EntityNotDeletedError(ValidationError):
    """Raised when restoring an entity that is not deleted."""

    code = "VALID_NOT_DELETED"

    def __init__(self, entity: str, entity_id: UUID | str) -> None:
        super().__init__(
            f"{entity} is not deleted",
            details={"entity": entity, "id": str(entity_id)},
        )


# =============================================================================
# Permission Errors (403)
# =============================================================================


class PermissionDeniedError(DomainError):
    """Raised when the actor lacks authorization for an action."""

    code = "PERM_DENIED"
    http_status = 403
    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, action: str, message: str | None = None) -> None:
        super().__init__(message or f"Permission denied: {action}", {"action": action})


class AbsenceSelfApprovalError(PermissionDeniedError):
    """Raised when a manager tries to approve or reject their own request."""

    code = "ABSENCE_SELF_APPROVAL"

    def __init__(self) -> None:
        super().__init__(
            "approve absence",
            "You cannot approve or reject your own absence request",
        )


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(DomainError):
    """Base class for conflicts with existing state."""

    code = "CONFLICT"
    http_status = 409
    kind = ErrorKind.CONFLICT


class AbsenceDateConflictError(ConflictError):
    """Raised when an absence overlaps an existing live request."""

    code = "ABSENCE_DATE_CONFLICT"

    def __init__(self, conflicting_absence_id: UUID, start_date: date, end_date: date) -> None:
        self.conflicting_absence_id = conflicting_absence_id
        super().__init__(
            f"You already have an absence request from {start_date.isoformat()} to {end_date.isoformat()}",
            {
                "conflicting_absence_id": str(conflicting_absence_id),
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        )


class ConcurrentBookingError(ConflictError):
    """Raised when a booking kept losing serialization races."""

    code = "ABSENCE_CONCURRENT_CONFLICT"

    def __init__(self, attempts: int) -> None:
        super().__init__(
            "Another absence request is being processed. Please try again in a moment.",
            {"attempts": attempts},
        )


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class NotFoundError(DomainError):
    """Base class for resource not found errors."""

    code = "NOT_FOUND"
    http_status = 404
    kind = ErrorKind.NOT_FOUND


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""

    code = "USER_NOT_FOUND"

    def __init__(self, user_id: UUID | str | None = None) -> None:
        details = {"user_id": str(user_id)} if user_id else {}
        super().__init__("User not found", details)


class FeedbackNotFoundError(NotFoundError):
    """Raised when feedback cannot be found."""

    code = "FEEDBACK_NOT_FOUND"

    def __init__(self, feedback_id: UUID | str | None = None) -> None:
        details = {"feedback_id": str(feedback_id)} if feedback_id else {}
        super().__init__("Feedback not found", details)


class AbsenceNotFoundError(NotFoundError):
    """Raised when an absence request cannot be found."""

    code = "ABSENCE_NOT_FOUND"

    def __init__(self, absence_id: UUID | str | None = None) -> None:
        details = {"absence_id": str(absence_id)} if absence_id else {}
        super().__init__("Absence request not found", details)


# =============================================================================
# Deleted-State Errors (410)
# =============================================================================


class EntityDeletedError(DomainError):
    """Raised when mutating a soft-deleted entity."""

    code = "ENTITY_DELETED"
    http_status = 410
    kind = ErrorKind.DELETED_STATE

    def __init__(self, entity: str, entity_id: UUID | str, action: str = "modify") -> None:
        super().__init__(
            f"Cannot {action} deleted {entity.lower()}",
            {"entity": entity, "id": str(entity_id), "action": action},
        )


# =============================================================================
# External Service Errors (503)
# =============================================================================


class ExternalServiceError(DomainError):
    """Raised when an identity, notification or AI dependency is unavailable."""

    code = "SYS_EXTERNAL_SERVICE"
    http_status = 503
    kind = ErrorKind.EXTERNAL_SERVICE

    def __init__(self, service: str, reason: str | None = None) -> None:
        message = f"External service '{service}' unavailable"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"service": service})


class IdentityUnavailableError(ExternalServiceError):
    """Raised when the identity provider cannot resolve the caller."""

    code = "SYS_IDENTITY_UNAVAILABLE"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__("identity", reason)


# =============================================================================
# System Errors (500)
# =============================================================================


class SystemFailureError(DomainError):
    """Base class for infrastructure failures fatal to the current request."""

    code = "SYS_INTERNAL"
    http_status = 500
    kind = ErrorKind.SYSTEM


class DatabaseError(SystemFailureError):
    """Raised when the database is unreachable or a statement fails."""

    code = "SYS_DATABASE"

    def __init__(self, operation: str) -> None:
        super().__init__(f"Database operation failed: {operation}", {"operation": operation})


# =============================================================================
# Transaction signals (internal to the booking engine)
# =============================================================================


class RetryableTransactionError(Exception):
    """A transaction attempt failed transiently and may be re-run."""


class SerializationConflict(RetryableTransactionError):
    """The database aborted a transaction with a serialization failure."""


class TransactionTimeout(RetryableTransactionError):
    """A transaction attempt exceeded its statement or transaction timeout."""


def is_domain_error(error: BaseException) -> bool:
    """Check if an error belongs to the domain taxonomy."""
    return isinstance(error, DomainError)


def get_http_status(error: BaseException) -> int:
    """Get the HTTP status a calling layer should use for an error."""
    if isinstance(error, DomainError):
        return error.http_status
    return 500
