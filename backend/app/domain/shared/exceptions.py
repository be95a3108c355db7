"""
Domain Exceptions

Defines custom exceptions for domain-specific errors with type discrimination.
These exceptions represent business rule violations, persistence faults and
collaborator failures raised inside the preventive maintenance engine.
"""

from datetime import date
from enum import Enum


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    REPOSITORY = "repository"
    CONCURRENCY = "concurrency"
    COLLABORATOR = "collaborator"
    PASS_ABORTED = "pass_aborted"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when domain validation rules are violated."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        full_message = f"Validation failed for field '{field_name}': {message}"
        details = details or {}
        details.update(
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
                "error_code": self.error_code,
            }
        )

        super().__init__(full_message, ErrorType.VALIDATION, details)

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "field": self.field_name,
            "value": str(self.value) if self.value is not None else None,
            "message": self.message,
            "error_code": self.error_code,
        }


class NotFoundError(DomainError):
    """Raised when requested entity is not found."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"{entity_type} with ID {entity_id} not found",
            ErrorType.NOT_FOUND,
            {"entity_type": entity_type, "entity_id": entity_id},
        )


class ScheduleNotFoundError(NotFoundError):
    """Raised when a preventive schedule is not found."""

    def __init__(self, schedule_id: str) -> None:
        super().__init__("PreventiveSchedule", schedule_id)


class LedgerError(DomainError):
    """Raised when the generation ledger cannot honour a request."""

    def __init__(
        self,
        message: str,
        schedule_id: str,
        occurrence_date: date,
    ) -> None:
        self.schedule_id = schedule_id
        self.occurrence_date = occurrence_date
        super().__init__(
            message,
            ErrorType.CONCURRENCY,
            {
                "schedule_id": schedule_id,
                "occurrence_date": occurrence_date.isoformat(),
            },
        )


class WorkOrderCreationError(DomainError):
    """Raised when the work order collaborator fails or times out."""

    def __init__(self, schedule_id: str, reason: str) -> None:
        self.schedule_id = schedule_id
        self.reason = reason
        super().__init__(
            f"Work order creation failed for schedule {schedule_id}: {reason}",
            ErrorType.COLLABORATOR,
            {"schedule_id": schedule_id, "reason": reason},
        )


class ScheduleUpdateError(DomainError):
    """Raised when an advanced next due date cannot be persisted."""

    def __init__(self, schedule_id: str, next_due_date: date, reason: str) -> None:
        self.schedule_id = schedule_id
        self.next_due_date = next_due_date
        self.reason = reason
        super().__init__(
            f"Could not advance schedule {schedule_id} to "
            f"{next_due_date.isoformat()}: {reason}",
            ErrorType.REPOSITORY,
            {
                "schedule_id": schedule_id,
                "next_due_date": next_due_date.isoformat(),
                "reason": reason,
            },
        )


class GenerationPassAbortedError(DomainError):
    """Raised when a due pass cannot run at all."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Due generation pass aborted: {reason}",
            ErrorType.PASS_ABORTED,
            {"reason": reason},
        )


class RetryExhaustedError(DomainError):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, operation: str, max_attempts: int, last_error: Exception) -> None:
        self.operation = operation
        self.max_attempts = max_attempts
        self.last_error = last_error
        super().__init__(
            f"Operation '{operation}' failed after {max_attempts} attempts: "
            f"{last_error}",
            ErrorType.REPOSITORY,
            {
                "operation": operation,
                "max_attempts": max_attempts,
                "last_error": str(last_error),
                "last_error_type": type(last_error).__name__,
            },
        )
