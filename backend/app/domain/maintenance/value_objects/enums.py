"""Domain enums for preventive maintenance."""

from enum import Enum


class DueStatus(str, Enum):
    """Due status of a schedule relative to an as-of date."""

    OVERDUE = "Overdue"
    DUE_TODAY = "Due Today"
    UPCOMING = "Upcoming"
    UNKNOWN = "Unknown"

    @property
    def is_due(self) -> bool:
        """Check if the status makes a schedule eligible for generation."""
        return self in {DueStatus.OVERDUE, DueStatus.DUE_TODAY}


class ScheduleHealth(str, Enum):
    """Coarse list-screen label for a schedule."""

    OVERDUE = "Overdue"
    DUE_SOON = "Due Soon"
    ON_TRACK = "On Track"
    UNKNOWN = "Unknown"


class WorkOrderPriority(str, Enum):
    """Work order priority levels."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class WorkOrderStatus(str, Enum):
    """Work order status values the engine writes."""

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class LedgerRecordState(str, Enum):
    """Lifecycle of a generation record."""

    RESERVED = "reserved"  # Claimed, work order not yet confirmed
    COMMITTED = "committed"  # Work order created and recorded


class GenerationOutcomeCode(str, Enum):
    """Per-schedule outcome codes reported by a due pass."""

    NOT_DUE = "NotDue"
    ALREADY_GENERATED = "AlreadyGenerated"
    WORK_ORDER_CREATION_FAILED = "WorkOrderCreationFailed"
    SCHEDULE_UPDATE_FAILED = "ScheduleUpdateFailed"
    LEDGER_COMMIT_FAILED = "LedgerCommitFailed"
    LEDGER_RESERVE_FAILED = "LedgerReserveFailed"
    STALE_RESERVATION = "StaleReservation"

    @property
    def is_error(self) -> bool:
        return self not in {
            GenerationOutcomeCode.NOT_DUE,
            GenerationOutcomeCode.ALREADY_GENERATED,
        }


class PassOutcome(str, Enum):
    """Aggregate outcome of a due pass."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"
