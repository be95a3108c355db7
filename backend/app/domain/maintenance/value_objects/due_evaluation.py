"""Value objects produced by due evaluation."""

from pydantic import Field

from ...shared.base import ValueObject
from .enums import DueStatus, ScheduleHealth


class DueEvaluation(ValueObject):
    """Whole-day distance to a schedule's next occurrence."""

    days_until_due: int | None = None
    status: DueStatus = DueStatus.UNKNOWN

    @property
    def is_due(self) -> bool:
        return self.status.is_due

    @classmethod
    def unknown(cls) -> "DueEvaluation":
        return cls(days_until_due=None, status=DueStatus.UNKNOWN)


class ScheduleDescription(ValueObject):
    """Read-side view of a schedule's due status for list and detail screens."""

    schedule_id: str
    status: DueStatus
    days_until_due: int | None = None
    health: ScheduleHealth = ScheduleHealth.UNKNOWN
    due_for_generation: bool = Field(
        default=False, description="Active and due today or overdue"
    )
