"""
Due Evaluator

Decides whether a schedule is overdue, due today or upcoming. All date math
is done on whole days in a single reference time zone.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from ...shared.base import DomainService
from ..entities.preventive_schedule import PreventiveSchedule
from ..value_objects.due_evaluation import DueEvaluation
from ..value_objects.enums import DueStatus, ScheduleHealth

DEFAULT_DUE_SOON_DAYS = 7


class DueEvaluator(DomainService):
    """Pure due-status calculations for preventive schedules."""

    def __init__(
        self,
        timezone_name: str = "UTC",
        due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    ) -> None:
        self._zone = ZoneInfo(timezone_name)
        self._due_soon_days = due_soon_days

    @property
    def due_soon_days(self) -> int:
        return self._due_soon_days

    def normalize(self, value: date | datetime) -> date:
        """
        Truncate a date or datetime to its calendar day.

        Aware datetimes are first converted into the reference time zone;
        naive datetimes are taken to already be in it.
        """
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(self._zone)
            return value.date()
        return value

    def days_until(self, due: date | datetime, today: date | datetime) -> int:
        return (self.normalize(due) - self.normalize(today)).days

    def evaluate(
        self, schedule: PreventiveSchedule, today: date | datetime
    ) -> DueEvaluation:
        if schedule.next_due_date is None:
            return DueEvaluation.unknown()

        days = self.days_until(schedule.next_due_date, today)
        if days < 0:
            status = DueStatus.OVERDUE
        elif days == 0:
            status = DueStatus.DUE_TODAY
        else:
            status = DueStatus.UPCOMING
        return DueEvaluation(days_until_due=days, status=status)

    def is_due_for_generation(
        self, schedule: PreventiveSchedule, today: date | datetime
    ) -> bool:
        """Active and due today or overdue."""
        return schedule.active and self.evaluate(schedule, today).is_due

    def health(self, evaluation: DueEvaluation) -> ScheduleHealth:
        days = evaluation.days_until_due
        if days is None:
            return ScheduleHealth.UNKNOWN
        if days < 0:
            return ScheduleHealth.OVERDUE
        if days <= self._due_soon_days:
            return ScheduleHealth.DUE_SOON
        return ScheduleHealth.ON_TRACK
