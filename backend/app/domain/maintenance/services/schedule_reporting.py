"""
Schedule Reporting

Read-only due status for list and detail screens. Never touches the ledger
and never writes anything, so it is safe to call as often as needed.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime

from ...shared.base import DomainService
from ..entities.preventive_schedule import PreventiveSchedule
from ..value_objects.due_evaluation import ScheduleDescription
from ..value_objects.enums import DueStatus
from .due_evaluator import DueEvaluator


class ScheduleReportingService(DomainService):
    def __init__(self, evaluator: DueEvaluator) -> None:
        self._evaluator = evaluator

    def describe_schedule(
        self, schedule: PreventiveSchedule, today: date | datetime
    ) -> ScheduleDescription:
        evaluation = self._evaluator.evaluate(schedule, today)
        return ScheduleDescription(
            schedule_id=schedule.id,
            status=evaluation.status,
            days_until_due=evaluation.days_until_due,
            health=self._evaluator.health(evaluation),
            due_for_generation=schedule.active and evaluation.is_due,
        )

    def describe_schedules(
        self, schedules: Iterable[PreventiveSchedule], today: date | datetime
    ) -> list[ScheduleDescription]:
        return [self.describe_schedule(schedule, today) for schedule in schedules]

    @staticmethod
    def summarize(descriptions: Iterable[ScheduleDescription]) -> dict[DueStatus, int]:
        """Count schedules per due status; every status is present."""
        counts = Counter(description.status for description in descriptions)
        return {status: counts.get(status, 0) for status in DueStatus}
