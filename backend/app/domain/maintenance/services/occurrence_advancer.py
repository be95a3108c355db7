"""
Occurrence Advancer

Moves a schedule past an occurrence that has just been generated. Missed
periods are collapsed: a schedule that was not evaluated for a long time
gets one backlog work order and resumes on its regular cadence from the
first date after today.
"""

from datetime import date, timedelta

from ...shared.base import DomainService
from ...shared.exceptions import ValidationError


class OccurrenceAdvancer(DomainService):
    """Next-occurrence arithmetic for frequency-based schedules."""

    @staticmethod
    def _periods_to_skip(next_due_date: date, frequency_days: int, today: date) -> int:
        if frequency_days < 1:
            raise ValidationError(
                "frequency_days",
                frequency_days,
                "Frequency must be a positive number of days",
                "FREQUENCY_NOT_POSITIVE",
            )
        elapsed = (today - next_due_date).days
        if elapsed < 0:
            return 1
        return elapsed // frequency_days + 1

    def advance(self, next_due_date: date, frequency_days: int, today: date) -> date:
        """
        Return the first occurrence strictly after ``today``.

        At least one period is always added, since ``next_due_date`` is the
        occurrence that was just generated.
        """
        periods = self._periods_to_skip(next_due_date, frequency_days, today)
        return next_due_date + timedelta(days=periods * frequency_days)

    def missed_occurrences(
        self, next_due_date: date, frequency_days: int, today: date
    ) -> int:
        """Number of occurrences collapsed away by ``advance``."""
        return self._periods_to_skip(next_due_date, frequency_days, today) - 1
