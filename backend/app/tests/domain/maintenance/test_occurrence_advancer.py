"""Unit tests for next-occurrence arithmetic and catch-up collapse."""

from datetime import date, timedelta

import pytest

from app.domain.maintenance.services.occurrence_advancer import OccurrenceAdvancer
from app.domain.shared.exceptions import ValidationError
from app.tests.factories import TODAY


@pytest.fixture
def advancer() -> OccurrenceAdvancer:
    return OccurrenceAdvancer()


class TestAdvance:
    def test_single_period_overdue(self, advancer):
        assert advancer.advance(date(2025, 1, 1), 30, TODAY) == date(2025, 1, 31)

    def test_due_today_moves_one_period(self, advancer):
        assert advancer.advance(TODAY, 1, TODAY) == date(2025, 1, 6)

    def test_landing_exactly_on_today_keeps_going(self, advancer):
        # 2025-01-01 + 2 * 2 days is 2025-01-05, which is not after today
        assert advancer.advance(date(2025, 1, 1), 2, TODAY) == date(2025, 1, 7)

    def test_future_date_still_moves_one_period(self, advancer):
        assert advancer.advance(date(2025, 1, 10), 7, TODAY) == date(2025, 1, 17)

    def test_collapses_missed_periods(self, advancer):
        next_due = TODAY - timedelta(days=30)

        result = advancer.advance(next_due, 7, TODAY)

        assert result == date(2025, 1, 10)
        assert advancer.missed_occurrences(next_due, 7, TODAY) == 4

    def test_long_pause(self, advancer):
        result = advancer.advance(date(2000, 1, 1), 1, TODAY)

        assert result == date(2025, 1, 6)

    @pytest.mark.parametrize("frequency", [1, 3, 7, 30, 365])
    @pytest.mark.parametrize("overdue_days", [0, 1, 6, 7, 8, 400])
    def test_result_is_first_occurrence_after_today(
        self, advancer, frequency, overdue_days
    ):
        next_due = TODAY - timedelta(days=overdue_days)

        result = advancer.advance(next_due, frequency, TODAY)

        assert result > TODAY
        assert result - timedelta(days=frequency) <= TODAY
        assert (result - next_due).days % frequency == 0


class TestMissedOccurrences:
    def test_nothing_missed_within_one_period(self, advancer):
        assert advancer.missed_occurrences(date(2025, 1, 1), 30, TODAY) == 0

    def test_nothing_missed_for_future_date(self, advancer):
        assert advancer.missed_occurrences(date(2025, 2, 1), 30, TODAY) == 0


class TestValidation:
    @pytest.mark.parametrize("frequency", [0, -1])
    def test_non_positive_frequency_is_rejected(self, advancer, frequency):
        with pytest.raises(ValidationError) as exc_info:
            advancer.advance(date(2025, 1, 1), frequency, TODAY)

        assert exc_info.value.error_code == "FREQUENCY_NOT_POSITIVE"
