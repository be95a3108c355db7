"""
Unit Tests for the PreventiveSchedule Entity

Tests creation rules, forward-only advancement and activation.
"""

from datetime import date

import pytest

from app.domain.maintenance.entities.preventive_schedule import PreventiveSchedule
from app.domain.shared.exceptions import ValidationError
from app.tests.factories import make_schedule


class TestScheduleCreation:
    """Test schedule creation and validation."""

    def test_create_valid_schedule(self):
        schedule = PreventiveSchedule.create(
            title="  Replace HVAC filter ",
            asset_id="hvac-7",
            frequency_days=90,
            next_due_date=date(2025, 3, 1),
            store_id="store-1",
        )

        assert schedule.title == "Replace HVAC filter"
        assert schedule.asset_id == "hvac-7"
        assert schedule.frequency_days == 90
        assert schedule.active
        assert schedule.store_id == "store-1"
        assert schedule.id
        assert schedule.is_valid()

    def test_explicit_id_is_kept(self):
        assert make_schedule(schedule_id="pm-1").id == "pm-1"

    @pytest.mark.parametrize(
        ("overrides", "error_code"),
        [
            ({"title": "   "}, "TITLE_REQUIRED"),
            ({"asset_id": ""}, "ASSET_REQUIRED"),
            ({"frequency_days": 0}, "FREQUENCY_NOT_POSITIVE"),
            ({"frequency_days": -5}, "FREQUENCY_NOT_POSITIVE"),
            ({"next_due_date": None}, "NEXT_DUE_DATE_REQUIRED"),
        ],
    )
    def test_invalid_input_raises_validation_error(self, overrides, error_code):
        with pytest.raises(ValidationError) as exc_info:
            make_schedule(**overrides)

        assert exc_info.value.error_code == error_code
        assert exc_info.value.to_dict()["type"] == "validation"

    def test_inactive_schedule_may_have_no_date(self):
        schedule = make_schedule(next_due_date=None, active=False)

        assert schedule.next_due_date is None
        assert schedule.is_valid()

    def test_work_order_title(self):
        assert make_schedule(title="Check belts").work_order_title == "PM: Check belts"


class TestScheduleLifecycle:
    def test_advance_moves_forward(self):
        schedule = make_schedule(next_due_date=date(2025, 1, 1))

        schedule.advance_to(date(2025, 1, 31))

        assert schedule.next_due_date == date(2025, 1, 31)
        assert schedule.updated_at is not None

    @pytest.mark.parametrize("target", [date(2025, 1, 1), date(2024, 12, 1)])
    def test_advance_never_moves_backwards(self, target):
        schedule = make_schedule(next_due_date=date(2025, 1, 1))

        with pytest.raises(ValidationError) as exc_info:
            schedule.advance_to(target)

        assert exc_info.value.error_code == "NEXT_DUE_DATE_NOT_FORWARD"
        assert schedule.next_due_date == date(2025, 1, 1)

    def test_deactivate_and_reactivate(self):
        schedule = make_schedule()

        schedule.deactivate()
        assert not schedule.active

        schedule.activate(next_due_date=date(2025, 6, 1))
        assert schedule.active
        assert schedule.next_due_date == date(2025, 6, 1)

    def test_activate_without_date_is_rejected(self):
        schedule = make_schedule(next_due_date=None, active=False)

        with pytest.raises(ValidationError):
            schedule.activate()

        assert not schedule.active

    def test_entities_compare_by_id(self):
        first = make_schedule(schedule_id="pm-1")
        second = make_schedule(schedule_id="pm-1", title="Other")

        assert first == second
        assert len({first, second}) == 1
