"""Builders for test data."""

from datetime import date, datetime, timezone

from app.core.retry_mechanisms import RetryConfig
from app.domain.maintenance.entities.preventive_schedule import PreventiveSchedule
from app.domain.shared.exceptions import ScheduleNotFoundError

TODAY = date(2025, 1, 5)
MORNING = datetime(2025, 1, 5, 8, 0, tzinfo=timezone.utc)


def make_schedule(
    title: str = "Grease conveyor bearings",
    asset_id: str = "asset-1",
    frequency_days: int = 30,
    next_due_date: date | None = date(2025, 1, 1),
    active: bool = True,
    store_id: str | None = None,
    schedule_id: str | None = None,
) -> PreventiveSchedule:
    return PreventiveSchedule.create(
        title=title,
        asset_id=asset_id,
        frequency_days=frequency_days,
        next_due_date=next_due_date,
        active=active,
        store_id=store_id,
        schedule_id=schedule_id,
    )


def no_sleep_retry(max_attempts: int = 3) -> RetryConfig:
    """Retry config that never waits between attempts."""
    return RetryConfig(
        max_attempts=max_attempts,
        jitter=False,
        stop_on_exceptions=(ScheduleNotFoundError,),
        sleep=lambda _: None,
    )


class MovableNow:
    """Ledger clock that tests move forward by hand."""

    def __init__(self, start: datetime = MORNING):
        self.value = start

    def __call__(self) -> datetime:
        return self.value
