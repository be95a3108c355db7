"""
Tests for the PM Generation Service

Runs due passes against the in-memory adapters and injects collaborator
failures with unittest.mock to check ledger, advancement and report handling.
"""

import threading
from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest

from app.core.clock import FixedClock
from app.domain.maintenance.services.pm_generation_service import PMGenerationService
from app.domain.maintenance.value_objects.enums import (
    GenerationOutcomeCode,
    LedgerRecordState,
    PassOutcome,
    WorkOrderPriority,
)
from app.domain.shared.exceptions import GenerationPassAbortedError, LedgerError
from app.infrastructure.memory import (
    InMemoryGenerationLedger,
    InMemoryPreventiveScheduleRepository,
    InMemoryWorkOrderRepository,
)
from app.tests.factories import TODAY, MovableNow, make_schedule, no_sleep_retry


class FlakyWorkOrderRepository(InMemoryWorkOrderRepository):
    """Fails creation for the listed assets."""

    def __init__(self, failing_assets: set[str], error: Exception | None = None):
        super().__init__()
        self.failing_assets = failing_assets
        self.error = error or RuntimeError("work order service unavailable")

    def create(self, request):
        if request.asset_id in self.failing_assets:
            raise self.error
        return super().create(request)


class SlowWorkOrderRepository(InMemoryWorkOrderRepository):
    """Runs a hook inside the first creation call, before the work order exists."""

    def __init__(self, during_first_create):
        super().__init__()
        self.during_first_create = during_first_create
        self.calls = 0

    def create(self, request):
        self.calls += 1
        if self.calls == 1:
            self.during_first_create()
        return super().create(request)

class TestEndToEnd:
    """Schedule due 2025-01-01, every 30 days, evaluated on 2025-01-05."""

    def test_overdue_schedule_generates_one_work_order(
        self, generation_service, schedule_repo, work_order_repo, ledger
    ):
        schedule = schedule_repo.add(make_schedule(store_id="store-9"))

        report = generation_service.run_generation_pass()

        assert report.as_of == TODAY
        assert len(report.generated) == 1
        generated = report.generated[0]
        assert generated.schedule_id == schedule.id
        assert generated.occurrence_date == date(2025, 1, 1)
        assert generated.next_due_date == date(2025, 1, 31)
        assert generated.missed_occurrences == 0

        request = work_order_repo.created[generated.work_order_id]
        assert request.title == "PM: Grease conveyor bearings"
        assert request.asset_id == "asset-1"
        assert request.store_id == "store-9"
        assert request.due_date == date(2025, 1, 1)
        assert request.priority == WorkOrderPriority.MEDIUM
        assert request.schedule_id == schedule.id

        assert schedule_repo.get_by_id(schedule.id).next_due_date == date(2025, 1, 31)
        record = ledger.get(schedule.id, date(2025, 1, 1))
        assert record.state == LedgerRecordState.COMMITTED
        assert record.work_order_id == generated.work_order_id

        assert report.success
        assert report.outcome == PassOutcome.SUCCESS
        assert report.summary() == "1 generated, 0 failed, 0 skipped"

    def test_second_pass_finds_nothing_due(
        self, generation_service, schedule_repo, work_order_repo
    ):
        schedule_repo.add(make_schedule())

        generation_service.run_generation_pass()
        report = generation_service.run_generation_pass()

        assert report.generated == []
        assert [s.reason for s in report.skipped] == [GenerationOutcomeCode.NOT_DUE]
        assert len(work_order_repo.created) == 1


class TestIdempotence:
    def test_ledger_blocks_regeneration_when_date_was_not_advanced(
        self, generation_service, schedule_repo, work_order_repo
    ):
        schedule = schedule_repo.add(make_schedule())

        with patch.object(
            schedule_repo,
            "update_next_due_date",
            side_effect=RuntimeError("write timeout"),
        ):
            first = generation_service.run_generation_pass()

        second = generation_service.run_generation_pass()

        assert first.needs_review[0].code == GenerationOutcomeCode.SCHEDULE_UPDATE_FAILED
        assert second.generated == []
        assert second.skipped[0].reason == GenerationOutcomeCode.ALREADY_GENERATED
        assert second.skipped[0].occurrence_date == date(2025, 1, 1)
        assert len(work_order_repo.for_schedule(schedule.id)) == 1

    def test_repeated_passes_on_the_same_day(
        self, generation_service, schedule_repo, work_order_repo
    ):
        for i in range(3):
            schedule_repo.add(make_schedule(asset_id=f"asset-{i}"))

        for _ in range(5):
            generation_service.run_generation_pass()

        assert len(work_order_repo.created) == 3


class TestConcurrency:
    def test_concurrent_passes_generate_at_most_once(
        self, schedule_repo, work_order_repo, ledger, clock
    ):
        schedules = [
            schedule_repo.add(make_schedule(asset_id=f"asset-{i}", frequency_days=7))
            for i in range(5)
        ]
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_order_repo,
            ledger=ledger,
            clock=clock,
            update_retry_config=no_sleep_retry(),
        )
        barrier = threading.Barrier(8)
        errors: list[Exception] = []

        def run_pass():
            barrier.wait()
            try:
                service.run_generation_pass()
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

        threads = [threading.Thread(target=run_pass) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        for schedule in schedules:
            assert len(work_order_repo.for_schedule(schedule.id)) == 1
            assert schedule_repo.get_by_id(schedule.id).next_due_date > TODAY

    def test_thread_pool_pass_keeps_listing_order(
        self, schedule_repo, work_order_repo, ledger, clock
    ):
        schedules = [
            schedule_repo.add(make_schedule(asset_id=f"asset-{i}")) for i in range(6)
        ]
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_order_repo,
            ledger=ledger,
            clock=clock,
            max_workers=4,
            update_retry_config=no_sleep_retry(),
        )

        report = service.run_generation_pass()

        assert [g.schedule_id for g in report.generated] == [s.id for s in schedules]
        assert len(work_order_repo.created) == 6


class TestStaleReservations:
    def test_slow_creation_outliving_the_ttl_is_not_duplicated(
        self, schedule_repo, clock
    ):
        now = MovableNow()
        ledger = InMemoryGenerationLedger(reservation_ttl_seconds=900, now=now)
        overlapping = []

        def overlapping_pass():
            now.value += timedelta(seconds=1000)
            overlapping.append(service.run_generation_pass())

        work_orders = SlowWorkOrderRepository(overlapping_pass)
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_orders,
            ledger=ledger,
            clock=clock,
            update_retry_config=no_sleep_retry(),
        )
        schedule = schedule_repo.add(make_schedule())

        report = service.run_generation_pass()

        assert len(work_orders.for_schedule(schedule.id)) == 1
        (inner,) = overlapping
        assert inner.generated == []
        assert [r.code for r in inner.needs_review] == [
            GenerationOutcomeCode.STALE_RESERVATION
        ]
        assert inner.needs_review[0].occurrence_date == date(2025, 1, 1)
        (generated,) = report.generated
        record = ledger.get(schedule.id, date(2025, 1, 1))
        assert record.is_committed
        assert record.work_order_id == generated.work_order_id

    def test_abandoned_reservation_is_held_until_discarded(
        self, schedule_repo, work_order_repo, clock
    ):
        now = MovableNow()
        ledger = InMemoryGenerationLedger(reservation_ttl_seconds=900, now=now)
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_order_repo,
            ledger=ledger,
            clock=clock,
            update_retry_config=no_sleep_retry(),
        )
        schedule = schedule_repo.add(make_schedule())
        # Left behind by a pass that died before creating its work order
        ledger.try_reserve(schedule.id, date(2025, 1, 1))

        fresh = service.run_generation_pass()
        now.value += timedelta(hours=1)
        stale = service.run_generation_pass()

        assert fresh.skipped[0].reason == GenerationOutcomeCode.ALREADY_GENERATED
        assert stale.needs_review[0].code == GenerationOutcomeCode.STALE_RESERVATION
        assert not stale.success
        assert work_order_repo.created == {}

        assert ledger.discard_stale(schedule.id, date(2025, 1, 1))
        recovered = service.run_generation_pass()

        assert [g.occurrence_date for g in recovered.generated] == [date(2025, 1, 1)]
        assert len(work_order_repo.for_schedule(schedule.id)) == 1

class TestCatchUp:
    def test_long_overdue_schedule_collapses_to_one_work_order(
        self, generation_service, schedule_repo, work_order_repo
    ):
        schedule = schedule_repo.add(
            make_schedule(frequency_days=7, next_due_date=TODAY - timedelta(days=30))
        )

        report = generation_service.run_generation_pass()

        assert len(work_order_repo.created) == 1
        generated = report.generated[0]
        assert generated.occurrence_date == date(2024, 12, 6)
        assert generated.next_due_date == date(2025, 1, 10)
        assert generated.missed_occurrences == 4
        assert schedule_repo.get_by_id(schedule.id).next_due_date == date(2025, 1, 10)


class TestDayGranularity:
    def test_time_of_day_does_not_matter(self, generation_service, schedule_repo):
        due_today = schedule_repo.add(make_schedule(next_due_date=date(2025, 1, 5)))
        tomorrow = schedule_repo.add(
            make_schedule(asset_id="asset-2", next_due_date=date(2025, 1, 6))
        )

        report = generation_service.run_generation_pass(
            today=datetime(2025, 1, 5, 23, 59, 59)
        )

        assert [g.schedule_id for g in report.generated] == [due_today.id]
        assert [s.schedule_id for s in report.skipped] == [tomorrow.id]

    def test_explicit_date_overrides_clock(self, generation_service, schedule_repo):
        schedule_repo.add(make_schedule(next_due_date=date(2025, 2, 1)))

        report = generation_service.run_generation_pass(today=date(2025, 2, 1))

        assert report.as_of == date(2025, 2, 1)
        assert report.generated[0].next_due_date == date(2025, 3, 3)

    def test_clock_supplies_today(self, schedule_repo, work_order_repo, ledger):
        clock = FixedClock(date(2025, 1, 31))
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_order_repo,
            ledger=ledger,
            clock=clock,
        )
        schedule_repo.add(make_schedule(next_due_date=date(2025, 1, 31)))

        assert service.run_generation_pass().as_of == date(2025, 1, 31)


class TestFailureIsolation:
    def test_one_failing_schedule_does_not_stop_the_others(
        self, schedule_repo, ledger, clock
    ):
        work_orders = FlakyWorkOrderRepository(failing_assets={"asset-2"})
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_orders,
            ledger=ledger,
            clock=clock,
            update_retry_config=no_sleep_retry(),
        )
        first = schedule_repo.add(make_schedule(asset_id="asset-1"))
        second = schedule_repo.add(make_schedule(asset_id="asset-2"))
        third = schedule_repo.add(make_schedule(asset_id="asset-3"))

        report = service.run_generation_pass()

        assert {g.schedule_id for g in report.generated} == {first.id, third.id}
        assert len(report.failed) == 1
        failed = report.failed[0]
        assert failed.schedule_id == second.id
        assert failed.code == GenerationOutcomeCode.WORK_ORDER_CREATION_FAILED
        assert "unavailable" in failed.error
        assert report.outcome == PassOutcome.PARTIAL
        assert report.summary() == "2 generated, 1 failed, 0 skipped"

        # Failed occurrence is left for the next pass
        assert schedule_repo.get_by_id(second.id).next_due_date == date(2025, 1, 1)
        assert ledger.get(second.id, date(2025, 1, 1)) is None

        work_orders.failing_assets.clear()
        retry = service.run_generation_pass()

        assert [g.schedule_id for g in retry.generated] == [second.id]
        assert len(work_orders.created) == 3

    def test_collaborator_timeout_is_a_failure(self, schedule_repo, ledger, clock):
        work_orders = FlakyWorkOrderRepository(
            failing_assets={"asset-1"}, error=TimeoutError()
        )
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_orders,
            ledger=ledger,
            clock=clock,
        )
        schedule_repo.add(make_schedule())

        report = service.run_generation_pass()

        assert report.failed[0].code == GenerationOutcomeCode.WORK_ORDER_CREATION_FAILED
        assert report.failed[0].error.endswith(": TimeoutError")
        assert report.outcome == PassOutcome.FAILURE

    def test_schedule_update_is_retried(
        self, generation_service, schedule_repo, work_order_repo
    ):
        schedule = schedule_repo.add(make_schedule())
        real_update = schedule_repo.update_next_due_date
        calls = []

        def flaky_update(schedule_id, next_due_date):
            calls.append(next_due_date)
            if len(calls) < 3:
                raise RuntimeError("deadlock detected")
            real_update(schedule_id, next_due_date)

        with patch.object(
            schedule_repo, "update_next_due_date", side_effect=flaky_update
        ):
            report = generation_service.run_generation_pass()

        assert len(calls) == 3
        assert len(report.generated) == 1
        assert report.needs_review == []
        assert schedule_repo.get_by_id(schedule.id).next_due_date == date(2025, 1, 31)

    def test_exhausted_schedule_update_needs_review(
        self, generation_service, schedule_repo, work_order_repo, ledger
    ):
        schedule = schedule_repo.add(make_schedule())

        with patch.object(
            schedule_repo,
            "update_next_due_date",
            side_effect=RuntimeError("database unavailable"),
        ) as update:
            report = generation_service.run_generation_pass()

        assert update.call_count == 3
        assert report.generated == []
        review = report.needs_review[0]
        assert review.code == GenerationOutcomeCode.SCHEDULE_UPDATE_FAILED
        assert review.work_order_id in work_order_repo.created
        assert ledger.get(schedule.id, date(2025, 1, 1)).is_committed
        assert not report.success
        assert report.summary() == "0 generated, 0 failed, 0 skipped, 1 need review"

    def test_commit_failure_needs_review_and_keeps_reservation(
        self, generation_service, schedule_repo, work_order_repo, ledger
    ):
        schedule = schedule_repo.add(make_schedule())

        with patch.object(
            ledger,
            "commit",
            side_effect=LedgerError("lost connection", schedule.id, date(2025, 1, 1)),
        ):
            report = generation_service.run_generation_pass()

        review = report.needs_review[0]
        assert review.code == GenerationOutcomeCode.LEDGER_COMMIT_FAILED
        assert review.work_order_id in work_order_repo.created
        assert schedule_repo.get_by_id(schedule.id).next_due_date == date(2025, 1, 31)
        assert ledger.get(schedule.id, date(2025, 1, 1)).state == LedgerRecordState.RESERVED

    def test_reserve_failure_creates_nothing(
        self, generation_service, schedule_repo, work_order_repo, ledger
    ):
        schedule_repo.add(make_schedule())

        with patch.object(
            ledger, "try_reserve", side_effect=RuntimeError("ledger offline")
        ):
            report = generation_service.run_generation_pass()

        assert report.failed[0].code == GenerationOutcomeCode.LEDGER_RESERVE_FAILED
        assert work_order_repo.created == {}

    def test_listing_failure_aborts_the_pass(
        self, generation_service, schedule_repo, work_order_repo
    ):
        schedule_repo.add(make_schedule())

        with patch.object(
            schedule_repo, "list_active", side_effect=RuntimeError("connection refused")
        ):
            with pytest.raises(GenerationPassAbortedError) as exc_info:
                generation_service.run_generation_pass()

        assert "connection refused" in exc_info.value.message
        assert exc_info.value.to_dict()["type"] == "pass_aborted"
        assert work_order_repo.created == {}


class TestScope:
    def test_inactive_and_upcoming_schedules_touch_nothing(
        self, generation_service, schedule_repo, work_order_repo, ledger
    ):
        inactive = schedule_repo.add(make_schedule(active=False))
        upcoming = schedule_repo.add(
            make_schedule(asset_id="asset-2", next_due_date=date(2025, 2, 1))
        )

        report = generation_service.run_generation_pass()

        assert [s.schedule_id for s in report.skipped] == [upcoming.id]
        assert report.processed == 1
        assert work_order_repo.created == {}
        assert ledger.history(inactive.id) == []
        assert ledger.history(upcoming.id) == []
        assert schedule_repo.get_by_id(upcoming.id).next_due_date == date(2025, 2, 1)

    def test_store_filter(self, generation_service, schedule_repo, work_order_repo):
        mine = schedule_repo.add(make_schedule(store_id="store-1"))
        schedule_repo.add(make_schedule(asset_id="asset-2", store_id="store-2"))

        report = generation_service.run_generation_pass(store_id="store-1")

        assert report.store_id == "store-1"
        assert [g.schedule_id for g in report.generated] == [mine.id]
        assert len(work_order_repo.created) == 1

    def test_configured_priority(self, schedule_repo, work_order_repo, ledger, clock):
        service = PMGenerationService(
            schedule_repository=schedule_repo,
            work_order_repository=work_order_repo,
            ledger=ledger,
            clock=clock,
            default_priority=WorkOrderPriority.HIGH,
        )
        schedule_repo.add(make_schedule())

        service.run_generation_pass()

        (request,) = work_order_repo.created.values()
        assert request.priority == WorkOrderPriority.HIGH

    def test_empty_pass_is_a_success(self, generation_service):
        report = generation_service.run_generation_pass()

        assert report.processed == 0
        assert report.outcome == PassOutcome.SUCCESS


def test_services_share_nothing_between_stores():
    """Two independent sets of stores never see each other's schedules."""
    first = InMemoryPreventiveScheduleRepository([make_schedule(schedule_id="a")])
    second = InMemoryPreventiveScheduleRepository()

    assert [s.id for s in first.list_active()] == ["a"]
    assert second.list_active() == []
    assert InMemoryGenerationLedger().history("a") == []
