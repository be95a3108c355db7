"""
PM Generation Service

Main orchestrator for preventive maintenance due passes. Walks every active
schedule, claims each due occurrence in the generation ledger, creates the
work order and advances the schedule. Each schedule is processed in
isolation: a failure on one is recorded in the report and never stops the
others.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime

from app.core.clock import Clock, get_clock
from app.core.observability import (
    PM_GENERATION_OUTCOMES,
    PM_GENERATION_PASS_DURATION,
    PM_GENERATION_PASSES,
    PM_LEDGER_CONFLICTS,
    get_logger,
    log_performance_metrics,
)
from app.core.retry_mechanisms import RetryConfig, execute_with_retry
from app.domain.shared.exceptions import (
    GenerationPassAbortedError,
    LedgerError,
    RetryExhaustedError,
    ScheduleNotFoundError,
    ScheduleUpdateError,
    WorkOrderCreationError,
)
from ..entities.preventive_schedule import PreventiveSchedule
from ..repositories.generation_ledger import GenerationLedger
from ..repositories.schedule_repository import PreventiveScheduleRepository
from ..repositories.work_order_repository import WorkOrderRepository
from ..value_objects.enums import GenerationOutcomeCode, WorkOrderPriority
from ..value_objects.generation import (
    FailedSchedule,
    GeneratedOccurrence,
    GenerationRecord,
    GenerationReport,
    SkippedSchedule,
    WorkOrderRequest,
)
from .due_evaluator import DueEvaluator
from .occurrence_advancer import OccurrenceAdvancer

logger = get_logger(__name__)


def _describe_error(error: Exception) -> str:
    return str(error) or type(error).__name__


@dataclass
class _ScheduleOutcome:
    bucket: str  # "generated" | "skipped" | "failed" | "needs_review"
    item: GeneratedOccurrence | SkippedSchedule | FailedSchedule


class PMGenerationService:
    """
    Due pass orchestrator.

    Per schedule the sequence is: evaluate, reserve, create, commit, advance.
    The ledger reservation is what makes concurrent passes safe; the
    schedule's ``next_due_date`` is only moved after the work order exists.
    """

    def __init__(
        self,
        schedule_repository: PreventiveScheduleRepository,
        work_order_repository: WorkOrderRepository,
        ledger: GenerationLedger,
        evaluator: DueEvaluator | None = None,
        advancer: OccurrenceAdvancer | None = None,
        clock: Clock | None = None,
        default_priority: WorkOrderPriority = WorkOrderPriority.MEDIUM,
        max_workers: int = 1,
        update_retry_config: RetryConfig | None = None,
    ) -> None:
        """
        Initialize the generation service.

        Args:
            schedule_repository: Schedule store
            work_order_repository: Work order collaborator
            ledger: Generation ledger guarding each occurrence
            evaluator: Due status calculations
            advancer: Next-occurrence arithmetic
            clock: Source of "today" when a pass has no explicit as-of date
            default_priority: Priority given to generated work orders
            max_workers: Schedules processed in parallel within one pass
            update_retry_config: Backoff for persisting the advanced date
        """
        self._schedules = schedule_repository
        self._work_orders = work_order_repository
        self._ledger = ledger
        self._evaluator = evaluator or DueEvaluator()
        self._advancer = advancer or OccurrenceAdvancer()
        self._clock = clock
        self._default_priority = default_priority
        self._max_workers = max(1, max_workers)
        self._update_retry_config = update_retry_config or RetryConfig(
            stop_on_exceptions=(ScheduleNotFoundError,)
        )

    @property
    def evaluator(self) -> DueEvaluator:
        return self._evaluator

    def resolve_today(self, today: date | datetime | None = None) -> date:
        if today is None:
            return (self._clock or get_clock()).today()
        return self._evaluator.normalize(today)

    def run_generation_pass(
        self,
        today: date | datetime | None = None,
        store_id: str | None = None,
    ) -> GenerationReport:
        """
        Generate one work order for every due occurrence.

        Args:
            today: As-of date; defaults to the clock's current date
            store_id: Restrict the pass to one store

        Returns:
            Report of generated, skipped, failed and needs-review schedules

        Raises:
            GenerationPassAbortedError: If the schedule store cannot be read
        """
        as_of = self.resolve_today(today)
        started = time.perf_counter()

        try:
            schedules = self._schedules.list_active(store_id=store_id)
        except Exception as e:
            PM_GENERATION_PASSES.labels(outcome="aborted").inc()
            logger.error(
                "Due pass aborted",
                as_of=as_of.isoformat(),
                store_id=store_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GenerationPassAbortedError(str(e)) from e

        logger.info(
            "Due pass started",
            as_of=as_of.isoformat(),
            store_id=store_id,
            schedule_count=len(schedules),
        )

        if self._max_workers > 1 and len(schedules) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                outcomes = list(
                    executor.map(lambda s: self._process_schedule(s, as_of), schedules)
                )
        else:
            outcomes = [self._process_schedule(s, as_of) for s in schedules]

        report = GenerationReport(as_of=as_of, store_id=store_id)
        for outcome in outcomes:
            getattr(report, outcome.bucket).append(outcome.item)
            PM_GENERATION_OUTCOMES.labels(outcome=outcome.bucket).inc()

        duration = time.perf_counter() - started
        PM_GENERATION_PASS_DURATION.observe(duration)
        PM_GENERATION_PASSES.labels(outcome=report.outcome.value).inc()
        log_performance_metrics(
            "pm_due_pass",
            duration,
            {"as_of": as_of.isoformat(), "processed": report.processed},
        )
        logger.info(
            "Due pass completed",
            as_of=as_of.isoformat(),
            store_id=store_id,
            outcome=report.outcome.value,
            summary=report.summary(),
        )
        return report

    def _process_schedule(
        self, schedule: PreventiveSchedule, as_of: date
    ) -> _ScheduleOutcome:
        if not self._evaluator.is_due_for_generation(schedule, as_of):
            return _ScheduleOutcome(
                "skipped",
                SkippedSchedule(
                    schedule_id=schedule.id, reason=GenerationOutcomeCode.NOT_DUE
                ),
            )

        occurrence = self._evaluator.normalize(schedule.next_due_date)

        try:
            granted = self._ledger.try_reserve(schedule.id, occurrence)
        except Exception as e:
            logger.error(
                "Ledger reservation failed",
                schedule_id=schedule.id,
                occurrence_date=occurrence.isoformat(),
                error=str(e),
            )
            return self._failed(
                schedule, occurrence, GenerationOutcomeCode.LEDGER_RESERVE_FAILED, e
            )

        if not granted:
            PM_LEDGER_CONFLICTS.inc()
            stale = self._find_stale_reservation(schedule.id, occurrence)
            if stale is not None:
                logger.warning(
                    "Stale reservation needs review",
                    schedule_id=schedule.id,
                    occurrence_date=occurrence.isoformat(),
                    reserved_at=stale.reserved_at.isoformat(),
                )
                return self._failed(
                    schedule,
                    occurrence,
                    GenerationOutcomeCode.STALE_RESERVATION,
                    LedgerError(
                        f"Reservation open since {stale.reserved_at.isoformat()}; "
                        "check whether its work order exists before discarding it",
                        schedule.id,
                        occurrence,
                    ),
                    bucket="needs_review",
                )
            logger.info(
                "Occurrence already generated",
                schedule_id=schedule.id,
                occurrence_date=occurrence.isoformat(),
            )
            return _ScheduleOutcome(
                "skipped",
                SkippedSchedule(
                    schedule_id=schedule.id,
                    reason=GenerationOutcomeCode.ALREADY_GENERATED,
                    occurrence_date=occurrence,
                ),
            )

        request = WorkOrderRequest(
            title=schedule.work_order_title,
            asset_id=schedule.asset_id,
            store_id=schedule.store_id,
            due_date=occurrence,
            priority=self._default_priority,
            description=f"Preventive maintenance for asset {schedule.asset_id}",
            schedule_id=schedule.id,
        )

        try:
            work_order_id = self._work_orders.create(request)
        except Exception as e:
            self._release_quietly(schedule.id, occurrence)
            logger.warning(
                "Work order creation failed",
                schedule_id=schedule.id,
                occurrence_date=occurrence.isoformat(),
                error=str(e),
                error_type=type(e).__name__,
            )
            return self._failed(
                schedule,
                occurrence,
                GenerationOutcomeCode.WORK_ORDER_CREATION_FAILED,
                WorkOrderCreationError(schedule.id, _describe_error(e)),
            )

        commit_error: Exception | None = None
        try:
            self._ledger.commit(schedule.id, occurrence, work_order_id)
        except Exception as e:
            # Reservation stays in place so nothing can generate this occurrence again
            commit_error = e
            logger.error(
                "Ledger commit failed",
                schedule_id=schedule.id,
                occurrence_date=occurrence.isoformat(),
                work_order_id=work_order_id,
                error=str(e),
            )

        next_due = self._advancer.advance(occurrence, schedule.frequency_days, as_of)
        missed = self._advancer.missed_occurrences(
            occurrence, schedule.frequency_days, as_of
        )

        try:
            execute_with_retry(
                self._schedules.update_next_due_date,
                "advance_schedule",
                self._update_retry_config,
                schedule.id,
                next_due,
            )
        except RetryExhaustedError as e:
            logger.error(
                "Schedule update failed after work order creation",
                schedule_id=schedule.id,
                occurrence_date=occurrence.isoformat(),
                work_order_id=work_order_id,
                next_due_date=next_due.isoformat(),
                error=str(e.last_error),
            )
            return self._failed(
                schedule,
                occurrence,
                GenerationOutcomeCode.SCHEDULE_UPDATE_FAILED,
                ScheduleUpdateError(
                    schedule.id, next_due, _describe_error(e.last_error)
                ),
                work_order_id=work_order_id,
                bucket="needs_review",
            )

        if commit_error is not None:
            return self._failed(
                schedule,
                occurrence,
                GenerationOutcomeCode.LEDGER_COMMIT_FAILED,
                commit_error,
                work_order_id=work_order_id,
                bucket="needs_review",
            )

        if missed:
            logger.info(
                "Collapsed missed occurrences",
                schedule_id=schedule.id,
                missed_occurrences=missed,
                next_due_date=next_due.isoformat(),
            )
        logger.info(
            "Work order generated",
            schedule_id=schedule.id,
            occurrence_date=occurrence.isoformat(),
            work_order_id=work_order_id,
            next_due_date=next_due.isoformat(),
        )
        return _ScheduleOutcome(
            "generated",
            GeneratedOccurrence(
                schedule_id=schedule.id,
                occurrence_date=occurrence,
                work_order_id=work_order_id,
                next_due_date=next_due,
                missed_occurrences=missed,
            ),
        )

    def _release_quietly(self, schedule_id: str, occurrence: date) -> None:
        try:
            self._ledger.release(schedule_id, occurrence)
        except Exception as e:
            # An unreleased reservation is reported for review once it goes stale
            logger.error(
                "Ledger release failed",
                schedule_id=schedule_id,
                occurrence_date=occurrence.isoformat(),
                error=str(e),
            )

    def _find_stale_reservation(
        self, schedule_id: str, occurrence: date
    ) -> GenerationRecord | None:
        try:
            return self._ledger.find_stale(schedule_id, occurrence)
        except Exception as e:
            logger.error(
                "Stale reservation lookup failed",
                schedule_id=schedule_id,
                occurrence_date=occurrence.isoformat(),
                error=str(e),
            )
            return None

    @staticmethod
    def _failed(
        schedule: PreventiveSchedule,
        occurrence: date,
        code: GenerationOutcomeCode,
        error: Exception,
        work_order_id: str | None = None,
        bucket: str = "failed",
    ) -> _ScheduleOutcome:
        return _ScheduleOutcome(
            bucket,
            FailedSchedule(
                schedule_id=schedule.id,
                code=code,
                error=_describe_error(error),
                occurrence_date=occurrence,
                work_order_id=work_order_id,
            ),
        )
