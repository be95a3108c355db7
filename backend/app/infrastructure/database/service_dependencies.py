"""
Service wiring for the preventive maintenance engine.

Builds domain services from settings and a session factory so the API, the
Celery task and the command-line script all run the same configuration.
"""

from collections.abc import Callable

from sqlmodel import Session

from app.core.clock import Clock
from app.core.config import settings
from app.core.retry_mechanisms import RetryConfig
from app.domain.maintenance.services.due_evaluator import DueEvaluator
from app.domain.maintenance.services.pm_generation_service import PMGenerationService
from app.domain.maintenance.services.schedule_reporting import (
    ScheduleReportingService,
)
from app.domain.maintenance.value_objects.enums import WorkOrderPriority
from app.domain.shared.exceptions import ScheduleNotFoundError

from .repositories import (
    SqlGenerationLedger,
    SqlPreventiveScheduleRepository,
    SqlWorkOrderRepository,
)

SessionFactory = Callable[[], Session]


def build_due_evaluator() -> DueEvaluator:
    return DueEvaluator(
        timezone_name=settings.PM_REFERENCE_TIMEZONE,
        due_soon_days=settings.PM_DUE_SOON_DAYS,
    )


def build_update_retry_config() -> RetryConfig:
    """Backoff used when persisting an advanced next-due date."""
    return RetryConfig(
        max_attempts=settings.PM_SCHEDULE_UPDATE_MAX_ATTEMPTS,
        base_delay_seconds=settings.PM_SCHEDULE_UPDATE_BASE_DELAY,
        stop_on_exceptions=(ScheduleNotFoundError,),
    )


def build_generation_ledger(session_factory: SessionFactory) -> SqlGenerationLedger:
    return SqlGenerationLedger(
        session_factory,
        reservation_ttl_seconds=settings.PM_RESERVATION_TTL_SECONDS,
    )


def build_generation_service(
    session_factory: SessionFactory, clock: Clock | None = None
) -> PMGenerationService:
    """Get a PM Generation Service backed by the SQL stores."""
    return PMGenerationService(
        schedule_repository=SqlPreventiveScheduleRepository(session_factory),
        work_order_repository=SqlWorkOrderRepository(session_factory),
        ledger=build_generation_ledger(session_factory),
        evaluator=build_due_evaluator(),
        clock=clock,
        default_priority=WorkOrderPriority(settings.PM_DEFAULT_PRIORITY),
        max_workers=settings.PM_GENERATION_MAX_WORKERS,
        update_retry_config=build_update_retry_config(),
    )


def build_reporting_service() -> ScheduleReportingService:
    return ScheduleReportingService(build_due_evaluator())
