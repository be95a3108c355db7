"""
FastAPI dependency injection for the preventive maintenance API.

Route handlers receive repositories and services through these providers.
Tests replace ``get_session_factory`` or ``get_clock_dep`` with
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from app.core.clock import Clock, get_clock
from app.core.db import get_engine, session_factory_for
from app.domain.maintenance.services.pm_generation_service import PMGenerationService
from app.domain.maintenance.services.schedule_reporting import (
    ScheduleReportingService,
)
from app.infrastructure.database.repositories import (
    SqlGenerationLedger,
    SqlPreventiveScheduleRepository,
)
from app.infrastructure.database.service_dependencies import (
    SessionFactory,
    build_generation_ledger,
    build_generation_service,
    build_reporting_service,
)


def get_session_factory() -> SessionFactory:
    return session_factory_for(get_engine())


def get_clock_dep() -> Clock:
    return get_clock()


SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]
ClockDep = Annotated[Clock, Depends(get_clock_dep)]


def get_schedule_repository(
    session_factory: SessionFactoryDep,
) -> SqlPreventiveScheduleRepository:
    return SqlPreventiveScheduleRepository(session_factory)


def get_generation_ledger(session_factory: SessionFactoryDep) -> SqlGenerationLedger:
    return build_generation_ledger(session_factory)


def get_generation_service(
    session_factory: SessionFactoryDep, clock: ClockDep
) -> PMGenerationService:
    """Get PM Generation Service with proper repository injection."""
    return build_generation_service(session_factory, clock=clock)


def get_reporting_service() -> ScheduleReportingService:
    return build_reporting_service()


# Type annotations for dependency injection
ScheduleRepositoryDep = Annotated[
    SqlPreventiveScheduleRepository, Depends(get_schedule_repository)
]
GenerationLedgerDep = Annotated[SqlGenerationLedger, Depends(get_generation_ledger)]
GenerationServiceDep = Annotated[
    PMGenerationService, Depends(get_generation_service)
]
ReportingServiceDep = Annotated[
    ScheduleReportingService, Depends(get_reporting_service)
]
