"""Shared fixtures for the preventive maintenance engine tests."""

from collections.abc import Iterator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from app.core.clock import FixedClock
from app.core.db import session_factory_for
from app.domain.maintenance.services.due_evaluator import DueEvaluator
from app.domain.maintenance.services.pm_generation_service import PMGenerationService
from app.infrastructure.database import models  # noqa: F401
from app.infrastructure.memory import (
    InMemoryGenerationLedger,
    InMemoryPreventiveScheduleRepository,
    InMemoryWorkOrderRepository,
)

from app.tests.factories import TODAY, no_sleep_retry


@pytest.fixture
def evaluator() -> DueEvaluator:
    return DueEvaluator()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def schedule_repo() -> InMemoryPreventiveScheduleRepository:
    return InMemoryPreventiveScheduleRepository()


@pytest.fixture
def work_order_repo() -> InMemoryWorkOrderRepository:
    return InMemoryWorkOrderRepository()


@pytest.fixture
def ledger() -> InMemoryGenerationLedger:
    return InMemoryGenerationLedger()


@pytest.fixture
def generation_service(
    schedule_repo, work_order_repo, ledger, clock
) -> PMGenerationService:
    return PMGenerationService(
        schedule_repository=schedule_repo,
        work_order_repository=work_order_repo,
        ledger=ledger,
        clock=clock,
        update_retry_config=no_sleep_retry(),
    )


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return session_factory_for(engine)
