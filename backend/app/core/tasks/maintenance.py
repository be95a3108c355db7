"""Preventive maintenance background tasks."""

from datetime import date
from typing import Any

from app.core.celery_app import BaseTask, celery_app
from app.core.db import get_engine, session_factory_for
from app.core.observability import get_logger
from app.infrastructure.database.service_dependencies import build_generation_service

logger = get_logger(__name__)


@celery_app.task(
    bind=True,
    base=BaseTask,
    name="app.core.tasks.maintenance.generate_due_pm_work_orders",
    queue="maintenance",
)
def generate_due_pm_work_orders(
    self: BaseTask,
    as_of: str | None = None,
    store_id: str | None = None,
) -> dict[str, Any]:
    """
    Run one due pass.

    Args:
        as_of: ISO date to run as of; defaults to today in the reference zone
        store_id: Restrict the pass to one store

    Returns:
        The pass report as JSON-compatible data
    """
    today = date.fromisoformat(as_of) if as_of else None

    service = build_generation_service(session_factory_for(get_engine()))
    report = service.run_generation_pass(today=today, store_id=store_id)

    logger.info(
        "Scheduled due pass finished",
        as_of=report.as_of.isoformat(),
        outcome=report.outcome.value,
        summary=report.summary(),
    )
    return report.model_dump(mode="json")
