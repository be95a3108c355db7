"""Celery application for the recurring due pass."""

from typing import Any

from celery import Celery, Task
from celery.signals import task_failure, task_postrun, task_prerun, worker_ready

from app.core.config import settings
from app.core.observability import (
    correlation_id_var,
    get_logger,
    set_correlation_id,
    setup_structured_logging,
)
from app.domain.shared.exceptions import GenerationPassAbortedError

logger = get_logger(__name__)

celery_app = Celery(
    "pm_engine",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.core.tasks.maintenance"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.PM_REFERENCE_TIMEZONE,
    enable_utc=True,
    task_track_started=settings.CELERY_TASK_TRACK_STARTED,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=settings.CELERY_WORKER_PREFETCH_MULTIPLIER,
    worker_hijack_root_logger=False,
    result_expires=86400,
    task_routes={"app.core.tasks.maintenance.*": {"queue": "maintenance"}},
    beat_schedule={
        "generate-due-pm-work-orders": {
            "task": "app.core.tasks.maintenance.generate_due_pm_work_orders",
            "schedule": settings.PM_GENERATION_INTERVAL_SECONDS,
        },
    },
)


class BaseTask(Task):
    """
    Base task for engine jobs.

    Only an aborted pass is retried. Per-schedule failures are already part
    of the returned report and a rerun would not change them.
    """

    autoretry_for = (GenerationPassAbortedError,)
    max_retries = 3
    retry_backoff = 60
    retry_backoff_max = 900
    retry_jitter = True

    def on_retry(
        self, exc: Exception, task_id: str, args: tuple, kwargs: dict, einfo: Any
    ) -> None:
        logger.warning(
            "Task retrying",
            task_name=self.name,
            task_id=task_id,
            retries=self.request.retries,
            error=str(exc),
        )
        super().on_retry(exc, task_id, args, kwargs, einfo)


celery_app.Task = BaseTask


@task_prerun.connect
def task_prerun_handler(
    task_id: str, task: Task, args: tuple, kwargs: dict, **kw: Any
) -> None:
    set_correlation_id(task_id)
    logger.info("Task starting", task_name=task.name, task_kwargs=kwargs)


@task_postrun.connect
def task_postrun_handler(task_id: str, task: Task, state: str, **kw: Any) -> None:
    logger.info("Task finished", task_name=task.name, state=state)
    correlation_id_var.set("")


@task_failure.connect
def task_failure_handler(
    task_id: str, exception: Exception, traceback: Any, **kw: Any
) -> None:
    logger.error(
        "Task failed",
        task_id=task_id,
        error=str(exception),
        error_type=type(exception).__name__,
    )


@worker_ready.connect
def worker_ready_handler(sender: Any, **kw: Any) -> None:
    setup_structured_logging()
    logger.info("Celery worker is ready to accept tasks")
