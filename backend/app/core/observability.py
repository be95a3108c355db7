"""
Observability Infrastructure

Structured logging and Prometheus metrics for the preventive maintenance
engine. Every log line carries the correlation id of the request, task or
script run that produced it.
"""

import contextvars
import logging
import sys
import uuid
from typing import Any

import structlog
from prometheus_client import Counter, Histogram

from .config import settings

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

# HTTP
REQUEST_COUNT = Counter(
    "pm_engine_http_requests_total",
    "HTTP requests by method, route and status",
    ["method", "endpoint", "status"],
)
REQUEST_DURATION = Histogram(
    "pm_engine_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)

# Due passes
PM_GENERATION_OUTCOMES = Counter(
    "pm_engine_generation_outcomes_total",
    "Per-schedule outcomes of due passes",
    ["outcome"],
)
PM_GENERATION_PASSES = Counter(
    "pm_engine_generation_passes_total",
    "Due passes by overall outcome",
    ["outcome"],
)
PM_GENERATION_PASS_DURATION = Histogram(
    "pm_engine_generation_pass_duration_seconds",
    "Duration of a full due pass",
    buckets=(0.05, 0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0),
)
PM_LEDGER_CONFLICTS = Counter(
    "pm_engine_ledger_conflicts_total",
    "Reservations refused because the occurrence was already claimed",
)


def add_correlation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor stamping the current correlation id."""
    correlation_id = correlation_id_var.get()
    if correlation_id and "correlation_id" not in event_dict:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def _renderer() -> Any:
    if settings.LOG_FORMAT == "console":
        return structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
    return structlog.processors.JSONRenderer()


def setup_structured_logging() -> None:
    """Route structlog through the standard library with JSON or console output."""
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_correlation_id,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.format_exc_info,
            _renderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.LOG_SQL else logging.WARNING
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set (or generate) the correlation id for the current context."""
    correlation_id = correlation_id or uuid.uuid4().hex
    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    return correlation_id_var.get()


def log_performance_metrics(
    operation: str,
    duration_seconds: float,
    metadata: dict[str, Any] | None = None,
) -> None:
    """Log the duration of a named operation."""
    get_logger("performance").info(
        "Performance metric recorded",
        operation=operation,
        duration_seconds=round(duration_seconds, 6),
        **(metadata or {}),
    )
