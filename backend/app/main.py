import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from prometheus_client import make_asgi_app
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.errors import register_exception_handlers
from app.api.main import api_router
from app.core.config import settings
from app.core.db import init_db
from app.core.observability import (
    REQUEST_COUNT,
    REQUEST_DURATION,
    get_logger,
    set_correlation_id,
    setup_structured_logging,
)

setup_structured_logging()
logger = get_logger(__name__)


def _route_label(request: Request) -> str:
    """Route template for metric labels."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Correlation id, request logging and HTTP metrics."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            endpoint = _route_label(request)
            REQUEST_COUNT.labels(request.method, endpoint, "500").inc()
            REQUEST_DURATION.labels(request.method, endpoint).observe(elapsed)
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_seconds=elapsed,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise

        elapsed = time.perf_counter() - started
        endpoint = _route_label(request)
        REQUEST_COUNT.labels(request.method, endpoint, str(response.status_code)).inc()
        REQUEST_DURATION.labels(request.method, endpoint).observe(elapsed)
        response.headers["X-Correlation-ID"] = correlation_id

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_seconds=elapsed,
        )
        return response


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Deployed environments manage the schema with migrations
    if settings.ENVIRONMENT == "local":
        init_db()

    logger.info(
        "Application started",
        project_name=settings.PROJECT_NAME,
        environment=settings.ENVIRONMENT,
        api_version=settings.API_V1_STR,
        reference_timezone=settings.PM_REFERENCE_TIMEZONE,
        metrics_enabled=settings.ENABLE_METRICS,
    )
    yield
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    PM Engine - Preventive Maintenance Due-Date API

    Tracks recurring maintenance schedules and turns due occurrences into
    work orders, at most once per occurrence.

    ## Features

    * **Due Status**: Overdue, due today and upcoming, on whole days
    * **Due Passes**: Idempotent work order generation with catch-up
    * **Generation Ledger**: Per-occurrence history for every schedule
    """,
    version="1.0.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_STR)

if settings.ENABLE_METRICS:
    app.mount("/metrics", make_asgi_app())
