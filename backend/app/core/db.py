from collections.abc import Callable
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings


@lru_cache
def get_engine() -> Engine:
    url = str(settings.SQLALCHEMY_DATABASE_URI)
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    # Configure engine with production-ready settings
    engine_kwargs = {
        "pool_pre_ping": settings.DATABASE_POOL_PRE_PING,
        "pool_recycle": settings.DATABASE_POOL_RECYCLE,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
    }

    if settings.ENVIRONMENT != "local" or settings.USE_SSL:
        engine_kwargs["connect_args"] = {
            "sslmode": "require",
            "connect_timeout": 10,
            "application_name": settings.PROJECT_NAME,
        }

    return create_engine(url, **engine_kwargs)


def session_factory_for(engine: Engine) -> Callable[[], Session]:
    """Return a zero-argument session factory bound to ``engine``."""

    def _factory() -> Session:
        return Session(engine, expire_on_commit=False)

    return _factory


def init_db(engine: Engine | None = None) -> None:
    # Tables should be created with migrations in deployed environments.
    # make sure all SQLModel models are imported before creating tables
    from app.infrastructure.database import models  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())
