import warnings
from typing import Literal

from pydantic import computed_field, model_validator
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    PROJECT_NAME: str = "PM Engine"

    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "maintenance"
    DATABASE_URL: str | None = None  # Direct connection string
    USE_SSL: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        # If DATABASE_URL is provided, use it directly
        if self.DATABASE_URL:
            # Ensure postgres URLs use the psycopg driver
            if self.DATABASE_URL.startswith("postgresql://"):
                return self.DATABASE_URL.replace(
                    "postgresql://", "postgresql+psycopg://", 1
                )
            elif self.DATABASE_URL.startswith("postgres://"):
                return self.DATABASE_URL.replace(
                    "postgres://", "postgresql+psycopg://", 1
                )
            else:
                return self.DATABASE_URL

        # Otherwise, build from individual components
        return str(
            MultiHostUrl.build(
                scheme="postgresql+psycopg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )

    # Database pool
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_RECYCLE: int = 3600
    DATABASE_POOL_PRE_PING: bool = True

    # Redis / Celery Configuration
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_SSL: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def REDIS_URL(self) -> str:
        """Build Redis connection URL."""
        if self.REDIS_PASSWORD:
            auth = f":{self.REDIS_PASSWORD}@"
        else:
            auth = ""

        protocol = "rediss" if self.REDIS_SSL else "redis"
        return f"{protocol}://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    CELERY_BROKER_URL: str | None = None
    CELERY_RESULT_BACKEND: str | None = None
    CELERY_TASK_TRACK_STARTED: bool = True
    CELERY_TASK_TIME_LIMIT: int = 1800  # 30 minutes
    CELERY_TASK_SOFT_TIME_LIMIT: int = 1500  # 25 minutes
    CELERY_WORKER_PREFETCH_MULTIPLIER: int = 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def celery_broker_url(self) -> str:
        """Get Celery broker URL (defaults to Redis)."""
        return self.CELERY_BROKER_URL or self.REDIS_URL

    @computed_field  # type: ignore[prop-decorator]
    @property
    def celery_result_backend(self) -> str:
        """Get Celery result backend URL (defaults to Redis)."""
        return self.CELERY_RESULT_BACKEND or self.REDIS_URL

    # Observability Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # "json" or "console"
    LOG_SQL: bool = False
    ENABLE_METRICS: bool = True

    # Preventive maintenance engine
    PM_REFERENCE_TIMEZONE: str = "UTC"
    PM_DUE_SOON_DAYS: int = 7
    PM_DEFAULT_PRIORITY: Literal["Low", "Medium", "High"] = "Medium"
    PM_RESERVATION_TTL_SECONDS: int = 900  # Reservation age flagged for review; 0 disables
    PM_GENERATION_MAX_WORKERS: int = 1
    PM_SCHEDULE_UPDATE_MAX_ATTEMPTS: int = 3
    PM_SCHEDULE_UPDATE_BASE_DELAY: float = 0.2  # seconds
    PM_GENERATION_INTERVAL_SECONDS: float = 86400.0  # Every day

    def _check_positive(self, var_name: str, value: int | float) -> None:
        if value < 1:
            message = f"{var_name} must be at least 1, got {value}"
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_engine_limits(self) -> Self:
        self._check_positive("PM_GENERATION_MAX_WORKERS", self.PM_GENERATION_MAX_WORKERS)
        self._check_positive(
            "PM_SCHEDULE_UPDATE_MAX_ATTEMPTS", self.PM_SCHEDULE_UPDATE_MAX_ATTEMPTS
        )
        if self.PM_DUE_SOON_DAYS < 0:
            raise ValueError("PM_DUE_SOON_DAYS cannot be negative")
        if self.PM_RESERVATION_TTL_SECONDS < 0:
            raise ValueError("PM_RESERVATION_TTL_SECONDS cannot be negative")
        return self


settings = Settings()  # type: ignore
