"""
Retry Mechanisms with Exponential Backoff

Synchronous retry helper used for persistence writes that must eventually
land, such as advancing a schedule after its work order was created.
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from ..domain.shared.exceptions import RetryExhaustedError
from .observability import get_correlation_id, get_logger

T = TypeVar("T")

logger = get_logger(__name__)


class RetryStrategy(Enum):
    """Available retry strategies."""

    FIXED_DELAY = "fixed_delay"
    EXPONENTIAL_BACKOFF = "exponential_backoff"
    LINEAR_BACKOFF = "linear_backoff"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL_BACKOFF
    base_delay_seconds: float = 0.2
    max_delay_seconds: float = 10.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_max_seconds: float = 0.1

    retry_on_exceptions: tuple[type[Exception], ...] = (Exception,)
    stop_on_exceptions: tuple[type[Exception], ...] = ()

    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)


class RetryDelayCalculator:
    """Calculates retry delays based on different strategies."""

    def __init__(self, config: RetryConfig):
        self.config = config

    def calculate_delay(self, attempt_number: int) -> float:
        """Calculate delay for the given attempt number (1-based)."""
        base_delay = self._calculate_base_delay(attempt_number)

        if self.config.jitter:
            base_delay += random.uniform(0, self.config.jitter_max_seconds)

        return min(base_delay, self.config.max_delay_seconds)

    def _calculate_base_delay(self, attempt_number: int) -> float:
        if self.config.strategy == RetryStrategy.EXPONENTIAL_BACKOFF:
            return self.config.base_delay_seconds * (
                self.config.exponential_base ** (attempt_number - 1)
            )
        elif self.config.strategy == RetryStrategy.LINEAR_BACKOFF:
            return self.config.base_delay_seconds * attempt_number
        else:
            return self.config.base_delay_seconds


def _should_stop_retrying(error: Exception, config: RetryConfig) -> bool:
    if any(isinstance(error, stop_type) for stop_type in config.stop_on_exceptions):
        return True
    return not any(
        isinstance(error, retry_type) for retry_type in config.retry_on_exceptions
    )


def execute_with_retry(
    operation: Callable[..., T],
    operation_name: str,
    config: RetryConfig | None = None,
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Execute operation with retry logic.

    Args:
        operation: The callable to execute
        operation_name: Name for logging
        config: Retry configuration (uses default if None)
        *args, **kwargs: Arguments to pass to the operation

    Returns:
        Result from the operation

    Raises:
        RetryExhaustedError: If all retry attempts are exhausted
    """
    config = config or RetryConfig()
    delay_calculator = RetryDelayCalculator(config)
    last_error: Exception | None = None

    for attempt_num in range(1, config.max_attempts + 1):
        if attempt_num > 1:
            delay = delay_calculator.calculate_delay(attempt_num - 1)
            logger.info(
                "Retrying after delay",
                operation=operation_name,
                attempt=attempt_num,
                delay_seconds=delay,
                correlation_id=get_correlation_id(),
            )
            config.sleep(delay)

        try:
            return operation(*args, **kwargs)
        except Exception as e:
            last_error = e
            if _should_stop_retrying(e, config):
                logger.error(
                    "Stopping retry due to non-retryable error",
                    operation=operation_name,
                    attempt=attempt_num,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                break

            logger.warning(
                "Retry attempt failed",
                operation=operation_name,
                attempt=attempt_num,
                max_attempts=config.max_attempts,
                will_retry=attempt_num < config.max_attempts,
                error=str(e),
            )

    raise RetryExhaustedError(
        operation=operation_name,
        max_attempts=config.max_attempts,
        last_error=last_error or Exception("Unknown error"),
    )
