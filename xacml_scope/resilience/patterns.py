"""
Retry and timeout patterns for calls to the decision oracle.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Callable, List, Type

from ..types.errors import ErrorCode, OracleError

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Retry configuration. A single attempt means no retry."""
    max_attempts: int = 1
    initial_delay: timedelta = field(default_factory=lambda: timedelta(milliseconds=100))
    max_delay: timedelta = field(default_factory=lambda: timedelta(seconds=2))
    multiplier: float = 2.0
    jitter: bool = True
    retryable_exceptions: List[Type[Exception]] = field(default_factory=lambda: [OracleError])

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not self.retryable_exceptions:
            self.retryable_exceptions = [OracleError]


class Retry:
    """Retry handler with exponential backoff."""

    def __init__(self, config: RetryConfig):
        self.config = config

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Await func, retrying retryable failures up to max_attempts."""
        for attempt in range(1, self.config.max_attempts + 1):
            try:
                result = await func(*args, **kwargs)

                if attempt > 1:
                    logger.info(f"Decision call succeeded on attempt {attempt}")

                return result

            except Exception as e:
                if not self._is_retryable(e) or attempt == self.config.max_attempts:
                    raise

                delay = self._calculate_delay(attempt)
                logger.warning(f"Attempt {attempt} failed: {e}. Retrying in {delay:.2f}s")

                await asyncio.sleep(delay)

    def _is_retryable(self, exception: Exception) -> bool:
        """Check if exception is retryable."""
        return any(isinstance(exception, exc_type) for exc_type in self.config.retryable_exceptions)

    def _calculate_delay(self, attempt: int) -> float:
        """Calculate delay for the given attempt."""
        delay_seconds = self.config.initial_delay.total_seconds() * (self.config.multiplier ** (attempt - 1))
        delay_seconds = min(delay_seconds, self.config.max_delay.total_seconds())

        if self.config.jitter:
            delay_seconds *= random.uniform(0.5, 1.5)

        return delay_seconds


@dataclass
class TimeoutConfig:
    """Timeout configuration."""
    timeout: timedelta = field(default_factory=lambda: timedelta(seconds=10))


class Timeout:
    """Bounds an awaitable call, turning expiry into an OracleError."""

    def __init__(self, config: TimeoutConfig):
        self.config = config

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Await func with the configured timeout."""
        timeout_seconds = self.config.timeout.total_seconds()

        try:
            return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout_seconds)
        except asyncio.TimeoutError as e:
            raise OracleError(
                f"Decision call timed out after {timeout_seconds}s",
                error_code=ErrorCode.TIMEOUT,
                details={'timeout_seconds': timeout_seconds},
                cause=e
            )
