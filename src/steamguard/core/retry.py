"""
Async retry with exponential backoff.

Only the HTTP layer uses this, and only when a ``RetryConfig`` is supplied;
enrollment and signing never retry implicitly.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

from .errors import RetryExhaustedError

T = TypeVar("T")


@dataclass
class RetryConfig:
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    jitter: bool = True
    timeout_per_attempt: float | None = None
    retryable_exceptions: list[type[BaseException]] = field(
        default_factory=lambda: [ConnectionError, TimeoutError, OSError]
    )

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")


@dataclass
class RetryStats:
    attempt_count: int = 0
    total_delay: float = 0.0
    last_exception: BaseException | None = None


class AsyncRetrier:
    """Runs an async callable until it succeeds or attempts run out."""

    def __init__(self, config: RetryConfig | None = None) -> None:
        self.config = config or RetryConfig()
        self.stats = RetryStats()

    def _delay_for(self, attempt: int) -> float:
        cfg = self.config
        delay = min(cfg.base_delay * (cfg.backoff_factor ** (attempt - 1)), cfg.max_delay)
        if cfg.jitter and delay > 0:
            delay = delay * (0.5 + random.random() / 2)
        return delay

    def _is_retryable(self, exc: BaseException) -> bool:
        return any(isinstance(exc, t) for t in self.config.retryable_exceptions)

    async def retry(self, fn: Callable[[], Awaitable[T]]) -> T:
        self.stats = RetryStats()
        cfg = self.config
        for attempt in range(1, cfg.max_attempts + 1):
            self.stats.attempt_count = attempt
            try:
                if cfg.timeout_per_attempt is not None:
                    return await asyncio.wait_for(fn(), timeout=cfg.timeout_per_attempt)
                return await fn()
            except Exception as exc:
                if not self._is_retryable(exc):
                    raise
                self.stats.last_exception = exc
                if attempt >= cfg.max_attempts:
                    break
                delay = self._delay_for(attempt)
                self.stats.total_delay += delay
                if delay > 0:
                    await asyncio.sleep(delay)
        raise RetryExhaustedError(
            f"All {cfg.max_attempts} retry attempts exhausted",
            cause=self.stats.last_exception,
            retry_stats=self.stats,
        )

    async def __call__(self, fn: Callable[[], Awaitable[T]]) -> T:
        return await self.retry(fn)
