"""
Alignment of the local clock with Steam's authoritative server time.

Codes and confirmation signatures are only accepted when they are computed
for the server's notion of "now". ``ClockAligner`` measures the offset
between the local clock and a remote time source and keeps it fresh:

- Fast path: when the last alignment is younger than the realign interval
  the cached offset is applied without locking or awaiting anything.
- Slow path: a stale (or missing) alignment triggers one round-trip to the
  time source. Concurrent callers that observe staleness at the same moment
  share that single round-trip; an ``asyncio.Lock`` serializes realignment
  and waiters re-check freshness before issuing another request.

Alignment is best-effort. If the time source fails, the previous offset
stays in effect and a diagnostic is emitted; callers still get a time value.
The failed attempt is remembered, so callers queued behind it and callers
arriving within the failure back-off reuse the stale offset instead of
repeating the request.
"""

from __future__ import annotations

import asyncio
import math
import time
from typing import Callable, Protocol, runtime_checkable

from . import diagnostics

DEFAULT_REALIGN_INTERVAL_SECONDS = 6 * 60 * 60
DEFAULT_FAILURE_BACKOFF_SECONDS = 60


@runtime_checkable
class TimeSource(Protocol):
    """Anything that can report the authoritative server time."""

    async def query_time(self) -> int:
        """Return the remote clock as epoch seconds."""
        ...


class ClockAligner:
    """Owns the local-to-server clock offset for one set of callers.

    Instances are explicitly constructed and passed to the components that
    need aligned time; nothing here is process-global.
    """

    def __init__(
        self,
        time_source: TimeSource,
        *,
        realign_interval_seconds: float = DEFAULT_REALIGN_INTERVAL_SECONDS,
        failure_backoff_seconds: float = DEFAULT_FAILURE_BACKOFF_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if realign_interval_seconds <= 0:
            raise ValueError("realign_interval_seconds must be > 0")
        if failure_backoff_seconds < 0:
            raise ValueError("failure_backoff_seconds must be >= 0")
        self._time_source = time_source
        self._realign_interval = float(realign_interval_seconds)
        self._clock = clock
        self._offset = 0
        self._last_alignment: float | None = None
        self._last_attempt: float | None = None
        self._failure_backoff = float(failure_backoff_seconds)
        self._lock = asyncio.Lock()
        self._alignment_count = 0

    @property
    def offset_seconds(self) -> int:
        """Signed ``remote - local`` delta measured at the last alignment."""
        return self._offset

    @property
    def last_alignment(self) -> float | None:
        return self._last_alignment

    @property
    def realign_interval_seconds(self) -> float:
        return self._realign_interval

    @property
    def alignment_count(self) -> int:
        """Number of successful alignments performed so far."""
        return self._alignment_count

    @property
    def is_aligned(self) -> bool:
        if self._last_alignment is None:
            return False
        return self._clock() <= self._last_alignment + self._realign_interval

    def _needs_alignment(self) -> bool:
        if self.is_aligned:
            return False
        if self._last_attempt is None:
            return True
        # A failed attempt suppresses further requests for the back-off period.
        return self._clock() > self._last_attempt + self._failure_backoff

    def local_time(self) -> int:
        return math.floor(self._clock())

    def cached_time(self) -> int:
        """Local time corrected by the current offset, without realigning."""
        return self.local_time() + self._offset

    async def get_aligned_time(self) -> int:
        """Return server-aligned epoch seconds, realigning when stale."""
        if self._needs_alignment():
            await self._realign_if_stale()
        return self.cached_time()

    async def align_time(self) -> None:
        """Force a realignment regardless of the current state."""
        async with self._lock:
            await self._align_locked()

    async def _realign_if_stale(self) -> None:
        async with self._lock:
            # Another caller may have aligned, or failed to, while we waited.
            if not self._needs_alignment():
                return
            await self._align_locked()

    async def _align_locked(self) -> None:
        local_before = self.local_time()
        try:
            remote = int(await self._time_source.query_time())
        except Exception as exc:
            self._last_attempt = self._clock()
            diagnostics.warn(
                "clock",
                "time alignment failed; keeping previous offset",
                offset_seconds=self._offset,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return
        self._offset = remote - local_before
        self._last_alignment = self._clock()
        self._last_attempt = self._last_alignment
        self._alignment_count += 1
        diagnostics.debug(
            "clock",
            "aligned with server time",
            offset_seconds=self._offset,
        )


class FixedTimeSource:
    """Time source that reports a constant offset from a local clock.

    Useful for offline operation and tests.
    """

    def __init__(
        self, offset_seconds: int = 0, *, clock: Callable[[], float] = time.time
    ) -> None:
        self.offset_seconds = offset_seconds
        self._clock = clock
        self.calls = 0

    async def query_time(self) -> int:
        self.calls += 1
        return math.floor(self._clock()) + self.offset_seconds
