"""
Elevation fetch pipeline.

Acquires one elevation per point from the lookup service while respecting
the provider's batch size and request-rate limits:

- points are split into fixed-size batches
- batches run in groups of at most ``max_concurrent`` simultaneous requests
- a RateLimiter holds a fixed pause between the end of one group and the
  start of the next
- HTTP 429 is retried with exponential backoff up to a fixed ceiling
- cancellation is cooperative and checked only between groups; a request
  already in flight is never interrupted

Output order always matches input order, whatever order requests finish in.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, Sequence

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_REQUEST_INTERVAL_S,
    RETRY_ATTEMPTS,
    RETRY_BASE_DELAY_S,
    ErrorMessages,
)
from .errors import InvalidRequest, RateLimited, RateLimitExhausted
from .geodesy import GeoPoint

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class ElevationSample:
    """Terrain elevation at a point."""

    point: GeoPoint
    elevation_m: float


class ElevationLookup(Protocol):
    def lookup(self, points: Sequence[GeoPoint]) -> list[float]: ...


class CancelToken:
    """Cooperative cancellation flag shared by one computation."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class RateLimiter:
    """Enforces a minimum idle interval before each acquisition.

    The interval counts from the later of the previous acquire and the
    previous release, so work that outlasts the interval still gets the
    full pause once it finishes.

    Owned by a pipeline instance; clock and sleep are injectable so tests
    can run against a fake clock.
    """

    def __init__(
        self,
        min_interval_s: float = DEFAULT_REQUEST_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    async def acquire(self) -> None:
        if self._last is not None:
            wait = self.min_interval_s - (self._clock() - self._last)
            if wait > 0:
                await self._sleep(wait)
        self._last = self._clock()

    def release(self) -> None:
        """Mark the end of the work guarded by the last acquire."""
        self._last = self._clock()

    def reset(self) -> None:
        self._last = None


class ElevationFetchPipeline:
    """Batched, rate-limited, cancellable elevation acquisition."""

    def __init__(
        self,
        client: ElevationLookup,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        rate_limiter: RateLimiter | None = None,
        max_retries: int = RETRY_ATTEMPTS,
        retry_base_delay_s: float = RETRY_BASE_DELAY_S,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if batch_size <= 0:
            raise InvalidRequest(ErrorMessages.INVALID_BATCH_SIZE.format(batch_size))
        if max_concurrent <= 0:
            raise InvalidRequest(ErrorMessages.INVALID_MAX_CONCURRENT.format(max_concurrent))

        self.client = client
        self.batch_size = batch_size
        self.max_concurrent = max_concurrent
        self.rate_limiter = rate_limiter or RateLimiter(sleep=sleep)
        self.max_retries = max_retries
        self.retry_base_delay_s = retry_base_delay_s
        self._sleep = sleep

    def batch_count(self, num_points: int) -> int:
        return math.ceil(num_points / self.batch_size)

    async def fetch_batch(self, points: Sequence[GeoPoint]) -> list[ElevationSample]:
        """Fetch one provider batch, retrying on rate limiting.

        Raises:
            RateLimitExhausted: Still rate limited after max_retries retries
            ProviderUnavailable: Any other provider failure (not retried)
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_base_delay_s, exp_base=2),
            retry=retry_if_exception_type(RateLimited),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )

        elevations: list[float] = []
        try:
            async for attempt in retrying:
                with attempt:
                    elevations = await asyncio.to_thread(self.client.lookup, list(points))
        except RateLimited as e:
            raise RateLimitExhausted(
                ErrorMessages.RATE_LIMIT_EXHAUSTED.format(self.max_retries),
                attempts=self.max_retries + 1,
            ) from e

        return [ElevationSample(point=p, elevation_m=e) for p, e in zip(points, elevations)]

    async def fetch_point(self, point: GeoPoint) -> ElevationSample:
        """Single-point lookup (observer elevation)."""
        await self.rate_limiter.acquire()
        try:
            samples = await self.fetch_batch([point])
        finally:
            self.rate_limiter.release()
        return samples[0]

    async def fetch_all(
        self,
        points: Sequence[GeoPoint],
        progress_callback: ProgressCallback | None = None,
        cancel_token: CancelToken | None = None,
    ) -> list[ElevationSample] | None:
        """Fetch elevations for every point, in input order.

        Args:
            points: Points to look up
            progress_callback: Called as (completed_batches, total_batches)
                after every batch group
            cancel_token: Checked before each group and after the last one

        Returns:
            One sample per point, or None when cancelled
        """
        batches = [
            list(points[i : i + self.batch_size]) for i in range(0, len(points), self.batch_size)
        ]
        total = len(batches)
        results: list[list[ElevationSample]] = [[] for _ in range(total)]
        completed = 0

        logger.info(f"Fetching elevation for {len(points)} points in {total} batches")

        for start in range(0, total, self.max_concurrent):
            if cancel_token is not None and cancel_token.cancelled:
                logger.info(f"Elevation fetch cancelled after {completed}/{total} batches")
                return None

            await self.rate_limiter.acquire()

            group = range(start, min(start + self.max_concurrent, total))
            try:
                group_results = await asyncio.gather(
                    *(self.fetch_batch(batches[i]) for i in group)
                )
            finally:
                self.rate_limiter.release()
            for i, samples in zip(group, group_results):
                results[i] = samples

            completed += len(group)
            if progress_callback is not None:
                progress_callback(completed, total)

        if cancel_token is not None and cancel_token.cancelled:
            logger.info("Elevation fetch cancelled after final batch group")
            return None

        return [sample for batch in results for sample in batch]
