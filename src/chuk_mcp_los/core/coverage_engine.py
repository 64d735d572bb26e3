"""
Coverage orchestrator.

Sequences one coverage computation: observer elevation, radial sampling,
elevation fetch, per-bearing visibility, result assembly. At most one
computation is active per engine; starting another cancels the current one
without waiting for its in-flight requests.

State machine::

    idle -> calculating -> {completed, cancelled, errored} -> idle
"""

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Mapping

from ..constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_K_FACTOR,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_MAX_DISTANCE_KM,
    DEFAULT_NUM_RADIALS,
    DEFAULT_REQUEST_INTERVAL_S,
    DEFAULT_SAMPLE_INTERVAL_KM,
    ELEVATION_API_URL,
    REQUEST_TIMEOUT_S,
    RETRY_ATTEMPTS,
    RETRY_BASE_DELAY_S,
    EnvVar,
    ErrorMessages,
)
from .elevation_pipeline import CancelToken, ElevationFetchPipeline, ElevationSample
from .errors import InvalidRequest
from .geodesy import (
    GeoPoint,
    RadialSamples,
    destination_point,
    flatten_radials,
    radial_bearings,
    samples_per_radial,
)
from .horizon import compute_visibility

logger = logging.getLogger(__name__)


class CoverageState(str, Enum):
    IDLE = "idle"
    CALCULATING = "calculating"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ERRORED = "errored"


TERMINAL_STATES = (CoverageState.COMPLETED, CoverageState.CANCELLED, CoverageState.ERRORED)


@dataclass(frozen=True)
class CoverageConfig:
    """Sampling geometry and elevation-service limits for coverage runs."""

    num_radials: int = DEFAULT_NUM_RADIALS
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM
    sample_interval_km: float = DEFAULT_SAMPLE_INTERVAL_KM
    k_factor: float = DEFAULT_K_FACTOR
    batch_size: int = DEFAULT_BATCH_SIZE
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    request_interval_s: float = DEFAULT_REQUEST_INTERVAL_S
    max_retries: int = RETRY_ATTEMPTS
    retry_base_delay_s: float = RETRY_BASE_DELAY_S
    elevation_api_url: str = ELEVATION_API_URL
    request_timeout_s: float = REQUEST_TIMEOUT_S

    def __post_init__(self) -> None:
        radial_bearings(self.num_radials)
        samples_per_radial(self.max_distance_km, self.sample_interval_km)
        if not self.k_factor > 0:
            raise InvalidRequest(ErrorMessages.INVALID_K_FACTOR.format(self.k_factor))
        if self.batch_size <= 0:
            raise InvalidRequest(ErrorMessages.INVALID_BATCH_SIZE.format(self.batch_size))
        if self.max_concurrent <= 0:
            raise InvalidRequest(ErrorMessages.INVALID_MAX_CONCURRENT.format(self.max_concurrent))

    @property
    def points_per_ray(self) -> int:
        return samples_per_radial(self.max_distance_km, self.sample_interval_km)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CoverageConfig":
        """Build a config from LOS_* environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ

        def _get(name: str, cast: Callable, default):
            raw = env.get(name)
            return cast(raw) if raw not in (None, "") else default

        return cls(
            num_radials=_get(EnvVar.NUM_RADIALS, int, DEFAULT_NUM_RADIALS),
            max_distance_km=_get(EnvVar.MAX_DISTANCE_KM, float, DEFAULT_MAX_DISTANCE_KM),
            sample_interval_km=_get(EnvVar.SAMPLE_INTERVAL_KM, float, DEFAULT_SAMPLE_INTERVAL_KM),
            k_factor=_get(EnvVar.K_FACTOR, float, DEFAULT_K_FACTOR),
            batch_size=_get(EnvVar.BATCH_SIZE, int, DEFAULT_BATCH_SIZE),
            max_concurrent=_get(EnvVar.MAX_CONCURRENT, int, DEFAULT_MAX_CONCURRENT),
            request_interval_s=_get(EnvVar.REQUEST_INTERVAL_S, float, DEFAULT_REQUEST_INTERVAL_S),
            max_retries=_get(EnvVar.MAX_RETRIES, int, RETRY_ATTEMPTS),
            elevation_api_url=_get(EnvVar.ELEVATION_API_URL, str, ELEVATION_API_URL),
        )


@dataclass(frozen=True)
class CoverageRequest:
    """Observer location and antenna height for one coverage run."""

    observer: GeoPoint
    antenna_height_m: float
    grid_label: str | None = None

    def validate(self) -> None:
        # `not > 0` also rejects NaN
        if not self.antenna_height_m > 0:
            raise InvalidRequest(
                ErrorMessages.INVALID_ANTENNA_HEIGHT.format(self.antenna_height_m)
            )


@dataclass(frozen=True)
class CoverageRay:
    """Visible samples along one bearing, nearest first."""

    bearing_deg: int
    visible_points: tuple[tuple[float, GeoPoint], ...]
    max_visible_distance_km: float
    endpoint: GeoPoint


@dataclass(frozen=True)
class CoverageResult:
    """Completed coverage computation. Immutable once emitted."""

    id: str
    observer: GeoPoint
    antenna_height_m: float
    observer_elevation_m: float
    rays: tuple[CoverageRay, ...]
    computed_at: datetime
    max_range_km: float
    grid_label: str | None = None


@dataclass(frozen=True)
class CoverageProgress:
    """Batch progress of the active computation."""

    completed_units: int
    total_units: int
    percent: float

    @classmethod
    def of(cls, completed: int, total: int) -> "CoverageProgress":
        percent = round(100.0 * completed / total, 1) if total else 0.0
        return cls(completed_units=completed, total_units=total, percent=percent)


def _consume_exception(task: asyncio.Task) -> None:
    # Failures are already recorded on the engine; keep fire-and-forget
    # tasks from logging "exception was never retrieved".
    if not task.cancelled():
        task.exception()


class CoverageEngine:
    """Runs at most one coverage computation at a time."""

    def __init__(
        self,
        pipeline: ElevationFetchPipeline,
        config: CoverageConfig | None = None,
        on_progress: Callable[[CoverageProgress], None] | None = None,
        on_result: Callable[[CoverageResult], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        on_state_change: Callable[[CoverageState], None] | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.config = config or CoverageConfig()
        self.on_progress = on_progress
        self.on_result = on_result
        self.on_error = on_error
        self.on_state_change = on_state_change

        self.progress: CoverageProgress | None = None
        self.error: Exception | None = None
        self.last_outcome: CoverageState | None = None
        self.current_request: CoverageRequest | None = None

        self._state = CoverageState.IDLE
        self._generation = 0
        self._token: CancelToken | None = None

    @property
    def state(self) -> CoverageState:
        return self._state

    @property
    def is_calculating(self) -> bool:
        return self._state is CoverageState.CALCULATING

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self, request: CoverageRequest) -> "asyncio.Task[CoverageResult | None]":
        """Begin a computation, superseding any in-flight one.

        Must be called from a running event loop. Never waits for the
        superseded computation.

        Raises:
            InvalidRequest: Non-positive antenna height (before any network I/O)
        """
        request.validate()
        loop = asyncio.get_running_loop()

        if self.is_calculating:
            logger.info("Superseding in-flight coverage calculation")
            self._cancel_current()

        self._generation += 1
        generation = self._generation
        token = CancelToken()
        self._token = token
        self.current_request = request
        self.error = None

        self._transition(CoverageState.CALCULATING)
        self._set_progress(0, 0)

        task = loop.create_task(self._run(request, token, generation))
        task.add_done_callback(_consume_exception)
        return task

    def cancel(self) -> bool:
        """Cancel the active computation. Returns False when nothing was running."""
        if not self.is_calculating:
            return False
        logger.info("Coverage calculation cancelled")
        self._cancel_current()
        return True

    async def calculate(self, request: CoverageRequest) -> CoverageResult | None:
        """Run a computation to the end.

        Returns:
            The result, or None if cancelled or superseded

        Raises:
            ElevationServiceError: The elevation service failed
        """
        return await self.start(request)

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    async def _run(
        self,
        request: CoverageRequest,
        token: CancelToken,
        generation: int,
    ) -> CoverageResult | None:
        config = self.config
        try:
            observer_sample = await self.pipeline.fetch_point(request.observer)
            if not self._is_current(token, generation):
                return None

            samples = await asyncio.to_thread(
                flatten_radials,
                request.observer,
                config.num_radials,
                config.max_distance_km,
                config.sample_interval_km,
            )
            if not self._is_current(token, generation):
                return None
            self._set_progress(0, self.pipeline.batch_count(len(samples.points)))

            def forward_progress(completed: int, total: int) -> None:
                if self._is_current(token, generation):
                    self._set_progress(completed, total)

            elevations = await self.pipeline.fetch_all(samples.points, forward_progress, token)
            if elevations is None or not self._is_current(token, generation):
                return None

            rays = await asyncio.to_thread(
                self._build_rays, request, observer_sample.elevation_m, samples, elevations
            )
            if not self._is_current(token, generation):
                return None

        except Exception as e:
            if not self._is_current(token, generation):
                logger.debug(f"Discarding failure of superseded calculation: {e}")
                return None
            logger.error(f"Coverage calculation failed: {e}")
            self.error = e
            self._finish(CoverageState.ERRORED)
            if self.on_error is not None:
                self.on_error(e)
            raise

        result = CoverageResult(
            id=f"coverage-{uuid.uuid4().hex[:12]}",
            observer=request.observer,
            antenna_height_m=request.antenna_height_m,
            observer_elevation_m=observer_sample.elevation_m,
            rays=rays,
            computed_at=datetime.now(timezone.utc),
            max_range_km=config.max_distance_km,
            grid_label=request.grid_label,
        )
        logger.info(f"Coverage {result.id} computed ({len(rays)} rays)")

        self._finish(CoverageState.COMPLETED)
        if self.on_result is not None:
            self.on_result(result)
        return result

    def _build_rays(
        self,
        request: CoverageRequest,
        observer_elevation_m: float,
        samples: RadialSamples,
        elevations: list[ElevationSample],
    ) -> tuple[CoverageRay, ...]:
        config = self.config
        rays = []
        for i, bearing in enumerate(samples.bearings):
            window = elevations[samples.ray_slice(i)]
            visibility = compute_visibility(
                observer_elevation_m,
                request.antenna_height_m,
                [s.elevation_m for s in window],
                config.sample_interval_km,
                max_range_km=config.max_distance_km,
                k_factor=config.k_factor,
            )
            visible_points = tuple(
                (distance, window[j].point)
                for j, distance in zip(visibility.indices, visibility.distances_km)
            )
            rays.append(
                CoverageRay(
                    bearing_deg=bearing,
                    visible_points=visible_points,
                    max_visible_distance_km=visibility.max_visible_distance_km,
                    endpoint=destination_point(
                        request.observer, bearing, visibility.max_visible_distance_km
                    ),
                )
            )
        return tuple(rays)

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def _is_current(self, token: CancelToken, generation: int) -> bool:
        return generation == self._generation and not token.cancelled

    def _cancel_current(self) -> None:
        if self._token is not None:
            self._token.cancel()
        # Late results of the cancelled computation no longer match
        self._generation += 1
        self._finish(CoverageState.CANCELLED)

    def _finish(self, outcome: CoverageState) -> None:
        self.progress = None
        self._token = None
        self.current_request = None
        self._transition(outcome)
        self._transition(CoverageState.IDLE)

    def _transition(self, state: CoverageState) -> None:
        self._state = state
        if state in TERMINAL_STATES:
            self.last_outcome = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    def _set_progress(self, completed: int, total: int) -> None:
        self.progress = CoverageProgress.of(completed, total)
        if self.on_progress is not None:
            self.on_progress(self.progress)
