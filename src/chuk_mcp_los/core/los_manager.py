"""
LOS Manager — central orchestrator for grid and coverage operations.

Owns the elevation client, fetch pipeline and coverage engine, retains
completed coverage results in memory, and stores each one as a JSON
artifact. Tools talk to this class only.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any

from ..constants import (
    COVERAGE_ARTIFACT_PREFIX,
    DEFAULT_ANTENNA_HEIGHT_M,
    DEFAULT_PRECISION,
    MAX_RETAINED_COVERAGES,
    ErrorMessages,
)
from .coverage_engine import (
    CoverageConfig,
    CoverageEngine,
    CoverageProgress,
    CoverageRequest,
    CoverageResult,
    CoverageState,
)
from .elevation_client import ElevationClient
from .elevation_pipeline import ElevationFetchPipeline, ElevationSample, RateLimiter
from .errors import InvalidRequest, LOSError
from .geodesy import GeoPoint
from .maidenhead import (
    GridBounds,
    all_precisions,
    normalize_locator,
    squares_in_bounds,
    to_bounds,
    to_locator,
)

logger = logging.getLogger(__name__)


@dataclass
class LocateResult:
    """Result of locating a point on the grid."""

    point: GeoPoint
    precision: int
    locator: str
    all_precisions: dict[str, str]
    bounds: GridBounds


@dataclass
class MultiPointResult:
    """Result of a multi-point elevation query."""

    samples: list[ElevationSample]
    elevation_range: list[float]


@dataclass
class CoverageSummary:
    """Aggregate statistics over the rays of one coverage result."""

    ray_count: int
    mean_distance_km: float
    min_distance_km: float
    max_distance_km: float
    farthest_bearing_deg: int | None
    full_range_rays: int
    visible_points: int


@dataclass
class StoredCoverage:
    """A retained coverage result and where its full payload was stored."""

    result: CoverageResult
    summary: CoverageSummary
    artifact_ref: str | None


@dataclass
class CoverageStatus:
    """Snapshot of the coverage engine."""

    state: CoverageState
    last_outcome: CoverageState | None
    progress: CoverageProgress | None
    error: str | None
    request: CoverageRequest | None
    last_result_id: str | None


def build_pipeline(client: Any, config: CoverageConfig) -> ElevationFetchPipeline:
    """Fetch pipeline wired to the config's batching and rate limits."""
    return ElevationFetchPipeline(
        client,
        batch_size=config.batch_size,
        max_concurrent=config.max_concurrent,
        rate_limiter=RateLimiter(config.request_interval_s),
        max_retries=config.max_retries,
        retry_base_delay_s=config.retry_base_delay_s,
    )


def summarize_coverage(result: CoverageResult) -> CoverageSummary:
    """Mean/min/max line-of-sight distance over all rays."""
    distances = [ray.max_visible_distance_km for ray in result.rays]
    if not distances:
        return CoverageSummary(0, 0.0, 0.0, 0.0, None, 0, 0)

    farthest = max(result.rays, key=lambda ray: ray.max_visible_distance_km)
    return CoverageSummary(
        ray_count=len(distances),
        mean_distance_km=sum(distances) / len(distances),
        min_distance_km=min(distances),
        max_distance_km=max(distances),
        farthest_bearing_deg=farthest.bearing_deg,
        full_range_rays=sum(1 for d in distances if d >= result.max_range_km),
        visible_points=sum(len(ray.visible_points) for ray in result.rays),
    )


def coverage_payload(result: CoverageResult, summary: CoverageSummary) -> dict:
    """JSON-serialisable form of a coverage result."""
    return {
        "schema_version": "1.0",
        "type": "los_coverage",
        "id": result.id,
        "observer": [result.observer.lat, result.observer.lng],
        "grid_label": result.grid_label,
        "antenna_height_m": result.antenna_height_m,
        "observer_elevation_m": result.observer_elevation_m,
        "max_range_km": result.max_range_km,
        "computed_at": result.computed_at.isoformat(),
        "summary": {
            "ray_count": summary.ray_count,
            "mean_distance_km": summary.mean_distance_km,
            "min_distance_km": summary.min_distance_km,
            "max_distance_km": summary.max_distance_km,
            "farthest_bearing_deg": summary.farthest_bearing_deg,
            "full_range_rays": summary.full_range_rays,
        },
        "rays": [
            {
                "bearing_deg": ray.bearing_deg,
                "max_visible_distance_km": ray.max_visible_distance_km,
                "endpoint": [ray.endpoint.lat, ray.endpoint.lng],
                "visible_points": [
                    [distance, point.lat, point.lng] for distance, point in ray.visible_points
                ],
            }
            for ray in result.rays
        ],
    }


class LOSManager:
    """Central manager for grid and line-of-sight coverage operations."""

    def __init__(
        self,
        config: CoverageConfig | None = None,
        pipeline: ElevationFetchPipeline | None = None,
        client: Any | None = None,
    ) -> None:
        self.config = config or CoverageConfig()
        if pipeline is None:
            client = client or ElevationClient(
                base_url=self.config.elevation_api_url,
                timeout_s=self.config.request_timeout_s,
            )
            pipeline = build_pipeline(client, self.config)
        self.pipeline = pipeline
        self.engine = CoverageEngine(pipeline, self.config)

        self._results: dict[str, StoredCoverage] = {}
        self._last_result_id: str | None = None
        self._collector: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Grid (sync, no I/O)
    # ------------------------------------------------------------------

    def locate(self, lat: float, lon: float, precision: int = DEFAULT_PRECISION) -> LocateResult:
        """Grid locator of a point plus its bounds and every other precision."""
        point = GeoPoint(lat, lon)
        locator = to_locator(point, precision)
        return LocateResult(
            point=point,
            precision=precision,
            locator=locator,
            all_precisions=all_precisions(point),
            bounds=to_bounds(locator),
        )

    def describe_locator(self, locator: str) -> GridBounds:
        return to_bounds(locator)

    def squares_in_bbox(self, bbox: list[float], precision: int = 4) -> list[str]:
        """Locators covering a [west, south, east, north] box."""
        if len(bbox) != 4:
            raise ValueError(ErrorMessages.INVALID_BBOX)
        west, south, east, north = bbox
        return squares_in_bounds(GeoPoint(south, west), GeoPoint(north, east), precision)

    # ------------------------------------------------------------------
    # Elevation (async)
    # ------------------------------------------------------------------

    async def fetch_point(self, lat: float, lon: float) -> ElevationSample:
        """Get elevation at a single point."""
        return await self.pipeline.fetch_point(GeoPoint(lat, lon))

    async def fetch_points(self, points: list[list[float]]) -> MultiPointResult:
        """Get elevations at multiple [lat, lon] points."""
        if not points:
            raise InvalidRequest(ErrorMessages.EMPTY_POINTS)
        geo_points = [GeoPoint(p[0], p[1]) for p in points]

        # No cancel token, so the pipeline never returns None here
        samples = await self.pipeline.fetch_all(geo_points) or []

        values = [s.elevation_m for s in samples]
        return MultiPointResult(samples=samples, elevation_range=[min(values), max(values)])

    # ------------------------------------------------------------------
    # Coverage
    # ------------------------------------------------------------------

    def build_request(
        self,
        lat: float | None = None,
        lon: float | None = None,
        locator: str | None = None,
        antenna_height_m: float = DEFAULT_ANTENNA_HEIGHT_M,
        label: str | None = None,
    ) -> CoverageRequest:
        """Build a coverage request from coordinates or a grid locator.

        A locator is resolved to the center of its square and, when no label
        is given, becomes the request's label. Coordinates win when both are
        supplied.
        """
        if lat is not None and lon is not None:
            observer = GeoPoint(lat, lon)
        elif locator:
            observer = to_bounds(locator).center
            if label is None:
                label = to_locator(observer, len(normalize_locator(locator)))
        else:
            raise InvalidRequest(ErrorMessages.MISSING_OBSERVER)

        request = CoverageRequest(
            observer=observer,
            antenna_height_m=antenna_height_m,
            grid_label=label,
        )
        request.validate()
        return request

    async def calculate_coverage(self, request: CoverageRequest) -> StoredCoverage | None:
        """Run a coverage computation to completion.

        Returns:
            The retained result, or None when cancelled or superseded
        """
        result = await self.engine.calculate(request)
        if result is None:
            return None
        return await self._record(result)

    def start_coverage(self, request: CoverageRequest) -> asyncio.Task:
        """Start a computation in the background, superseding any current one."""
        task = self.engine.start(request)
        self._collector = asyncio.get_running_loop().create_task(self._collect(task))
        return self._collector

    def cancel_coverage(self) -> bool:
        return self.engine.cancel()

    def coverage_status(self) -> CoverageStatus:
        engine = self.engine
        return CoverageStatus(
            state=engine.state,
            last_outcome=engine.last_outcome,
            progress=engine.progress,
            error=str(engine.error) if engine.error is not None else None,
            request=engine.current_request,
            last_result_id=self._last_result_id,
        )

    def get_result(self, coverage_id: str | None = None) -> StoredCoverage:
        """Retained result by id; the most recent one when no id is given."""
        key = coverage_id or self._last_result_id
        if key is None or key not in self._results:
            raise ValueError(ErrorMessages.UNKNOWN_COVERAGE.format(coverage_id or "latest"))
        return self._results[key]

    def list_results(self) -> list[StoredCoverage]:
        return list(self._results.values())

    def clear_result(self, coverage_id: str) -> None:
        if coverage_id not in self._results:
            raise ValueError(ErrorMessages.UNKNOWN_COVERAGE.format(coverage_id))
        del self._results[coverage_id]
        if self._last_result_id == coverage_id:
            self._last_result_id = next(reversed(self._results), None)

    def clear_all_results(self) -> int:
        count = len(self._results)
        self._results.clear()
        self._last_result_id = None
        return count

    def close(self) -> None:
        client = getattr(self.pipeline, "client", None)
        if client is not None and hasattr(client, "close"):
            client.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _collect(self, task: asyncio.Task) -> StoredCoverage | None:
        try:
            result = await task
        except LOSError as e:
            # Already recorded on the engine and reported by coverage_status
            logger.debug(f"Background coverage ended with error: {e}")
            return None
        if result is None:
            return None
        return await self._record(result)

    async def _record(self, result: CoverageResult) -> StoredCoverage:
        summary = summarize_coverage(result)
        stored = StoredCoverage(result=result, summary=summary, artifact_ref=None)

        # Retain before the artifact write, evicting oldest first
        while len(self._results) >= MAX_RETAINED_COVERAGES:
            oldest = next(iter(self._results))
            del self._results[oldest]
        self._results[result.id] = stored
        self._last_result_id = result.id

        stored.artifact_ref = await self._store_result(result, summary)
        return stored

    def _get_store(self) -> Any:
        """Get the artifact store instance."""
        from chuk_mcp_server import get_artifact_store

        store = get_artifact_store()
        if store is None:
            raise RuntimeError(ErrorMessages.NO_ARTIFACT_STORE)
        return store

    async def _store_result(self, result: CoverageResult, summary: CoverageSummary) -> str | None:
        """Store the full result as JSON. Returns None when storage is unavailable."""
        try:
            store = self._get_store()
            ref = f"{COVERAGE_ARTIFACT_PREFIX}/{result.id}.json"
            payload = coverage_payload(result, summary)
            await store.store(
                ref,
                json.dumps(payload).encode("utf-8"),
                mime_type="application/json",
                metadata={
                    "type": "los_coverage",
                    "observer": payload["observer"],
                    "grid_label": result.grid_label,
                    "antenna_height_m": result.antenna_height_m,
                    "ray_count": summary.ray_count,
                },
                summary=f"LOS coverage ({summary.ray_count} rays)",
            )
            return ref
        except Exception as e:
            logger.warning(f"Failed to store coverage {result.id}: {e}")
            return None
