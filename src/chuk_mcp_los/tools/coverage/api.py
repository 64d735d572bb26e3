"""
Coverage tools — radio line-of-sight coverage from an observer.

A computation fetches tens of thousands of elevations, so it can run either
to completion (coverage_calculate) or in the background (coverage_start,
then coverage_status / coverage_get). Starting a new computation cancels the
one in progress.
"""

import logging

from ...constants import DEFAULT_ANTENNA_HEIGHT_M, SuccessMessages
from ...core.los_manager import CoverageStatus, StoredCoverage
from ...models.responses import (
    CoverageClearResponse,
    CoverageListItem,
    CoverageListResponse,
    CoverageResponse,
    CoverageStatusResponse,
    CoverageSummaryInfo,
    ErrorResponse,
    ProgressInfo,
    RayInfo,
    format_response,
)

logger = logging.getLogger(__name__)


def coverage_response(stored: StoredCoverage, include_rays: bool = False) -> CoverageResponse:
    result = stored.result
    summary = stored.summary
    rays = None
    if include_rays:
        rays = [
            RayInfo(
                bearing_deg=ray.bearing_deg,
                max_visible_distance_km=ray.max_visible_distance_km,
                endpoint=[ray.endpoint.lat, ray.endpoint.lng],
                visible_count=len(ray.visible_points),
            )
            for ray in result.rays
        ]

    return CoverageResponse(
        coverage_id=result.id,
        observer=[result.observer.lat, result.observer.lng],
        grid_label=result.grid_label,
        antenna_height_m=result.antenna_height_m,
        observer_elevation_m=result.observer_elevation_m,
        max_range_km=result.max_range_km,
        computed_at=result.computed_at.isoformat(),
        summary=CoverageSummaryInfo(
            ray_count=summary.ray_count,
            mean_distance_km=summary.mean_distance_km,
            min_distance_km=summary.min_distance_km,
            max_distance_km=summary.max_distance_km,
            farthest_bearing_deg=summary.farthest_bearing_deg,
            full_range_rays=summary.full_range_rays,
            visible_points=summary.visible_points,
        ),
        rays=rays,
        artifact_ref=stored.artifact_ref,
        message=SuccessMessages.COVERAGE_COMPLETE.format(
            summary.ray_count, summary.mean_distance_km, summary.max_distance_km
        ),
    )


def status_response(status: CoverageStatus, message: str) -> CoverageStatusResponse:
    progress = None
    if status.progress is not None:
        progress = ProgressInfo(
            completed_units=status.progress.completed_units,
            total_units=status.progress.total_units,
            percent=status.progress.percent,
        )
    request = status.request
    return CoverageStatusResponse(
        state=status.state.value,
        last_outcome=status.last_outcome.value if status.last_outcome else None,
        progress=progress,
        observer=[request.observer.lat, request.observer.lng] if request else None,
        grid_label=request.grid_label if request else None,
        error=status.error,
        last_result_id=status.last_result_id,
        message=message,
    )


def register_coverage_tools(mcp, manager):
    """Register coverage tools with the MCP server."""

    @mcp.tool()
    async def coverage_calculate(
        lat: float | None = None,
        lon: float | None = None,
        locator: str | None = None,
        antenna_height_m: float = DEFAULT_ANTENNA_HEIGHT_M,
        label: str | None = None,
        include_rays: bool = False,
        output_mode: str = "json",
    ) -> str:
        """Compute line-of-sight coverage in every direction from an observer
        and wait for the result.

        Give either lat/lon or a grid locator (the square's center is used).

        Args:
            lat: Observer latitude (-90 to 90)
            lon: Observer longitude (-180 to 180)
            locator: Maidenhead locator, used when lat/lon are omitted
            antenna_height_m: Antenna height above ground in metres (> 0)
            label: Optional label stored with the result
            include_rays: Include the per-bearing distances in the response
            output_mode: "json" or "text"

        Returns:
            Coverage summary with artifact reference for the full result
        """
        try:
            request = manager.build_request(
                lat=lat,
                lon=lon,
                locator=locator,
                antenna_height_m=antenna_height_m,
                label=label,
            )
            stored = await manager.calculate_coverage(request)
            if stored is None:
                return format_response(
                    ErrorResponse(error=SuccessMessages.COVERAGE_SUPERSEDED), output_mode
                )
            return format_response(coverage_response(stored, include_rays), output_mode)

        except Exception as e:
            logger.error(f"coverage_calculate failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def coverage_start(
        lat: float | None = None,
        lon: float | None = None,
        locator: str | None = None,
        antenna_height_m: float = DEFAULT_ANTENNA_HEIGHT_M,
        label: str | None = None,
        output_mode: str = "json",
    ) -> str:
        """Start a coverage computation in the background and return immediately.

        Cancels any computation already running. Poll coverage_status for
        progress and fetch the result with coverage_get.

        Args:
            lat: Observer latitude (-90 to 90)
            lon: Observer longitude (-180 to 180)
            locator: Maidenhead locator, used when lat/lon are omitted
            antenna_height_m: Antenna height above ground in metres (> 0)
            label: Optional label stored with the result
            output_mode: "json" or "text"

        Returns:
            Engine status after starting
        """
        try:
            request = manager.build_request(
                lat=lat,
                lon=lon,
                locator=locator,
                antenna_height_m=antenna_height_m,
                label=label,
            )
            manager.start_coverage(request)
            message = SuccessMessages.COVERAGE_STARTED.format(
                request.observer.lat, request.observer.lng
            )
            return format_response(status_response(manager.coverage_status(), message), output_mode)

        except Exception as e:
            logger.error(f"coverage_start failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def coverage_status(output_mode: str = "json") -> str:
        """Get the coverage engine state and progress of a running computation.

        Args:
            output_mode: "json" or "text"

        Returns:
            State, progress percentage, last outcome and any error
        """
        try:
            status = manager.coverage_status()
            message = f"Coverage engine {status.state.value}"
            return format_response(status_response(status, message), output_mode)

        except Exception as e:
            logger.error(f"coverage_status failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def coverage_get(
        coverage_id: str | None = None,
        include_rays: bool = True,
        output_mode: str = "json",
    ) -> str:
        """Get a retained coverage result.

        Args:
            coverage_id: Result identifier (default: the most recent result)
            include_rays: Include the per-bearing distances
            output_mode: "json" or "text"

        Returns:
            Coverage summary and, optionally, every ray
        """
        try:
            stored = manager.get_result(coverage_id)
            return format_response(coverage_response(stored, include_rays), output_mode)

        except Exception as e:
            logger.error(f"coverage_get failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def coverage_cancel(output_mode: str = "json") -> str:
        """Cancel the running coverage computation, if any.

        Requests already sent to the elevation service finish, but no
        further batches are started and no result is produced.

        Args:
            output_mode: "json" or "text"

        Returns:
            Engine status after cancelling
        """
        try:
            cancelled = manager.cancel_coverage()
            message = (
                SuccessMessages.COVERAGE_CANCELLED
                if cancelled
                else SuccessMessages.COVERAGE_NOTHING_TO_CANCEL
            )
            return format_response(status_response(manager.coverage_status(), message), output_mode)

        except Exception as e:
            logger.error(f"coverage_cancel failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def coverage_list(output_mode: str = "json") -> str:
        """List retained coverage results, oldest first.

        Args:
            output_mode: "json" or "text"

        Returns:
            One summary line per result
        """
        try:
            results = manager.list_results()
            items = [
                CoverageListItem(
                    coverage_id=s.result.id,
                    observer=[s.result.observer.lat, s.result.observer.lng],
                    grid_label=s.result.grid_label,
                    antenna_height_m=s.result.antenna_height_m,
                    computed_at=s.result.computed_at.isoformat(),
                    mean_distance_km=s.summary.mean_distance_km,
                    max_distance_km=s.summary.max_distance_km,
                    artifact_ref=s.artifact_ref,
                )
                for s in results
            ]
            response = CoverageListResponse(
                coverages=items,
                message=SuccessMessages.COVERAGE_LIST.format(len(items)),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"coverage_list failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def coverage_clear(coverage_id: str | None = None, output_mode: str = "json") -> str:
        """Remove one retained coverage result, or all of them.

        Stored artifacts are left in the artifact store.

        Args:
            coverage_id: Result to remove (default: remove every result)
            output_mode: "json" or "text"

        Returns:
            Number of results removed
        """
        try:
            if coverage_id:
                manager.clear_result(coverage_id)
                cleared = 1
            else:
                cleared = manager.clear_all_results()
            response = CoverageClearResponse(
                cleared=cleared,
                message=SuccessMessages.COVERAGE_CLEARED.format(cleared),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"coverage_clear failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

