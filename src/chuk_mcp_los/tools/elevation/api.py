"""
Elevation tools — terrain height lookups.

These tools call the batch elevation service through the manager's fetch
pipeline, so they share its rate limiting and retry policy.
"""

import logging

from ...constants import METERS_TO_FEET, SuccessMessages
from ...models.responses import (
    ErrorResponse,
    MultiPointResponse,
    PointElevationResponse,
    PointInfo,
    format_elevation,
    format_response,
)

logger = logging.getLogger(__name__)


def register_elevation_tools(mcp, manager):
    """Register elevation tools with the MCP server."""

    @mcp.tool()
    async def elevation_point(lat: float, lon: float, output_mode: str = "json") -> str:
        """Get terrain elevation at a single point.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)
            output_mode: "json" or "text"

        Returns:
            Elevation in metres and feet
        """
        try:
            sample = await manager.fetch_point(lat, lon)
            response = PointElevationResponse(
                lat=lat,
                lon=lon,
                elevation_m=sample.elevation_m,
                elevation_ft=round(sample.elevation_m * METERS_TO_FEET, 1),
                message=SuccessMessages.POINT_ELEVATION.format(format_elevation(sample.elevation_m)),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"elevation_point failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def elevation_points(points: list[list[float]], output_mode: str = "json") -> str:
        """Get terrain elevation at multiple points.

        Args:
            points: List of [lat, lon] pairs
            output_mode: "json" or "text"

        Returns:
            Elevation per point and the overall range
        """
        try:
            result = await manager.fetch_points(points)
            response = MultiPointResponse(
                point_count=len(result.samples),
                points=[
                    PointInfo(lat=s.point.lat, lon=s.point.lng, elevation_m=s.elevation_m)
                    for s in result.samples
                ],
                elevation_range=result.elevation_range,
                message=SuccessMessages.POINTS_ELEVATION.format(len(result.samples)),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"elevation_points failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
