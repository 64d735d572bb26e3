"""
Grid tools — Maidenhead locator encoding, decoding, and enumeration.

Pure computation; no network I/O.
"""

import logging

from ...constants import DEFAULT_PRECISION, SuccessMessages
from ...core.maidenhead import GridBounds
from ...models.responses import (
    ErrorResponse,
    GridBoundsInfo,
    GridBoundsResponse,
    GridSquaresResponse,
    LocatorResponse,
    format_response,
)

logger = logging.getLogger(__name__)


def bounds_info(bounds: GridBounds) -> GridBoundsInfo:
    return GridBoundsInfo(
        southwest=[bounds.southwest.lat, bounds.southwest.lng],
        northeast=[bounds.northeast.lat, bounds.northeast.lng],
        center=[bounds.center.lat, bounds.center.lng],
        lat_span_deg=bounds.lat_span,
        lon_span_deg=bounds.lng_span,
    )


def register_grid_tools(mcp, manager):
    """Register grid tools with the MCP server."""

    @mcp.tool()
    async def grid_locate(
        lat: float,
        lon: float,
        precision: int = DEFAULT_PRECISION,
        output_mode: str = "json",
    ) -> str:
        """Convert a coordinate to its Maidenhead grid locator.

        Args:
            lat: Latitude (-90 to 90)
            lon: Longitude (-180 to 180)
            precision: Locator length (2, 4, 6, 8, or 10)
            output_mode: "json" or "text"

        Returns:
            Locator at the requested precision, at every other precision,
            and the bounds of the square
        """
        try:
            result = manager.locate(lat, lon, precision)
            response = LocatorResponse(
                lat=lat,
                lon=lon,
                precision=precision,
                locator=result.locator,
                all_precisions=result.all_precisions,
                bounds=bounds_info(result.bounds),
                message=SuccessMessages.LOCATE.format(result.locator, precision),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"grid_locate failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def grid_bounds(locator: str, output_mode: str = "json") -> str:
        """Decode a Maidenhead locator into its corners and center.

        Args:
            locator: Grid locator, e.g. "KN41" or "kn41kb" (case-insensitive)
            output_mode: "json" or "text"

        Returns:
            Southwest/northeast corners, center, and spans in degrees
        """
        try:
            bounds = manager.describe_locator(locator)
            locator = locator.strip()
            response = GridBoundsResponse(
                locator=locator,
                precision=len(locator),
                bounds=bounds_info(bounds),
                message=SuccessMessages.BOUNDS.format(locator, bounds.lat_span, bounds.lng_span),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"grid_bounds failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def grid_squares(
        bbox: list[float],
        precision: int = 4,
        output_mode: str = "json",
    ) -> str:
        """List the grid squares covering a bounding box.

        Args:
            bbox: Bounding box [west, south, east, north] in degrees
            precision: Locator length (2, 4, 6, 8, or 10)
            output_mode: "json" or "text"

        Returns:
            Locators ordered south to north, west to east (at most 1000)
        """
        try:
            locators = manager.squares_in_bbox(bbox, precision)
            response = GridSquaresResponse(
                bbox=bbox,
                precision=precision,
                count=len(locators),
                locators=locators,
                message=SuccessMessages.SQUARES.format(len(locators), precision),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"grid_squares failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
