"""Response models for chuk-mcp-los."""

from .responses import (
    CapabilitiesResponse,
    CoverageClearResponse,
    CoverageListItem,
    CoverageListResponse,
    CoverageResponse,
    CoverageStatusResponse,
    CoverageSummaryInfo,
    ErrorResponse,
    GridBoundsInfo,
    GridBoundsResponse,
    GridSquaresResponse,
    LocatorResponse,
    MultiPointResponse,
    PointElevationResponse,
    PointInfo,
    ProgressInfo,
    RayInfo,
    StatusResponse,
    format_response,
)

__all__ = [
    "ErrorResponse",
    "GridBoundsInfo",
    "LocatorResponse",
    "GridBoundsResponse",
    "GridSquaresResponse",
    "PointElevationResponse",
    "PointInfo",
    "MultiPointResponse",
    "CoverageSummaryInfo",
    "RayInfo",
    "CoverageResponse",
    "ProgressInfo",
    "CoverageStatusResponse",
    "CoverageListItem",
    "CoverageListResponse",
    "CoverageClearResponse",
    "StatusResponse",
    "CapabilitiesResponse",
    "format_response",
]
