"""
Response models for chuk-mcp-los tools.

All tool responses are Pydantic models for type safety and consistent API.
"""

from pydantic import BaseModel, ConfigDict, Field

from ..constants import METERS_TO_FEET


def format_response(model: BaseModel, output_mode: str = "json") -> str:
    """Format a response model as JSON or human-readable text.

    Args:
        model: Pydantic response model instance
        output_mode: "json" (default) or "text"

    Returns:
        Formatted string
    """
    if output_mode == "text" and hasattr(model, "to_text"):
        return str(model.to_text())
    return str(model.model_dump_json())


def format_elevation(elevation_m: float) -> str:
    """Elevation in metres and feet, e.g. "1524 m (5000 ft)"."""
    return f"{elevation_m:.0f} m ({elevation_m * METERS_TO_FEET:.0f} ft)"


def _latlon(point: list[float]) -> str:
    return f"({point[0]:.5f}, {point[1]:.5f})"


class ErrorResponse(BaseModel):
    """Error response model for tool failures."""

    model_config = ConfigDict(extra="forbid")

    error: str = Field(..., description="Error message describing what went wrong")

    def to_text(self) -> str:
        return f"Error: {self.error}"


# ---------------------------------------------------------------------------
# Grid responses
# ---------------------------------------------------------------------------


class GridBoundsInfo(BaseModel):
    """Corners and center of a grid square."""

    model_config = ConfigDict(extra="forbid")

    southwest: list[float] = Field(..., description="Southwest corner [lat, lon]")
    northeast: list[float] = Field(..., description="Northeast corner [lat, lon]")
    center: list[float] = Field(..., description="Center point [lat, lon]")
    lat_span_deg: float = Field(..., description="Latitude span in degrees")
    lon_span_deg: float = Field(..., description="Longitude span in degrees")


class LocatorResponse(BaseModel):
    """Response model for locating a point on the Maidenhead grid."""

    model_config = ConfigDict(extra="forbid")

    lat: float = Field(..., description="Latitude of the query point")
    lon: float = Field(..., description="Longitude of the query point")
    precision: int = Field(..., description="Locator length requested")
    locator: str = Field(..., description="Grid locator at the requested precision")
    all_precisions: dict[str, str] = Field(
        ..., description="Locator at every precision, keyed by tier name"
    )
    bounds: GridBoundsInfo = Field(..., description="Bounds of the located square")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            f"Grid locator for {_latlon([self.lat, self.lon])}: {self.locator}",
            f"Square center: {_latlon(self.bounds.center)}",
            "",
        ]
        for name, locator in self.all_precisions.items():
            lines.append(f"  {name}: {locator}")
        return "\n".join(lines)


class GridBoundsResponse(BaseModel):
    """Response model for decoding a grid locator."""

    model_config = ConfigDict(extra="forbid")

    locator: str = Field(..., description="Grid locator as given")
    precision: int = Field(..., description="Locator length")
    bounds: GridBoundsInfo = Field(..., description="Square bounds")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        b = self.bounds
        lines = [
            self.message,
            f"Southwest: {_latlon(b.southwest)}",
            f"Northeast: {_latlon(b.northeast)}",
            f"Center: {_latlon(b.center)}",
        ]
        return "\n".join(lines)


class GridSquaresResponse(BaseModel):
    """Response model for enumerating grid squares over an area."""

    model_config = ConfigDict(extra="forbid")

    bbox: list[float] = Field(..., description="Bounding box [west, south, east, north]")
    precision: int = Field(..., description="Locator length")
    count: int = Field(..., description="Number of squares", ge=0)
    locators: list[str] = Field(..., description="Locators ordered south to north, west to east")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return "\n".join([self.message, ", ".join(self.locators)])


# ---------------------------------------------------------------------------
# Elevation responses
# ---------------------------------------------------------------------------


class PointElevationResponse(BaseModel):
    """Response model for single-point elevation query."""

    model_config = ConfigDict(extra="forbid")

    lat: float = Field(..., description="Latitude of the query point")
    lon: float = Field(..., description="Longitude of the query point")
    elevation_m: float = Field(..., description="Elevation in metres")
    elevation_ft: float = Field(..., description="Elevation in feet")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return f"Elevation at {_latlon([self.lat, self.lon])}: {format_elevation(self.elevation_m)}"


class PointInfo(BaseModel):
    """Elevation data for a single point in a multi-point query."""

    model_config = ConfigDict(extra="forbid")

    lat: float = Field(..., description="Latitude")
    lon: float = Field(..., description="Longitude")
    elevation_m: float = Field(..., description="Elevation in metres")


class MultiPointResponse(BaseModel):
    """Response model for multi-point elevation query."""

    model_config = ConfigDict(extra="forbid")

    point_count: int = Field(..., description="Number of points queried", ge=1)
    points: list[PointInfo] = Field(..., description="Elevation results per point")
    elevation_range: list[float] = Field(..., description="[min, max] elevation across all points")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        elev_min, elev_max = self.elevation_range
        lines = [
            f"Elevation for {self.point_count} point(s)",
            f"Range: {elev_min:.1f}m to {elev_max:.1f}m",
            "",
        ]
        for p in self.points:
            lines.append(f"  {_latlon([p.lat, p.lon])}: {p.elevation_m:.1f}m")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Coverage responses
# ---------------------------------------------------------------------------


class CoverageSummaryInfo(BaseModel):
    """Aggregate line-of-sight statistics."""

    model_config = ConfigDict(extra="forbid")

    ray_count: int = Field(..., description="Number of rays (bearings)", ge=0)
    mean_distance_km: float = Field(..., description="Mean line-of-sight distance")
    min_distance_km: float = Field(..., description="Shortest line-of-sight distance")
    max_distance_km: float = Field(..., description="Longest line-of-sight distance")
    farthest_bearing_deg: int | None = Field(None, description="Bearing of the longest ray")
    full_range_rays: int = Field(..., description="Rays clear to the maximum range", ge=0)
    visible_points: int = Field(..., description="Visible samples across all rays", ge=0)


class RayInfo(BaseModel):
    """Line of sight along one bearing."""

    model_config = ConfigDict(extra="forbid")

    bearing_deg: int = Field(..., description="Bearing in degrees from north")
    max_visible_distance_km: float = Field(..., description="Furthest visible distance")
    endpoint: list[float] = Field(..., description="Ray endpoint [lat, lon]")
    visible_count: int = Field(..., description="Number of visible samples", ge=0)


class CoverageResponse(BaseModel):
    """Response model for a completed coverage computation."""

    model_config = ConfigDict(extra="forbid")

    coverage_id: str = Field(..., description="Coverage result identifier")
    observer: list[float] = Field(..., description="Observer point [lat, lon]")
    grid_label: str | None = Field(None, description="Grid locator the observer came from")
    antenna_height_m: float = Field(..., description="Antenna height above ground in metres")
    observer_elevation_m: float = Field(..., description="Ground elevation at observer in metres")
    max_range_km: float = Field(..., description="Maximum range sampled per ray")
    computed_at: str = Field(..., description="Completion time (ISO 8601, UTC)")
    summary: CoverageSummaryInfo = Field(..., description="Aggregate statistics")
    rays: list[RayInfo] | None = Field(None, description="Per-bearing results when requested")
    artifact_ref: str | None = Field(None, description="Artifact store reference for full result")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        s = self.summary
        observer = _latlon(self.observer)
        if self.grid_label:
            observer = f"{self.grid_label} {observer}"
        lines = [
            f"Coverage {self.coverage_id}",
            f"Observer: {observer}",
            f"Ground: {format_elevation(self.observer_elevation_m)}, "
            f"antenna {self.antenna_height_m:.1f}m",
            f"Rays: {s.ray_count}, range {self.max_range_km:.0f} km",
            f"LOS distance: mean {s.mean_distance_km:.1f} km, "
            f"min {s.min_distance_km:.1f} km, max {s.max_distance_km:.1f} km",
        ]
        if s.farthest_bearing_deg is not None:
            lines.append(f"Farthest bearing: {s.farthest_bearing_deg}°")
        if self.artifact_ref:
            lines.append(f"Artifact: {self.artifact_ref}")
        if self.rays:
            lines.append("")
            for ray in self.rays:
                lines.append(f"  {ray.bearing_deg:3d}°: {ray.max_visible_distance_km:.1f} km")
        return "\n".join(lines)


class ProgressInfo(BaseModel):
    """Batch progress of a running computation."""

    model_config = ConfigDict(extra="forbid")

    completed_units: int = Field(..., description="Completed batches", ge=0)
    total_units: int = Field(..., description="Total batches", ge=0)
    percent: float = Field(..., description="Percent complete", ge=0, le=100)


class CoverageStatusResponse(BaseModel):
    """Response model for coverage engine state."""

    model_config = ConfigDict(extra="forbid")

    state: str = Field(..., description="Engine state (idle, calculating, ...)")
    last_outcome: str | None = Field(None, description="Outcome of the last computation")
    progress: ProgressInfo | None = Field(None, description="Progress while calculating")
    observer: list[float] | None = Field(None, description="Observer of the running computation")
    grid_label: str | None = Field(None, description="Grid label of the running computation")
    error: str | None = Field(None, description="Error of the last failed computation")
    last_result_id: str | None = Field(None, description="Most recent coverage result id")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [self.message, f"State: {self.state}"]
        if self.progress is not None:
            p = self.progress
            lines.append(f"Progress: {p.percent:.1f}% ({p.completed_units}/{p.total_units} batches)")
        if self.observer is not None:
            lines.append(f"Observer: {_latlon(self.observer)}")
        if self.last_outcome:
            lines.append(f"Last outcome: {self.last_outcome}")
        if self.error:
            lines.append(f"Error: {self.error}")
        if self.last_result_id:
            lines.append(f"Last result: {self.last_result_id}")
        return "\n".join(lines)


class CoverageListItem(BaseModel):
    """Summary of a retained coverage result."""

    model_config = ConfigDict(extra="forbid")

    coverage_id: str = Field(..., description="Coverage result identifier")
    observer: list[float] = Field(..., description="Observer point [lat, lon]")
    grid_label: str | None = Field(None, description="Grid locator the observer came from")
    antenna_height_m: float = Field(..., description="Antenna height in metres")
    computed_at: str = Field(..., description="Completion time (ISO 8601, UTC)")
    mean_distance_km: float = Field(..., description="Mean line-of-sight distance")
    max_distance_km: float = Field(..., description="Longest line-of-sight distance")
    artifact_ref: str | None = Field(None, description="Artifact store reference")

    def to_text(self) -> str:
        label = f" [{self.grid_label}]" if self.grid_label else ""
        return (
            f"{self.coverage_id}{label} {_latlon(self.observer)} "
            f"h={self.antenna_height_m:.0f}m mean {self.mean_distance_km:.1f} km"
        )


class CoverageListResponse(BaseModel):
    """Response model for listing retained coverage results."""

    model_config = ConfigDict(extra="forbid")

    coverages: list[CoverageListItem] = Field(..., description="Retained results, oldest first")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [self.message]
        for c in self.coverages:
            lines.append(f"  {c.to_text()}")
        return "\n".join(lines)


class CoverageClearResponse(BaseModel):
    """Response model for clearing coverage results."""

    model_config = ConfigDict(extra="forbid")

    cleared: int = Field(..., description="Number of results removed", ge=0)
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Discovery responses
# ---------------------------------------------------------------------------


class StatusResponse(BaseModel):
    """Response model for server status queries."""

    model_config = ConfigDict(extra="forbid")

    server: str = Field(default="chuk-mcp-los", description="Server name")
    version: str = Field(default="0.1.0", description="Server version")
    engine_state: str = Field(..., description="Coverage engine state")
    elevation_api_url: str = Field(..., description="Elevation lookup endpoint")
    storage_provider: str = Field(..., description="Active storage provider (memory/filesystem/s3)")
    artifact_store_available: bool = Field(
        default=False, description="Whether artifact store is available"
    )
    retained_coverages: int = Field(default=0, description="Coverage results held in memory")

    def to_text(self) -> str:
        store_status = "available" if self.artifact_store_available else "not available"
        lines = [
            f"{self.server} v{self.version}",
            f"Engine: {self.engine_state}",
            f"Elevation API: {self.elevation_api_url}",
            f"Storage: {self.storage_provider}",
            f"Artifact store: {store_status}",
            f"Retained coverages: {self.retained_coverages}",
        ]
        return "\n".join(lines)


class CapabilitiesResponse(BaseModel):
    """Response model for server capabilities listing."""

    model_config = ConfigDict(extra="forbid")

    server: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")
    grid_precisions: list[int] = Field(..., description="Supported locator lengths")
    default_precision: int = Field(..., description="Default locator length")
    num_radials: int = Field(..., description="Bearings per coverage computation")
    max_distance_km: float = Field(..., description="Maximum range per ray")
    sample_interval_km: float = Field(..., description="Spacing of terrain samples")
    k_factor: float | None = Field(None, description="Refraction factor (null for flat Earth)")
    batch_size: int = Field(..., description="Points per elevation request")
    max_concurrent: int = Field(..., description="Simultaneous elevation requests")
    tools: list[str] = Field(..., description="Available tool names")
    tool_count: int = Field(..., description="Number of available tools", ge=0)
    llm_guidance: str = Field(..., description="LLM-friendly usage guidance for the server")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        k = f"{self.k_factor:.3f}" if self.k_factor is not None else "flat Earth"
        lines = [
            f"{self.server} v{self.version}",
            f"Tools: {self.tool_count} ({', '.join(self.tools)})",
            f"Grid precisions: {', '.join(str(p) for p in self.grid_precisions)}",
            f"Coverage: {self.num_radials} radials to {self.max_distance_km:.0f} km "
            f"every {self.sample_interval_km} km, K={k}",
            f"Elevation batches: {self.batch_size} points, {self.max_concurrent} concurrent",
            f"Guidance: {self.llm_guidance}",
        ]
        return "\n".join(lines)
