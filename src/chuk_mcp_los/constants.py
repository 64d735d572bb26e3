"""
Constants for chuk-mcp-los server.

All magic strings, grid metadata, and configuration values live here.
"""


class ServerConfig:
    NAME = "chuk-mcp-los"
    VERSION = "0.1.0"
    DESCRIPTION = "Maidenhead Grid Locator & Radio Line-of-Sight Coverage MCP Server"


class StorageProvider:
    MEMORY = "memory"
    S3 = "s3"
    FILESYSTEM = "filesystem"


class SessionProvider:
    MEMORY = "memory"
    REDIS = "redis"


class EnvVar:
    ARTIFACTS_PROVIDER = "CHUK_ARTIFACTS_PROVIDER"
    BUCKET_NAME = "BUCKET_NAME"
    REDIS_URL = "REDIS_URL"
    ARTIFACTS_PATH = "CHUK_ARTIFACTS_PATH"
    AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
    AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
    AWS_ENDPOINT_URL_S3 = "AWS_ENDPOINT_URL_S3"
    MCP_STDIO = "MCP_STDIO"
    ELEVATION_API_URL = "LOS_ELEVATION_API_URL"
    BATCH_SIZE = "LOS_BATCH_SIZE"
    MAX_CONCURRENT = "LOS_MAX_CONCURRENT"
    REQUEST_INTERVAL_S = "LOS_REQUEST_INTERVAL_S"
    NUM_RADIALS = "LOS_NUM_RADIALS"
    MAX_DISTANCE_KM = "LOS_MAX_DISTANCE_KM"
    SAMPLE_INTERVAL_KM = "LOS_SAMPLE_INTERVAL_KM"
    K_FACTOR = "LOS_K_FACTOR"
    MAX_RETRIES = "LOS_MAX_RETRIES"


# ---------------------------------------------------------------------------
# Maidenhead grid
# ---------------------------------------------------------------------------

GRID_PRECISIONS = [2, 4, 6, 8, 10]
DEFAULT_PRECISION = 6

# Case-insensitive: field A-R, square 0-9, subsquare A-X, extended 0-9, super A-X
GRID_LOCATOR_PATTERN = r"^[A-Ra-r]{2}(?:[0-9]{2}(?:[A-Xa-x]{2}(?:[0-9]{2}(?:[A-Xa-x]{2})?)?)?)?$"

# (lng_span_deg, lat_span_deg, divisions, name) for each character pair
GRID_TIERS: list[tuple[float, float, int, str]] = [
    (20.0, 10.0, 18, "field"),
    (2.0, 1.0, 10, "square"),
    (2.0 / 24, 1.0 / 24, 24, "subsquare"),
    (2.0 / 240, 1.0 / 240, 10, "extended"),
    (2.0 / 5760, 1.0 / 5760, 24, "super_extended"),
]

MAX_GRID_SQUARES = 1000

# ---------------------------------------------------------------------------
# Geometry & line of sight
# ---------------------------------------------------------------------------

EARTH_RADIUS_KM = 6371.0
DEFAULT_K_FACTOR = 4.0 / 3.0
DEFAULT_NUM_RADIALS = 360
DEFAULT_MAX_DISTANCE_KM = 300.0
DEFAULT_SAMPLE_INTERVAL_KM = 1.0
DEFAULT_ANTENNA_HEIGHT_M = 10.0

# ---------------------------------------------------------------------------
# Elevation service
# ---------------------------------------------------------------------------

ELEVATION_API_URL = "https://elevation.qso.app/api/v1/lookup"
DEFAULT_BATCH_SIZE = 100
DEFAULT_MAX_CONCURRENT = 3
DEFAULT_REQUEST_INTERVAL_S = 0.1
REQUEST_TIMEOUT_S = 30.0
HTTP_TOO_MANY_REQUESTS = 429

# Retry on rate limiting: base * 2**attempt
RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY_S = 1.0

METERS_TO_FEET = 3.28084

COVERAGE_ARTIFACT_PREFIX = "coverage"
MAX_RETAINED_COVERAGES = 20

GRID_TOOLS = ["grid_locate", "grid_bounds", "grid_squares"]
ELEVATION_TOOLS = ["elevation_point", "elevation_points"]
COVERAGE_TOOLS = [
    "coverage_calculate",
    "coverage_start",
    "coverage_status",
    "coverage_get",
    "coverage_cancel",
    "coverage_list",
    "coverage_clear",
]


class ErrorMessages:
    INVALID_PRECISION = "Invalid precision {}. Available: {}"
    INVALID_LOCATOR = "Invalid Maidenhead locator '{}'"
    INVALID_LATITUDE = "Latitude {} out of range [-90, 90]"
    INVALID_LONGITUDE = "Longitude {} out of range [-180, 180]"
    INVALID_BBOX = "Invalid bounding box: must be [west, south, east, north]"
    INVALID_BBOX_VALUES = "Invalid bounding box values: west ({}) must be < east ({})"
    INVALID_BBOX_LAT = "Invalid bounding box values: south ({}) must be < north ({})"
    TOO_MANY_SQUARES = "Would generate {} grid squares, exceeding max of {}"
    INVALID_ANTENNA_HEIGHT = "antenna_height_m must be > 0, got {}"
    INVALID_DISTANCE = "max_distance_km must be >= 0, got {}"
    INVALID_INTERVAL = "interval_km must be > 0, got {}"
    INVALID_NUM_RADIALS = "num_radials must be a positive divisor of 360, got {}"
    INVALID_K_FACTOR = "k_factor must be > 0, got {}"
    INVALID_BATCH_SIZE = "batch_size must be > 0, got {}"
    INVALID_MAX_CONCURRENT = "max_concurrent must be > 0, got {}"
    MISSING_OBSERVER = "Provide either lat/lon or a grid locator"
    EMPTY_POINTS = "points must contain at least one [lat, lon] pair"
    PROVIDER_STATUS = "Elevation API error: {} {}"
    PROVIDER_UNREACHABLE = "Elevation API unreachable: {}"
    PROVIDER_NO_RESULTS = "No elevation data returned"
    PROVIDER_RESULT_COUNT = "Elevation API returned {} results for {} locations"
    RATE_LIMIT_EXHAUSTED = "Elevation API still rate limited after {} retries"
    NO_ARTIFACT_STORE = (
        "No artifact store available. Configure CHUK_ARTIFACTS_PROVIDER "
        "environment variable (memory, filesystem, or s3)."
    )
    UNKNOWN_COVERAGE = "Coverage '{}' not found"


class SuccessMessages:
    LOCATE = "{} at precision {}"
    BOUNDS = "Grid square {} ({:.4f}° x {:.4f}°)"
    SQUARES = "{} grid squares at precision {}"
    POINT_ELEVATION = "Elevation at point: {}"
    POINTS_ELEVATION = "Retrieved elevation for {} points"
    STATUS = "LOS MCP Server v{} (engine: {}, storage: {})"
    COVERAGE_COMPLETE = "Coverage computed: {} rays, mean LOS {:.1f} km, max {:.1f} km"
    COVERAGE_STARTED = "Coverage calculation started for ({:.5f}, {:.5f})"
    COVERAGE_CANCELLED = "Coverage calculation cancelled"
    COVERAGE_NOTHING_TO_CANCEL = "No coverage calculation in progress"
    COVERAGE_SUPERSEDED = "Coverage calculation was cancelled or superseded"
    COVERAGE_LIST = "{} coverage results retained"
    COVERAGE_CLEARED = "Cleared {} coverage results"
