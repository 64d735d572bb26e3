"""Error hierarchy for grid and line-of-sight operations.

Input errors subclass ValueError so callers that validate with
``except ValueError`` keep working. Cancellation is not an error: the
pipeline and engine return ``None`` for a cancelled computation.
"""


class LOSError(Exception):
    """Base error for chuk-mcp-los."""


class InvalidRequest(LOSError, ValueError):
    """Request rejected before any network activity."""


class InvalidCoordinate(InvalidRequest):
    """Latitude or longitude outside the valid range."""


class InvalidLocator(LOSError, ValueError):
    """Malformed Maidenhead locator or unsupported precision."""


class ElevationServiceError(LOSError):
    """The elevation service failed for the current computation."""


class ProviderUnavailable(ElevationServiceError):
    """Non-2xx (other than 429), transport failure, or malformed payload."""


class RateLimited(ElevationServiceError):
    """HTTP 429 from the elevation service. Retried by the pipeline."""


class RateLimitExhausted(ElevationServiceError):
    """Rate limiting persisted past the retry ceiling.

    Attributes:
        attempts: Number of provider calls made for the batch
    """

    def __init__(self, message: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(message)
