"""
HTTP client for the batch elevation lookup service.

Synchronous; the fetch pipeline wraps calls in asyncio.to_thread().
One request carries many locations: ``?locations=lat,lng|lat,lng|...``
and the service answers ``{"results": [{"elevation": ...}, ...]}`` in
request order.
"""

import logging
from typing import Sequence

import requests

from ..constants import (
    ELEVATION_API_URL,
    HTTP_TOO_MANY_REQUESTS,
    REQUEST_TIMEOUT_S,
    ErrorMessages,
)
from .errors import ProviderUnavailable, RateLimited
from .geodesy import GeoPoint

logger = logging.getLogger(__name__)


class ElevationClient:
    """Batch elevation lookups against an HTTP elevation API."""

    def __init__(
        self,
        base_url: str = ELEVATION_API_URL,
        timeout_s: float = REQUEST_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._session = session or requests.Session()

    def lookup(self, points: Sequence[GeoPoint]) -> list[float]:
        """Elevation in metres for each point, in request order.

        Raises:
            RateLimited: HTTP 429
            ProviderUnavailable: Other non-2xx status, transport error,
                or a payload that does not match the request
        """
        if not points:
            return []

        locations = "|".join(f"{p.lat},{p.lng}" for p in points)
        try:
            response = self._session.get(
                self.base_url,
                params={"locations": locations},
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise ProviderUnavailable(ErrorMessages.PROVIDER_UNREACHABLE.format(e)) from e

        if response.status_code == HTTP_TOO_MANY_REQUESTS:
            raise RateLimited(
                ErrorMessages.PROVIDER_STATUS.format(response.status_code, response.reason)
            )
        if not response.ok:
            raise ProviderUnavailable(
                ErrorMessages.PROVIDER_STATUS.format(response.status_code, response.reason)
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderUnavailable(ErrorMessages.PROVIDER_NO_RESULTS) from e

        results = payload.get("results") if isinstance(payload, dict) else None
        if not results:
            raise ProviderUnavailable(ErrorMessages.PROVIDER_NO_RESULTS)
        if len(results) != len(points):
            raise ProviderUnavailable(
                ErrorMessages.PROVIDER_RESULT_COUNT.format(len(results), len(points))
            )

        elevations = []
        for item in results:
            value = item.get("elevation") if isinstance(item, dict) else None
            # Voids (open ocean, missing tiles) come back as null
            try:
                elevations.append(float(value) if value is not None else 0.0)
            except (TypeError, ValueError) as e:
                raise ProviderUnavailable(ErrorMessages.PROVIDER_NO_RESULTS) from e
        return elevations

    def close(self) -> None:
        self._session.close()
