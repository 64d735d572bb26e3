"""
Maidenhead Locator System (grid square) codec.

The world is divided into nested tiles, one character pair per tier:

- 2 chars (field): 20° lon x 10° lat, letters A-R (e.g. "KN")
- 4 chars (square): 2° lon x 1° lat, digits 0-9 (e.g. "KN41")
- 6 chars (subsquare): 5' lon x 2.5' lat, letters a-x (e.g. "KN41kb")
- 8 chars (extended): 30" lon x 15" lat, digits 0-9 (e.g. "KN41kb58")
- 10 chars (super extended): 1.25" lon x 0.625" lat, letters a-x

Encoding emits upper case field letters and lower case subsquare letters;
decoding is case-insensitive.
"""

import math
import re
from dataclasses import dataclass

from ..constants import (
    DEFAULT_PRECISION,
    GRID_LOCATOR_PATTERN,
    GRID_PRECISIONS,
    GRID_TIERS,
    MAX_GRID_SQUARES,
    ErrorMessages,
)
from .errors import InvalidLocator
from .geodesy import GeoPoint

_LOCATOR_RE = re.compile(GRID_LOCATOR_PATTERN)


@dataclass(frozen=True)
class GridBounds:
    """Bounds of a grid square."""

    southwest: GeoPoint
    northeast: GeoPoint
    center: GeoPoint

    @property
    def lat_span(self) -> float:
        return self.northeast.lat - self.southwest.lat

    @property
    def lng_span(self) -> float:
        return self.northeast.lng - self.southwest.lng

    def contains(self, point: GeoPoint) -> bool:
        return (
            self.southwest.lat <= point.lat <= self.northeast.lat
            and self.southwest.lng <= point.lng <= self.northeast.lng
        )


def _check_precision(precision: int) -> None:
    if precision not in GRID_PRECISIONS:
        raise InvalidLocator(
            ErrorMessages.INVALID_PRECISION.format(
                precision, ", ".join(str(p) for p in GRID_PRECISIONS)
            )
        )


def tile_span(precision: int) -> tuple[float, float]:
    """(lng_span, lat_span) in degrees of a tile at the given precision."""
    _check_precision(precision)
    lng_span, lat_span, _, _ = GRID_TIERS[precision // 2 - 1]
    return lng_span, lat_span


def _symbol(pair: int, index: int) -> str:
    if pair % 2 == 1:
        return str(index)
    base = "A" if pair == 0 else "a"
    return chr(ord(base) + index)


def _index(pair: int, char: str) -> int:
    if pair % 2 == 1:
        return int(char)
    return ord(char) - ord("A")


def to_locator(point: GeoPoint, precision: int = DEFAULT_PRECISION) -> str:
    """Encode a point as a Maidenhead locator.

    Args:
        point: Point to encode
        precision: Locator length (2, 4, 6, 8, or 10)

    Returns:
        Locator string, e.g. "KN41kb"
    """
    _check_precision(precision)

    rem_lng = point.lng + 180.0
    rem_lat = point.lat + 90.0
    chars: list[str] = []

    for pair, (lng_span, lat_span, divisions, _) in enumerate(GRID_TIERS[: precision // 2]):
        # Clamping keeps lat=90 / lng=180 and float drift inside the last tile
        lng_idx = min(max(int(rem_lng // lng_span), 0), divisions - 1)
        lat_idx = min(max(int(rem_lat // lat_span), 0), divisions - 1)
        rem_lng -= lng_idx * lng_span
        rem_lat -= lat_idx * lat_span
        chars.append(_symbol(pair, lng_idx))
        chars.append(_symbol(pair, lat_idx))

    return "".join(chars)


def is_valid_locator(value: str) -> bool:
    """Check whether a string is a valid 2-10 character locator."""
    if not isinstance(value, str):
        return False
    return _LOCATOR_RE.fullmatch(value.strip()) is not None


def normalize_locator(value: str) -> str:
    """Trim and upper-case a locator for comparison."""
    return value.strip().upper()


def to_bounds(locator: str) -> GridBounds:
    """Decode a locator into its southwest/northeast corners and center.

    Raises:
        InvalidLocator: Length not in {2,4,6,8,10} or a character out of range
    """
    if not is_valid_locator(locator):
        raise InvalidLocator(ErrorMessages.INVALID_LOCATOR.format(locator))

    upper = normalize_locator(locator)
    lng = -180.0
    lat = -90.0
    lng_span = 360.0
    lat_span = 180.0

    for pair, (tier_lng, tier_lat, _, _) in enumerate(GRID_TIERS[: len(upper) // 2]):
        lng += _index(pair, upper[2 * pair]) * tier_lng
        lat += _index(pair, upper[2 * pair + 1]) * tier_lat
        lng_span = tier_lng
        lat_span = tier_lat

    return GridBounds(
        southwest=GeoPoint(lat, lng),
        northeast=GeoPoint(min(lat + lat_span, 90.0), min(lng + lng_span, 180.0)),
        center=GeoPoint(lat + lat_span / 2, lng + lng_span / 2),
    )


def locator_center(locator: str) -> GeoPoint:
    """Center point of a grid square."""
    return to_bounds(locator).center


def all_precisions(point: GeoPoint) -> dict[str, str]:
    """Locators for a point at every precision, keyed by tier name."""
    return {
        name: to_locator(point, (pair + 1) * 2)
        for pair, (_, _, _, name) in enumerate(GRID_TIERS)
    }


def squares_in_bounds(
    southwest: GeoPoint,
    northeast: GeoPoint,
    precision: int,
    max_squares: int = MAX_GRID_SQUARES,
) -> list[str]:
    """Locators of every tile intersecting a bounding box, south to north.

    Raises:
        ValueError: Inverted box, or more than ``max_squares`` tiles
    """
    if southwest.lng >= northeast.lng:
        raise ValueError(ErrorMessages.INVALID_BBOX_VALUES.format(southwest.lng, northeast.lng))
    if southwest.lat >= northeast.lat:
        raise ValueError(ErrorMessages.INVALID_BBOX_LAT.format(southwest.lat, northeast.lat))

    lng_span, lat_span = tile_span(precision)
    start = to_bounds(to_locator(southwest, precision)).southwest

    n_lng = max(1, math.ceil((northeast.lng - start.lng) / lng_span - 1e-9))
    n_lat = max(1, math.ceil((northeast.lat - start.lat) / lat_span - 1e-9))
    if n_lng * n_lat > max_squares:
        raise ValueError(ErrorMessages.TOO_MANY_SQUARES.format(n_lng * n_lat, max_squares))

    locators = []
    for i in range(n_lat):
        lat = start.lat + (i + 0.5) * lat_span
        if lat > 90.0:
            break
        for j in range(n_lng):
            lng = start.lng + (j + 0.5) * lng_span
            if lng > 180.0:
                break
            locators.append(to_locator(GeoPoint(lat, lng), precision))
    return locators
