"""
Spherical geodesy and radial sampling.

Generates the terrain sample points along each bearing from an observer.
All functions are synchronous, pure computation on a spherical Earth.
"""

import math
from dataclasses import dataclass

import numpy as np

from ..constants import EARTH_RADIUS_KM, ErrorMessages
from .errors import InvalidCoordinate, InvalidRequest


@dataclass(frozen=True)
class GeoPoint:
    """Geographic point in decimal degrees (WGS84, spherical model)."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise InvalidCoordinate(ErrorMessages.INVALID_LATITUDE.format(self.lat))
        if not -180.0 <= self.lng <= 180.0:
            raise InvalidCoordinate(ErrorMessages.INVALID_LONGITUDE.format(self.lng))


@dataclass(frozen=True)
class RadialSamples:
    """All sample points of every radial, flattened for batch fetching.

    Ray ``i`` occupies the contiguous range ``ray_slice(i)`` of ``points``;
    ``index_map[k]`` gives the (bearing, sample_index) of flat position ``k``.
    """

    points: list[GeoPoint]
    index_map: list[tuple[int, int]]
    bearings: list[int]
    points_per_bearing: int

    def ray_slice(self, ray_index: int) -> slice:
        start = ray_index * self.points_per_bearing
        return slice(start, start + self.points_per_bearing)


def _destinations(
    origin: GeoPoint,
    bearing_deg: float,
    distances_km: np.ndarray,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> tuple[np.ndarray, np.ndarray]:
    """Vectorised direct geodesic: (lats, lngs) for each distance along a bearing."""
    lat1 = math.radians(origin.lat)
    lng1 = math.radians(origin.lng)
    bearing = math.radians(bearing_deg)
    angular = np.asarray(distances_km, dtype=np.float64) / earth_radius_km

    lat2 = np.arcsin(
        math.sin(lat1) * np.cos(angular) + math.cos(lat1) * np.sin(angular) * math.cos(bearing)
    )
    lng2 = lng1 + np.arctan2(
        math.sin(bearing) * np.sin(angular) * math.cos(lat1),
        np.cos(angular) - math.sin(lat1) * np.sin(lat2),
    )

    lats = np.clip(np.degrees(lat2), -90.0, 90.0)
    lngs = (np.degrees(lng2) + 540.0) % 360.0 - 180.0
    return lats, lngs


def destination_point(
    origin: GeoPoint,
    bearing_deg: float,
    distance_km: float,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> GeoPoint:
    """Point reached travelling ``distance_km`` from ``origin`` on ``bearing_deg``.

    Args:
        origin: Starting point
        bearing_deg: Bearing in degrees (0 = north, clockwise)
        distance_km: Great-circle distance in kilometres
        earth_radius_km: Sphere radius

    Returns:
        Destination point with longitude normalised to [-180, 180)
    """
    lats, lngs = _destinations(origin, bearing_deg, np.array([distance_km]), earth_radius_km)
    return GeoPoint(float(lats[0]), float(lngs[0]))


def _validate_sampling(max_distance_km: float, interval_km: float) -> None:
    if max_distance_km < 0:
        raise InvalidRequest(ErrorMessages.INVALID_DISTANCE.format(max_distance_km))
    if interval_km <= 0:
        raise InvalidRequest(ErrorMessages.INVALID_INTERVAL.format(interval_km))


def samples_per_radial(max_distance_km: float, interval_km: float) -> int:
    """Number of samples along one radial: floor(max / interval)."""
    _validate_sampling(max_distance_km, interval_km)
    # Tolerate 300 / 0.1 style float error before flooring
    return int(math.floor(max_distance_km / interval_km + 1e-9))


def sample_radial(
    origin: GeoPoint,
    bearing_deg: float,
    max_distance_km: float,
    interval_km: float,
) -> list[GeoPoint]:
    """Sample points at interval_km, 2*interval_km, ... up to max_distance_km."""
    count = samples_per_radial(max_distance_km, interval_km)
    if count == 0:
        return []
    distances = np.arange(1, count + 1, dtype=np.float64) * interval_km
    lats, lngs = _destinations(origin, bearing_deg, distances)
    return [GeoPoint(float(lat), float(lng)) for lat, lng in zip(lats, lngs)]


def radial_bearings(num_radials: int) -> list[int]:
    """Integer bearings i * (360 / num_radials) for i in [0, num_radials)."""
    if num_radials <= 0 or 360 % num_radials != 0:
        raise InvalidRequest(ErrorMessages.INVALID_NUM_RADIALS.format(num_radials))
    step = 360 // num_radials
    return [i * step for i in range(num_radials)]


def flatten_radials(
    origin: GeoPoint,
    num_radials: int,
    max_distance_km: float,
    interval_km: float,
) -> RadialSamples:
    """Sample every radial and flatten into one ordered list with an index map."""
    bearings = radial_bearings(num_radials)
    per_bearing = samples_per_radial(max_distance_km, interval_km)

    points: list[GeoPoint] = []
    index_map: list[tuple[int, int]] = []
    for bearing in bearings:
        ray = sample_radial(origin, bearing, max_distance_km, interval_km)
        points.extend(ray)
        index_map.extend((bearing, j) for j in range(len(ray)))

    return RadialSamples(
        points=points,
        index_map=index_map,
        bearings=bearings,
        points_per_bearing=per_bearing,
    )


def haversine_km(a: GeoPoint, b: GeoPoint, earth_radius_km: float = EARTH_RADIUS_KM) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1 = math.radians(a.lat)
    phi2 = math.radians(b.lat)
    dphi = math.radians(b.lat - a.lat)
    dlam = math.radians(b.lng - a.lng)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    return earth_radius_km * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
