"""
Horizon / visibility along a single terrain profile.

A sample is visible when its elevation angle from the antenna is at least
the highest angle of every closer sample (cumulative skyline). Terrain
heights are lowered by the Earth-curvature drop for an effective radius
of K * R, which approximates standard atmospheric refraction.
"""

import math
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from ..constants import DEFAULT_K_FACTOR, EARTH_RADIUS_KM, ErrorMessages
from .errors import InvalidRequest

FloatArray = NDArray[np.floating[Any]]


@dataclass(frozen=True)
class Visibility:
    """Visible samples of one profile."""

    indices: list[int]
    distances_km: list[float]
    max_visible_distance_km: float


def earth_curvature_drop_m(
    distance_km: float | FloatArray,
    k_factor: float = DEFAULT_K_FACTOR,
    earth_radius_km: float = EARTH_RADIUS_KM,
) -> float | FloatArray:
    """Apparent drop of the surface below the tangent plane, in metres.

    drop = d^2 / (2 * K * R). ``k_factor=math.inf`` models a flat Earth.
    """
    if k_factor <= 0:
        raise InvalidRequest(ErrorMessages.INVALID_K_FACTOR.format(k_factor))
    if math.isinf(k_factor):
        return distance_km * 0.0
    distance_m = distance_km * 1000.0
    return distance_m * distance_m / (2.0 * k_factor * earth_radius_km * 1000.0)


def compute_visibility(
    observer_ground_elevation_m: float,
    antenna_height_m: float,
    profile: Sequence[float] | FloatArray,
    interval_km: float,
    max_range_km: float | None = None,
    k_factor: float = DEFAULT_K_FACTOR,
) -> Visibility:
    """Determine which profile samples are visible from the antenna.

    Args:
        observer_ground_elevation_m: Ground elevation under the antenna
        antenna_height_m: Antenna height above ground
        profile: Terrain elevation at (i + 1) * interval_km for each i
        interval_km: Spacing between samples
        max_range_km: Distance reported when every sample is visible
            (defaults to the profile length)
        k_factor: Refraction factor applied to the Earth radius

    Returns:
        Visible sample indices, their distances, and the furthest visible distance
    """
    if interval_km <= 0:
        raise InvalidRequest(ErrorMessages.INVALID_INTERVAL.format(interval_km))

    elevations = np.asarray(profile, dtype=np.float64)
    n = elevations.size
    if n == 0:
        return Visibility(indices=[], distances_km=[], max_visible_distance_km=0.0)

    eye_height = observer_ground_elevation_m + antenna_height_m
    distances_km = np.arange(1, n + 1, dtype=np.float64) * interval_km
    distances_m = distances_km * 1000.0

    effective = elevations - earth_curvature_drop_m(distances_km, k_factor)
    angles = np.arctan2(effective - eye_height, distances_m)

    horizon = np.empty_like(angles)
    horizon[0] = -np.inf
    # fmax skips NaN voids instead of poisoning the rest of the ray
    horizon[1:] = np.fmax.accumulate(angles)[:-1]
    visible = angles >= horizon

    indices = np.flatnonzero(visible)
    if visible.all():
        max_visible = float(max_range_km) if max_range_km is not None else float(distances_km[-1])
    elif indices.size == 0:
        max_visible = 0.0
    else:
        max_visible = float(distances_km[indices[-1]])

    return Visibility(
        indices=[int(i) for i in indices],
        distances_km=[float(d) for d in distances_km[indices]],
        max_visible_distance_km=max_visible,
    )
