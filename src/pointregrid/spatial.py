# SPDX-License-Identifier: MIT
"""
pointregrid.spatial
===================

Distance metrics on (longitude, latitude) coordinates.

- :func:`haversine_distance`:
    Vectorized great-circle distance (km) between two sets of points.
- :func:`euclidean_distance`:
    Vectorized planar distance in the lon/lat plane, in **degrees**.
- :func:`distance` / :func:`distances_to`:
    Validating dispatchers used by the matcher.
- :func:`km_to_degrees` / :func:`degrees_to_km`:
    Radius and reporting conversions for the euclidean metric.
- :func:`normalize_longitude`:
    Wrap a longitude into [-180, 180].

Coordinates are in decimal degrees. Haversine distances are in kilometers,
euclidean distances are in degrees and must be converted for reporting.
"""

from __future__ import annotations

from typing import Tuple, Union

import numpy as np

from .exceptions import ConfigurationError, ValidationError

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.32

HAVERSINE = "haversine"
EUCLIDEAN = "euclidean"
SUPPORTED_METRICS: Tuple[str, ...] = (HAVERSINE, EUCLIDEAN)

# cos(lat) floor used by km_to_degrees near the poles
_MIN_COS_LAT = 1e-10

ArrayLike = Union[float, np.ndarray]


def check_metric(metric: str) -> str:
    """Return the lower-cased metric name or raise ConfigurationError."""
    name = str(metric).lower()
    if name not in SUPPORTED_METRICS:
        raise ConfigurationError(
            f"Unsupported distance metric '{metric}'. "
            f"Supported metrics are: {list(SUPPORTED_METRICS)}."
        )
    return name


def check_coordinates(lon: ArrayLike, lat: ArrayLike) -> None:
    """
    Raise ValidationError if any latitude exceeds ±90 or any longitude ±360.
    """
    lat_arr = np.asarray(lat, dtype=float)
    lon_arr = np.asarray(lon, dtype=float)
    if np.any(np.abs(lat_arr) > 90.0):
        raise ValidationError("Latitudes must be in [-90, 90]")
    if np.any(np.abs(lon_arr) > 360.0):
        raise ValidationError("Longitudes must be in [-360, 360]")


# ---------------------------------------------------------------------------
# Raw metrics
# ---------------------------------------------------------------------------


def haversine_distance(
    lat1: ArrayLike,
    lon1: ArrayLike,
    lat2: ArrayLike,
    lon2: ArrayLike,
) -> np.ndarray:
    """
    Compute great-circle distance between two sets of points (km).

    Parameters
    ----------
    lat1, lon1 : array-like
        Latitudes/longitudes of the first set of points in degrees.
    lat2, lon2 : array-like
        Latitudes/longitudes of the second set of points in degrees.

    Returns
    -------
    np.ndarray
        Distances in kilometers, with standard NumPy broadcasting.
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    dlat = np.radians(np.subtract(lat2, lat1))
    dlon = np.radians(np.subtract(lon2, lon1))

    a = (
        np.sin(dlat / 2.0) ** 2
        + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2.0) ** 2
    )
    a = np.clip(a, 0.0, 1.0)
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))

    return EARTH_RADIUS_KM * c


def euclidean_distance(
    lat1: ArrayLike,
    lon1: ArrayLike,
    lat2: ArrayLike,
    lon2: ArrayLike,
) -> np.ndarray:
    """
    Planar distance in the lon/lat plane, in degrees.
    """
    dlon = np.subtract(lon2, lon1)
    dlat = np.subtract(lat2, lat1)
    return np.sqrt(dlon * dlon + dlat * dlat)


_METRIC_FUNCS = {
    HAVERSINE: haversine_distance,
    EUCLIDEAN: euclidean_distance,
}


# ---------------------------------------------------------------------------
# Validating dispatchers
# ---------------------------------------------------------------------------


def distance(a, b, metric: str = HAVERSINE) -> float:
    """
    Distance between two coordinates.

    Parameters
    ----------
    a, b : Coordinate
        Any objects exposing ``longitude`` and ``latitude`` in degrees.
    metric : {"haversine", "euclidean"}
        Haversine returns kilometers; euclidean returns degrees.

    Returns
    -------
    float

    Raises
    ------
    ValidationError
        If a latitude exceeds ±90° or a longitude exceeds ±360°.
    ConfigurationError
        If ``metric`` is unknown.
    """
    func = _METRIC_FUNCS[check_metric(metric)]
    check_coordinates([a.longitude, b.longitude], [a.latitude, b.latitude])
    return float(func(a.latitude, a.longitude, b.latitude, b.longitude))


def distances_to(
    target,
    lons: np.ndarray,
    lats: np.ndarray,
    metric: str = HAVERSINE,
    *,
    check_sources: bool = True,
) -> np.ndarray:
    """
    Distances from one target coordinate to every (lon, lat) pair, in order.

    Same units and validation as :func:`distance`; the returned array is
    aligned with the input arrays. Pass ``check_sources=False`` when the
    arrays were already validated once (the matcher does this).
    """
    func = _METRIC_FUNCS[check_metric(metric)]
    check_coordinates(target.longitude, target.latitude)
    if check_sources:
        check_coordinates(lons, lats)
    return np.asarray(
        func(target.latitude, target.longitude, lats, lons), dtype=float
    )


# ---------------------------------------------------------------------------
# Unit conversions
# ---------------------------------------------------------------------------


def km_to_degrees(km: float, latitude: float) -> float:
    """
    Convert a kilometer radius into degrees at ``latitude``.

    Uses 111.32 km per degree scaled by ``cos(latitude)``. The cosine is
    clamped to 1e-10 so the conversion stays finite at the poles.
    """
    if km < 0.0:
        raise ValidationError("Distance in km must be non-negative")
    if abs(latitude) > 90.0:
        raise ValidationError("Latitude must be in [-90, 90]")
    cos_lat = np.cos(np.radians(latitude))
    if abs(cos_lat) < _MIN_COS_LAT:
        cos_lat = _MIN_COS_LAT
    return float(km / (KM_PER_DEGREE * cos_lat))


def degrees_to_km(distance_deg: ArrayLike, latitude: float) -> ArrayLike:
    """
    Convert a euclidean (degree) distance into kilometers at ``latitude``.

    Inverse of :func:`km_to_degrees` without the polar clamp. Accepts a
    scalar or an array.
    """
    factor = KM_PER_DEGREE * np.cos(np.radians(latitude))
    if np.ndim(distance_deg) == 0:
        return float(distance_deg * factor)
    return np.asarray(distance_deg, dtype=float) * factor


def normalize_longitude(lon: float) -> float:
    """Wrap a longitude into [-180, 180] by whole turns of 360°."""
    lon = float(lon)
    while lon > 180.0:
        lon -= 360.0
    while lon < -180.0:
        lon += 360.0
    return lon


__all__ = [
    "EARTH_RADIUS_KM",
    "KM_PER_DEGREE",
    "HAVERSINE",
    "EUCLIDEAN",
    "SUPPORTED_METRICS",
    "check_metric",
    "check_coordinates",
    "haversine_distance",
    "euclidean_distance",
    "distance",
    "distances_to",
    "km_to_degrees",
    "degrees_to_km",
    "normalize_longitude",
]
