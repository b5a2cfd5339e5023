"""Great-circle helpers shared by the spatial store and request validation.

All distances are meters on a sphere with the mean Earth radius.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from geogame.errors import ValidationError

EARTH_RADIUS_M = 6_371_008.8
METERS_PER_DEGREE_LAT = math.pi * EARTH_RADIUS_M / 180.0
# Slack added to the SQL prefilter box; the exact test runs afterwards
BOX_MARGIN_DEG = 1e-6


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two lat/lon points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


def _as_number(value, field: str) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f'{field} must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number')
    if not math.isfinite(number):
        raise ValidationError(f'{field} must be a finite number')
    return number


def validate_point(latitude, longitude) -> Tuple[float, float]:
    lat = _as_number(latitude, 'lat')
    lon = _as_number(longitude, 'lon')
    if not -90.0 <= lat <= 90.0:
        raise ValidationError(f'lat out of range: {lat}')
    if not -180.0 <= lon <= 180.0:
        raise ValidationError(f'lon out of range: {lon}')
    return lat, lon


def validate_distance(distance) -> float:
    meters = _as_number(distance, 'distance')
    if meters <= 0:
        raise ValidationError('distance must be positive')
    return meters


def latitude_inside(latitude: float, meters: float) -> float:
    """Latitude 1 m short of ``meters`` due north, i.e. just inside that radius."""
    return latitude + (meters - 1.0) / METERS_PER_DEGREE_LAT


def latitude_outside(latitude: float, meters: float) -> float:
    """Latitude 1 m beyond ``meters`` due north, i.e. just outside that radius."""
    return latitude + (meters + 1.0) / METERS_PER_DEGREE_LAT


def bounding_box(latitude: float, longitude: float, meters: float) -> Tuple[float, float, Optional[float], Optional[float]]:
    """Coarse lat/lon box containing every point within ``meters``.

    Longitude bounds are ``None`` when the box touches a pole or wraps the
    antimeridian; callers then filter on latitude only.
    """
    angular = meters / EARTH_RADIUS_M
    d_lat = math.degrees(angular) + BOX_MARGIN_DEG
    min_lat, max_lat = latitude - d_lat, latitude + d_lat
    if min_lat <= -90.0 or max_lat >= 90.0:
        return max(min_lat, -90.0), min(max_lat, 90.0), None, None

    # widest longitude span of a spherical cap centred at this latitude
    ratio = math.sin(angular) / math.cos(math.radians(latitude))
    if ratio >= 1.0:
        return min_lat, max_lat, None, None
    d_lon = math.degrees(math.asin(ratio)) + BOX_MARGIN_DEG
    min_lon, max_lon = longitude - d_lon, longitude + d_lon
    if min_lon < -180.0 or max_lon > 180.0:
        return min_lat, max_lat, None, None
    return min_lat, max_lat, min_lon, max_lon
