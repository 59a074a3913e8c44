"""Geo math helpers (pure functions, no I/O)."""

from __future__ import annotations

from dataclasses import dataclass
from math import asin, cos, degrees, floor, isfinite, pi, radians, sin, sqrt

from app.core.errors import ValidationError

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_DEGREE_LAT = 111_000.0


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def wraps_antimeridian(self) -> bool:
        """True when the longitude range crosses +/-180 and needs two intervals."""
        return self.min_lon < -180.0 or self.max_lon > 180.0


def is_valid_coordinate(lat: float, lon: float) -> bool:
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (haversine) distance in meters."""
    phi1, phi2 = radians(lat1), radians(lat2)
    dphi = phi2 - phi1
    dlambda = radians(lon2 - lon1)

    h = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(h)))


def bounding_box(lat: float, lon: float, radius_m: float) -> BoundingBox:
    """Box that contains every point within ``radius_m``; a prefilter only.

    The longitude half-width is the circle's true extent,
    ``asin(sin(d) / cos(lat))``, which outgrows the flat ``d / cos(lat)``
    estimate at high latitudes and large radii.
    """
    lat_delta = radius_m / METERS_PER_DEGREE_LAT
    min_lat = max(-90.0, lat - lat_delta)
    max_lat = min(90.0, lat + lat_delta)

    angular = radius_m / EARTH_RADIUS_M
    cos_lat = cos(radians(lat))
    if max_lat >= 90.0 or min_lat <= -90.0 or angular >= pi / 2 or sin(angular) >= cos_lat:
        # circle reaches a pole: every longitude is in range
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)

    lon_delta = max(
        radius_m / (METERS_PER_DEGREE_LAT * cos_lat),
        degrees(asin(sin(angular) / cos_lat)),
    )
    if lon_delta >= 180.0:
        return BoundingBox(min_lat, max_lat, -180.0, 180.0)
    return BoundingBox(min_lat, max_lat, lon - lon_delta, lon + lon_delta)


def clamp_radius(requested_m: float | None, default_m: int = 5000, minimum_m: int = 300, step_m: int = 100) -> int:
    """Round to the nearest ``step_m`` and floor at ``minimum_m``.

    Half steps round up (250 -> 300), so equal inputs always land in the same
    cache bucket. Infinite or NaN radii are rejected.
    """
    if requested_m is None:
        requested_m = default_m
    if not isfinite(requested_m):
        raise ValidationError(f"Invalid radius: {requested_m}")
    rounded = int(floor(requested_m / step_m + 0.5)) * step_m
    return max(minimum_m, rounded)


def quantize(value: float, precision: int) -> float:
    """Round a coordinate to ``precision`` decimals (0.01 deg ~ 1.1 km)."""
    return float(f"{value:.{precision}f}") + 0.0  # drop the sign of -0.0
