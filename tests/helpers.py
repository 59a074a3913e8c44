from math import pi

from app.services.geo import EARTH_RADIUS_M

TEST_SECRET = "test-secret"


def north_of(lat: float, lon: float, meters: float) -> tuple[float, float]:
    """Point exactly ``meters`` due north (haversine distance is exact along a meridian)."""
    return lat + meters / (EARTH_RADIUS_M * pi / 180.0), lon
