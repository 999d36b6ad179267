"""Great-circle distance between coordinates"""

import math

EARTH_RADIUS_MILES = 3959.0


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in miles between two (latitude, longitude) points."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c


def distance_between(a, b) -> float:
    """Distance between two objects exposing ``latitude`` and ``longitude``."""
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def within_radius(center_lat: float, center_lng: float, lat, lng, radius_miles: float) -> bool:
    if lat is None or lng is None:
        return False
    return haversine_distance(center_lat, center_lng, lat, lng) <= radius_miles
