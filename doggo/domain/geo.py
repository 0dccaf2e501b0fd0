"""
Great-circle distance helpers.

Plain haversine math on a spherical earth; good enough for "how far apart do
these two owners live" and radius filtering without a spatial index.
"""

import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from .models import Coordinates

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LATITUDE = 111.32

T = TypeVar("T")


def haversine_km(point1: Coordinates, point2: Coordinates) -> float:
    """Return the great-circle distance between two points in kilometers."""
    d_lat = math.radians(point2.latitude - point1.latitude)
    d_lon = math.radians(point2.longitude - point1.longitude)

    a = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(math.radians(point1.latitude))
        * math.cos(math.radians(point2.latitude))
        * math.sin(d_lon / 2)
        * math.sin(d_lon / 2)
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def filter_by_radius(
    items: Sequence[T],
    center: Coordinates,
    radius_km: float,
    location_of: Callable[[T], Optional[Coordinates]],
) -> List[Tuple[T, float]]:
    """
    Keep the items located within ``radius_km`` of ``center``.

    Items without a location are skipped. Returns ``(item, distance_km)`` pairs
    sorted by ascending distance.
    """
    within: List[Tuple[T, float]] = []

    for item in items:
        location = location_of(item)
        if location is None:
            continue
        distance = haversine_km(center, location)
        if distance <= radius_km:
            within.append((item, distance))

    return sorted(within, key=lambda pair: pair[1])


def bounding_box(center: Coordinates, radius_km: float) -> Dict[str, float]:
    """
    Approximate lat/lon box around ``center``; useful as a coarse prefilter
    for record store queries before the exact haversine check.
    """
    lat_delta = radius_km / KM_PER_DEGREE_LATITUDE
    lon_delta = radius_km / (KM_PER_DEGREE_LATITUDE * math.cos(math.radians(center.latitude)))

    return {
        "north": center.latitude + lat_delta,
        "south": center.latitude - lat_delta,
        "east": center.longitude + lon_delta,
        "west": center.longitude - lon_delta,
    }
