"""Great-circle distance, padded bounding boxes and zoom hints."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from location_api.lib.geocoder.base import GeographicCoordinates

EARTH_RADIUS_KM = 6371.0
BOUNDS_PADDING_RATIO = 0.1

# (max radius km, zoom level); anything larger falls through to _MIN_ZOOM
_ZOOM_STEPS: tuple[tuple[float, int], ...] = (
    (1, 15),
    (5, 13),
    (10, 12),
    (25, 11),
    (50, 10),
    (100, 9),
)
_MIN_ZOOM = 8


@dataclass(frozen=True)
class BoundingBox:
    """A viewport box in degrees."""

    north: float
    south: float
    east: float
    west: float

    @classmethod
    def empty(cls) -> "BoundingBox":
        return cls(north=0.0, south=0.0, east=0.0, west=0.0)

    def contains(self, point: GeographicCoordinates) -> bool:
        return self.south <= point.lat <= self.north and self.west <= point.lng <= self.east


def haversine_km(a: GeographicCoordinates, b: GeographicCoordinates) -> float:
    """Great-circle distance between two points in kilometers (Haversine formula)."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def calculate_bounds(points: Iterable[GeographicCoordinates]) -> BoundingBox:
    """Compute the min/max box over ``points``, padded by 10% of each span.

    A single point (or identical points) yields a zero-size box; no points
    yields the all-zero box.
    """
    points = list(points)
    if not points:
        return BoundingBox.empty()

    north = max(p.lat for p in points)
    south = min(p.lat for p in points)
    east = max(p.lng for p in points)
    west = min(p.lng for p in points)

    lat_padding = (north - south) * BOUNDS_PADDING_RATIO
    lng_padding = (east - west) * BOUNDS_PADDING_RATIO

    return BoundingBox(
        north=north + lat_padding,
        south=south - lat_padding,
        east=east + lng_padding,
        west=west - lng_padding,
    )


def optimal_zoom(radius_km: float) -> int:
    """Map a search radius to a web-map zoom level (presentation hint only)."""
    for max_radius, zoom in _ZOOM_STEPS:
        if radius_km <= max_radius:
            return zoom
    return _MIN_ZOOM


def format_distance(distance_km: float) -> str:
    """Format a distance as meters below 1 km, otherwise kilometers with one decimal."""
    if distance_km < 1:
        return f"{round(distance_km * 1000)}m"
    return f"{distance_km:.1f}km"
