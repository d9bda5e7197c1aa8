"""Spatial math — great-circle distance, padded bounds and zoom hints.

Pure computation; nothing here performs I/O.
"""

from location_api.lib.spatial.distance import (
    EARTH_RADIUS_KM,
    BoundingBox,
    calculate_bounds,
    format_distance,
    haversine_km,
    optimal_zoom,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "BoundingBox",
    "calculate_bounds",
    "format_distance",
    "haversine_km",
    "optimal_zoom",
]
