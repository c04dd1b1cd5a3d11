from __future__ import annotations

import numpy as np

EARTH_RADIUS_MILES = 3959


def haversine_miles(lat1, lng1, lat2, lng2):
    """Great-circle distance in miles between points given in decimal degrees.

    Accepts scalars or array-likes (e.g. pandas columns). Scalars return a
    plain ``float``.
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    d_lat = np.radians(np.subtract(lat2, lat1))
    d_lng = np.radians(np.subtract(lng2, lng1))

    a = (
        np.sin(d_lat / 2) * np.sin(d_lat / 2)
        + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(d_lng / 2) * np.sin(d_lng / 2)
    )
    # rounding can push a past 1.0 for antipodal points
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    distance = EARTH_RADIUS_MILES * c

    if np.ndim(distance) == 0:
        return float(distance)
    return distance


def format_distance(miles: float) -> str:
    if miles < 0.1:
        return "< 0.1 mi"
    return f"{miles:.1f} mi"
