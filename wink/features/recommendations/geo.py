"""
Great-circle helpers for proximity scoring and meeting-point search.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from wink.errors import ValidationError

from .domain.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def midpoint(points: Sequence[GeoPoint]) -> GeoPoint:
    """
    Spherical mean of ``points``.

    For two points this is the great-circle midpoint, the spot used to
    search for activities between two friends.
    """
    if not points:
        raise ValidationError("midpoint needs at least one point")
    if len(points) == 1:
        return points[0]

    x = y = z = 0.0
    for point in points:
        lat, lng = math.radians(point.lat), math.radians(point.lng)
        x += math.cos(lat) * math.cos(lng)
        y += math.cos(lat) * math.sin(lng)
        z += math.sin(lat)
    x, y, z = x / len(points), y / len(points), z / len(points)

    hyp = math.hypot(x, y)
    if hyp < 1e-12 and abs(z) < 1e-12:
        raise ValidationError("midpoint is undefined for antipodal points")
    return GeoPoint(lat=math.degrees(math.atan2(z, hyp)), lng=math.degrees(math.atan2(y, x)))
