# runstats/analyze/geometry.py
"""
Distance helpers for runstats.

Surface distance uses the vector form of the great-circle central angle,

    angle = atan2(|n1 x n2|, n1 . n2)

with n1, n2 the unit normal vectors of the two positions. Unlike the
haversine/arccos forms it stays well conditioned for both tiny and
near-antipodal separations.
"""

from __future__ import annotations

import math

from haversine import Unit
from haversine.haversine import get_avg_earth_radius

from runstats.formats.gpx import TrackPoint

# Mean Earth radius (IUGG), 6 371 008.8 m
EARTH_RADIUS_M = get_avg_earth_radius(Unit.METERS)


def _unit_vector(lat: float, lon: float) -> tuple[float, float, float]:
    phi = math.radians(lat)
    lam = math.radians(lon)
    return (
        math.cos(phi) * math.cos(lam),
        math.cos(phi) * math.sin(lam),
        math.sin(phi),
    )


def surface_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two (lat, lon) positions in degrees."""
    ax, ay, az = _unit_vector(lat1, lon1)
    bx, by, bz = _unit_vector(lat2, lon2)

    cx = ay * bz - az * by
    cy = az * bx - ax * bz
    cz = ax * by - ay * bx

    cross = math.sqrt(cx * cx + cy * cy + cz * cz)
    dot = ax * bx + ay * by + az * bz
    return math.atan2(cross, dot) * EARTH_RADIUS_M


def point_distance(p0: TrackPoint, p1: TrackPoint) -> float:
    """
    Distance in meters between two track points, elevation included.

    Horizontal distance and elevation difference are the legs of a right
    triangle; the result is its hypotenuse.
    """
    horizontal = surface_distance(p0.lat, p0.lon, p1.lat, p1.lon)
    return math.hypot(horizontal, abs(p1.ele - p0.ele))
