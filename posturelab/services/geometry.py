# =============================================================================
# POSTURELAB BACKEND - GEOMETRY UTILITIES
# =============================================================================
"""
Angle helpers for 2-D image coordinates.

Image y grows downward, so a point directly below another has a positive dy.
Callers guard against coincident points through landmark presence checks.
"""

import math
from typing import Protocol


class Point(Protocol):
    x: float
    y: float


def angle_from_vertical(p1: Point, p2: Point) -> float:
    """
    Angle of the vector p1 -> p2 relative to true vertical, in degrees.

    Positive when p2 sits to the right of p1, negative when to the left.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return math.degrees(math.atan2(dx, dy))


def angle_at_vertex(p1: Point, p2: Point, p3: Point) -> float:
    """Interior angle at p2 between rays to p1 and p3, in [0, 180] degrees."""
    angle1 = math.atan2(p1.y - p2.y, p1.x - p2.x)
    angle2 = math.atan2(p3.y - p2.y, p3.x - p2.x)
    angle = abs(math.degrees(angle1 - angle2))
    if angle > 180:
        angle = 360 - angle
    return angle


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from the floor (2.5 -> 3, -2.5 -> -2)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
