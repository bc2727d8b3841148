"""
Plane geometry used by pluck detection.
"""

from __future__ import annotations

import math

from .models import Point


# ---------------------------------------------------------------------------
# Segment intersection
# ---------------------------------------------------------------------------
def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """
    True when segment *p1*→*p2* properly crosses segment *p3*→*p4*.

    Both parametric fractions must lie strictly inside ``(0, 1)``, so
    touching at an endpoint is not a crossing.  Parallel, collinear and
    zero-length segments (``det == 0``) never intersect.
    """
    det = (p2.x - p1.x) * (p4.y - p3.y) - (p4.x - p3.x) * (p2.y - p1.y)
    if det == 0:
        return False

    # lam runs along p1→p2, gamma along p3→p4
    lam = ((p4.y - p3.y) * (p4.x - p1.x) + (p3.x - p4.x) * (p4.y - p1.y)) / det
    gamma = ((p1.y - p2.y) * (p4.x - p1.x) + (p2.x - p1.x) * (p4.y - p1.y)) / det
    return (0 < lam < 1) and (0 < gamma < 1)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------
def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation; *t* is not clamped."""
    return start * (1 - t) + end * t
