"""
Data classes for the Starry String installation.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# 2D point
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Point:
    """A point on the render surface, in pixels."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, o: Point) -> Point:
        return Point(self.x + o.x, self.y + o.y)

    def __sub__(self, o: Point) -> Point:
        return Point(self.x - o.x, self.y - o.y)

    def __mul__(self, s: float) -> Point:
        return Point(self.x * s, self.y * s)

    def to_pixel(self) -> tuple[int, int]:
        return int(round(self.x)), int(round(self.y))


# ---------------------------------------------------------------------------
# Pluck / ripple state
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PluckEvent:
    """A plucker crossed the string this frame."""

    point: Point
    normalized_position: float  # point.x / surface width


def new_ripple_id() -> float:
    """Creation time in ms plus a random tiebreaker."""
    return time.time() * 1000.0 + random.random()


@dataclass
class Ripple:
    """A decaying swirl spawned where a pluck happened."""

    x: float
    y: float
    max_age: int
    age: int = 0
    intensity: float = 1.0
    id: float = field(default_factory=new_ripple_id)

    @property
    def life(self) -> float:
        """1.0 when spawned, 0.0 once ``age`` reaches ``max_age``."""
        return 1.0 - self.age / self.max_age

    @property
    def alive(self) -> bool:
        return self.age < self.max_age


# ---------------------------------------------------------------------------
# Per-frame pipeline output
# ---------------------------------------------------------------------------
@dataclass
class FrameOutput:
    """Everything the drawing layer needs from one pipeline step."""

    anchor_a: Point | None = None
    anchor_b: Point | None = None
    pluckers: list[Point] = field(default_factory=list)
    events: list[PluckEvent] = field(default_factory=list)
    ripples: list[Ripple] = field(default_factory=list)

    @property
    def has_string(self) -> bool:
        return self.anchor_a is not None and self.anchor_b is not None
