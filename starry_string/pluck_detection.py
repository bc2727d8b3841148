"""
Pluck detection: a plucker whose frame-to-frame motion crosses the string.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from .geometry import segments_intersect
from .models import PluckEvent, Point


class PluckDetector:
    """
    Tracks each plucker's previous position and reports string crossings.

    Plucker slots are positional: slot ``i`` is whichever hand MediaPipe
    listed i-th this frame.  The history is dropped entirely whenever the
    string is missing, so a hand re-entering the frame somewhere else can
    never fire a crossing from its old position.

    Parameters
    ----------
    surface_width : float
        Width of the render surface in pixels; pluck positions are
        reported as ``x / surface_width``.
    """

    def __init__(self, surface_width: float) -> None:
        self.surface_width = surface_width
        self._prev: dict[int, Point] = {}

    @property
    def previous(self) -> Mapping[int, Point]:
        """Read-only view of the last known plucker positions by slot."""
        return MappingProxyType(self._prev)

    def reset(self) -> None:
        """Forget every plucker's history."""
        self._prev = {}

    def detect(
        self,
        anchor_a: Point | None,
        anchor_b: Point | None,
        pluckers: Sequence[Point],
        surface_width: float | None = None,
    ) -> list[PluckEvent]:
        """
        Test every plucker's motion since the last frame against the string.

        Returns one ``PluckEvent`` per crossing (possibly none).  Each
        plucker's position is stored for the next frame after its test ran
        against the old value.
        """
        if surface_width is not None:
            self.surface_width = surface_width

        if anchor_a is None or anchor_b is None:
            # No string this frame: forget every plucker
            self._prev = {}
            return []

        events: list[PluckEvent] = []
        for slot, plucker in enumerate(pluckers):
            prev = self._prev.get(slot)
            if prev is not None and segments_intersect(
                prev, plucker, anchor_a, anchor_b,
            ):
                events.append(PluckEvent(
                    point=plucker,
                    normalized_position=self._normalize(plucker.x),
                ))
            self._prev[slot] = plucker

        # Slots beyond this frame's hand count belong to hands that left
        for slot in [s for s in self._prev if s >= len(pluckers)]:
            del self._prev[slot]

        return events

    def _normalize(self, x: float) -> float:
        if self.surface_width <= 0:
            return 0.0
        return x / self.surface_width
