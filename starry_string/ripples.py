"""
Ripple simulation: short-lived swirls spawned at each pluck.

The field only owns the lifecycle (spawn, age, expire).  Drawing is done by
a *painter* callable so the simulation has no OpenCV dependency; the
installation passes ``drawing.draw_swirl``.
"""

from __future__ import annotations

from typing import Callable, Iterator

import numpy as np

from .config import RIPPLE_INTENSITY, RIPPLE_MAX_AGE
from .models import Ripple

Painter = Callable[[np.ndarray, Ripple, float], None]


class RippleField:
    """
    The set of live ripples.

    Parameters
    ----------
    max_age : int
        Lifetime of every ripple, in frames.
    intensity : float
        Initial intensity given to spawned ripples.
    """

    def __init__(
        self,
        max_age: int = RIPPLE_MAX_AGE,
        intensity: float = RIPPLE_INTENSITY,
    ) -> None:
        if max_age < 1:
            raise ValueError(f"max_age must be at least 1 frame, got {max_age}")
        self.max_age = int(max_age)
        self.intensity = intensity
        self._ripples: list[Ripple] = []

    def __len__(self) -> int:
        return len(self._ripples)

    def __iter__(self) -> Iterator[Ripple]:
        return iter(self._ripples)

    @property
    def ripples(self) -> list[Ripple]:
        """Snapshot of the live ripples."""
        return list(self._ripples)

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------
    def spawn(self, x: float, y: float) -> Ripple:
        """Start a new ripple at ``(x, y)`` with ``age = 0``."""
        ripple = Ripple(
            x=x, y=y, max_age=self.max_age, intensity=self.intensity,
        )
        live_ids = {r.id for r in self._ripples}
        while ripple.id in live_ids:
            ripple.id += 1e-6
        self._ripples.append(ripple)
        return ripple

    def advance(self) -> None:
        """
        Age every ripple by one frame and drop the expired ones.

        Call exactly once per frame, however many ripples were spawned.
        """
        for ripple in self._ripples:
            ripple.age += 1
        self._ripples = [r for r in self._ripples if r.age < r.max_age]

    def clear(self) -> None:
        self._ripples = []

    # -----------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------
    def render(self, image: np.ndarray, painter: Painter) -> int:
        """
        Paint every ripple that still has life left.

        ``painter(image, ripple, life)`` is called with
        ``life = 1 - age / max_age``; ripples with ``life <= 0`` are
        skipped.  Returns the number of ripples painted.
        """
        painted = 0
        for ripple in self._ripples:
            life = ripple.life
            if life <= 0:
                continue
            painter(image, ripple, life)
            painted += 1
        return painted
