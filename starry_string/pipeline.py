"""
The per-frame step of the installation.

``StarryString.update(hands)`` turns one frame of hand landmarks into
string anchors, pluck events and the live ripples.  It never blocks and
never touches the camera or the window, so it can be driven by synthetic
frames as easily as by the live loop in ``main``.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from .config import (
    ANCHOR_LANDMARK_INDEX,
    PLUCKER_LANDMARK_INDEX,
    RIPPLE_MAX_AGE,
)
from .hand_tracking import extract_points
from .models import FrameOutput, PluckEvent
from .pluck_detection import PluckDetector
from .ripples import RippleField


class PluckSink(Protocol):
    """Anything that can sound a pluck, e.g. ``AudioEngine``."""

    def play_pluck(self, normalized_position: float): ...


class StarryString:
    """
    The string, its pluck detector and the ripple field.

    Parameters
    ----------
    width, height : int
        Size of the render surface in pixels.
    audio : PluckSink | None
        Receives ``play_pluck`` for every event.  ``None`` plays nothing.
    max_age : int
        Ripple lifetime in frames.
    """

    def __init__(
        self,
        width: int,
        height: int,
        audio: PluckSink | None = None,
        max_age: int = RIPPLE_MAX_AGE,
        anchor_landmark: int = ANCHOR_LANDMARK_INDEX,
        plucker_landmark: int = PLUCKER_LANDMARK_INDEX,
    ) -> None:
        self.width = width
        self.height = height
        self.audio = audio
        self.anchor_landmark = anchor_landmark
        self.plucker_landmark = plucker_landmark

        self.detector = PluckDetector(surface_width=width)
        self.ripples = RippleField(max_age=max_age)
        self.pluck_count = 0
        self.frame_count = 0

    def resize(self, width: int, height: int) -> None:
        """Follow a change of render surface size."""
        self.width = width
        self.height = height
        self.detector.surface_width = width

    def reset(self) -> None:
        """Drop plucker history and ripples."""
        self.detector.reset()
        self.ripples.clear()

    def update(
        self,
        hands: Sequence[Sequence],
        width: int | None = None,
        height: int | None = None,
    ) -> FrameOutput:
        """
        Run one frame.

        1. Extract the string anchors and pluckers.
        2. Test each plucker's motion against the string.
        3. For each pluck: sound it and spawn a ripple there.
        4. Age the ripples once.
        """
        if width is not None and height is not None:
            self.resize(width, height)

        anchor_a, anchor_b, pluckers = extract_points(
            hands,
            self.width,
            self.height,
            anchor_landmark=self.anchor_landmark,
            plucker_landmark=self.plucker_landmark,
        )

        events = self.detector.detect(anchor_a, anchor_b, pluckers)
        for event in events:
            self._on_pluck(event)

        self.ripples.advance()
        self.frame_count += 1

        return FrameOutput(
            anchor_a=anchor_a,
            anchor_b=anchor_b,
            pluckers=pluckers,
            events=events,
            ripples=self.ripples.ripples,
        )

    def _on_pluck(self, event: PluckEvent) -> None:
        self.pluck_count += 1
        if self.audio is not None:
            self.audio.play_pluck(event.normalized_position)
        self.ripples.spawn(event.point.x, event.point.y)
