"""
Hand tracking logic: landmark helpers and string / plucker extraction.
"""

from __future__ import annotations

from typing import Sequence

from .config import ANCHOR_LANDMARK_INDEX, PLUCKER_LANDMARK_INDEX
from .models import Point


class HandLandmark:
    """Landmark indices of the 21-point MediaPipe hand model."""

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# ---------------------------------------------------------------------------
# Landmark helpers
# ---------------------------------------------------------------------------
def landmark_to_point(lm, width: float, height: float) -> Point:
    """Scale a normalised MediaPipe landmark into surface pixels."""
    return Point(lm.x * width, lm.y * height)


def hand_landmarks_of(result) -> list:
    """
    The ordered hand list of a detection result.

    Accepts a MediaPipe ``HandLandmarkerResult`` or an already-unwrapped
    list of hands; ``None`` means nothing was detected.
    """
    if result is None:
        return []
    hands = getattr(result, "hand_landmarks", result)
    return list(hands or [])


# ---------------------------------------------------------------------------
# String anchors & pluckers
# ---------------------------------------------------------------------------
def extract_points(
    hands: Sequence[Sequence],
    width: float,
    height: float,
    anchor_landmark: int = ANCHOR_LANDMARK_INDEX,
    plucker_landmark: int = PLUCKER_LANDMARK_INDEX,
) -> tuple[Point | None, Point | None, list[Point]]:
    """
    Split one frame's hands into string anchors and pluckers.

    Hands are taken in detection order.  The first hand's anchor tip is
    ``anchor_a`` and the second hand's is ``anchor_b``; later hands add no
    anchor.  Every hand contributes its plucker tip, so ``pluckers[i]``
    belongs to the i-th detected hand.

    Returns ``(anchor_a, anchor_b, pluckers)`` in pixel coordinates.
    """
    anchor_a: Point | None = None
    anchor_b: Point | None = None
    pluckers: list[Point] = []

    for landmarks in hands:
        anchor = landmark_to_point(landmarks[anchor_landmark], width, height)
        if anchor_a is None:
            anchor_a = anchor
        elif anchor_b is None:
            anchor_b = anchor

        pluckers.append(
            landmark_to_point(landmarks[plucker_landmark], width, height)
        )

    return anchor_a, anchor_b, pluckers


def anchor_tips(
    hands: Sequence[Sequence],
    width: float,
    height: float,
    anchor_landmark: int = ANCHOR_LANDMARK_INDEX,
) -> list[Point]:
    """Anchor tip of every detected hand (used for the feedback dots)."""
    return [
        landmark_to_point(landmarks[anchor_landmark], width, height)
        for landmarks in hands
    ]
