"""
OpenCV drawing helpers for the Starry String canvas.
"""

from __future__ import annotations

import math

import cv2
import numpy as np

from .config import (
    BACKDROP_DARKEN,
    COLOR_BLACK,
    COLOR_GREEN,
    COLOR_GREY,
    COLOR_WHITE,
    PLUCK_FLASH_RADIUS,
    STRING_COLOR,
    STRING_GLOW_BLUR,
    STRING_GLOW_COLOR,
    STRING_WIDTH,
    SWIRL_ARMS,
    SWIRL_COLOR,
    SWIRL_MAX_ALPHA,
    TIP_ALPHA,
    TIP_RADIUS,
)
from .models import FrameOutput, Point, Ripple
from .ripples import RippleField


# ---------------------------------------------------------------------------
# Backdrop
# ---------------------------------------------------------------------------
def load_backdrop(path: str | None) -> np.ndarray | None:
    """Read the backdrop image, or ``None`` if unset or unreadable."""
    if not path:
        return None
    image = cv2.imread(path, cv2.IMREAD_COLOR)
    if image is None:
        print(f"[Drawing] Could not read backdrop {path}; using the camera.")
    return image


def draw_backdrop(
    frame: np.ndarray,
    backdrop: np.ndarray | None = None,
    darken: float = BACKDROP_DARKEN,
) -> np.ndarray:
    """
    Start a new canvas the size of *frame*.

    The backdrop (stretched to fit) is used when given, otherwise the
    camera frame itself; either way it is darkened so the string stands out.
    """
    h, w = frame.shape[:2]
    if backdrop is not None:
        canvas = cv2.resize(backdrop, (w, h), interpolation=cv2.INTER_LINEAR)
    else:
        canvas = frame.copy()

    if darken > 0:
        black = np.zeros_like(canvas)
        cv2.addWeighted(black, darken, canvas, 1 - darken, 0, canvas)
    return canvas


# ---------------------------------------------------------------------------
# String
# ---------------------------------------------------------------------------
def draw_string(
    image: np.ndarray,
    anchor_a: Point,
    anchor_b: Point,
    color: tuple[int, int, int] = STRING_COLOR,
    width: int = STRING_WIDTH,
    glow_color: tuple[int, int, int] = STRING_GLOW_COLOR,
    glow_blur: int = STRING_GLOW_BLUR,
) -> None:
    """Draw the glowing string between the two anchors."""
    a = anchor_a.to_pixel()
    b = anchor_b.to_pixel()

    if glow_blur > 0:
        glow = np.zeros_like(image)
        cv2.line(glow, a, b, glow_color, width + glow_blur // 2, cv2.LINE_AA)
        ksize = 2 * glow_blur + 1
        glow = cv2.GaussianBlur(glow, (ksize, ksize), 0)
        cv2.add(image, glow, image)

    cv2.line(image, a, b, color, width, cv2.LINE_AA)


def draw_pluck_flash(
    image: np.ndarray, point: Point, radius: int = PLUCK_FLASH_RADIUS,
) -> None:
    """White burst where a plucker crossed the string."""
    cv2.circle(image, point.to_pixel(), radius, COLOR_WHITE, -1, cv2.LINE_AA)


# ---------------------------------------------------------------------------
# Ripple swirls
# ---------------------------------------------------------------------------
def bezier_points(
    p0: tuple[float, float],
    p1: tuple[float, float],
    p2: tuple[float, float],
    p3: tuple[float, float],
    samples: int = 24,
) -> np.ndarray:
    """Sample a cubic Bézier curve; returns a ``(samples, 2)`` float array."""
    t = np.linspace(0.0, 1.0, samples)[:, None]
    pts = np.array([p0, p1, p2, p3], dtype=np.float64)
    return (
        (1 - t) ** 3 * pts[0]
        + 3 * (1 - t) ** 2 * t * pts[1]
        + 3 * (1 - t) * t ** 2 * pts[2]
        + t ** 3 * pts[3]
    )


def swirl_arms(ripple: Ripple, arms: int = SWIRL_ARMS) -> list[np.ndarray]:
    """
    Pixel polylines of a ripple's spiral arms.

    The whole swirl turns by ``0.1 rad`` per frame of age and each arm
    reaches further out as the ripple ages.
    """
    age = ripple.age
    arm = bezier_points(
        (10, 0),
        (30 + age * 2, 20),
        (50 + age * 4, -20),
        (80 + age * 6, 0),
    )

    rotation = age * 0.1
    polylines = []
    for j in range(arms):
        angle = rotation + (j + 1) * 2 * math.pi / arms
        c, s = math.cos(angle), math.sin(angle)
        x = arm[:, 0] * c - arm[:, 1] * s + ripple.x
        y = arm[:, 0] * s + arm[:, 1] * c + ripple.y
        polylines.append(np.stack([x, y], axis=1).round().astype(np.int32))
    return polylines


def draw_swirl(image: np.ndarray, ripple: Ripple, life: float) -> None:
    """
    Paint one ripple as a fading, rotating three-armed spiral.

    Opacity falls and the stroke thickens as *life* runs out.
    """
    if life <= 0:
        return

    alpha = float(np.clip(SWIRL_MAX_ALPHA * life * ripple.intensity, 0.0, 1.0))
    thickness = max(1, int(round(3 + (1 - life) * 10)))

    overlay = image.copy()
    cv2.polylines(
        overlay, swirl_arms(ripple), False, SWIRL_COLOR, thickness, cv2.LINE_AA,
    )
    cv2.addWeighted(overlay, alpha, image, 1 - alpha, 0, image)


# ---------------------------------------------------------------------------
# Fingertip feedback
# ---------------------------------------------------------------------------
def draw_tips(
    image: np.ndarray, tips: list[Point], radius: int = TIP_RADIUS,
) -> None:
    """Translucent dots on every hand's anchor fingertip."""
    if not tips:
        return
    overlay = image.copy()
    for tip in tips:
        cv2.circle(overlay, tip.to_pixel(), radius, COLOR_WHITE, -1, cv2.LINE_AA)
    cv2.addWeighted(overlay, TIP_ALPHA, image, 1 - TIP_ALPHA, 0, image)


# ---------------------------------------------------------------------------
# Scene
# ---------------------------------------------------------------------------
def draw_scene(
    image: np.ndarray,
    output: FrameOutput,
    ripples: RippleField,
    tips: list[Point] | None = None,
) -> None:
    """Draw one frame's string, pluck flashes, ripples and fingertip dots."""
    if output.has_string:
        draw_string(image, output.anchor_a, output.anchor_b)
        for event in output.events:
            draw_pluck_flash(image, event.point)

    ripples.render(image, draw_swirl)

    if tips:
        draw_tips(image, tips)


# ---------------------------------------------------------------------------
# Text overlays
# ---------------------------------------------------------------------------
def _centered_text(
    image: np.ndarray,
    text: str,
    y: int,
    scale: float,
    color: tuple[int, int, int],
    thickness: int = 1,
) -> None:
    w = image.shape[1]
    (tw, _), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, thickness)
    cv2.putText(
        image, text, ((w - tw) // 2, y),
        cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA,
    )


def draw_title_screen(image: np.ndarray) -> None:
    """Start screen shown until the user presses the start key."""
    h, w = image.shape[:2]
    overlay = np.zeros_like(image)
    cv2.addWeighted(overlay, 0.8, image, 0.2, 0, image)

    cy = h // 2
    _centered_text(image, "STARRY STRING", cy - 90, 1.6, COLOR_WHITE, 2)
    _centered_text(
        image, "Use your index fingers to create a cosmic string.",
        cy - 30, 0.7, (200, 200, 200),
    )
    _centered_text(
        image, "Pluck it with your middle fingers.",
        cy + 5, 0.7, (200, 200, 200),
    )
    _centered_text(image, "Press SPACE to enter", cy + 70, 0.9, COLOR_WHITE, 2)
    _centered_text(image, "Camera access required", cy + 110, 0.45, COLOR_GREY)


def draw_loading(image: np.ndarray) -> None:
    """Top-right notice until the first hand-tracking result arrives."""
    w = image.shape[1]
    cv2.putText(
        image, "Loading vision model...", (w - 260, 30),
        cv2.FONT_HERSHEY_SIMPLEX, 0.55, COLOR_GREY, 1, cv2.LINE_AA,
    )


def draw_fps(image: np.ndarray, fps: float) -> None:
    cv2.putText(
        image, f"FPS: {fps:.0f}", (10, image.shape[0] - 15),
        cv2.FONT_HERSHEY_SIMPLEX, 0.6, COLOR_GREEN, 1, cv2.LINE_AA,
    )


def draw_status(image: np.ndarray, text: str) -> None:
    """Small status line in the top-left corner."""
    cv2.rectangle(image, (0, 0), (len(text) * 9 + 20, 30), COLOR_BLACK, -1)
    cv2.putText(
        image, text, (10, 20),
        cv2.FONT_HERSHEY_SIMPLEX, 0.5, COLOR_WHITE, 1, cv2.LINE_AA,
    )
