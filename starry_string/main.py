#!/usr/bin/env python3
"""
Starry String — Entry Point

Webcam + MediaPipe hand tracking drive a glowing string between your two
index fingertips.  Swipe a middle fingertip across it to pluck: a note
sounds (pitch follows the horizontal position) and a swirl spreads from
the crossing point.

Flow:
  1. Title screen.  Audio starts only when you press SPACE / Enter.
  2. Camera + hand landmarker start.
  3. Per frame: backdrop → string → plucks → swirls → fingertip dots.

Controls:
  - SPACE / Enter : Start (title screen)
  - ESC or 'q'    : Quit
  - 'f'           : Toggle FPS display

Usage:
    starry-string
    python3 -m starry_string.main --backdrop starry_night.jpg --camera 1
"""

from __future__ import annotations

import argparse
import threading
import time
from pathlib import Path

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks.python import BaseOptions
from mediapipe.tasks.python.vision import (
    HandLandmarker,
    HandLandmarkerOptions,
    HandLandmarkerResult,
    RunningMode,
)

from .audio_engine import AudioEngine
from .config import (
    BACKDROP_PATH,
    BASE_FREQ,
    CAMERA_INDEX,
    FRAME_HEIGHT,
    FRAME_INTERVAL_MS,
    FRAME_WIDTH,
    FREQ_RANGE,
    FREQ_STEP,
    MIN_DETECTION_CONFIDENCE,
    MIN_PRESENCE_CONFIDENCE,
    MIN_TRACKING_CONFIDENCE,
    MIRROR,
    MODEL_PATH,
    MODEL_URL,
    NUM_HANDS,
    RIPPLE_MAX_AGE,
    WINDOW_TITLE,
)
from .drawing import (
    draw_backdrop,
    draw_fps,
    draw_loading,
    draw_scene,
    draw_status,
    draw_title_screen,
    load_backdrop,
)
from .hand_tracking import anchor_tips, hand_landmarks_of
from .pipeline import StarryString

KEY_ESC = 27
KEY_ENTER = 13
KEY_SPACE = 32


# ---------------------------------------------------------------------------
# Frame driver
# ---------------------------------------------------------------------------
class FrameDriver:
    """
    Owns the camera, the hand landmarker and the display loop.

    The landmarker runs in live-stream mode: its callback stores the latest
    finished result, and the loop feeds that result to ``StarryString``
    once per displayed frame.  Every acquired resource is released in
    ``close()``, whichever way the loop ends.
    """

    def __init__(
        self,
        audio: AudioEngine,
        camera_index: int = CAMERA_INDEX,
        model_path: str = MODEL_PATH,
        backdrop_path: str | None = BACKDROP_PATH,
        max_age: int = RIPPLE_MAX_AGE,
        mirror: bool = MIRROR,
    ) -> None:
        self.audio = audio
        self.camera_index = camera_index
        self.model_path = model_path
        self.mirror = mirror
        self.max_age = max_age
        self.backdrop = load_backdrop(backdrop_path)

        self.instrument: StarryString | None = None
        self.running = False
        self.show_fps = True

        self._cap: cv2.VideoCapture | None = None
        self._landmarker: HandLandmarker | None = None
        self._window_open = False

        self._latest_result: HandLandmarkerResult | None = None
        self._result_lock = threading.Lock()

    def _on_result(self, result: HandLandmarkerResult, _img, _ts) -> None:
        with self._result_lock:
            self._latest_result = result

    # -----------------------------------------------------------------
    # Startup
    # -----------------------------------------------------------------
    def wait_for_start(self) -> bool:
        """
        Show the title screen until SPACE / Enter (True) or quit (False).
        """
        if self.backdrop is not None:
            base = draw_backdrop(
                np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 3), np.uint8), self.backdrop,
            )
        else:
            base = np.zeros((FRAME_HEIGHT, FRAME_WIDTH, 3), np.uint8)
        draw_title_screen(base)

        while True:
            cv2.imshow(WINDOW_TITLE, base)
            self._window_open = True
            key = cv2.waitKey(30) & 0xFF
            if key in (KEY_SPACE, KEY_ENTER):
                return True
            if key == KEY_ESC or key == ord("q"):
                return False
            if cv2.getWindowProperty(WINDOW_TITLE, cv2.WND_PROP_VISIBLE) < 1:
                return False

    def start_audio(self) -> None:
        """Bring up audio; only called after the user pressed start."""
        if self.audio.initialize():
            self.audio.resume()
        else:
            print("[FrameDriver] Continuing without sound.")

    def _open_landmarker(self) -> bool:
        if not Path(self.model_path).exists():
            print(f"[FrameDriver] Model not found at {self.model_path}")
            print("Download it with:")
            print(f"  curl -L -o {self.model_path} \\")
            print(f"    {MODEL_URL}")
            return False

        options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=self.model_path),
            running_mode=RunningMode.LIVE_STREAM,
            num_hands=NUM_HANDS,
            min_hand_detection_confidence=MIN_DETECTION_CONFIDENCE,
            min_hand_presence_confidence=MIN_PRESENCE_CONFIDENCE,
            min_tracking_confidence=MIN_TRACKING_CONFIDENCE,
            result_callback=self._on_result,
        )
        self._landmarker = HandLandmarker.create_from_options(options)
        return True

    def _open_camera(self) -> bool:
        self._cap = cv2.VideoCapture(self.camera_index)
        if not self._cap.isOpened():
            print(f"[FrameDriver] Could not open webcam {self.camera_index}.")
            return False
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, FRAME_WIDTH)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, FRAME_HEIGHT)
        return True

    # -----------------------------------------------------------------
    # Main loop
    # -----------------------------------------------------------------
    def run(self) -> None:
        cv2.namedWindow(WINDOW_TITLE, cv2.WINDOW_NORMAL)
        self._window_open = True

        if not self.wait_for_start():
            return

        self.start_audio()
        if not self._open_landmarker():
            return
        if not self._open_camera():
            return

        self.running = True
        frame_timestamp_ms = 0
        prev_time = time.time()
        fps = 0.0

        print("[FrameDriver] Webcam started. Raise both index fingers.")

        while self.running and self._cap.isOpened():
            success, frame = self._cap.read()
            if not success:
                continue

            if self.mirror:
                frame = cv2.flip(frame, 1)
            h, w = frame.shape[:2]

            if self.instrument is None:
                self.instrument = StarryString(
                    w, h, audio=self.audio, max_age=self.max_age,
                )

            frame_timestamp_ms += FRAME_INTERVAL_MS
            mp_image = mp.Image(
                image_format=mp.ImageFormat.SRGB,
                data=cv2.cvtColor(frame, cv2.COLOR_BGR2RGB),
            )
            self._landmarker.detect_async(mp_image, frame_timestamp_ms)

            with self._result_lock:
                result = self._latest_result

            hands = hand_landmarks_of(result)
            output = self.instrument.update(hands, w, h)

            # --- Draw ---
            canvas = draw_backdrop(frame, self.backdrop)
            draw_scene(
                canvas, output, self.instrument.ripples,
                tips=anchor_tips(
                    hands, w, h, self.instrument.anchor_landmark,
                ),
            )

            if result is None:
                draw_loading(canvas)
            if not self.audio.ready:
                draw_status(canvas, "Audio unavailable")

            current_time = time.time()
            fps = 0.9 * fps + 0.1 / max(current_time - prev_time, 1e-6)
            prev_time = current_time
            if self.show_fps:
                draw_fps(canvas, fps)

            cv2.imshow(WINDOW_TITLE, canvas)

            key = cv2.waitKey(1) & 0xFF
            if key == KEY_ESC or key == ord("q"):
                break
            elif key == ord("f"):
                self.show_fps = not self.show_fps

        self.running = False

    def stop(self) -> None:
        self.running = False

    # -----------------------------------------------------------------
    # Teardown
    # -----------------------------------------------------------------
    def close(self) -> None:
        """Release landmarker, camera, window and audio.  Idempotent."""
        self.running = False
        try:
            if self._landmarker is not None:
                self._landmarker.close()
                self._landmarker = None
        finally:
            try:
                if self._cap is not None:
                    self._cap.release()
                    self._cap = None
            finally:
                try:
                    if self._window_open:
                        cv2.destroyAllWindows()
                        self._window_open = False
                finally:
                    self.audio.shutdown()

        plucks = self.instrument.pluck_count if self.instrument else 0
        print(f"[FrameDriver] Stopped. Total plucks: {plucks}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Starry String — pluck a string of light between your hands.",
    )
    parser.add_argument(
        "--camera", "-c",
        type=int,
        default=CAMERA_INDEX,
        help="Webcam index passed to OpenCV",
    )
    parser.add_argument(
        "--backdrop", "-b",
        default=BACKDROP_PATH,
        help="Backdrop image (default: the mirrored camera feed)",
    )
    parser.add_argument(
        "--model",
        default=MODEL_PATH,
        help="Path to the MediaPipe hand_landmarker.task model",
    )
    parser.add_argument(
        "--max-age",
        type=int,
        default=RIPPLE_MAX_AGE,
        help="Ripple lifetime in frames",
    )
    parser.add_argument(
        "--base-freq",
        type=float,
        default=BASE_FREQ,
        help="Pitch at the left edge of the screen (Hz)",
    )
    parser.add_argument(
        "--freq-range",
        type=float,
        default=FREQ_RANGE,
        help="Pitch span from left to right edge (Hz)",
    )
    parser.add_argument(
        "--freq-step",
        type=float,
        default=FREQ_STEP,
        help="Pitch quantisation step (Hz)",
    )
    parser.add_argument(
        "--no-mirror",
        action="store_true",
        help="Do not mirror the camera image",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    print("=" * 60)
    print("  Starry String")
    print("=" * 60)
    print("Controls: SPACE = Start | ESC/q = Quit | f = Toggle FPS")
    print()

    audio = AudioEngine(
        base_freq=args.base_freq,
        freq_range=args.freq_range,
        freq_step=args.freq_step,
    )
    driver = FrameDriver(
        audio,
        camera_index=args.camera,
        model_path=args.model,
        backdrop_path=args.backdrop,
        max_age=args.max_age,
        mirror=not args.no_mirror,
    )

    try:
        driver.run()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        driver.close()


if __name__ == "__main__":
    main()
