"""
Configuration constants for the Starry String installation.

Every value here is a default: the classes that use them take the same
setting as a keyword argument, and the command line overrides the common
ones.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# MediaPipe model
# ---------------------------------------------------------------------------
MODEL_PATH = os.environ.get(
    "STARRY_MODEL_PATH", str(Path(__file__).parent / "hand_landmarker.task"),
)
MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/"
    "hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task"
)

NUM_HANDS = 2
MIN_DETECTION_CONFIDENCE = 0.5
MIN_PRESENCE_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5

# ---------------------------------------------------------------------------
# Camera / display
# ---------------------------------------------------------------------------
CAMERA_INDEX = int(os.environ.get("STARRY_CAMERA_INDEX", "0"))
FRAME_WIDTH = 1280
FRAME_HEIGHT = 720
FRAME_INTERVAL_MS = 33  # timestamp step fed to the live-stream landmarker
MIRROR = True

# Optional backdrop image; the mirrored camera frame is used when unset
BACKDROP_PATH = os.environ.get("STARRY_BACKDROP") or None
BACKDROP_DARKEN = 0.3

WINDOW_TITLE = "Starry String"

# ---------------------------------------------------------------------------
# Colors (BGR)
# ---------------------------------------------------------------------------
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)
COLOR_GREEN = (0, 255, 0)
COLOR_GREY = (128, 128, 128)

STRING_COLOR = (221, 255, 255)  # #ffffdd
STRING_WIDTH = 4
STRING_GLOW_COLOR = (64, 192, 240)  # #f0c040
STRING_GLOW_BLUR = 15

SWIRL_COLOR = (100, 255, 255)  # rgb(255, 255, 100)
SWIRL_ARMS = 3
SWIRL_MAX_ALPHA = 0.8

PLUCK_FLASH_RADIUS = 20
TIP_RADIUS = 6
TIP_ALPHA = 0.8

# ---------------------------------------------------------------------------
# Hand tracking
# ---------------------------------------------------------------------------
# String anchors: index fingertips of the first two hands
ANCHOR_LANDMARK_INDEX = 8  # INDEX_FINGER_TIP

# Pluckers: middle fingertip of every hand
PLUCKER_LANDMARK_INDEX = 12  # MIDDLE_FINGER_TIP

# ---------------------------------------------------------------------------
# Ripples
# ---------------------------------------------------------------------------
RIPPLE_MAX_AGE = 60  # frames
RIPPLE_INTENSITY = 1.0

# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------
SAMPLE_RATE = 44100
BLOCK_SIZE = 512
CHANNELS = 2

# Position → pitch mapping (Hz)
BASE_FREQ = 200.0
FREQ_RANGE = 600.0
FREQ_STEP = 50.0

# Voice envelope
PEAK_GAIN = 0.8
ATTACK_TIME = 0.01  # seconds to peak
DECAY_TIME = 1.5  # seconds from onset until the envelope reaches DECAY_FLOOR
DECAY_FLOOR = 0.001
VOICE_DURATION = 2.0  # each voice stops itself after this many seconds

MASTER_GAIN = 0.4

# Synthetic reverb impulse
REVERB_DURATION = 2.0
REVERB_DECAY = 2.0
REVERB_REVERSE = False
