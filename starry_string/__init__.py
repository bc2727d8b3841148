"""
Starry String — pluck a string of light stretched between your hands.

The index fingertips of the first two detected hands hold the string; a
middle fingertip swiped across it plucks a note and leaves a fading swirl.

Modules:
  config          : Named defaults for every tunable
  models          : Point, PluckEvent, Ripple, FrameOutput
  geometry        : Segment intersection, distance, lerp
  hand_tracking   : Landmark indices and anchor / plucker extraction
  pluck_detection : Frame-to-frame string crossing detection
  ripples         : Ripple lifecycle (spawn, age, expire, render)
  synth           : Pluck voice, envelope and reverb buffers (numpy)
  audio_engine    : Voice mixer on a sounddevice output stream
  pipeline        : The per-frame update step
  drawing         : OpenCV canvas drawing
  main            : Camera + MediaPipe frame driver and CLI
"""

from .audio_engine import AudioEngine, AudioState
from .geometry import distance, lerp, segments_intersect
from .hand_tracking import extract_points
from .models import FrameOutput, PluckEvent, Point, Ripple
from .pipeline import StarryString
from .pluck_detection import PluckDetector
from .ripples import RippleField

__all__ = [
    "AudioEngine",
    "AudioState",
    "FrameOutput",
    "PluckDetector",
    "PluckEvent",
    "Point",
    "Ripple",
    "RippleField",
    "StarryString",
    "distance",
    "extract_points",
    "lerp",
    "segments_intersect",
]
