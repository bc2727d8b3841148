"""
Synth: the plucked-string voice and its reverb, as plain numpy buffers.

Inputs
------
- ``normalized_position`` : horizontal pluck position (0-1) → frequency

Output
------
Float32 sample buffers: a mono voice (triangle oscillator shaped by an
attack / exponential-decay envelope), a stereo noise impulse response, and
the wet signal of the voice through that impulse.

Nothing here touches an audio device; ``audio_engine`` mixes the buffers.
"""

from __future__ import annotations

import math

import numpy as np
from scipy import signal

from .config import (
    ATTACK_TIME,
    BASE_FREQ,
    DECAY_FLOOR,
    DECAY_TIME,
    FREQ_RANGE,
    FREQ_STEP,
    PEAK_GAIN,
    REVERB_DECAY,
    REVERB_DURATION,
    REVERB_REVERSE,
    VOICE_DURATION,
)

# Output gain of the convolution reverb once the impulse is RMS-normalised
REVERB_CALIBRATION = 0.00125


# ---------------------------------------------------------------------------
# Position → pitch
# ---------------------------------------------------------------------------
def quantize(freq: float, step: float = FREQ_STEP) -> float:
    """Snap *freq* to the nearest multiple of *step* (halves round up)."""
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    return math.floor(freq / step + 0.5) * step


def pluck_frequency(
    normalized_position: float,
    base: float = BASE_FREQ,
    freq_range: float = FREQ_RANGE,
    step: float = FREQ_STEP,
) -> float:
    """
    Map a horizontal position (0-1) to a quantised frequency in Hz.

    0 → ``base``, 1 → ``base + freq_range``, linear in between, then
    snapped to the ``step`` grid.  Positions outside 0-1 are not clamped.
    """
    return quantize(base + normalized_position * freq_range, step)


# ---------------------------------------------------------------------------
# Voice
# ---------------------------------------------------------------------------
def pluck_envelope(
    n_samples: int,
    sample_rate: int,
    peak: float = PEAK_GAIN,
    attack: float = ATTACK_TIME,
    decay: float = DECAY_TIME,
    floor: float = DECAY_FLOOR,
) -> np.ndarray:
    """
    Gain curve of one pluck.

    Linear ramp from 0 to *peak* over *attack* seconds, then an exponential
    fall that reaches *floor* at *decay* seconds after onset, then held at
    *floor*.
    """
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    if not 0 < floor < peak:
        raise ValueError("floor must be between 0 and peak")

    t = np.arange(n_samples) / sample_rate
    env = np.full(n_samples, floor, dtype=np.float64)

    if attack > 0:
        rising = t < attack
        env[rising] = peak * t[rising] / attack

    if decay > attack:
        falling = (t >= attack) & (t < decay)
        frac = (t[falling] - attack) / (decay - attack)
        env[falling] = peak * (floor / peak) ** frac

    return env.astype(np.float32)


def triangle_wave(freq: float, n_samples: int, sample_rate: int) -> np.ndarray:
    """Unit triangle wave starting at 0 and rising."""
    t = np.arange(n_samples) / sample_rate
    return signal.sawtooth(
        2 * np.pi * freq * t + np.pi / 2, width=0.5,
    ).astype(np.float32)


def render_pluck(
    freq: float,
    sample_rate: int,
    duration: float = VOICE_DURATION,
    peak: float = PEAK_GAIN,
    attack: float = ATTACK_TIME,
    decay: float = DECAY_TIME,
    floor: float = DECAY_FLOOR,
) -> np.ndarray:
    """One complete pluck voice, mono, stopping after *duration* seconds."""
    n = int(round(sample_rate * duration))
    env = pluck_envelope(n, sample_rate, peak, attack, decay, floor)
    return triangle_wave(freq, n, sample_rate) * env


# ---------------------------------------------------------------------------
# Reverb
# ---------------------------------------------------------------------------
def impulse_response(
    sample_rate: int,
    duration: float = REVERB_DURATION,
    decay: float = REVERB_DECAY,
    reverse: bool = REVERB_REVERSE,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """
    Synthetic stereo impulse: white noise under a ``(1 - n/len)**decay`` fade.

    Returns a ``(length, 2)`` float32 array, one independent noise channel
    per side.  With *reverse* the fade runs the other way.
    """
    if rng is None:
        rng = np.random.default_rng()

    length = int(sample_rate * duration)
    n = np.arange(length, dtype=np.float64)
    if reverse:
        n = length - n
    fade = (1 - n / length) ** decay

    noise = rng.uniform(-1.0, 1.0, size=(length, 2))
    return (noise * fade[:, None]).astype(np.float32)


def normalize_impulse(impulse: np.ndarray) -> np.ndarray:
    """Scale *impulse* to unit RMS times ``REVERB_CALIBRATION``."""
    rms = float(np.sqrt(np.mean(np.square(impulse, dtype=np.float64))))
    if rms < 1e-12:
        return impulse
    return (impulse * (REVERB_CALIBRATION / rms)).astype(np.float32)


def apply_reverb(dry: np.ndarray, impulse: np.ndarray) -> np.ndarray:
    """
    Convolve a mono *dry* signal with a stereo *impulse*.

    Returns the wet signal, shape ``(len(dry) + len(impulse) - 1, 2)``.
    """
    wet = signal.fftconvolve(dry[:, None], impulse, mode="full", axes=0)
    return wet.astype(np.float32)


def mix_voice(dry: np.ndarray, impulse: np.ndarray | None) -> np.ndarray:
    """
    Stereo buffer of one voice: the dry path plus its reverb send.

    The dry signal goes to both channels; the wet tail makes the buffer
    longer than the voice itself.
    """
    if impulse is None or len(impulse) == 0:
        return np.repeat(dry[:, None], 2, axis=1).astype(np.float32)

    wet = apply_reverb(dry, impulse)
    out = wet.copy()
    out[: len(dry)] += dry[:, None]
    return out
