"""
Audio engine: synthesized pluck voices mixed into a sounddevice stream.

The rest of the system only needs to call ``play_pluck(normalized_position)``.
Audio may only start after a user action, so the engine has an explicit
lifecycle::

    UNINITIALIZED --initialize()--> SUSPENDED --resume()--> RUNNING
                                        ^------suspend()------'
    any state --shutdown()--> CLOSED
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from .config import (
    ATTACK_TIME,
    BASE_FREQ,
    BLOCK_SIZE,
    CHANNELS,
    DECAY_FLOOR,
    DECAY_TIME,
    FREQ_RANGE,
    FREQ_STEP,
    MASTER_GAIN,
    PEAK_GAIN,
    REVERB_DECAY,
    REVERB_DURATION,
    REVERB_REVERSE,
    SAMPLE_RATE,
    VOICE_DURATION,
)
from .synth import (
    impulse_response,
    mix_voice,
    normalize_impulse,
    pluck_frequency,
    render_pluck,
)


class AudioState(Enum):
    """Lifecycle of the output graph."""
    UNINITIALIZED = "uninitialized"
    SUSPENDED = "suspended"
    RUNNING = "running"
    CLOSED = "closed"


@dataclass
class _Voice:
    """One self-terminating pluck: its stereo buffer and play cursor."""
    samples: np.ndarray
    freq: float
    cursor: int = 0

    @property
    def finished(self) -> bool:
        return self.cursor >= len(self.samples)


class AudioEngine:
    """
    Pluck synthesizer with a shared reverb send and a master gain stage.

    Every ``play_pluck`` renders an independent voice (dry signal plus its
    reverb tail) and hands it to the mixer; the output callback sums the
    active voices, applies the master gain, and drops voices that have
    played out.

    Parameters
    ----------
    sample_rate : int
        Output sample rate in Hz.
    master_gain : float
        Gain applied to the summed dry and wet signals.
    base_freq, freq_range, freq_step : float
        Position → pitch mapping: 0 → ``base_freq``,
        1 → ``base_freq + freq_range``, snapped to ``freq_step``.
    reverb_duration, reverb_decay : float
        Length (seconds) and fade exponent of the synthetic impulse.
    stream_factory : callable | None
        Builds the output stream; called with ``samplerate``,
        ``blocksize``, ``channels``, ``dtype`` and ``callback`` keywords.
        Defaults to ``sounddevice.OutputStream``.
    """

    def __init__(
        self,
        sample_rate: int = SAMPLE_RATE,
        master_gain: float = MASTER_GAIN,
        base_freq: float = BASE_FREQ,
        freq_range: float = FREQ_RANGE,
        freq_step: float = FREQ_STEP,
        reverb_duration: float = REVERB_DURATION,
        reverb_decay: float = REVERB_DECAY,
        reverb_reverse: bool = REVERB_REVERSE,
        voice_duration: float = VOICE_DURATION,
        peak_gain: float = PEAK_GAIN,
        attack: float = ATTACK_TIME,
        decay: float = DECAY_TIME,
        decay_floor: float = DECAY_FLOOR,
        block_size: int = BLOCK_SIZE,
        stream_factory: Callable | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if freq_step <= 0:
            raise ValueError(f"freq_step must be positive, got {freq_step}")
        if voice_duration <= 0:
            raise ValueError(
                f"voice_duration must be positive, got {voice_duration}"
            )

        self.sample_rate = sample_rate
        self.master_gain = master_gain
        self.base_freq = base_freq
        self.freq_range = freq_range
        self.freq_step = freq_step
        self.reverb_duration = reverb_duration
        self.reverb_decay = reverb_decay
        self.reverb_reverse = reverb_reverse
        self.voice_duration = voice_duration
        self.peak_gain = peak_gain
        self.attack = attack
        self.decay = decay
        self.decay_floor = decay_floor
        self.block_size = block_size

        self._stream_factory = stream_factory
        self._rng = rng
        self._stream = None
        self._impulse: np.ndarray | None = None
        self._voices: list[_Voice] = []
        self._state = AudioState.UNINITIALIZED
        self._lock = threading.Lock()

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------
    @property
    def state(self) -> AudioState:
        return self._state

    @property
    def ready(self) -> bool:
        """True once the graph is built and plucks can be queued."""
        return self._state in (AudioState.SUSPENDED, AudioState.RUNNING)

    def initialize(self) -> bool:
        """
        Build the output graph: reverb impulse, mixer and output stream.

        Only the first successful call does anything; later calls are
        no-ops.  The stream is left suspended until ``resume()``.
        Returns ``ready``.
        """
        if self._state is not AudioState.UNINITIALIZED:
            return self.ready

        factory = self._stream_factory
        if factory is None:
            try:
                import sounddevice
            except (ImportError, OSError) as exc:
                print(
                    f"[AudioEngine] sounddevice unavailable ({exc}). "
                    "Run: pip install sounddevice"
                )
                return False
            factory = sounddevice.OutputStream

        impulse = normalize_impulse(impulse_response(
            self.sample_rate,
            duration=self.reverb_duration,
            decay=self.reverb_decay,
            reverse=self.reverb_reverse,
            rng=self._rng,
        ))

        try:
            stream = factory(
                samplerate=self.sample_rate,
                blocksize=self.block_size,
                channels=CHANNELS,
                dtype="float32",
                callback=self._callback,
            )
        except Exception as exc:
            print(f"[AudioEngine] Failed to open output stream: {exc}")
            return False

        with self._lock:
            self._impulse = impulse
            self._stream = stream
            self._voices = []
            self._state = AudioState.SUSPENDED

        print(
            f"[AudioEngine] Ready: {self.sample_rate} Hz, "
            f"reverb {self.reverb_duration:.1f}s, "
            f"pitch {self.base_freq:.0f}-{self.base_freq + self.freq_range:.0f} Hz"
        )
        return True

    def resume(self) -> None:
        """Start (or restart) a suspended output stream."""
        if self._state is not AudioState.SUSPENDED:
            return
        self._stream.start()
        self._state = AudioState.RUNNING

    def suspend(self) -> None:
        """Pause output; queued voices continue on ``resume()``."""
        if self._state is not AudioState.RUNNING:
            return
        self._stream.stop()
        self._state = AudioState.SUSPENDED

    def stop_all(self) -> None:
        """Silence every voice."""
        with self._lock:
            self._voices = []

    def shutdown(self) -> None:
        """Close the stream and release the device.  Safe to call twice."""
        if self._state is AudioState.CLOSED:
            return
        self.stop_all()
        stream = self._stream
        self._stream = None
        self._state = AudioState.CLOSED
        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()

    # -----------------------------------------------------------------
    # Playback
    # -----------------------------------------------------------------
    @property
    def active_voices(self) -> int:
        with self._lock:
            return len(self._voices)

    def frequency_for(self, normalized_position: float) -> float:
        """Quantised frequency a pluck at *normalized_position* plays."""
        return pluck_frequency(
            normalized_position,
            base=self.base_freq,
            freq_range=self.freq_range,
            step=self.freq_step,
        )

    def play_pluck(self, normalized_position: float) -> float | None:
        """
        Queue one plucked-string voice (non-blocking).

        The voice is fully rendered up front, so it stops by itself after
        ``voice_duration`` plus its reverb tail.  Does nothing before
        ``initialize()``.  Returns the frequency played, or ``None``.
        """
        if not self.ready:
            return None

        freq = self.frequency_for(normalized_position)
        dry = render_pluck(
            freq,
            self.sample_rate,
            duration=self.voice_duration,
            peak=self.peak_gain,
            attack=self.attack,
            decay=self.decay,
            floor=self.decay_floor,
        )
        samples = mix_voice(dry, self._impulse)

        with self._lock:
            self._voices.append(_Voice(samples=samples, freq=freq))
        return freq

    def render_block(self, frames: int) -> np.ndarray:
        """
        Mix the next *frames* samples of every active voice.

        Returns a ``(frames, 2)`` float32 block after the master gain.
        Finished voices are dropped.
        """
        mix = np.zeros((frames, CHANNELS), dtype=np.float32)
        with self._lock:
            for voice in self._voices:
                chunk = voice.samples[voice.cursor:voice.cursor + frames]
                mix[: len(chunk)] += chunk
                voice.cursor += frames
            self._voices = [v for v in self._voices if not v.finished]

        mix *= self.master_gain
        np.clip(mix, -1.0, 1.0, out=mix)
        return mix

    def _callback(self, outdata, frames, time_info, status) -> None:
        outdata[:] = self.render_block(frames)
