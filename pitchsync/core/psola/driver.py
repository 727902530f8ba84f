# pitchsync/core/psola/driver.py

"""
Pitch-synchronous overlap-add time-scale modification.

The engine walks the input one pitch period at a time. At each step it
estimates the next period, builds a loop filter there, and crossfades from
the previous filter to the new one while the playback cursor covers the
step at the requested speed. Slowing down and speeding up are the same
loop; only the number of output samples per step changes.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from ..errors import ConfigurationError
from .filter_builder import build_loop_filter
from .pitch import (
    DEFAULT_MAX_VOICE_FREQUENCY_HZ,
    DEFAULT_MIN_VOICE_FREQUENCY_HZ,
    DEFAULT_NOISE_FLOOR_THRESHOLD,
    PeriodBounds,
    estimate_pitch_period,
)
from .resynth import Resynthesizer
from .sample_buffer import OutputSampleBuffer, PaddedSampleBuffer, as_pcm16

logger = logging.getLogger(__name__)

DEFAULT_MAX_SPEED = 10.0


@dataclass(frozen=True)
class PitchTrackEntry:
    """Period decision for one step; `position` is in unpadded input samples."""
    position: int
    period: int
    voiced: bool


@dataclass
class PSOLAResult:
    samples: NDArray[np.int16]
    sample_rate: int
    speed: float
    bounds: PeriodBounds
    pitch_track: List[PitchTrackEntry] = field(default_factory=list)

    @property
    def steps(self) -> int:
        return len(self.pitch_track)


def validate_speed(speed: float, max_speed: float = DEFAULT_MAX_SPEED) -> float:
    """
    Checks a speed factor before any processing starts.

    Raises:
        ConfigurationError: If speed is not a finite number in (0, max_speed].
    """
    try:
        speed = float(speed)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Speed must be a number, got {speed!r}.")
    if not math.isfinite(speed) or speed <= 0:
        raise ConfigurationError(f"Speed must be a positive finite number, got {speed}.")
    if speed > max_speed:
        raise ConfigurationError(f"Speed {speed} exceeds the maximum supported speed {max_speed}.")
    return speed


class PSOLAEngine:
    """
    All state for one time-scaling run.

    Engines share nothing, so several may run side by side. Each engine
    processes its input once.
    """

    def __init__(
        self,
        samples: Union[Sequence[int], NDArray],
        sample_rate: int,
        speed: float,
        min_voice_frequency_hz: int = DEFAULT_MIN_VOICE_FREQUENCY_HZ,
        max_voice_frequency_hz: int = DEFAULT_MAX_VOICE_FREQUENCY_HZ,
        noise_floor_threshold: float = DEFAULT_NOISE_FLOOR_THRESHOLD,
        max_speed: float = DEFAULT_MAX_SPEED
    ):
        self.speed = validate_speed(speed, max_speed)
        self.sample_rate = int(sample_rate)
        self.bounds = PeriodBounds.from_sample_rate(
            self.sample_rate, min_voice_frequency_hz, max_voice_frequency_hz
        )
        self.noise_floor_threshold = noise_floor_threshold

        pcm = as_pcm16(samples)
        max_period = self.bounds.max_period
        # The last step may start up to max_period past the real end and look
        # another max_period ahead of that
        self.input = PaddedSampleBuffer(pcm, leading=max_period, trailing=2 * max_period)
        capacity = int(math.ceil((len(pcm) + 2 * max_period) / self.speed)) + 1
        self.output = OutputSampleBuffer(capacity)

        self.playback = Resynthesizer(initial_period=self.bounds.min_period, input_pos=self.input.start)
        self.current_period = self.bounds.min_period
        self.previous_period = self.bounds.min_period
        self.voiced = False
        self.pitch_track: List[PitchTrackEntry] = []
        self._finished = False

    @property
    def input_pos(self) -> int:
        return self.playback.input_pos

    @property
    def exhausted(self) -> bool:
        return self.playback.input_pos >= self.input.end

    def step(self) -> int:
        """
        Runs one driver iteration.

        Returns:
            Number of output samples emitted during the step.
        """
        step_size = self.current_period
        self.previous_period = self.current_period
        self.playback.rotate()

        position = self.playback.input_pos + step_size
        estimate = estimate_pitch_period(
            self.input,
            position,
            self.bounds,
            self.previous_period,
            self.voiced,
            self.noise_floor_threshold,
        )
        self.current_period = estimate.period
        self.voiced = estimate.voiced
        self.pitch_track.append(
            PitchTrackEntry(position=position - self.input.start, period=estimate.period, voiced=estimate.voiced)
        )

        loop_filter = build_loop_filter(
            self.input, position, estimate.period, self.playback.previous_pos, step_size
        )
        self.playback.load(loop_filter)
        emitted = self.playback.emit(self.output, step_size, self.speed)
        self.playback.advance(step_size)
        return emitted

    def run(self) -> PSOLAResult:
        """
        Steps until the input is exhausted.

        Raises:
            RuntimeError: If the engine has already run.
            InternalConsistencyError: On broken cursor bookkeeping.
        """
        if self._finished:
            raise RuntimeError("PSOLAEngine instances process their input once; create a new engine.")

        logger.info(f"Length = {self.input.length}, sample rate = {self.sample_rate} Hz")
        logger.debug(
            f"Time scaling at speed {self.speed}: periods {self.bounds.min_period}..{self.bounds.max_period}, "
            f"noise floor {self.noise_floor_threshold}, output capacity {self.output.capacity}"
        )
        while not self.exhausted:
            self.step()
        self._finished = True

        voiced_steps = sum(1 for entry in self.pitch_track if entry.voiced)
        logger.debug(
            f"Finished after {len(self.pitch_track)} steps ({voiced_steps} voiced); "
            f"{self.output.position} output samples."
        )
        return PSOLAResult(
            samples=self.output.samples,
            sample_rate=self.sample_rate,
            speed=self.speed,
            bounds=self.bounds,
            pitch_track=list(self.pitch_track),
        )


def time_scale(
    samples: Union[Sequence[int], NDArray],
    sample_rate: int,
    speed: float,
    min_voice_frequency_hz: int = DEFAULT_MIN_VOICE_FREQUENCY_HZ,
    max_voice_frequency_hz: int = DEFAULT_MAX_VOICE_FREQUENCY_HZ,
    noise_floor_threshold: float = DEFAULT_NOISE_FLOOR_THRESHOLD
) -> NDArray[np.int16]:
    """
    Changes the playback speed of mono 16-bit audio without changing its pitch.

    Args:
        samples: Mono signed 16-bit samples.
        sample_rate: Sampling rate in Hz.
        speed: Speed factor; 1.0 leaves timing unchanged, 2.0 halves the
               duration, 0.5 doubles it.
        min_voice_frequency_hz: Lowest fundamental the pitch tracker searches.
        max_voice_frequency_hz: Highest fundamental the pitch tracker searches.
        noise_floor_threshold: Average mismatch below which frames are unvoiced.

    Returns:
        int16 array of roughly `len(samples) / speed` samples.

    Raises:
        ConfigurationError: For invalid speed, sample rate, bounds, or input shape.
    """
    engine = PSOLAEngine(
        samples,
        sample_rate,
        speed,
        min_voice_frequency_hz=min_voice_frequency_hz,
        max_voice_frequency_hz=max_voice_frequency_hz,
        noise_floor_threshold=noise_floor_threshold,
    )
    return engine.run().samples
