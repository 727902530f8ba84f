# pitchsync/core/psola/pitch.py

"""
Pitch period estimation by average magnitude difference.

For each candidate period the window immediately before a position is
compared against the window immediately after it; the candidate with the
smallest per-sample mismatch wins. A frame is voiced when that minimum is
sharp relative to the search range average and the signal rises above a
noise floor.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..errors import ConfigurationError
from .sample_buffer import PaddedSampleBuffer

logger = logging.getLogger(__name__)

# --- Constants ---
DEFAULT_MIN_VOICE_FREQUENCY_HZ = 65
DEFAULT_MAX_VOICE_FREQUENCY_HZ = 400
DEFAULT_NOISE_FLOOR_THRESHOLD = 100.0


@dataclass(frozen=True)
class PeriodBounds:
    """Smallest and largest pitch period searched, in samples."""
    min_period: int
    max_period: int

    @classmethod
    def from_sample_rate(
        cls,
        sample_rate: int,
        min_voice_frequency_hz: int = DEFAULT_MIN_VOICE_FREQUENCY_HZ,
        max_voice_frequency_hz: int = DEFAULT_MAX_VOICE_FREQUENCY_HZ
    ) -> "PeriodBounds":
        """
        Derives period bounds from the sample rate and voice frequency range.

        Args:
            sample_rate: Sampling rate in Hz.
            min_voice_frequency_hz: Lowest fundamental searched (sets max_period).
            max_voice_frequency_hz: Highest fundamental searched (sets min_period).

        Returns:
            PeriodBounds with 1 <= min_period <= max_period.

        Raises:
            ConfigurationError: If any value is non-positive or the bounds collapse.
        """
        if sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}.")
        if min_voice_frequency_hz <= 0 or max_voice_frequency_hz <= 0:
            raise ConfigurationError("Voice frequency bounds must be positive.")

        min_period = int(sample_rate // max_voice_frequency_hz)
        max_period = int(sample_rate // min_voice_frequency_hz)
        if min_period < 1:
            raise ConfigurationError(
                f"Sample rate {sample_rate} Hz is too low for a {max_voice_frequency_hz} Hz "
                f"voice frequency ceiling (min_period would be {min_period})."
            )
        if min_period > max_period:
            raise ConfigurationError(
                f"Invalid period bounds: min_period {min_period} > max_period {max_period} "
                f"(min_voice_frequency_hz={min_voice_frequency_hz}, max_voice_frequency_hz={max_voice_frequency_hz})."
            )
        return cls(min_period=min_period, max_period=max_period)


@dataclass(frozen=True)
class PitchEstimate:
    period: int
    voiced: bool


def period_search_range(
    bounds: PeriodBounds,
    previous_period: int,
    previous_voiced: bool
) -> Tuple[int, int]:
    """
    Inclusive candidate range for the next period.

    After a voiced frame the range narrows to [2/3, 3/2] of the previous
    period (clipped into the bounds) so the tracker cannot jump an octave.
    """
    if not previous_voiced:
        return bounds.min_period, bounds.max_period
    low = max(bounds.min_period, (2 * previous_period) // 3)
    high = min(bounds.max_period, (3 * previous_period) // 2)
    return low, high


def estimate_pitch_period(
    buffer: PaddedSampleBuffer,
    position: int,
    bounds: PeriodBounds,
    previous_period: int,
    previous_voiced: bool,
    noise_floor_threshold: float = DEFAULT_NOISE_FLOOR_THRESHOLD
) -> PitchEstimate:
    """
    Finds the period that best matches the signal around `position`.

    Args:
        buffer: Padded input samples.
        position: Padded sample index; needs `max_period` valid samples on each side.
        bounds: Period search bounds.
        previous_period: Period chosen at the previous step.
        previous_voiced: Voicing decision at the previous step.
        noise_floor_threshold: Average mismatch the range must exceed to count as voiced.

    Returns:
        PitchEstimate with the best period and the voicing decision.

    Raises:
        IndexError: If the buffer lacks slack around `position`.
    """
    low, high = period_search_range(bounds, previous_period, previous_voiced)
    window = buffer.window(position - bounds.max_period, position + bounds.max_period).astype(np.int64)
    center = bounds.max_period

    best_period = 0
    min_diff = 1
    total_mismatch = 0.0
    for period in range(low, high + 1):
        diff = int(np.abs(window[center - period:center] - window[center:center + period]).sum())
        total_mismatch += diff / period
        # diff/period < min_diff/best_period without dividing
        if diff * best_period < min_diff * period:
            min_diff = diff
            best_period = period

    average_mismatch = total_mismatch / (high - low + 1)
    best_mismatch = min_diff / best_period
    voiced = best_mismatch <= average_mismatch / 2 and average_mismatch > noise_floor_threshold
    return PitchEstimate(period=best_period, voiced=voiced)
