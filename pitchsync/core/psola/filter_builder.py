# pitchsync/core/psola/filter_builder.py

"""
Builds loop filters: single synthetic waveform cycles that repeat seamlessly.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .sample_buffer import PaddedSampleBuffer

logger = logging.getLogger(__name__)


@dataclass
class LoopFilter:
    """One waveform cycle plus the offset at which playback of it starts."""
    samples: NDArray[np.float64]
    start_offset: int

    @property
    def period(self) -> int:
        return len(self.samples)


def build_loop_filter(
    buffer: PaddedSampleBuffer,
    position: int,
    period: int,
    previous_start_offset: int,
    step_size: int
) -> LoopFilter:
    """
    Crossfades the cycle before `position` into the cycle after it.

    Sample i mixes `i/period` of the preceding cycle with the remainder of the
    following one, so the last sample runs straight into the first when the
    filter is looped.

    Args:
        buffer: Padded input samples.
        position: Padded sample index the filter is centred on.
        period: Filter length (the estimated pitch period).
        previous_start_offset: Read position the previous filter had reached.
        step_size: Input advance between the previous filter and this one.

    Returns:
        LoopFilter whose start offset is `(previous_start_offset - step_size) mod period`,
        keeping the new loop in phase with the one it replaces.
    """
    before = buffer.window(position - period, position).astype(np.float64)
    after = buffer.window(position, position + period).astype(np.float64)
    ratio = np.arange(period, dtype=np.float64) / period
    samples = ratio * before + (1.0 - ratio) * after
    start_offset = (previous_start_offset - step_size) % period
    return LoopFilter(samples=samples, start_offset=start_offset)
