# pitchsync/core/psola/resynth.py

"""
Variable-rate crossfade between two loop filters.

The playback cursor advances by `speed` input samples per output sample.
While it travels one step of input, the previous filter fades out and the
current filter fades in; both are read circularly, so the number of output
samples per step (step_size / speed) is independent of the filter lengths.
"""

import logging
import math

import numpy as np
from numpy.typing import NDArray

from ..errors import InternalConsistencyError
from .filter_builder import LoopFilter
from .sample_buffer import OutputSampleBuffer, clamp_to_pcm16

logger = logging.getLogger(__name__)


class Resynthesizer:
    """
    Holds the previous and current loop filters, their read positions, and
    the playback cursor (`input_pos` whole samples consumed, `exact_input_pos`
    fractional position reached).
    """

    def __init__(self, initial_period: int, input_pos: int):
        self.previous_filter: NDArray[np.float64] = np.zeros(initial_period, dtype=np.float64)
        self.previous_pos = 0
        self.current_filter: NDArray[np.float64] = np.zeros(initial_period, dtype=np.float64)
        self.current_pos = 0
        self.input_pos = input_pos
        self.exact_input_pos = float(input_pos)

    def rotate(self) -> None:
        """The current filter and its read position become the previous ones."""
        self.previous_filter = self.current_filter
        self.previous_pos = self.current_pos

    def load(self, loop_filter: LoopFilter) -> None:
        """Installs a freshly built filter in the current slot."""
        self.current_filter = loop_filter.samples
        self.current_pos = loop_filter.start_offset

    def advance(self, step_size: int) -> None:
        self.input_pos += step_size

    def emit(self, output: OutputSampleBuffer, step_size: int, speed: float) -> int:
        """
        Emits output samples until the cursor has moved `step_size` past `input_pos`.

        Each sample is `(1 - ratio) * previous + ratio * current`, with
        `ratio = (exact_input_pos - input_pos) / step_size`, rounded and
        saturated to 16 bits.

        Args:
            output: Destination buffer.
            step_size: Input samples covered by this crossfade.
            speed: Input samples consumed per output sample.

        Returns:
            Number of samples written.

        Raises:
            InternalConsistencyError: If a crossfade ratio falls outside [0, 1].
        """
        offset = self.exact_input_pos - self.input_pos
        if offset >= step_size:
            return 0

        # One extra candidate absorbs rounding in the division, the mask trims it
        candidates = int(math.ceil((step_size - offset) / speed)) + 1
        offsets = offset + speed * np.arange(candidates, dtype=np.float64)
        offsets = offsets[offsets < step_size]
        count = len(offsets)
        if count == 0:
            return 0

        ratios = offsets / step_size
        if ratios[0] < 0.0 or ratios[-1] > 1.0:
            raise InternalConsistencyError(
                f"Crossfade ratio out of range [{ratios[0]:.6f}, {ratios[-1]:.6f}] "
                f"(input_pos={self.input_pos}, exact_input_pos={self.exact_input_pos}, step_size={step_size})."
            )

        steps = np.arange(count)
        previous_idx = (self.previous_pos + steps) % len(self.previous_filter)
        current_idx = (self.current_pos + steps) % len(self.current_filter)
        mixed = (1.0 - ratios) * self.previous_filter[previous_idx] + ratios * self.current_filter[current_idx]
        output.write(clamp_to_pcm16(mixed))

        self.previous_pos = (self.previous_pos + count) % len(self.previous_filter)
        self.current_pos = (self.current_pos + count) % len(self.current_filter)
        # Same expression as the mask above, so the cursor lands at or past step_size
        self.exact_input_pos = self.input_pos + (offset + speed * count)
        return count
