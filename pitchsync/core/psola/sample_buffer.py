# pitchsync/core/psola/sample_buffer.py

"""
Sample storage for the time-scaling engine.

The input side is a zero-padded buffer so that windows reaching up to
`max_period` samples behind or ahead of a position stay in bounds without
special-casing the edges. The output side is a fixed-capacity buffer sized
once before processing starts.
"""

import logging
from typing import Union, Sequence

import numpy as np
from numpy.typing import NDArray

from ..errors import ConfigurationError, InternalConsistencyError

logger = logging.getLogger(__name__)

PCM16_MIN = -32768
PCM16_MAX = 32767
# Output saturates symmetrically, -32768 is never produced
PCM16_CLAMP = 32767


def clamp_to_pcm16(values: NDArray[np.float64]) -> NDArray[np.int16]:
    """
    Rounds float samples (half away from zero) and saturates them to [-32767, 32767].

    Args:
        values: Float sample values.

    Returns:
        int16 array; out-of-range values are clipped rather than wrapped.
    """
    rounded = np.trunc(values + np.copysign(0.5, values))
    return np.clip(rounded, -PCM16_CLAMP, PCM16_CLAMP).astype(np.int16)


def as_pcm16(samples: Union[Sequence[int], NDArray]) -> NDArray[np.int16]:
    """
    Validates and converts a mono integer sample sequence to int16.

    Raises:
        ConfigurationError: If the input is not 1D, not integer typed, or
                            holds values outside the 16-bit signed range.
    """
    data = np.asarray(samples)
    if data.ndim != 1:
        raise ConfigurationError(f"Input samples must be a 1D (mono) array, got shape {data.shape}.")
    if data.size == 0:
        return np.zeros(0, dtype=np.int16)
    if not np.issubdtype(data.dtype, np.integer):
        raise ConfigurationError(f"Input samples must be 16-bit integer PCM, got dtype {data.dtype}.")
    if data.dtype != np.int16:
        if data.min() < PCM16_MIN or data.max() > PCM16_MAX:
            raise ConfigurationError("Input samples exceed the 16-bit signed range.")
        data = data.astype(np.int16)
    return data


class PaddedSampleBuffer:
    """
    Input samples surrounded by zero slack.

    Positions are expressed in padded coordinates: the first real sample sits
    at `start` (== leading slack) and the real data ends at `end`.
    """

    def __init__(self, samples: NDArray[np.int16], leading: int, trailing: int):
        if leading < 0 or trailing < 0:
            raise ValueError("Padding must be non-negative.")
        self.length = len(samples)
        self.start = leading
        self.end = leading + self.length
        self._data = np.zeros(leading + self.length + trailing, dtype=np.int16)
        self._data[self.start:self.end] = samples
        logger.debug(f"Padded input buffer: {self.length} samples, slack {leading}/{trailing}.")

    def __len__(self) -> int:
        return len(self._data)

    def window(self, start: int, stop: int) -> NDArray[np.int16]:
        """
        Returns a read-only view of padded samples [start, stop).

        Raises:
            IndexError: If the window leaves the padded buffer.
        """
        if start < 0 or stop > len(self._data) or start > stop:
            raise IndexError(
                f"Window [{start}, {stop}) outside padded buffer of length {len(self._data)}."
            )
        view = self._data[start:stop]
        view.flags.writeable = False
        return view


class OutputSampleBuffer:
    """Pre-sized int16 output with a write cursor. Never grows."""

    def __init__(self, capacity: int):
        self._data = np.zeros(max(capacity, 0), dtype=np.int16)
        self.position = 0

    @property
    def capacity(self) -> int:
        return len(self._data)

    def write(self, block: NDArray[np.int16]) -> None:
        """
        Appends a block of samples at the write cursor.

        Raises:
            InternalConsistencyError: If the block would overrun the pre-sized buffer.
        """
        end = self.position + len(block)
        if end > len(self._data):
            raise InternalConsistencyError(
                f"Output overrun: writing {len(block)} samples at {self.position} "
                f"exceeds capacity {len(self._data)}."
            )
        self._data[self.position:end] = block
        self.position = end

    @property
    def samples(self) -> NDArray[np.int16]:
        """Copy of the samples written so far."""
        return self._data[:self.position].copy()
