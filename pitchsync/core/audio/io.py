# pitchsync/core/audio/io.py

"""
Handles loading and saving of 16-bit PCM audio files using soundfile.

The engine works on mono int16 samples, so files are read as int16 and
multi-channel input is mixed down to a single channel.
"""

import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
import soundfile as sf
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

_available_formats = sf.available_formats()

SUPPORTED_READ_EXTENSIONS = {f".{fmt.lower()}" for fmt in _available_formats}
# Integer PCM subtypes are not available for lossy containers
SUPPORTED_WRITE_EXTENSIONS = SUPPORTED_READ_EXTENSIONS - {".mp3", ".ogg"}

logger.debug(f"Supported audio read extensions: {SUPPORTED_READ_EXTENSIONS}")
logger.debug(f"Supported audio write extensions: {SUPPORTED_WRITE_EXTENSIONS}")


def load_pcm16(file_path: Union[str, Path]) -> Tuple[NDArray[np.int16], int, int]:
    """
    Loads an audio file as mono 16-bit samples.

    Args:
        file_path: Path to the audio file.

    Returns:
        A tuple containing:
        - samples (NDArray[np.int16]): Mono samples.
        - sample_rate (int): Native sampling rate of the file.
        - channels (int): Channel count of the file before any mixdown.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the path is not a file or the extension is unsupported.
        RuntimeError: For soundfile decoding errors (soundfile.LibsndfileError).
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Audio input file not found: {file_path}")
    if not file_path.is_file():
        raise ValueError(f"Input path is not a file: {file_path}")
    ext = file_path.suffix.lower()
    if ext not in SUPPORTED_READ_EXTENSIONS:
        raise ValueError(f"Unsupported audio input extension: '{ext}'. "
                         f"Supported extensions: {sorted(SUPPORTED_READ_EXTENSIONS)}")

    logger.info(f"Loading audio from: {file_path}")
    data, sample_rate = sf.read(str(file_path), dtype='int16', always_2d=True)
    channels = data.shape[1]
    if channels == 1:
        samples = data[:, 0].copy()
    else:
        logger.warning(f"Input audio has {channels} channels. Mixing down to mono before processing.")
        samples = np.round(data.astype(np.float64).mean(axis=1)).astype(np.int16)

    logger.debug(f"Audio loaded. Samples: {len(samples)}, SR: {sample_rate}, channels: {channels}")
    return samples, int(sample_rate), channels


def save_pcm16(
    samples: NDArray[np.int16],
    sample_rate: int,
    output_path: Union[str, Path],
    subtype: str = 'PCM_16'
) -> None:
    """
    Saves mono 16-bit samples to an audio file.

    The container format is taken from the output file extension.

    Args:
        samples: Mono int16 samples.
        sample_rate: Sampling rate in Hz.
        output_path: Destination path; parent directories are created.
        subtype: Soundfile subtype (e.g., 'PCM_16'). See `soundfile.available_subtypes()`.

    Raises:
        ValueError: If the extension or subtype is unsupported, or samples are not 1D int16.
        RuntimeError: For soundfile writing errors (soundfile.LibsndfileError).
    """
    output_path = Path(output_path)
    logger.info(f"Saving audio to: {output_path} (sr={sample_rate}, subtype={subtype})")

    ext = output_path.suffix.lower()
    if ext not in SUPPORTED_WRITE_EXTENSIONS:
        raise ValueError(f"Unsupported audio output extension: '{ext}'. "
                         f"Supported extensions: {sorted(SUPPORTED_WRITE_EXTENSIONS)}")
    samples = np.asarray(samples)
    if samples.ndim != 1:
        raise ValueError(f"Output samples must be 1D (mono), got shape {samples.shape}")
    if samples.dtype != np.int16:
        raise ValueError(f"Output samples must be int16, got dtype {samples.dtype}")

    file_format = ext[1:].upper()
    if not sf.check_format(file_format, subtype):
        raise ValueError(f"Subtype '{subtype}' is not valid for format '{file_format}'.")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(output_path), samples, sample_rate, subtype=subtype, format=file_format)
    logger.info(f"Audio successfully saved to {output_path}")
