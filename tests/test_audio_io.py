# tests/test_audio_io.py

import numpy as np
import pytest
import soundfile as sf
from pathlib import Path
from numpy.testing import assert_array_equal

from pitchsync.core.audio.io import load_pcm16, save_pcm16

from conftest import SAMPLE_RATE, make_tone


def test_save_and_load_pcm16(tmp_path: Path):
    """Samples written as PCM_16 come back bit-exact."""
    samples = make_tone(40, 4000)
    out_file = tmp_path / "tone.wav"
    save_pcm16(samples, SAMPLE_RATE, out_file)
    assert out_file.exists()

    loaded, sr, channels = load_pcm16(out_file)
    assert loaded.dtype == np.int16
    assert sr == SAMPLE_RATE
    assert channels == 1
    assert_array_equal(loaded, samples)


def test_save_creates_parent_directories(tmp_path: Path):
    out_file = tmp_path / "nested" / "dir" / "out.flac"
    save_pcm16(np.zeros(100, dtype=np.int16), SAMPLE_RATE, out_file)
    assert out_file.exists()


def test_load_mixes_stereo_down_to_mono(tmp_path: Path):
    left = np.full(500, 1000, dtype=np.int16)
    right = np.full(500, 3000, dtype=np.int16)
    stereo_file = tmp_path / "stereo.wav"
    sf.write(str(stereo_file), np.stack([left, right], axis=1), SAMPLE_RATE, subtype='PCM_16')

    loaded, sr, channels = load_pcm16(stereo_file)
    assert channels == 2
    assert loaded.ndim == 1
    assert_array_equal(loaded, np.full(500, 2000, dtype=np.int16))


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_pcm16(tmp_path / "missing.wav")


def test_load_rejects_directory(tmp_path: Path):
    with pytest.raises(ValueError):
        load_pcm16(tmp_path)


def test_save_rejects_bad_extension(tmp_path: Path):
    with pytest.raises(ValueError, match="Unsupported audio output extension"):
        save_pcm16(np.zeros(10, dtype=np.int16), SAMPLE_RATE, tmp_path / "out.xyz")


def test_save_rejects_non_pcm16_samples(tmp_path: Path):
    with pytest.raises(ValueError):
        save_pcm16(np.zeros(10, dtype=np.float64), SAMPLE_RATE, tmp_path / "out.wav")
    with pytest.raises(ValueError):
        save_pcm16(np.zeros((10, 2), dtype=np.int16), SAMPLE_RATE, tmp_path / "out.wav")
