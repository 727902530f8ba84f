# tests/conftest.py

import logging

import numpy as np
import pytest

from pitchsync.config import PitchSyncConfig

SAMPLE_RATE = 8000
# 8000 Hz with the default 65..400 Hz voice range
MIN_PERIOD = 20
MAX_PERIOD = 123


def make_tone(period: int, n_samples: int, amplitude: float = 10000.0) -> np.ndarray:
    """Exactly periodic int16 sine built by tiling one cycle."""
    cycle = np.round(amplitude * np.sin(2 * np.pi * np.arange(period) / period)).astype(np.int16)
    return np.tile(cycle, n_samples // period + 1)[:n_samples]


@pytest.fixture
def tone_200hz() -> np.ndarray:
    """One second of a 200 Hz tone at 8 kHz (period of 40 samples)."""
    return make_tone(40, SAMPLE_RATE)


@pytest.fixture
def test_config(tmp_path) -> PitchSyncConfig:
    """Configuration isolated from user/project files, writing under tmp_path."""
    return PitchSyncConfig(
        paths={"output_dir": str(tmp_path / "out"), "log_directory": str(tmp_path / "logs")},
        logging={"log_file_enabled": False},
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging between tests."""
    yield
    package_logger = logging.getLogger("pitchsync")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
