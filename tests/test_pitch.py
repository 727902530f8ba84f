# tests/test_pitch.py

"""
Tests for period bounds, the search range and pitch period estimation.
"""

import numpy as np
import pytest

from pitchsync.core.errors import ConfigurationError
from pitchsync.core.psola.pitch import PeriodBounds, estimate_pitch_period, period_search_range
from pitchsync.core.psola.sample_buffer import PaddedSampleBuffer

from conftest import MAX_PERIOD, MIN_PERIOD, SAMPLE_RATE, make_tone

BOUNDS = PeriodBounds(MIN_PERIOD, MAX_PERIOD)


def _padded(samples: np.ndarray) -> PaddedSampleBuffer:
    return PaddedSampleBuffer(samples, leading=MAX_PERIOD, trailing=2 * MAX_PERIOD)


# --- Period Bounds ---

@pytest.mark.parametrize("sample_rate", [400, 8000, 11025, 16000, 22050, 44100, 48000, 96000])
def test_bounds_are_ordered_for_valid_sample_rates(sample_rate):
    bounds = PeriodBounds.from_sample_rate(sample_rate)
    assert 1 <= bounds.min_period <= bounds.max_period
    assert bounds.min_period == sample_rate // 400
    assert bounds.max_period == sample_rate // 65


def test_bounds_for_8khz():
    assert PeriodBounds.from_sample_rate(SAMPLE_RATE) == PeriodBounds(20, 123)


@pytest.mark.parametrize("sample_rate, min_hz, max_hz", [
    (100, 65, 400),    # min_period would be 0
    (0, 65, 400),
    (-8000, 65, 400),
    (8000, 500, 100),  # inverted frequency range
    (8000, 0, 400),
])
def test_invalid_bounds_are_rejected(sample_rate, min_hz, max_hz):
    with pytest.raises(ConfigurationError):
        PeriodBounds.from_sample_rate(sample_rate, min_hz, max_hz)


# --- Search Range ---

def test_search_range_unvoiced_uses_full_bounds():
    assert period_search_range(BOUNDS, 40, False) == (MIN_PERIOD, MAX_PERIOD)


@pytest.mark.parametrize("previous_period, expected", [
    (40, (26, 60)),
    (120, (80, MAX_PERIOD)),   # clipped above
    (20, (MIN_PERIOD, 30)),    # clipped below
])
def test_search_range_voiced_narrows_around_previous(previous_period, expected):
    assert period_search_range(BOUNDS, previous_period, True) == expected


# --- Estimation ---

@pytest.mark.parametrize("period", [25, 40, 50, 80, 100])
def test_pure_tone_period_is_found(period):
    buffer = _padded(make_tone(period, 2000))
    estimate = estimate_pitch_period(buffer, buffer.start + 600, BOUNDS, MIN_PERIOD, False)
    assert abs(estimate.period - period) <= 1
    assert estimate.voiced


def test_voiced_continuity_keeps_period():
    buffer = _padded(make_tone(40, 2000))
    estimate = estimate_pitch_period(buffer, buffer.start + 600, BOUNDS, 42, True)
    assert estimate.period == 40
    assert estimate.voiced


def test_silence_is_unvoiced_and_picks_first_candidate():
    buffer = _padded(np.zeros(2000, dtype=np.int16))
    estimate = estimate_pitch_period(buffer, buffer.start + 600, BOUNDS, MIN_PERIOD, False)
    assert estimate.period == MIN_PERIOD
    assert not estimate.voiced


def test_quiet_tone_stays_below_noise_floor():
    buffer = _padded(make_tone(40, 2000, amplitude=5.0))
    estimate = estimate_pitch_period(buffer, buffer.start + 600, BOUNDS, MIN_PERIOD, False)
    assert estimate.period == 40
    assert not estimate.voiced
    # Same signal passes once the floor is lowered below its mismatch level
    assert estimate_pitch_period(buffer, buffer.start + 600, BOUNDS, MIN_PERIOD, False,
                                 noise_floor_threshold=0.5).voiced


def test_noise_periods_stay_within_search_range():
    rng = np.random.default_rng(1234)
    noise = rng.integers(-3000, 3000, size=4000).astype(np.int16)
    buffer = _padded(noise)
    for offset in range(200, 3800, 97):
        for previous_period, previous_voiced in [(MIN_PERIOD, False), (60, True), (MAX_PERIOD, True)]:
            low, high = period_search_range(BOUNDS, previous_period, previous_voiced)
            estimate = estimate_pitch_period(buffer, buffer.start + offset, BOUNDS,
                                             previous_period, previous_voiced)
            assert low <= estimate.period <= high
            assert MIN_PERIOD <= estimate.period <= MAX_PERIOD


def test_estimation_requires_slack_around_position():
    buffer = PaddedSampleBuffer(make_tone(40, 500), leading=10, trailing=10)
    with pytest.raises(IndexError):
        estimate_pitch_period(buffer, 50, BOUNDS, MIN_PERIOD, False)
