# tests/test_driver.py

"""
Tests for the PSOLA driver loop and the time_scale entry point.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from pitchsync.core.errors import ConfigurationError, InternalConsistencyError
from pitchsync.core.psola import PSOLAEngine, time_scale, validate_speed
from pitchsync.core.psola.pitch import PeriodBounds, estimate_pitch_period
from pitchsync.core.psola.sample_buffer import PaddedSampleBuffer

from conftest import MAX_PERIOD, MIN_PERIOD, SAMPLE_RATE, make_tone


def _length_bounds(n_samples: int, speed: float):
    """Output length is ceil(total input advance / speed); the advance overshoots by < max_period."""
    return math.floor(n_samples / speed) - 1, math.ceil((n_samples + MAX_PERIOD) / speed) + 1


# --- Parameter Validation ---

@pytest.mark.parametrize("speed", [0, -1.0, float("nan"), float("inf"), 10.5, "fast"])
def test_invalid_speed_is_rejected(speed):
    with pytest.raises(ConfigurationError):
        validate_speed(speed)


def test_speed_limit_is_configurable():
    assert validate_speed(12.0, max_speed=20.0) == 12.0
    with pytest.raises(ConfigurationError):
        PSOLAEngine(np.zeros(100, dtype=np.int16), SAMPLE_RATE, 12.0)


def test_invalid_sample_rate_is_rejected_before_processing():
    with pytest.raises(ConfigurationError):
        time_scale(np.zeros(100, dtype=np.int16), 100, 1.0)


def test_non_pcm_input_is_rejected():
    with pytest.raises(ConfigurationError):
        time_scale(np.zeros(100, dtype=np.float32), SAMPLE_RATE, 1.0)
    with pytest.raises(ConfigurationError):
        time_scale(np.zeros((2, 100), dtype=np.int16), SAMPLE_RATE, 1.0)


# --- Engine State ---

def test_initial_state():
    engine = PSOLAEngine(np.zeros(500, dtype=np.int16), SAMPLE_RATE, 1.0)
    assert engine.bounds == PeriodBounds(MIN_PERIOD, MAX_PERIOD)
    assert engine.input_pos == MAX_PERIOD
    assert engine.playback.exact_input_pos == MAX_PERIOD
    assert engine.current_period == MIN_PERIOD
    assert not engine.voiced
    assert_array_equal(engine.playback.current_filter, np.zeros(MIN_PERIOD))


def test_step_advances_by_current_period(tone_200hz):
    engine = PSOLAEngine(tone_200hz, SAMPLE_RATE, 1.0)
    engine.step()
    assert engine.input_pos == MAX_PERIOD + MIN_PERIOD
    assert engine.pitch_track[0].position == MIN_PERIOD
    next_step = engine.current_period
    engine.step()
    assert engine.input_pos == MAX_PERIOD + MIN_PERIOD + next_step


def test_engine_runs_once(tone_200hz):
    engine = PSOLAEngine(tone_200hz, SAMPLE_RATE, 1.0)
    engine.run()
    with pytest.raises(RuntimeError):
        engine.run()


def test_engines_do_not_share_state(tone_200hz):
    fast = PSOLAEngine(tone_200hz, SAMPLE_RATE, 2.0)
    slow = PSOLAEngine(tone_200hz, SAMPLE_RATE, 0.5)
    while not (fast.exhausted and slow.exhausted):
        if not fast.exhausted:
            fast.step()
        if not slow.exhausted:
            slow.step()
    assert_array_equal(fast.output.samples, time_scale(tone_200hz, SAMPLE_RATE, 2.0))
    assert_array_equal(slow.output.samples, time_scale(tone_200hz, SAMPLE_RATE, 0.5))


def test_corrupted_cursor_is_fatal(tone_200hz):
    engine = PSOLAEngine(tone_200hz, SAMPLE_RATE, 1.0)
    engine.step()
    engine.playback.exact_input_pos = engine.input_pos - 5.0
    with pytest.raises(InternalConsistencyError):
        engine.step()


# --- Output Length ---

def test_empty_input_gives_empty_output():
    out = time_scale(np.zeros(0, dtype=np.int16), SAMPLE_RATE, 1.5)
    assert out.dtype == np.int16
    assert len(out) == 0


def test_unity_speed_preserves_length(tone_200hz):
    out = time_scale(tone_200hz, SAMPLE_RATE, 1.0)
    assert out.dtype == np.int16
    assert len(tone_200hz) <= len(out) <= len(tone_200hz) + MAX_PERIOD + 1


@pytest.mark.parametrize("speed", [0.1, 0.25, 0.5, 0.8, 1.0, 1.7, 2.0, 4.0, 10.0])
def test_output_length_scales_with_speed(tone_200hz, speed):
    out = time_scale(tone_200hz, SAMPLE_RATE, speed)
    low, high = _length_bounds(len(tone_200hz), speed)
    assert low <= len(out) <= high


def test_output_length_decreases_as_speed_increases(tone_200hz):
    lengths = [len(time_scale(tone_200hz, SAMPLE_RATE, speed)) for speed in (0.25, 0.5, 1.0, 2.0, 4.0, 10.0)]
    assert lengths == sorted(lengths, reverse=True)
    assert len(set(lengths)) == len(lengths)


# --- Signal Properties ---

@pytest.mark.parametrize("speed", [0.3, 1.0, 3.0])
def test_silence_in_silence_out(speed):
    engine = PSOLAEngine(np.zeros(3000, dtype=np.int16), SAMPLE_RATE, speed)
    result = engine.run()
    assert len(result.samples) > 0
    assert not result.samples.any()
    assert not any(entry.voiced for entry in result.pitch_track)


def test_pure_tone_is_tracked_after_convergence(tone_200hz):
    result = PSOLAEngine(tone_200hz, SAMPLE_RATE, 1.0).run()
    n = len(tone_200hz)
    steady = [entry for entry in result.pitch_track
              if 2 * MAX_PERIOD <= entry.position <= n - 2 * MAX_PERIOD]
    assert steady
    for entry in steady:
        assert abs(entry.period - SAMPLE_RATE / 200) <= 1
        assert entry.voiced


@pytest.mark.parametrize("speed", [0.5, 2.0])
def test_pitch_is_preserved(tone_200hz, speed):
    out = time_scale(tone_200hz, SAMPLE_RATE, speed)
    middle = len(out) // 2
    segment = out[middle - 300:middle + 300]
    buffer = PaddedSampleBuffer(segment, leading=MAX_PERIOD, trailing=2 * MAX_PERIOD)
    estimate = estimate_pitch_period(buffer, buffer.start + 300, PeriodBounds(MIN_PERIOD, MAX_PERIOD),
                                     MIN_PERIOD, False)
    assert estimate.period == 40
    assert estimate.voiced


def test_periods_always_within_bounds():
    rng = np.random.default_rng(7)
    noise = rng.integers(-8000, 8000, size=4000).astype(np.int16)
    # Noise followed by a tone exercises both unvoiced and voiced search ranges
    signal = np.concatenate([noise, make_tone(55, 4000)])
    result = PSOLAEngine(signal, SAMPLE_RATE, 1.3).run()
    assert all(MIN_PERIOD <= entry.period <= MAX_PERIOD for entry in result.pitch_track)


def test_extreme_amplitude_saturates():
    loud = np.full(3000, -32768, dtype=np.int16)
    out = time_scale(loud, SAMPLE_RATE, 1.0)
    assert out.min() == -32767
    assert out.max() <= 0
