# pitchsync/core/psola/__init__.py

"""
Pitch-Synchronous Overlap-Add Package.

Contains the pieces of the time-scaling engine, leaves first:
- Padded input / pre-sized output sample buffers
- Pitch period estimation with voicing decision
- Loop filter construction
- Crossfade resynthesis
- The stepping driver (PSOLAEngine) and the `time_scale` entry point
"""

from .sample_buffer import PaddedSampleBuffer, OutputSampleBuffer, clamp_to_pcm16
from .pitch import PeriodBounds, PitchEstimate, estimate_pitch_period, period_search_range
from .filter_builder import LoopFilter, build_loop_filter
from .resynth import Resynthesizer
from .driver import PSOLAEngine, PSOLAResult, PitchTrackEntry, time_scale, validate_speed

__all__ = [
    "PaddedSampleBuffer",
    "OutputSampleBuffer",
    "clamp_to_pcm16",
    "PeriodBounds",
    "PitchEstimate",
    "estimate_pitch_period",
    "period_search_range",
    "LoopFilter",
    "build_loop_filter",
    "Resynthesizer",
    "PSOLAEngine",
    "PSOLAResult",
    "PitchTrackEntry",
    "time_scale",
    "validate_speed",
]
