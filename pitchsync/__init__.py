# pitchsync/__init__.py

"""
pitchsync: pitch-synchronous overlap-add time-scale modification.

Changes the playback speed of speech (or other periodic audio) while
preserving its pitch and timbre.
"""

from .version import __version__
from .core.psola import time_scale, PSOLAEngine, PSOLAResult

__all__ = [
    "__version__",
    "time_scale",
    "PSOLAEngine",
    "PSOLAResult",
]
