# pitchsync/core/__init__.py

"""
Core Processing Package for pitchsync.

Contains modules for:
- The PSOLA time-scaling engine
- Audio file input/output (16-bit PCM)
- Engine error types
"""

from . import errors
from . import psola
from . import audio

__all__ = [
    "errors",
    "psola",
    "audio",
]
