# pitchsync/core/audio/__init__.py

"""
Core Audio Package.

Reads and writes the 16-bit PCM sample streams the engine consumes and produces.
"""

from . import io

__all__ = [
    "io",
]
