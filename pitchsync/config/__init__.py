# pitchsync/config/__init__.py

"""
Configuration management for the pitchsync application.

This package handles loading configuration from files (TOML),
environment variables, and internal defaults, providing a unified
configuration object.
"""

from .models import PitchSyncConfig
from .loaders import load_configuration

__all__ = [
    "PitchSyncConfig",
    "load_configuration",
]
