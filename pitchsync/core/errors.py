# pitchsync/core/errors.py

"""
Exception types raised by the time-scaling engine.
"""

# --- Custom Exceptions ---

class ConfigurationError(ValueError):
    """Invalid run parameters (speed, sample rate, voice frequency bounds, input shape)."""
    pass

class InternalConsistencyError(RuntimeError):
    """
    Broken cursor or step bookkeeping inside the engine.

    Never caused by input data; signals a bug and is not recoverable.
    """
    pass
