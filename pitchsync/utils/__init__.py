# pitchsync/utils/__init__.py

"""Utility helpers (logging setup) for the pitchsync CLI."""
