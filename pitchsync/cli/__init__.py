# pitchsync/cli/__init__.py

"""Command-line interface for pitchsync."""
