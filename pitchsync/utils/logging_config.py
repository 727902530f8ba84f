# pitchsync/utils/logging_config.py

"""
Configures the logging system for the pitchsync application based on loaded settings.
Uses Rich for enhanced console logging.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from pitchsync.config import PitchSyncConfig
from pitchsync.version import __version__

# --- Constants ---
# Map verbosity levels (from CLI flags) to logging levels
VERBOSITY_MAP = {
    0: logging.WARNING,  # Default (normal), overridden by logging.log_level_console
    1: logging.INFO,     # -v (verbose)
    2: logging.DEBUG,    # -vv (debug)
    -1: logging.CRITICAL + 10 # -q (quiet/silent)
}

PACKAGE_LOGGER_NAME = "pitchsync"

# --- Setup Function ---

def setup_logging(config: PitchSyncConfig, verbosity: int = 0) -> Optional[Path]:
    """
    Configures the package logger based on the provided configuration and verbosity level.

    Args:
        config: The loaded PitchSyncConfig object.
        verbosity: Console verbosity level (0 normal, 1 verbose, 2 debug, -1 quiet).
                   Values above 2 are treated as debug.

    Returns:
        The path of the log file being written, or None when file logging is off.
    """
    log_cfg = config.logging
    paths_cfg = config.paths

    if verbosity == 0:
        console_level = logging.getLevelName(log_cfg.log_level_console)
    else:
        console_level = VERBOSITY_MAP.get(min(verbosity, 2), logging.INFO)

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(logging.DEBUG) # Handlers filter by their own levels
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    # --- Console Handler (Rich) ---
    if console_level <= logging.CRITICAL:
        console_handler = RichHandler(
            level=console_level,
            show_time=False,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(console_handler)

    # --- File Handler ---
    log_filepath: Optional[Path] = None
    if log_cfg.log_file_enabled:
        try:
            log_dir = paths_cfg.log_directory
            log_dir.mkdir(parents=True, exist_ok=True)
            log_filepath = log_dir / log_cfg.log_filename_template.format(timestamp=datetime.now())

            file_handler = logging.FileHandler(log_filepath, encoding='utf-8')
            file_handler.setLevel(log_cfg.log_level_file)
            file_handler.setFormatter(logging.Formatter(log_cfg.log_format))
            package_logger.addHandler(file_handler)
        except OSError as e:
            package_logger.error(f"Failed to configure file logging: {e}", exc_info=True)
            log_filepath = None

    # --- Initial Log Messages ---
    init_logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.init")
    init_logger.info(f"pitchsync v{__version__} initialized.")
    init_logger.debug(f"Console logging level set to: {logging.getLevelName(console_level)}")
    if log_filepath is not None:
        init_logger.info(f"Logging to file: {log_filepath}")
        init_logger.debug(f"Full configuration loaded: {config.model_dump()}")
    else:
        init_logger.debug("File logging is disabled.")
    return log_filepath
