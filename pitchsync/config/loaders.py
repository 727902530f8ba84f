# pitchsync/config/loaders.py

"""
Functions for loading and merging pitchsync configuration from various sources.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional, List

import toml
from pydantic import ValidationError

from .models import PitchSyncConfig

logger = logging.getLogger(__name__)

# --- Constants ---
ENV_PREFIX = "PITCHSYNC_"
ENV_NESTING_SEPARATOR = "__"
USER_CONFIG_DIR = Path("~/.config/pitchsync").expanduser()
USER_CONFIG_FILE = USER_CONFIG_DIR / "pitchsync.toml"
PROJECT_CONFIG_FILENAME = "pitchsync.toml"

# --- Helper Functions ---

def _load_toml_file(filepath: Path) -> Dict[str, Any]:
    """Loads a TOML file if it exists, returns empty dict otherwise."""
    if filepath.is_file():
        try:
            with open(filepath, 'r') as f:
                return toml.load(f)
        except toml.TomlDecodeError as e:
            logger.warning(f"Error decoding TOML file '{filepath}': {e}. Skipping.")
        except OSError as e:
            logger.warning(f"Could not read config file '{filepath}': {e}. Skipping.")
    return {}

def _deep_merge_dicts(base: Dict, update: Dict) -> Dict:
    """Recursively merges 'update' dict into 'base' dict."""
    merged = base.copy()
    for key, value in update.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = _deep_merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged

def _parse_env_value(value: str) -> Any:
    """Coerces an environment string into bool, int or float where possible."""
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value

def _get_config_from_env() -> Dict[str, Any]:
    """
    Reads configuration settings from environment variables.

    PITCHSYNC_PARAMETERS__PITCH__NOISE_FLOOR_THRESHOLD=250 becomes
    {'parameters': {'pitch': {'noise_floor_threshold': 250}}}. Keys keep their
    single underscores; double underscores separate nesting levels.
    """
    env_config: Dict[str, Any] = {}
    for env_var, value in os.environ.items():
        if not env_var.startswith(ENV_PREFIX):
            continue
        keys = env_var[len(ENV_PREFIX):].lower().split(ENV_NESTING_SEPARATOR)
        if not all(keys):
            logger.debug(f"Ignoring malformed configuration variable: {env_var}")
            continue
        d = env_config
        for key in keys[:-1]:
            d = d.setdefault(key, {})
        d[keys[-1]] = _parse_env_value(value)
    return env_config

# --- Main Loading Function ---

def load_configuration(
    config_files: Optional[List[Path]] = None,
    disable_project_config: bool = False,
    disable_user_config: bool = False,
) -> PitchSyncConfig:
    """
    Loads pitchsync configuration from defaults, files, and environment variables.

    Precedence (highest first):
    1. Environment Variables (PITCHSYNC_*)
    2. User Config File (~/.config/pitchsync/pitchsync.toml)
    3. Project Config File (./pitchsync.toml)
    4. Explicitly passed config files (if any)
    5. Internal Defaults (from Pydantic models)

    Args:
        config_files: List of additional config file paths to load.
        disable_project_config: If True, ignores ./pitchsync.toml.
        disable_user_config: If True, ignores ~/.config/pitchsync/pitchsync.toml.

    Returns:
        A validated PitchSyncConfig object.
    """
    merged_config_dict: Dict[str, Any] = {}

    if config_files:
        for file_path in reversed(config_files):
            merged_config_dict = _deep_merge_dicts(merged_config_dict, _load_toml_file(Path(file_path)))

    if not disable_project_config:
        project_config_file = Path.cwd() / PROJECT_CONFIG_FILENAME
        logger.debug(f"Attempting to load project config: {project_config_file}")
        project_cfg = _load_toml_file(project_config_file)
        if project_cfg:
            logger.info(f"Loaded project configuration from {project_config_file}")
            merged_config_dict = _deep_merge_dicts(merged_config_dict, project_cfg)

    if not disable_user_config:
        logger.debug(f"Attempting to load user config: {USER_CONFIG_FILE}")
        user_cfg = _load_toml_file(USER_CONFIG_FILE)
        if user_cfg:
            logger.info(f"Loaded user configuration from {USER_CONFIG_FILE}")
            merged_config_dict = _deep_merge_dicts(merged_config_dict, user_cfg)

    env_cfg = _get_config_from_env()
    if env_cfg:
        logger.debug(f"Applying environment variable configuration: {env_cfg}")
        merged_config_dict = _deep_merge_dicts(merged_config_dict, env_cfg)

    try:
        final_config = PitchSyncConfig(**merged_config_dict)
        logger.debug("Configuration loaded and validated successfully.")
        return final_config
    except ValidationError as e:
        logger.error(f"Configuration validation failed:\n{e}")
        logger.warning("Falling back to default configuration due to validation errors.")
        return PitchSyncConfig()
