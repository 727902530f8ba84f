# pitchsync/config/models.py

"""
Pydantic models for defining the structure and validation of the pitchsync configuration (pitchsync.toml).
Uses Pydantic V2 syntax.
"""

from pathlib import Path
from typing import Union, Any

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

# --- Helper Functions ---

def _resolve_path(path: Union[str, Path]) -> Path:
    """Resolves and expands user paths."""
    return Path(path).expanduser().resolve()

# --- Model Definitions ---

class DefaultsConfig(BaseModel):
    """Default processing parameters."""
    output_subtype: str = Field("PCM_16", description="Soundfile subtype used when writing output audio.")

class PathsConfig(BaseModel):
    """Configuration for file paths used by pitchsync."""
    output_dir: Path = Field(default=Path("./pitchsync_output"), validate_default=True, description="Default directory for saving results.")
    log_directory: Path = Field(default=Path("./pitchsync_logs"), validate_default=True, description="Directory for log files.")

    @field_validator('output_dir', 'log_directory', mode='before')
    @classmethod
    def resolve_paths_before_validation(cls, value: Any) -> Path:
        """Resolves paths before Pydantic validates them."""
        if isinstance(value, (str, Path)):
            return _resolve_path(value)
        return value

class PitchParams(BaseModel):
    """Parameters for pitch period estimation."""
    min_voice_frequency_hz: int = Field(65, gt=0, description="Lowest voice frequency searched (sets max_period).")
    max_voice_frequency_hz: int = Field(400, gt=0, description="Highest voice frequency searched (sets min_period).")
    noise_floor_threshold: float = Field(100.0, ge=0, description="Average mismatch a frame must exceed to be voiced.")

    @model_validator(mode='after')
    def check_frequency_order(self) -> 'PitchParams':
        """Ensure the voice frequency bounds form a non-empty range."""
        if self.min_voice_frequency_hz > self.max_voice_frequency_hz:
            raise ValueError(
                f"min_voice_frequency_hz ({self.min_voice_frequency_hz}) must not exceed "
                f"max_voice_frequency_hz ({self.max_voice_frequency_hz})"
            )
        return self

class StretchParams(BaseModel):
    """Limits applied to the requested playback speed."""
    max_speed: float = Field(10.0, gt=0, description="Largest accepted speed factor.")

class ParametersConfig(BaseModel):
    """Centralized parameters for the time-scaling engine."""
    pitch: PitchParams = Field(default_factory=PitchParams)
    stretch: StretchParams = Field(default_factory=StretchParams)

class LoggingConfig(BaseModel):
    """Logging configuration settings."""
    log_file_enabled: bool = Field(False, description="Enable/disable persistent file logging.")
    log_filename_template: str = Field("pitchsync_run_{timestamp:%Y%m%d_%H%M%S}.log", description="Naming pattern for log files.")
    log_level_file: str = Field("DEBUG", description="Minimum level for file logs (DEBUG, INFO, WARNING, ERROR, CRITICAL).")
    log_format: str = Field("%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)", description="Format string for file log entries.")
    log_level_console: str = Field("WARNING", description="Minimum level for console output when no -v/-q flag is given.")

    @field_validator('log_level_file', 'log_level_console')
    @classmethod
    def check_log_level(cls, value: str) -> str:
        """Validate log level strings."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            raise ValueError(f"Invalid log level '{value}'. Must be one of {allowed_levels}")
        return upper_value

class PitchSyncConfig(BaseModel):
    """Root configuration model for pitchsync."""
    model_config = ConfigDict(
        extra='allow',
        validate_assignment=True
    )

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    parameters: ParametersConfig = Field(default_factory=ParametersConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
