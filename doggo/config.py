"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import DEFAULT_TIMEZONE


class SchedulingConfig(BaseModel):
    """Settings for slot computation."""
    slot_size_minutes: int = 30

    @field_validator("slot_size_minutes")
    @classmethod
    def validate_slot_size(cls, value: int) -> int:
        """Ensure the slot grid has a positive stride that fits in a day."""
        if not 0 < value <= 24 * 60:
            raise ValueError("slot_size_minutes must be between 1 and 1440")
        return value


class MatchingConfig(BaseModel):
    """Settings for the potential-match feed."""
    min_score: int = 60
    limit: int = 10

    @field_validator("min_score")
    @classmethod
    def validate_min_score(cls, value: int) -> int:
        if not 0 <= value <= 100:
            raise ValueError(f"min_score must be between 0 and 100, got {value}")
        return value

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("limit must be greater than zero")
        return value


class EmergencyConfig(BaseModel):
    """Settings for nearby emergency alerts."""
    radius_km: float = 25.0

    @field_validator("radius_km")
    @classmethod
    def validate_radius(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("radius_km must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = DEFAULT_TIMEZONE
    data_file: Optional[Path] = None
    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    emergency: EmergencyConfig = Field(default_factory=EmergencyConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject unknown IANA timezone names early."""
        try:
            pendulum.timezone(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Relative ``data_file`` paths are resolved against the config file's directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if config.data_file is not None and not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load an explicit config file, else ``config.yaml`` if present, else defaults.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
