"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.models import MAX_STEP_MINUTES, MIN_STEP_MINUTES, SlotGranularity

CONFIG_ENV_VAR = "SLOTBOOKER_CONFIG"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class DefaultsConfig(BaseModel):
    """Default settings for slot search and booking."""
    granularity: SlotGranularity = SlotGranularity.HALF_HOURLY
    step_minutes: int = 30

    @field_validator("step_minutes")
    @classmethod
    def validate_step(cls, value: int) -> int:
        """Ensure the search step is within the supported range."""
        if not MIN_STEP_MINUTES <= value <= MAX_STEP_MINUTES:
            raise ValueError(
                f"step_minutes must be between {MIN_STEP_MINUTES} and "
                f"{MAX_STEP_MINUTES}, got {value}"
            )
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    database_url: str = "sqlite:///slotbooker.db"
    busy_timeout_seconds: float = 30.0
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Ensure the level is one the logging module knows."""
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("busy_timeout_seconds")
    @classmethod
    def validate_busy_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("busy_timeout_seconds must be greater than zero")
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

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

        return cls(**data)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """
        Load an explicit config file, or the default one if it exists.

        Without an explicit path and without a default file, the built-in
        defaults are used.
        """
        if config_path is not None:
            return cls.load_from_yaml(config_path)

        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)
        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    # Look for config.yaml in current directory
    config_path = Path.cwd() / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
