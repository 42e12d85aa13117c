"""
Configuration management for chronodx.

Uses pydantic-settings for environment variable support, with an optional
YAML file underneath. Environment variables always win over YAML values.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "CHRONODX_"
CONFIG_FILE_ENV = f"{ENV_PREFIX}CONFIG_FILE"
CONFIG_FILE_NAMES = ("chronodx.yaml", "chronodx.yml")

# Largest signed 64-bit value, the storage encoding of "still open".
NOW_SENTINEL = 2**63 - 1

DEFAULT_DATE_PATTERN = "%Y/%m/%d %H:%M:%S.%f %z"

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    """chronodx configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Environment: development, staging, production, test",
    )
    log_level: str = Field(
        default="WARNING",
        description="Root log level used by the CLI",
    )

    # Mapper defaults
    date_pattern: str = Field(
        default=DEFAULT_DATE_PATTERN,
        description="strftime pattern for string instants, or 'timestamp' for epoch millis",
    )
    now_value: int | str | None = Field(
        default=None,
        description="Value that stands for NOW in indexed columns (default: max int64)",
    )

    # Query defaults
    default_boost: float = Field(
        default=1.0,
        description="Boost applied to conditions that do not set one",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid = {"development", "staging", "production", "test"}
        if v.lower() not in valid:
            raise ValueError(f"environment must be one of: {valid}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {sorted(VALID_LOG_LEVELS)}")
        return v.upper()

    @field_validator("default_boost")
    @classmethod
    def validate_default_boost(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"default_boost must be positive (got {v})")
        return v


def _config_candidates() -> list[Path]:
    """Config file locations, most specific first."""
    candidates = []
    explicit = os.getenv(CONFIG_FILE_ENV)
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates += [Path(name) for name in CONFIG_FILE_NAMES]
    candidates += [Path.home() / ".chronodx" / f"config{ext}" for ext in (".yaml", ".yml")]
    return candidates


def _find_config_file() -> Path | None:
    explicit = os.getenv(CONFIG_FILE_ENV)
    if explicit and not Path(explicit).expanduser().exists():
        logger.warning("Config file from %s not found: %s", CONFIG_FILE_ENV, explicit)
    for path in _config_candidates():
        if path.exists():
            logger.debug("Found config file: %s", path)
            return path
    return None


def _read_yaml(path: Path) -> dict:
    """Mapping of setting name to value from a YAML file.

    Raises:
        ValueError: If the file is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a dictionary, got {type(data).__name__}")
    logger.info("Loaded configuration from: %s", path)
    return data


def load_settings_from_yaml(config_path: Path | str | None = None) -> Settings:
    """
    Build Settings from a YAML file; CHRONODX_* environment variables win.

    Without ``config_path`` the file is looked up in ``CHRONODX_CONFIG_FILE``,
    ``./chronodx.yaml`` and ``~/.chronodx/config.yaml`` (``.yml`` accepted).
    Keys that are not settings are ignored with a warning.

    Example YAML config:
        ```yaml
        date_pattern: timestamp
        now_value: 253402300799000
        default_boost: 2.0
        ```
    """
    if config_path:
        path = Path(config_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
    else:
        path = _find_config_file()

    values = {}
    for key, value in (_read_yaml(path) if path else {}).items():
        if key not in Settings.model_fields:
            logger.warning("Ignoring unknown setting '%s' in %s", key, path)
        elif os.getenv(f"{ENV_PREFIX}{key.upper()}") is not None:
            logger.debug("YAML key '%s' overridden by environment", key)
        else:
            values[key] = value
    return Settings(**values)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded from (in order of precedence):
    1. Environment variables (CHRONODX_* prefix)
    2. YAML config file (if found)
    3. Default values
    """
    return load_settings_from_yaml()


def reset_settings() -> None:
    """Clear the cached settings, forcing reload on next get_settings() call."""
    get_settings.cache_clear()
