"""Configuration settings and loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from lifecyclekit.errors import ConfigurationError

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class DispatcherSettings(BaseSettings):
    """Configuration for listener resolution, context caching and logging."""

    model_config = SettingsConfigDict(
        env_prefix="LIFECYCLEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_listeners: Annotated[list[str], NoDecode] = Field(default_factory=list)
    honor_class_listeners: bool = True
    discover_entry_points: bool = False
    cache_max_size: int = 32
    log_level: str = "WARNING"
    json_logs: bool = False

    @field_validator("default_listeners", mode="before")
    @classmethod
    def split_listener_string(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @field_validator("cache_max_size")
    @classmethod
    def validate_cache_max_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache_max_size must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Valid: {sorted(VALID_LOG_LEVELS)}")
        return level

    @property
    def log_level_num(self) -> int:
        return getattr(logging, self.log_level)


def load_settings(config_path: str | Path | None = None) -> DispatcherSettings:
    """Load settings from a YAML file and the environment.

    Priority: env vars > config file > defaults

    Raises:
        ConfigurationError: If the file is not valid YAML or a value is invalid
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            try:
                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Could not parse {config_path}", cause=e, config_path=str(config_path)
                ) from e
            if not isinstance(config_data, dict):
                raise ConfigurationError(
                    f"Expected a mapping at the top of {config_path}",
                    config_path=str(config_path),
                )

    config_data.update(_get_env_overrides())

    try:
        return DispatcherSettings(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}", cause=e) from e


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "LIFECYCLEKIT_DEFAULT_LISTENERS": "default_listeners",
        "LIFECYCLEKIT_HONOR_CLASS_LISTENERS": ("honor_class_listeners", _to_bool),
        "LIFECYCLEKIT_DISCOVER_ENTRY_POINTS": ("discover_entry_points", _to_bool),
        "LIFECYCLEKIT_CACHE_MAX_SIZE": ("cache_max_size", int),
        "LIFECYCLEKIT_LOG_LEVEL": "log_level",
        "LIFECYCLEKIT_JSON_LOGS": ("json_logs", _to_bool),
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                try:
                    overrides[key] = converter(value)
                except ValueError as e:
                    raise ConfigurationError(
                        f"Invalid value for {env_key}: {value!r}", cause=e
                    ) from e
            else:
                overrides[config_key] = value

    return overrides


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")
