"""Configuration loading for CourseHub.

Settings come from an optional YAML file and are then overridden by
``COURSEHUB_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILE = "coursehub.yaml"
ENV_PREFIX = "COURSEHUB_"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class Settings:
    """Runtime settings for the API, store and CLI."""

    db_path: str = "coursehub.db"
    secret_key: str = "change-me-in-production"
    token_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    password_schemes: list[str] = field(default_factory=lambda: ["pbkdf2_sha256"])
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_dir: str = "logs"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary.

        Args:
            data: Mapping loaded from YAML. Unknown keys are rejected.

        Returns:
            Parsed settings object.

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(unknown)}")

        settings = cls()
        for key, value in data.items():
            setattr(settings, key, _coerce(key, value, getattr(settings, key)))
        return settings

    def apply_env(self, environ: dict[str, str] | None = None) -> Settings:
        """Override fields from COURSEHUB_<FIELD> environment variables."""
        environ = dict(os.environ) if environ is None else environ
        for f in fields(self):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None:
                continue
            current = getattr(self, f.name)
            if isinstance(current, list):
                value: Any = [item.strip() for item in raw.split(",") if item.strip()]
            else:
                value = raw
            setattr(self, f.name, _coerce(f.name, value, current))
        return self

    def to_env(self) -> dict[str, str]:
        """Render every field as a COURSEHUB_<FIELD> variable apply_env reads back."""
        env = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                value = ",".join(value)
            env[f"{ENV_PREFIX}{f.name.upper()}"] = str(value)
        return env


def _coerce(key: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(default, int):
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Setting '{key}' must be an integer, got {value!r}") from e
    if isinstance(default, list):
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            raise ConfigError(f"Setting '{key}' must be a list, got {type(value).__name__}")
        return [str(item) for item in value]
    return str(value)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML (if present) and the environment.

    Args:
        config_path: Path to a YAML file. Defaults to COURSEHUB_CONFIG, then to
            ``coursehub.yaml`` in the current directory if it exists.

    Returns:
        Parsed settings object.

    Raises:
        ConfigError: If an explicit file doesn't exist or is invalid.
    """
    explicit = config_path is not None or "COURSEHUB_CONFIG" in os.environ
    if config_path is None:
        config_path = os.environ.get("COURSEHUB_CONFIG", DEFAULT_CONFIG_FILE)
    config_path = Path(config_path)

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Configuration file not found: {config_path}")
        return Settings().apply_env()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return Settings.from_dict(data).apply_env()
