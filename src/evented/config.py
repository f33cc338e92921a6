"""Configuration models for evented."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

ENV_PREFIX = "EVENTED_"

_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class EventsSettings(BaseModel):
    """Process-wide knobs for the event machinery."""

    id_prefix: str = Field(default="l", description="Prefix for generated listen ids")
    log_level: str = Field(default="WARNING", description="Level for the evented loggers")
    json_logs: bool = Field(default=True, description="Emit one JSON object per log line")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> str:
        level = str(value).strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LEVELS)}")
        return level

    @field_validator("id_prefix")
    @classmethod
    def prefix_not_numeric(cls, value: str) -> str:
        if value and value[-1].isdigit():
            raise ValueError("id_prefix must not end with a digit")
        return value

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "EventsSettings":
        try:
            return cls.model_validate(dict(raw))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid evented settings: {exc}") from exc

    @classmethod
    def from_path(cls, path: Path | str) -> "EventsSettings":
        """Load settings from a YAML (``.yaml``/``.yml``) or JSON file."""

        path = Path(path)
        with path.open("r", encoding="utf-8") as handle:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(handle) or {}
            else:
                data = json.load(handle)
        if not isinstance(data, MutableMapping):
            raise ConfigurationError("Configuration file must contain a mapping")
        return cls.from_mapping(data)


def load_settings(env: Mapping[str, str] | None = None) -> EventsSettings:
    """Build settings from ``EVENTED_*`` variables in ``env`` (default ``os.environ``)."""

    env = os.environ if env is None else env
    raw = {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in env.items()
        if key.startswith(ENV_PREFIX) and value != ""
    }
    return EventsSettings.from_mapping(raw)


_settings: EventsSettings | None = None


def get_settings() -> EventsSettings:
    """Return the active settings, loading them from the environment once."""

    global _settings
    if _settings is None:
        try:
            _settings = load_settings()
        except ConfigurationError:
            # Fall back to defaults on a bad EVENTED_* variable.
            _settings = EventsSettings()
    return _settings


def configure(settings: EventsSettings | Mapping[str, Any] | None = None) -> EventsSettings:
    """Replace the active settings and re-level the evented loggers.

    ``None`` reloads from the environment.
    """

    global _settings
    if settings is None:
        settings = load_settings()
    elif not isinstance(settings, EventsSettings):
        settings = EventsSettings.from_mapping(settings)
    _settings = settings

    from .logging import apply_settings, get_logger, log_event

    logger = get_logger("config")
    for name in ("config", "events"):
        apply_settings(get_logger(name), settings.log_level, settings.json_logs)
    log_event(logger, "settings_applied", settings.model_dump())
    return settings


__all__ = [
    "ENV_PREFIX",
    "EventsSettings",
    "configure",
    "get_settings",
    "load_settings",
]
