"""
Ladon -- Configuration

Two layers:
1. Config         -- the frozen, per-run configuration every Bundle is built from
                     (correlation id, log threshold, flag values).
2. LadonSettings  -- process-wide defaults, loaded from an optional YAML file
                     and then overridden by LADON_* environment variables.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ladon.primitives.common import LogLevel, new_id

# ─── Per-run Config ───────────────────────────────────────────────


def _flag_key(key: Any) -> str:
    if isinstance(key, enum.Enum):
        key = key.value
    return str(key)


class Config(BaseModel):
    """
    Configuration for one Ladon model or automation.

    Immutable once constructed: attribute assignment is rejected and ``flags``
    is exposed as a read-only mapping.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(default_factory=new_id)
    log_level: LogLevel = Field(default=None, validate_default=True)
    flags: Mapping[str, Any] = Field(default_factory=lambda: MappingProxyType({}))
    class_name: str | None = None
    path: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return new_id() if v is None else str(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, v: Any) -> LogLevel:
        return LogLevel.parse(v) or default_log_level()

    @field_validator("flags", mode="before")
    @classmethod
    def _normalise_flags(cls, v: Any) -> dict[str, Any]:
        if not isinstance(v, Mapping):
            return {}
        return {_flag_key(k): val for k, val in v.items()}

    @field_validator("flags", mode="after")
    @classmethod
    def _freeze_flags(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("flags")
    def _dump_flags(self, flags: Mapping[str, Any]) -> dict[str, Any]:
        return dict(flags)

    def flag(self, name: Any, default: Any = None) -> Any:
        """Value given for the flag ``name``, or ``default``."""
        return self.flags.get(_flag_key(name), default)

    def has_flag(self, name: Any) -> bool:
        return _flag_key(name) in self.flags

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "class_name": self.class_name,
            "path": self.path,
            "log_level": self.log_level.name,
            "flags": dict(self.flags),
        }

    def __str__(self) -> str:
        lines = [
            f"Id: {self.id}",
            f"Class Name: {self.class_name}",
            f"Path: {self.path}",
            f"Log Level: {self.log_level.name}",
            "Flags:",
        ]
        lines.extend(f"  {name} => {value!r}" for name, value in self.flags.items())
        return "\n".join(lines)


# ─── Process Settings ─────────────────────────────────────────────


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


class LadonSettings(BaseSettings):
    """Process-wide defaults. Environment: LADON_LOGGING__LEVEL, LADON_DEFAULT_LOG_LEVEL, ..."""

    model_config = SettingsConfigDict(
        env_prefix="LADON_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    default_log_level: str = "ERROR"
    batch_run_delay_s: float = 0.5


def load_settings(config_path: str | Path | None = None) -> LadonSettings:
    """
    Load settings from a YAML file, then apply environment variable overrides.

    A missing file is treated as empty. Environment values win over the file.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    env_settings = LadonSettings()
    merged = _deep_merge(raw, env_settings.model_dump(exclude_unset=True))
    return LadonSettings(**merged)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def default_log_level() -> LogLevel:
    """Threshold for configs given no usable level: ``LADON_DEFAULT_LOG_LEVEL``, else ERROR."""
    return LogLevel.parse(LadonSettings().default_log_level, default=LogLevel.ERROR)
