"""
Ladon -- Common Primitives

Shared enums, base classes, and utilities used by the modeler and the automator.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel
from ulid import ULID


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


# ─── Enums ────────────────────────────────────────────────────────


class LogLevel(int, enum.Enum):
    """
    Thresholds for the in-result message log.

    Values line up with the standard library logging levels so entries can be
    mirrored to structlog without a translation table.
    """

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    FATAL = 50

    @classmethod
    def parse(cls, value: Any, default: LogLevel | None = None) -> LogLevel | None:
        """Coerce a level, a level name or a stdlib level number. Unknown values map to ``default``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "WARNING":
                name = "WARN"
            if name == "CRITICAL":
                name = "FATAL"
            return cls.__members__.get(name, default)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                return default
        return default

    def enabled_levels(self) -> list[LogLevel]:
        """Levels retained by a log configured at this threshold."""
        return [level for level in LogLevel if level >= self]


class ResultStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"   # completed normally
    FAILURE = "FAILURE"   # an assertion failed or a required phase was missing
    ERROR = "ERROR"       # an unexpected error escaped into a sandbox

    @property
    def severity(self) -> int:
        return _STATUS_SEVERITY[self]


_STATUS_SEVERITY: dict[ResultStatus, int] = {
    ResultStatus.SUCCESS: 0,
    ResultStatus.FAILURE: 1,
    ResultStatus.ERROR: 2,
}


# ─── Base Models ──────────────────────────────────────────────────


class LadonBaseModel(BaseModel):
    """Base model for all Ladon data holders."""

    model_config = {"populate_by_name": True, "from_attributes": True}
