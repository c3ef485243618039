"""
Ladon -- In-Result Message Log

The Logger records LogEntry objects at or above its threshold so they end up
in the automation's Result. Each recorded entry is also mirrored to structlog
(one event per entry) unless echo is switched off.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog
from pydantic import Field, field_validator

from ladon.primitives.common import LadonBaseModel, LogLevel, utc_now

logger = structlog.get_logger().bind(system="ladon.automator.log")


class LogEntry(LadonBaseModel):
    """One message in the log. Kept as lines so consumers can format them freely."""

    level: LogLevel
    msg_lines: list[str]
    time: datetime = Field(default_factory=utc_now)

    @field_validator("msg_lines", mode="before")
    @classmethod
    def _as_lines(cls, v: Any) -> list[str]:
        if isinstance(v, (list, tuple)):
            return [str(line) for line in v]
        return [str(v)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.name,
            "time": self.time.isoformat(),
            "msg_lines": list(self.msg_lines),
        }

    def __str__(self) -> str:
        header = f"{self.level.name} at {self.time.strftime('%H:%M:%S')}"
        return "\n".join([header, *(f"\t{line}" for line in self.msg_lines)])


class Logger:
    """Threshold-filtered message log owned by one Bundle."""

    def __init__(
        self,
        level: LogLevel = LogLevel.ERROR,
        echo: bool = True,
        **context: Any,
    ) -> None:
        self.entries: list[LogEntry] = []
        self.level = level
        self.echo = echo
        self._structlog = logger.bind(**context)

    @property
    def level(self) -> LogLevel:
        return self._level

    @level.setter
    def level(self, level: LogLevel) -> None:
        """Change the threshold. Existing entries are kept whatever their level."""
        parsed = LogLevel.parse(level)
        if parsed is None:
            raise ValueError(f"Invalid log level: {level!r}")
        self._level = parsed

    def set_echo(self, echo: bool) -> None:
        self.echo = echo

    def log(self, msg: Any, level: LogLevel = LogLevel.WARN) -> LogEntry | None:
        """Record ``msg`` (a string or list of lines). Returns None below the threshold."""
        if level < self._level:
            return None
        entry = LogEntry(level=level, msg_lines=msg)
        self.entries.append(entry)
        if self.echo:
            self._structlog.log(
                int(level),
                entry.msg_lines[0] if entry.msg_lines else "",
                lines=entry.msg_lines[1:] or None,
            )
        return entry

    def debug(self, msg: Any) -> LogEntry | None:
        return self.log(msg, LogLevel.DEBUG)

    def info(self, msg: Any) -> LogEntry | None:
        return self.log(msg, LogLevel.INFO)

    def warn(self, msg: Any) -> LogEntry | None:
        return self.log(msg, LogLevel.WARN)

    def error(self, msg: Any) -> LogEntry | None:
        return self.log(msg, LogLevel.ERROR)

    def fatal(self, msg: Any) -> LogEntry | None:
        return self.log(msg, LogLevel.FATAL)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self._level.name,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    def __str__(self) -> str:
        return "\n".join([f"Level: {self._level.name}", "Entries:", *map(str, self.entries)])
