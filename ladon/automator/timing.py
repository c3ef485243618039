"""
Ladon -- Timing

The Timer measures named blocks of work; each measurement is a TimeEntry.
Durations are in seconds.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from ladon.primitives.common import LadonBaseModel, utc_now


class TimeEntry(LadonBaseModel):
    name: str
    start_time: datetime | None = None
    end_time: datetime | None = None

    def start(self) -> datetime:
        self.start_time = utc_now()
        return self.start_time

    def end(self) -> datetime:
        self.end_time = utc_now()
        return self.end_time

    @property
    def duration(self) -> float:
        """Elapsed seconds, or -1.0 while either end is missing."""
        if self.start_time is None or self.end_time is None:
            return -1.0
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "start": self.start_time.isoformat() if self.start_time else None,
            "end": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration,
        }


class Timer:
    def __init__(self) -> None:
        self.entries: list[TimeEntry] = []

    @contextmanager
    def time(self, name: Any) -> Iterator[TimeEntry]:
        """Time the body of a ``with`` block. The entry is closed even if the body raises."""
        if name is None:
            raise ValueError("A timing entry needs a name")
        entry = TimeEntry(name=str(name))
        self.entries.append(entry)
        entry.start()
        try:
            yield entry
        finally:
            entry.end()

    @property
    def total_time(self) -> float:
        return sum(entry.duration for entry in self.entries)

    def to_dict(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self.entries]
