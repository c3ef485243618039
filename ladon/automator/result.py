"""
Ladon -- Result

Accumulated outcome of one Bundle: status, the config it ran with, timings,
the message log and an open key/value data log.

Status only escalates: SUCCESS -> FAILURE -> ERROR. Marking a lower status
than the current one is a no-op.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ladon.primitives.common import ResultStatus

if TYPE_CHECKING:
    from ladon.automator.log import Logger
    from ladon.automator.timing import Timer
    from ladon.config import Config


class Result:
    def __init__(self, config: Config, logger: Logger, timer: Timer) -> None:
        self.config = config
        self.logger = logger
        self.timer = timer
        self.data_log: dict[Any, Any] = {}
        self._status = ResultStatus.SUCCESS

    @property
    def status(self) -> ResultStatus:
        return self._status

    def record_data(self, key: Any, value: Any) -> Any:
        if key is None:
            raise ValueError("A data log key is required")
        self.data_log[key] = value
        return value

    def _escalate(self, status: ResultStatus) -> ResultStatus:
        if status.severity > self._status.severity:
            self._status = status
        return self._status

    def mark_failure(self) -> ResultStatus:
        return self._escalate(ResultStatus.FAILURE)

    def mark_error(self) -> ResultStatus:
        return self._escalate(ResultStatus.ERROR)

    def success(self) -> bool:
        return self._status == ResultStatus.SUCCESS

    def failure(self) -> bool:
        return self._status == ResultStatus.FAILURE

    def error(self) -> bool:
        return self._status == ResultStatus.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self._status.value,
            "config": self.config.to_dict(),
            "timings": self.timer.to_dict(),
            "log": self.logger.to_dict(),
            "data_log": dict(self.data_log),
        }

    def __repr__(self) -> str:
        return f"<Result {self._status.value} id={self.config.id}>"
