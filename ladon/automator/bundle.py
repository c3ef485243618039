"""
Ladon -- Bundle

A Bundle is anything spawned from a Config that owns a Logger, a Timer and a
Result. Every Bundle can declare Flags, make assertions and sandbox work.

``sandbox`` is the failure-containment boundary: an exception escaping the
sandboxed block is logged (type, activity, message, traceback) and folded
into the Result instead of propagating.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from ladon.automator.assertions import Assertions, error_to_lines
from ladon.automator.flags import HasFlags
from ladon.automator.log import Logger
from ladon.automator.result import Result
from ladon.automator.timing import Timer
from ladon.config import Config
from ladon.errors import BlockRequiredError

B = TypeVar("B", bound="Bundle")

ErrorHandler = Callable[[Exception, str], Any]


class Bundle(HasFlags, Assertions):
    def __init__(
        self,
        config: Config | None = None,
        timer: Timer | None = None,
        logger: Logger | None = None,
    ) -> None:
        if config is None:
            config = Config()
        if not isinstance(config, Config):
            raise TypeError(f"A ladon Config is required, got {type(config).__name__}")
        self.config = config
        self.timer = timer if isinstance(timer, Timer) else Timer()
        if isinstance(logger, Logger):
            logger.level = config.log_level
            self.logger = logger
        else:
            self.logger = Logger(
                level=config.log_level,
                run_id=config.id,
                bundle=type(self).__name__,
            )
        self.result = Result(config, self.logger, self.timer)

    @classmethod
    def spawn(
        cls: type[B],
        *,
        id: Any = None,
        log_level: Any = None,
        flags: Mapping[str, Any] | None = None,
        class_name: str | None = None,
        path: str | None = None,
    ) -> B:
        """Build a Config from the arguments and an instance from that Config."""
        config = Config(
            id=id,
            log_level=log_level,
            flags=flags or {},
            class_name=class_name or cls.__qualname__,
            path=path,
        )
        return cls(config=config)

    @property
    def flags(self) -> Mapping[str, Any]:
        return self.config.flags

    def sandbox(
        self,
        activity: str,
        block: Callable[[], Any] | None = None,
        on_error: ErrorHandler | None = None,
    ) -> Any:
        """
        Run ``block`` and return its value, or None if it raised.

        Raises:
            BlockRequiredError: no callable block was given.
        """
        if not callable(block):
            raise BlockRequiredError("No block given to sandbox")
        try:
            return block()
        except Exception as err:
            (on_error or self.on_error)(err, activity)
            return None

    def on_error(self, err: Exception, activity: str) -> None:
        """Default sandbox handler: record the error and escalate the Result."""
        self.result.mark_error()
        self.logger.error(error_to_lines(err, f"{type(err).__name__} in {activity}: {err}"))
