"""
Ladon -- Automation

An Automation runs a script against the software under test as an ordered
plan of Phases, accumulating everything it observes in its Result.

Per run:
  - the class must be concrete (abstract automations raise immediately)
  - each phase is checked against its validator; a rejected phase is skipped
    with a warning and no effect on the Result. A validator that raises is
    sandboxed like phase code: the Result is marked ERROR and the phase skipped
  - a phase whose method is missing is skipped: ERROR entry and FAILURE
    status if it is required, a warning otherwise
  - every executed phase is timed and sandboxed. An exception escaping a phase
    is logged and marks the Result ERROR, and the run moves on to the next
    phase. Halting assertions follow the same rule: the assertion marks
    FAILURE, then the phase sandbox escalates it to ERROR

Callers inspect ``result.success()`` / ``failure()`` / ``error()`` rather
than catching exceptions from ``run()``.

Concrete subclasses are recorded in a registered-automation table so runners
can look them up by name.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar

import structlog

from ladon.automator.bundle import Bundle
from ladon.automator.flags import Flag
from ladon.automator.phase import Phase, result_succeeding
from ladon.errors import MissingImplementationError, UnknownAutomationError

if TYPE_CHECKING:
    from ladon.automator.log import Logger
    from ladon.automator.result import Result
    from ladon.automator.timing import Timer
    from ladon.config import Config

process_logger = structlog.get_logger().bind(system="ladon.automator")

_REGISTRY: dict[str, type[Automation]] = {}


def _set_log_echo(automation: Automation, echo: Any) -> None:
    automation.logger.set_echo(bool(echo))


class Automation(Bundle):
    """
    Base class for Ladon automations. Abstract; subclass it.

    Declare a subclass abstract with ``class Base(Automation, abstract=True)``.
    """

    SETUP_PHASE: ClassVar[str] = "setup"
    EXECUTE_PHASE: ClassVar[str] = "execute"
    TEARDOWN_PHASE: ClassVar[str] = "teardown"

    LOG_ECHO = Flag(
        "log_echo",
        description="Mirror the automation's message log to the process log",
        default=True,
        class_override=True,
        handler=_set_log_echo,
    )

    _abstract: ClassVar[bool] = True

    def __init_subclass__(cls, abstract: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._abstract = abstract
        if not abstract:
            _REGISTRY[f"{cls.__module__}.{cls.__qualname__}"] = cls

    def __init__(
        self,
        config: Config | None = None,
        timer: Timer | None = None,
        logger: Logger | None = None,
    ) -> None:
        super().__init__(config=config, timer=timer, logger=logger)
        self.phase = 0
        self._log = process_logger.bind(
            automation=type(self).__name__,
            run_id=self.config.id,
        )

    @classmethod
    def is_abstract(cls) -> bool:
        return cls._abstract

    @classmethod
    def phases(cls) -> list[Phase]:
        """
        The phase plan. Subclasses may replace it entirely.

        Default: setup, then execute (required, only while the Result is
        still successful), then teardown.
        """
        return [
            Phase(cls.SETUP_PHASE),
            Phase(cls.EXECUTE_PHASE, required=True, validator=result_succeeding),
            Phase(cls.TEARDOWN_PHASE),
        ]

    def run(self, to_index: int | None = None) -> Result:
        """
        Run the phases from the cursor up to ``to_index`` (exclusive).

        A missing or out-of-range ``to_index`` runs every remaining phase.

        Raises:
            MissingImplementationError: this automation class is abstract.
        """
        if self.is_abstract():
            raise MissingImplementationError(
                f"{type(self).__name__} is abstract and cannot be run"
            )

        self.handle_flag(self.LOG_ECHO)

        plan = self.phases()
        stop = len(plan)
        if isinstance(to_index, int) and self.phase <= to_index <= len(plan):
            stop = to_index

        self._log.info("automation_started", phases=[p.name for p in plan[self.phase:stop]])
        for phase in plan[self.phase:stop]:
            self.process_phase(phase)
        self._log.info("automation_finished", status=self.result.status.value)
        return self.result

    def process_phase(self, phase: Phase) -> None:
        self.phase += 1
        # A validator that raises is recorded by on_error and skips the phase
        if self.sandbox(f"{phase.name} validator", lambda: phase.valid_for(self)) is not True:
            self.logger.warn(f"{phase.name} skipped: phase validator rejected this run")
            return
        self.execute_phase(phase)

    def execute_phase(self, phase: Phase) -> None:
        method = getattr(self, phase.name, None)
        if not callable(method):
            self.on_phase_skipped(phase)
            return

        with self.timer.time(phase.name):
            self.logger.info(f"Starting {phase.name}")
            self.sandbox(phase.name, lambda: self._run_phase_method(phase, method))

    def on_phase_skipped(self, phase: Phase) -> None:
        if phase.required:
            self.logger.error(f"{phase.name} skipped: required phase is not implemented")
            self.result.mark_failure()
        else:
            self.logger.warn(f"{phase.name} skipped: no {phase.name} method detected")

    def _run_phase_method(self, phase: Phase, method: Callable[[], Any]) -> None:
        method()
        self.logger.info(f"{phase.name} completed normally")


# ─── Registered automations ───────────────────────────────────────


def registered_automations() -> list[type[Automation]]:
    return list(_REGISTRY.values())


def automation_for(name: str) -> type[Automation]:
    """
    Look up a concrete automation by fully qualified or unambiguous bare name.

    Raises:
        UnknownAutomationError: nothing (or more than one class) matches.
    """
    found = _REGISTRY.get(name)
    if found is not None:
        return found
    matches = [cls for key, cls in _REGISTRY.items() if key.rsplit(".", 1)[-1] == name]
    if len(matches) != 1:
        raise UnknownAutomationError(f"No single registered automation named '{name}'")
    return matches[0]
