"""
Ladon -- Error Hierarchy

Every exception raised by Ladon derives from LadonError.

Namespaces:
  ModelerError subclasses   -> programmer errors while building a model.
                               Raised synchronously from load/merge and never
                               recovered by Ladon itself.
  AutomatorError subclasses -> raised while configuring or running an
                               Automation. Inside a phase they are caught by
                               the phase sandbox and folded into the Result.
"""

from __future__ import annotations


class LadonError(Exception):
    """Base for all Ladon errors."""


class MissingImplementationError(LadonError, NotImplementedError):
    """A required override (an 'abstract' method) was not provided."""


class BlockRequiredError(LadonError, TypeError):
    """A callable was required but not given."""


# ─── Modeler ──────────────────────────────────────────────────────


class ModelerError(LadonError):
    """Base for graph and state machine errors."""


class InvalidStateTypeError(ModelerError, TypeError):
    """A graph was asked to load something that is not a State subclass."""

    def __init__(self, given_type: object) -> None:
        super().__init__(f"Not a valid state type: {given_type!r}")
        self.given_type = given_type


class UnknownStateError(ModelerError, KeyError):
    """Transitions were requested for a state type the graph has not loaded."""

    def __init__(self, state_type: object) -> None:
        super().__init__(f"No known state {state_type!r}")
        self.state_type = state_type

    def __str__(self) -> str:
        return self.args[0]


class AlreadyLoadedError(ModelerError):
    """A transition target resolver slot was filled twice, or after the target was loaded."""


class TargetNotLoadedError(ModelerError):
    """A transition's target was identified before its loader ran."""


class NoCurrentStateError(ModelerError):
    """A state machine operation needs a current state but there is none."""


class InvalidMergeError(ModelerError):
    """Two graphs of different concrete types were merged."""


class InvalidSelectionError(ModelerError, TypeError):
    """A selection strategy returned something other than a single Transition."""


# ─── Automator ────────────────────────────────────────────────────


class AutomatorError(LadonError):
    """Base for automation errors."""


class AssertionFailedError(AutomatorError):
    """Raised when a halting assertion fails. Unwinds to the phase sandbox."""

    def __init__(self, msg: str) -> None:
        super().__init__(f"Assertion failed: {msg}")
        self.assertion = msg


class InvalidModelError(AutomatorError):
    """A ModelAutomation's model is not a FiniteStateMachine."""


class InvalidFlagValueError(AutomatorError, ValueError):
    """A flag validator rejected the resolved value."""

    def __init__(self, flag_name: str, value: object) -> None:
        super().__init__(f"Invalid value for flag '{flag_name}': {value!r}")
        self.flag_name = flag_name
        self.value = value


class UnknownAutomationError(AutomatorError, LookupError):
    """No registered automation matches the requested name."""
