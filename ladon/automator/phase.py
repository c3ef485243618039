"""
Ladon -- Phases

A Phase names one step of an Automation's plan. The name is also the method
the automation must define to run it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

Validator = Callable[[Any], Any]


@dataclass(frozen=True)
class Phase:
    name: str
    required: bool = False
    validator: Validator | None = None

    def valid_for(self, automation: Any) -> bool:
        """Whether ``automation`` may run this phase right now."""
        if self.validator is None:
            return True
        return bool(self.validator(automation))

    def requiring(self, predicate: Validator) -> Phase:
        """Copy of this phase that also requires ``predicate`` to hold."""
        original = self.validator
        if original is None:
            return replace(self, validator=predicate)
        return replace(self, validator=lambda a: bool(predicate(a)) and bool(original(a)))


def result_succeeding(automation: Any) -> bool:
    """Validator: only run while nothing has failed or errored so far."""
    return automation.result.success()
