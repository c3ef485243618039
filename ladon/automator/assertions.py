"""
Ladon -- Assertions

Assertions record expectations about the software under test in the Result.

A block passes only if it raises nothing and returns exactly ``True``. Any
other return value, including truthy ones like ``1`` or a non-empty list,
is a failure: incidental return values must never pass an assertion.

A failure marks the Result FAILURE. A halting assertion then raises
AssertionFailedError, which ends the current phase; the phase sandbox
catches it and escalates the Result to ERROR. A non-halting assertion logs an ERROR entry and carries on.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from typing import Any

from ladon.errors import AssertionFailedError, BlockRequiredError

_UNSET: Any = object()


class Assertions:
    """Mixin. Expects ``logger``, ``result`` and ``sandbox`` on the host (see Bundle)."""

    def assert_that(
        self,
        msg: str,
        block: Callable[[], Any] | None = None,
        *,
        halting: bool = False,
        expected: Any = _UNSET,
        actual: Any = _UNSET,
    ) -> bool:
        """
        Evaluate ``block`` in a sandbox and record the outcome.

        Returns True if the assertion passed, False otherwise.

        Raises:
            BlockRequiredError: no callable block was given.
            AssertionFailedError: the assertion failed and ``halting`` is set.
        """
        if not callable(block):
            raise BlockRequiredError("No assertion block given")

        passed = self.sandbox(f"assertion '{msg}'", block, on_error=self._on_assertion_error)
        if passed is True:
            self.logger.info(f"Assertion passed: '{msg}'")
            return True

        self.on_failed_assertion(msg, halting, expected, actual)
        return False

    def halting_assert(self, msg: str, block: Callable[[], Any] | None = None) -> bool:
        return self.assert_that(msg, block, halting=True)

    def on_failed_assertion(
        self,
        msg: str,
        halting: bool,
        expected: Any = _UNSET,
        actual: Any = _UNSET,
    ) -> None:
        self.result.mark_failure()
        if halting:
            raise AssertionFailedError(msg)

        line = f"Assertion failed: {msg}"
        if expected is not _UNSET or actual is not _UNSET:
            shown_expected = None if expected is _UNSET else expected
            shown_actual = None if actual is _UNSET else actual
            line += f" - Expected: {shown_expected!r}, Actual: {shown_actual!r}"
        self.logger.error(line)

    def _on_assertion_error(self, err: Exception, activity: str) -> None:
        # The assertion fails; this is not an automation error
        self.logger.error(
            error_to_lines(err, f"Error while evaluating {activity}: {type(err).__name__}: {err}")
        )


def error_to_lines(err: BaseException, description: str | None = None) -> list[str]:
    """An exception as log lines: ``description`` first, then the formatted traceback."""
    lines = [
        line
        for chunk in traceback.format_exception(type(err), err, err.__traceback__)
        for line in chunk.rstrip("\n").split("\n")
    ]
    if description:
        lines.insert(0, description)
    return lines
