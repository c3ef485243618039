"""
Tests for the Automation phase engine.

Covers:
  - Abstract classes refuse to run
  - Phase ordering, validators, and missing phase methods
  - Error containment between phases
  - The phase cursor and the log_echo flag
  - The registered-automation table
"""

from __future__ import annotations

import pytest

from ladon.automator.automation import Automation, automation_for, registered_automations
from ladon.automator.phase import Phase, result_succeeding
from ladon.errors import MissingImplementationError, UnknownAutomationError
from ladon.primitives.common import LogLevel, ResultStatus


class RecordingAutomation(Automation, abstract=True):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []


class PlainScript(RecordingAutomation):
    def setup(self):
        self.calls.append("setup")

    def execute(self):
        self.calls.append("execute")

    def teardown(self):
        self.calls.append("teardown")


class CrashingSetup(PlainScript):
    def setup(self):
        self.calls.append("setup")
        raise ConnectionError("service down")


class CrashingExecute(PlainScript):
    def execute(self):
        self.calls.append("execute")
        raise RuntimeError("boom")


class HaltingExecute(PlainScript):
    def execute(self):
        self.halting_assert("login succeeds", lambda: False)
        self.calls.append("unreachable")


class ExecuteOnly(RecordingAutomation):
    def execute(self):
        self.calls.append("execute")


class MissingRequiredPhase(RecordingAutomation):
    @classmethod
    def phases(cls):
        return [Phase("a", required=True), Phase("b")]

    def b(self):
        self.calls.append("b")


class ModelGatedScript(RecordingAutomation):
    @classmethod
    def phases(cls):
        return [
            Phase("execute", validator=lambda a: a.model.current_state is not None),
            Phase("teardown"),
        ]

    def execute(self):
        self.calls.append("execute")

    def teardown(self):
        self.calls.append("teardown")


class QuietScript(PlainScript):
    @classmethod
    def default_log_echo(cls):
        return False


def _run(cls, **spawn_kwargs):
    automation = cls.spawn(**spawn_kwargs)
    automation.logger.set_echo(False)
    return automation, automation.run()


class TestAbstract:
    def test_base_class_cannot_run(self):
        with pytest.raises(MissingImplementationError):
            Automation.spawn().run()

    def test_abstract_subclass_cannot_run(self):
        automation = RecordingAutomation.spawn()
        with pytest.raises(MissingImplementationError):
            automation.run()
        assert automation.phase == 0
        assert automation.timer.entries == []

    def test_abstract_flag_is_per_class(self):
        assert RecordingAutomation.is_abstract() is True
        assert PlainScript.is_abstract() is False


class TestPhaseEngine:
    def test_default_plan_runs_in_order(self):
        automation, result = _run(PlainScript)
        assert automation.calls == ["setup", "execute", "teardown"]
        assert result.status is ResultStatus.SUCCESS
        assert [e.name for e in automation.timer.entries] == ["setup", "execute", "teardown"]

    def test_run_returns_the_result(self):
        automation, result = _run(PlainScript)
        assert result is automation.result

    def test_setup_error_skips_execute_but_runs_teardown(self):
        automation, result = _run(CrashingSetup)
        assert automation.calls == ["setup", "teardown"]
        assert result.error()

    def test_error_in_execute_is_contained(self):
        automation, result = _run(CrashingExecute)
        assert automation.calls == ["setup", "execute", "teardown"]
        assert result.status is ResultStatus.ERROR
        assert any(
            e.msg_lines[0] == "RuntimeError in execute: boom" for e in automation.logger.entries
        )

    def test_halting_assertion_ends_only_the_phase(self):
        automation, result = _run(HaltingExecute)
        assert automation.calls == ["setup", "teardown"]
        assert result.status is ResultStatus.ERROR
        assert automation.logger.entries[0].msg_lines[0] == (
            "AssertionFailedError in execute: Assertion failed: login succeeds"
        )

    def test_missing_optional_phases_are_skipped_quietly(self):
        automation, result = _run(ExecuteOnly, log_level=LogLevel.WARN)
        assert automation.calls == ["execute"]
        assert result.success()
        warnings = [e.msg_lines[0] for e in automation.logger.entries]
        assert warnings == [
            "setup skipped: no setup method detected",
            "teardown skipped: no teardown method detected",
        ]

    def test_missing_required_phase_fails_without_raising(self):
        automation, result = _run(MissingRequiredPhase)
        assert result.status is ResultStatus.FAILURE
        assert automation.calls == ["b"]
        assert automation.logger.entries[0].msg_lines == [
            "a skipped: required phase is not implemented"
        ]

    def test_rejected_phase_does_not_touch_result(self):
        automation = PlainScript.spawn(log_level=LogLevel.WARN)
        automation.logger.set_echo(False)
        automation.result.mark_failure()
        automation.run()
        assert automation.calls == ["setup", "teardown"]
        assert automation.result.status is ResultStatus.FAILURE
        assert automation.logger.entries[0].msg_lines[0].startswith("execute skipped")

    def test_raising_validator_is_contained(self):
        automation, result = _run(ModelGatedScript)
        assert result.status is ResultStatus.ERROR
        assert automation.calls == ["teardown"]
        assert automation.timer.entries[0].name == "teardown"
        assert automation.logger.entries[0].msg_lines[0].startswith(
            "AttributeError in execute validator:"
        )


class TestCursor:
    def test_run_up_to_index(self):
        automation = PlainScript.spawn()
        automation.logger.set_echo(False)

        automation.run(to_index=1)
        assert automation.calls == ["setup"]
        assert automation.phase == 1

        automation.run()
        assert automation.calls == ["setup", "execute", "teardown"]
        assert automation.phase == 3

    @pytest.mark.parametrize("to_index", [None, 99, -1, "2"])
    def test_out_of_range_index_runs_everything(self, to_index):
        automation = PlainScript.spawn()
        automation.run(to_index=to_index)
        assert automation.calls == ["setup", "execute", "teardown"]

    def test_completed_run_is_not_repeated(self):
        automation, _ = _run(PlainScript)
        automation.run()
        assert automation.calls == ["setup", "execute", "teardown"]


class TestLogEchoFlag:
    def test_echo_on_by_default(self):
        automation, _ = _run(PlainScript)
        assert automation.logger.echo is True

    def test_flag_disables_echo(self):
        automation, _ = _run(PlainScript, flags={"log_echo": False})
        assert automation.logger.echo is False

    def test_class_default(self):
        automation, _ = _run(QuietScript)
        assert automation.logger.echo is False

    def test_flag_beats_class_default(self):
        automation, _ = _run(QuietScript, flags={"log_echo": True})
        assert automation.logger.echo is True


class TestRegistry:
    def test_concrete_classes_are_registered(self):
        assert automation_for(f"{__name__}.PlainScript") is PlainScript
        assert automation_for("HaltingExecute") is HaltingExecute
        assert PlainScript in registered_automations()

    def test_abstract_classes_are_not_registered(self):
        assert RecordingAutomation not in registered_automations()
        assert Automation not in registered_automations()
        with pytest.raises(UnknownAutomationError):
            automation_for("RecordingAutomation")

    def test_unknown_name(self):
        with pytest.raises(UnknownAutomationError):
            automation_for("NoSuchAutomation")


class TestPhase:
    def test_no_validator_always_valid(self):
        assert Phase("setup").valid_for(object()) is True

    def test_requiring_combines_validators(self):
        automation = PlainScript.spawn()
        phase = Phase("execute", validator=lambda a: a.phase == 0).requiring(result_succeeding)
        assert phase.valid_for(automation) is True
        automation.result.mark_failure()
        assert phase.valid_for(automation) is False
        assert phase.name == "execute"
