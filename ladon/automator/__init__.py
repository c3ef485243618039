"""
Ladon -- Automator

Runs scripts against the software under test as phase-sequenced, sandboxed
automations that accumulate a structured Result.

Public interface:
  Automation        phase engine base class
  ModelAutomation   automation driven through a FiniteStateMachine model
  BatchAutomation   runs many automations in parallel worker threads
  Phase             named, optionally required step with a validator
  Flag              declarative, overridable configuration input
  Result            status + timings + message log + data log
"""

from ladon.automator.automation import Automation, automation_for, registered_automations
from ladon.automator.batch import BatchAutomation, BatchEntry
from ladon.automator.bundle import Bundle
from ladon.automator.flags import Flag, HasFlags
from ladon.automator.log import LogEntry, Logger
from ladon.automator.model_automation import ModelAutomation
from ladon.automator.phase import Phase, result_succeeding
from ladon.automator.result import Result
from ladon.automator.timing import TimeEntry, Timer

__all__ = [
    "Automation",
    "BatchAutomation",
    "BatchEntry",
    "Bundle",
    "Flag",
    "HasFlags",
    "LogEntry",
    "Logger",
    "ModelAutomation",
    "Phase",
    "Result",
    "TimeEntry",
    "Timer",
    "automation_for",
    "registered_automations",
    "result_succeeding",
]
