"""
Ladon -- model-based automation of software under test.

Two layers:
  ladon.modeler    graph / state machine models of the software
  ladon.automator  phase-sequenced, sandboxed automations that drive them
"""

from ladon.config import Config, LadonSettings, load_settings
from ladon.primitives.common import LogLevel, ResultStatus

__version__ = "1.0.0"

__all__ = [
    "Config",
    "LadonSettings",
    "LogLevel",
    "ResultStatus",
    "load_settings",
]
