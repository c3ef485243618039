"""
Ladon -- Runner

Process entry points for hosts that drive automations programmatically.

``bootstrap`` loads LadonSettings (YAML at ``LADON_CONFIG_PATH`` or the given
path, then LADON_* environment overrides) and installs structured logging from
``settings.logging``. ``run_automation`` resolves an automation, spawns it with
its own Config and runs it with that config's id bound as ``run_id`` on every
process log entry emitted during the run.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from ladon.automator.automation import Automation, automation_for
from ladon.config import LadonSettings, load_settings
from ladon.telemetry.logging import setup_logging

if TYPE_CHECKING:
    from ladon.automator.result import Result

logger = structlog.get_logger().bind(system="ladon.runner")


def bootstrap(config_path: str | Path | None = None) -> LadonSettings:
    """Load settings and configure process logging. Returns the settings."""
    config_path = config_path or os.environ.get("LADON_CONFIG_PATH")
    settings = load_settings(config_path)
    setup_logging(settings.logging)
    logger.info(
        "ladon_starting",
        config_path=str(config_path) if config_path else None,
        log_level=settings.logging.level,
        log_format=settings.logging.format,
    )
    return settings


def run_automation(
    automation: type[Automation] | str,
    *,
    flags: Mapping[str, Any] | None = None,
    log_level: Any = None,
    id: Any = None,
    path: str | None = None,
) -> Result:
    """
    Spawn and run one automation.

    ``automation`` is an Automation subclass or a registered automation name.

    Raises:
        UnknownAutomationError: the name matches no single registered automation.
        MissingImplementationError: the automation class is abstract.
    """
    cls = automation_for(automation) if isinstance(automation, str) else automation
    instance = cls.spawn(id=id, log_level=log_level, flags=flags, path=path)
    with structlog.contextvars.bound_contextvars(run_id=instance.config.id):
        logger.info("automation_dispatched", automation=cls.__qualname__)
        return instance.run()
