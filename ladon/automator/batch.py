"""
Ladon -- Batch Automation

Runs many independent automations side by side.

  build     spawns one instance per entry repeat, each with its own Config
  execute   starts one worker thread per instance (staggered by ``run_delay``)
            and joins them all before moving on
  teardown  records how many instances ended in each status and asserts
            that all of them succeeded

Instances share no mutable state. A worker's exceptions are contained by
this batch's sandbox and never affect sibling workers.
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ladon.automator.automation import Automation, automation_for
from ladon.automator.flags import Flag
from ladon.automator.phase import Phase, result_succeeding
from ladon.config import LadonSettings


@dataclass(frozen=True)
class BatchEntry:
    """One automation to run ``repeats`` times with the given flags."""

    automation: type[Automation] | str
    flags: Mapping[str, Any] = field(default_factory=dict)
    repeats: Any = 1
    log_level: Any = None

    def automation_class(self) -> type[Automation]:
        if isinstance(self.automation, str):
            return automation_for(self.automation)
        return self.automation

    def instance_count(self) -> int:
        """Repeats as a non-negative int; anything else means a single run."""
        repeats = self.repeats
        if not isinstance(repeats, int) or isinstance(repeats, bool) or repeats < 0:
            return 1
        return repeats


def _valid_entries(entries: Any) -> bool:
    return isinstance(entries, (list, tuple)) and all(isinstance(e, BatchEntry) for e in entries)


def _stagger(batch: BatchAutomation, delay: Any) -> None:
    if isinstance(delay, (int, float)) and not isinstance(delay, bool) and delay > 0:
        time.sleep(delay)


class BatchAutomation(Automation):
    ENTRIES = Flag(
        "entries",
        description="BatchEntry list describing the automations to run",
        default=(),
        validator=_valid_entries,
    )
    RUN_DELAY = Flag(
        "run_delay",
        description="Seconds to wait between starting workers",
        default=0.5,
        class_override=True,
        handler=_stagger,
    )

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.instances: list[Automation] = []
        self._lock = threading.Lock()

    @classmethod
    def default_run_delay(cls) -> float:
        return LadonSettings().batch_run_delay_s

    @classmethod
    def phases(cls) -> list[Phase]:
        return [
            Phase("build", required=True),
            Phase("execute", required=True, validator=result_succeeding),
            Phase("teardown", required=True),
        ]

    def build(self) -> None:
        entries = self.flag_value(self.ENTRIES)
        classes = [entry.automation_class() for entry in entries]
        self.halting_assert(
            "Batch entries must name concrete automations",
            lambda: not any(cls.is_abstract() for cls in classes),
        )

        for entry, cls in zip(entries, classes):
            for _ in range(entry.instance_count()):
                self.instances.append(cls.spawn(flags=entry.flags, log_level=entry.log_level))
        self.logger.info(f"Built {len(self.instances)} automation instance(s)")

    def execute(self) -> None:
        workers: list[threading.Thread] = []
        for idx, instance in enumerate(self.instances):
            worker = threading.Thread(
                target=self.sandbox,
                args=(f"execute runner #{idx}", instance.run),
                name=f"ladon-batch-{idx}",
            )
            workers.append(worker)
            worker.start()
            if idx < len(self.instances) - 1:
                self.handle_flag(self.RUN_DELAY)
        for worker in workers:
            worker.join()

    def teardown(self) -> None:
        counts = Counter(instance.result.status.value for instance in self.instances)
        for status, count in counts.items():
            self.result.record_data(status, count)
        self.result.record_data(
            "outcomes",
            [
                {
                    "automation": type(instance).__qualname__,
                    "id": instance.config.id,
                    "status": instance.result.status.value,
                }
                for instance in self.instances
            ],
        )
        self.assert_that(
            "All automations in the batch should succeed",
            lambda: all(instance.result.success() for instance in self.instances),
        )

    def on_error(self, err: Exception, activity: str) -> None:
        # Worker threads report through here concurrently
        with self._lock:
            super().on_error(err, activity)
