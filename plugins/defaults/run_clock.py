"""Record when the plugin batch started and how long this plugin was alive."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from contracts.plugin import Plugin


class RunClock(Plugin):
    info = {
        "name": "Run clock",
        "description": "Timestamps the start of a run and measures its own lifetime.",
        "author": "plugin-orchestrator",
        "version": "0.1",
        "priority": 0,
        "options": {
            "type": "object",
            "properties": {
                "hold_s": {"type": "number", "minimum": 0, "default": 0},
            },
        },
    }

    def prepare(self) -> None:
        self._started = time.monotonic()
        self._started_at = datetime.now(timezone.utc)

    def run(self) -> None:
        # Keep the job alive for a while so callers can observe it.
        self.wait(self.options["hold_s"])
        elapsed_ms = int((time.monotonic() - self._started) * 1000)
        self.register_results(
            {
                "started_at": self._started_at.isoformat(timespec="milliseconds"),
                "elapsed_ms": elapsed_ms,
            }
        )
