"""Describe the interpreter and host the plugins are running on."""

from __future__ import annotations

import os
import sys

from contracts.plugin import Plugin


class EnvironmentReport(Plugin):
    info = {
        "name": "Environment report",
        "description": "Collects interpreter and host details.",
        "author": "plugin-orchestrator",
        "version": "0.1",
        "options": {
            "type": "object",
            "properties": {
                "include_env": {
                    "type": "array",
                    "items": {"type": "string"},
                    "default": [],
                },
            },
        },
    }
    dependencies = ["platform"]

    def run(self) -> None:
        import platform

        self.register_results(
            {
                "python": platform.python_version(),
                "implementation": platform.python_implementation(),
                "platform": platform.platform(),
                "executable": sys.executable,
                "cpu_count": os.cpu_count(),
                "env": {key: os.environ.get(key) for key in self.options["include_env"]},
            }
        )
