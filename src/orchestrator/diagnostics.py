"""Diagnostic sink used by the orchestrator to report progress and failures."""

from __future__ import annotations

import logging
from typing import Protocol


class DiagnosticSink(Protocol):
    """Receiver for human-oriented status messages."""

    def status(self, msg: str) -> None:
        ...

    def warn(self, msg: str) -> None:
        ...

    def error(self, msg: str) -> None:
        ...

    def debug(self, msg: str) -> None:
        ...


class LoggingSink:
    """Forward diagnostics to a :mod:`logging` logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("orchestrator")

    def status(self, msg: str) -> None:
        self.logger.info(msg)

    def warn(self, msg: str) -> None:
        self.logger.warning(msg)

    def error(self, msg: str) -> None:
        self.logger.error(msg)

    def debug(self, msg: str) -> None:
        self.logger.debug(msg)


__all__ = ["DiagnosticSink", "LoggingSink"]
