"""Execution backends that drive a plugin through its lifecycle."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

from contracts.plugin import LIFECYCLE_HOOKS, Plugin

from . import log
from .diagnostics import DiagnosticSink
from .jobs import Handle, Job

_LOGGER = logging.getLogger(__name__)

PluginFactory = Callable[..., Plugin]


def execute(job: Job, factory: PluginFactory, sink: DiagnosticSink) -> None:
    """Build the plugin, then run ``prepare``, ``run`` and ``clean_up``.

    Never raises ``Exception``: a constructor or hook failure is reported to
    ``sink`` and journalled. A killed job skips every phase it has not
    started yet.
    """

    name = job.name
    log.append_event({"event": "plugin_launched", "plugin": name})
    try:
        job.plugin = factory(stop=job.stop)
        for hook in LIFECYCLE_HOOKS:
            if job.killed:
                sink.debug(f"[{name}] Killed before {hook}().")
                log.append_event({"event": "plugin_stopped", "plugin": name, "phase": hook})
                return
            getattr(job.plugin, hook)()
    except Exception as exc:
        sink.error(f"[{name}] Plugin failed: {type(exc).__name__}: {exc}")
        _LOGGER.debug("Traceback for plugin %s", name, exc_info=True)
        log.append_event(
            {"event": "plugin_failed", "plugin": name, "error": f"{type(exc).__name__}: {exc}"}
        )
        return
    log.append_event({"event": "plugin_finished", "plugin": name})


class Executor(Protocol):
    """Abstract execution backend."""

    def launch(self, job: Job, factory: PluginFactory, sink: DiagnosticSink) -> Handle:
        """Start executing ``job`` and return a handle to poll it."""


class ThreadExecutor:
    """Run every plugin in its own thread."""

    def __init__(self, *, daemon: bool = True) -> None:
        self.daemon = daemon

    def launch(self, job: Job, factory: PluginFactory, sink: DiagnosticSink) -> threading.Thread:
        thread = threading.Thread(
            target=execute,
            args=(job, factory, sink),
            name=f"plugin:{job.name}",
            daemon=self.daemon,
        )
        thread.start()
        return thread


class _FinishedHandle:
    def is_alive(self) -> bool:
        return False

    def join(self, timeout: float | None = None) -> None:
        return None


class SequentialExecutor:
    """Deterministic executor running each plugin to completion in the caller."""

    def launch(self, job: Job, factory: PluginFactory, sink: DiagnosticSink) -> Handle:
        execute(job, factory, sink)
        return _FinishedHandle()


__all__ = ["Executor", "PluginFactory", "SequentialExecutor", "ThreadExecutor", "execute"]
