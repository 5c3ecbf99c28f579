"""Bookkeeping for plugin jobs that are currently executing."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Protocol

from contracts.plugin import Plugin

from .diagnostics import DiagnosticSink


class Handle(Protocol):
    """The part of :class:`threading.Thread` the registry relies on."""

    def is_alive(self) -> bool:
        ...

    def join(self, timeout: float | None = None) -> None:
        ...


@dataclass
class Job:
    """One launched plugin and the handle of the unit executing it.

    ``plugin`` stays ``None`` until the unit has constructed the instance, and
    for good if construction failed. ``stop`` is handed to the plugin so a
    kill reaches it whether or not it exists yet.
    """

    name: str
    handle: Optional[Handle] = None
    plugin: Optional[Plugin] = None
    stop: threading.Event = field(default_factory=threading.Event)

    @property
    def killed(self) -> bool:
        return self.stop.is_set()

    def alive(self) -> bool:
        return self.handle is not None and self.handle.is_alive()

    def kill(self) -> None:
        self.stop.set()


class JobRegistry:
    """Ordered collection of launched jobs.

    Only the orchestrator's own control flow adds or removes jobs; the small
    lock keeps snapshots consistent when callers poll from other threads.
    """

    def __init__(self) -> None:
        self._jobs: List[Job] = []
        self._lock = threading.Lock()

    def add(self, job: Job) -> None:
        with self._lock:
            self._jobs.append(job)

    def jobs(self) -> List[Job]:
        with self._lock:
            return list(self._jobs)

    def names(self) -> List[str]:
        return [job.name for job in self.jobs()]

    def get(self, name: str) -> Optional[Job]:
        for job in self.jobs():
            if job.name == name:
                return job
        return None

    def busy(self) -> bool:
        """``True`` while at least one tracked job is alive."""

        return any(job.alive() for job in self.jobs())

    def prune(self) -> List[Job]:
        """Forget jobs whose unit has terminated and return them."""

        finished: List[Job] = []
        running: List[Job] = []
        with self._lock:
            for job in self._jobs:
                (running if job.alive() else finished).append(job)
            self._jobs = running
        return finished

    def kill(self, name: str) -> bool:
        """Cancel the job called ``name`` and stop tracking it.

        Python threads cannot be stopped from outside: the job's stop event
        is set, phases that have not started yet are skipped and later
        result registrations are dropped, but a phase already running keeps
        its thread until it returns.
        """

        with self._lock:
            job = next((job for job in self._jobs if job.name == name), None)
            if job is None:
                return False
            self._jobs.remove(job)
        job.kill()
        return True

    def block(
        self,
        poll_interval: float,
        sink: DiagnosticSink,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Wait until every tracked job has terminated."""

        while True:
            remaining = self.names()
            if not remaining:
                return
            sink.debug(f"Waiting on the following ({len(remaining)}) plugins to finish:")
            sink.debug(", ".join(remaining))

            self.prune()
            if self.names():
                sleep(poll_interval)

    def __iter__(self) -> Iterator[Job]:
        return iter(self.jobs())

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


__all__ = ["Handle", "Job", "JobRegistry"]
