"""Plugin manager: dependency gate, priority scheduling and one thread per plugin."""

from __future__ import annotations

import argparse
import json
import logging
import time
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from contracts.errors import PluginError, UnsatisfiedDependency
from contracts.options import prep_options
from contracts.plugin import Plugin
from ports import ComponentLoader

from . import dependencies, log
from .diagnostics import DiagnosticSink, LoggingSink
from .executor import Executor, ThreadExecutor
from .jobs import Job, JobRegistry
from .results import ResultRegistry
from .scheduler import run_order
from .settings import Settings, resolve_settings

DEFAULT_PATTERNS: Tuple[str, ...] = ("defaults/*",)
_DEFAULT_POLL_INTERVAL = 1.0
_DEFAULT_SETTLE_DELAY = 1.0

OptionsByName = Mapping[str, Mapping[str, Any]]


class PluginManager:
    """Load plugins, run each in its own thread and collect their results.

    ``results`` is the shared :class:`ResultRegistry`; several managers may be
    given the same registry. ``options`` maps plugin names to the options used
    when :meth:`run` is called without explicit ones.
    """

    def __init__(
        self,
        loader: ComponentLoader,
        results: ResultRegistry,
        *,
        options: OptionsByName | None = None,
        executor: Executor | None = None,
        sink: DiagnosticSink | None = None,
        default_patterns: Sequence[str] = DEFAULT_PATTERNS,
        poll_interval: float = _DEFAULT_POLL_INTERVAL,
        settle_delay: float = _DEFAULT_SETTLE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.loader = loader
        self.options: Dict[str, Mapping[str, Any]] = dict(options or {})
        self.executor = executor or ThreadExecutor()
        self.sink = sink or LoggingSink()
        self.default_patterns = tuple(default_patterns)
        self.poll_interval = poll_interval
        self.settle_delay = settle_delay
        self._results = results
        self._jobs = JobRegistry()
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        results: ResultRegistry | None = None,
        **kwargs: Any,
    ) -> "PluginManager":
        """Build a manager wired from :func:`resolve_settings`."""

        settings = settings or resolve_settings()
        if settings.journal_enabled:
            log.configure(settings.journal_dir, max_bytes=settings.journal_max_bytes)
        loader = ComponentLoader(settings.directory, settings.namespace)
        return cls(
            loader,
            results if results is not None else ResultRegistry(settings.namespace),
            default_patterns=settings.defaults,
            poll_interval=settings.poll_interval,
            settle_delay=settings.settle_delay,
            **kwargs,
        )

    # -- loading ---------------------------------------------------------

    def load(self, patterns: str | Iterable[str]) -> List[str]:
        return self.loader.load(patterns)

    def load_defaults(self) -> List[str]:
        """Load the plugins matched by :attr:`default_patterns`."""

        return self.loader.load(self.default_patterns)

    def defaults(self) -> List[str]:
        """Names of the default plugins, without loading them."""

        return self.loader.parse(self.default_patterns)

    # -- running ---------------------------------------------------------

    def _report_unsatisfied(self, report: dependencies.DependencyReport) -> None:
        self.sink.error(f"[{report.name}] The following plugin dependencies aren't satisfied:")
        for module_name in report.missing:
            self.sink.error(f"\t* {module_name}")
        self.sink.error("Try installing them by running:")
        self.sink.error(f"\t{report.hint}")

    def run(self, options: OptionsByName | None = None) -> List[str]:
        """Launch every loaded plugin and return the launched names in order.

        The first plugin whose dependencies are missing aborts the call with
        :class:`UnsatisfiedDependency`; plugins scheduled after it are not
        launched, plugins launched before it keep running. Invalid options
        abort the same way with :class:`InvalidOptions`. Plugins are constructed
        inside their execution unit, so a failing constructor is reported like
        any other plugin failure.
        """

        options = self.options if options is None else options
        self._jobs.prune()

        launched: List[str] = []
        for name in run_order(self.loader.loaded(), lambda name: self.loader[name].priority):
            descriptor = self.loader[name]

            report = dependencies.check(descriptor)
            if not report.satisfied:
                self._report_unsatisfied(report)
                raise UnsatisfiedDependency(name, report.missing)

            if self._jobs.get(name) is not None:
                self.sink.warn(f"[{name}] Still running from a previous run, not launching it again.")
                continue

            plugin_options, dropped = prep_options(descriptor, options.get(name))
            if dropped:
                self.sink.debug(f"[{name}] Ignoring unknown options: {', '.join(dropped)}")

            job = Job(name=name)
            factory = partial(descriptor.create, plugin_options, manager=self)
            job.handle = self.executor.launch(job, factory, self.sink)
            self._jobs.add(job)
            launched.append(name)

        if not launched:
            return launched

        self.sink.status("Waiting for plugins to settle...")
        if self.settle_delay > 0:
            self._sleep(self.settle_delay)
        return launched

    def block(self) -> None:
        """Block until every plugin job has finished."""

        self._jobs.block(self.poll_interval, self.sink, sleep=self._sleep)

    def busy(self) -> bool:
        return self._jobs.busy()

    def job_names(self) -> List[str]:
        return self._jobs.names()

    def jobs(self) -> List[Job]:
        return self._jobs.jobs()

    def get(self, name: str) -> Optional[Job]:
        return self._jobs.get(name)

    def kill(self, name: str) -> bool:
        """Stop tracking the job ``name`` and cancel its plugin."""

        if not self._jobs.kill(name):
            return False
        self.sink.status(f"[{name}] Killed.")
        log.append_event({"event": "plugin_killed", "plugin": name})
        return True

    # -- results ---------------------------------------------------------

    def register_results(self, plugin: Plugin, results: Any) -> None:
        """Store ``results`` for ``plugin`` merged with its ``info``.

        Silently ignored when the plugin is not loaded here or was killed.
        """

        def resolve() -> Optional[Tuple[str, Mapping[str, Any]]]:
            name = getattr(plugin, "name", None)
            if plugin.cancelled or name not in self.loader:
                return None
            descriptor = self.loader[name]
            if not isinstance(plugin, descriptor.plugin_class):
                return None
            return name, descriptor.info

        stored = self._results.resolve_and_register(resolve, results)
        if stored is not None:
            log.append_event({"event": "results_registered", "plugin": stored})

    def results(self) -> Dict[str, Dict[str, Any]]:
        return self._results.all()

    def reset(self) -> None:
        """Clear all results and unload every plugin."""

        self._results.reset()
        self.loader.clear()


def _parse_option(raw: str) -> Tuple[str, str, Any]:
    target, sep, value = raw.partition("=")
    name, dot, key = target.rpartition(".")
    if not sep or not dot or not name or not key:
        raise ValueError(f"Options must look like NAME.KEY=VALUE, got {raw!r}")
    try:
        parsed: Any = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    return name, key, parsed


def _collect_options(raw_options: Sequence[str]) -> Dict[str, Dict[str, Any]]:
    options: Dict[str, Dict[str, Any]] = {}
    for raw in raw_options:
        name, key, value = _parse_option(raw)
        options.setdefault(name, {})[key] = value
    return options


def _cli_overrides(args: argparse.Namespace) -> Dict[str, str]:
    payload: Dict[str, str] = {}
    if args.plugin_dir:
        payload["CLI_PLUGINS_DIRECTORY"] = args.plugin_dir
    if args.settle_delay is not None:
        payload["CLI_PLUGINS_SETTLE_DELAY_S"] = str(args.settle_delay)
    if args.poll_interval is not None:
        payload["CLI_PLUGINS_POLL_INTERVAL_S"] = str(args.poll_interval)
    if args.journal_dir:
        payload["CLI_PLUGINS_JOURNAL_ENABLED"] = "1"
        payload["CLI_PLUGINS_JOURNAL_DIR"] = args.journal_dir
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Load plugins, run them concurrently and print their results as JSON.",
    )
    parser.add_argument(
        "--plugin-dir",
        help="Directory holding plugin files. Overrides config and environment.",
    )
    parser.add_argument(
        "--plugins",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Plugin name or shell-style pattern to load; prefix with '-' to exclude. Repeatable.",
    )
    parser.add_argument(
        "--defaults",
        action="store_true",
        help="Load the default plugins as well (implied when --plugins is not given).",
    )
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="NAME.KEY=VALUE",
        help="Option for a plugin; VALUE is parsed as JSON when possible. Repeatable.",
    )
    parser.add_argument(
        "--settle-delay",
        type=float,
        help="Seconds to pause after launching plugins.",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        help="Seconds between liveness checks while waiting for plugins.",
    )
    parser.add_argument(
        "--journal-dir",
        help="Write JSONL lifecycle events below this directory.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug diagnostics.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = _collect_options(args.option)
    except ValueError as exc:
        parser.error(str(exc))

    manager = PluginManager.from_settings(resolve_settings(_cli_overrides(args)))
    try:
        if args.defaults or not args.plugins:
            manager.load_defaults()
        if args.plugins:
            manager.load(args.plugins)
        manager.run(options)
    except PluginError as exc:
        parser.error(str(exc))

    manager.block()
    print(json.dumps(manager.results(), indent=2, sort_keys=True, default=str))
    return 0


__all__ = ["DEFAULT_PATTERNS", "PluginManager", "build_parser", "main"]


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
