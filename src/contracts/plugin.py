"""Plugin base class and the read-only descriptor built from it."""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Type

from .errors import InvalidDescriptor, ValidationIssue, make_error
from .schema import info_issues

LIFECYCLE_HOOKS: Tuple[str, ...] = ("prepare", "run", "clean_up")


class Plugin:
    """Base class for every plugin.

    Subclasses describe themselves through two class attributes:

    ``info``
        Metadata merged into every result entry. Recognised keys are ``name``,
        ``description``, ``author``, ``version``, ``priority`` (integer, lower
        runs first) and ``options`` (a JSON Schema object describing the
        accepted options and their defaults).
    ``dependencies``
        Module names that must be importable before the plugin may run.

    The orchestrator instantiates the class once per run inside the thread
    that executes it, passing the plugin's loader name, its resolved options
    and the job's stop event, then calls :meth:`prepare`, :meth:`run` and
    :meth:`clean_up` from that same thread. Subclasses overriding
    ``__init__`` must forward keyword arguments to the base class.
    """

    info: Mapping[str, Any] = {}
    dependencies: Sequence[str] = ()

    def __init__(
        self,
        name: str,
        options: Mapping[str, Any] | None = None,
        *,
        manager: Any = None,
        stop: threading.Event | None = None,
    ) -> None:
        self.name = name
        self.options = dict(options or {})
        self.manager = manager
        self._stop = stop if stop is not None else threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def cancel(self) -> None:
        """Ask the plugin to stop; long-running bodies should poll :attr:`cancelled`."""

        self._stop.set()

    def wait(self, seconds: float) -> bool:
        """Sleep for up to ``seconds``; return ``True`` early if cancelled."""

        return self._stop.wait(seconds)

    def prepare(self) -> None:
        pass

    def run(self) -> None:
        raise NotImplementedError

    def clean_up(self) -> None:
        pass

    def register_results(self, results: Any) -> None:
        """Hand ``results`` to the owning manager, if any."""

        if self.manager is None:
            return
        self.manager.register_results(self, results)


@dataclass(frozen=True)
class PluginDescriptor:
    """Everything the orchestrator knows about a loaded plugin."""

    name: str
    plugin_class: Type[Plugin]
    info: Mapping[str, Any]
    dependencies: Tuple[str, ...]
    capabilities: FrozenSet[str]

    @property
    def priority(self) -> Optional[int]:
        value = self.info.get("priority")
        if value is None:
            return None
        return int(value)

    @property
    def options_schema(self) -> Optional[Mapping[str, Any]]:
        return self.info.get("options")

    def create(
        self,
        options: Mapping[str, Any],
        *,
        manager: Any = None,
        stop: Optional[threading.Event] = None,
    ) -> Plugin:
        return self.plugin_class(self.name, options, manager=manager, stop=stop)


def _capabilities(plugin_class: Type[Plugin]) -> FrozenSet[str]:
    return frozenset(
        hook for hook in LIFECYCLE_HOOKS if getattr(plugin_class, hook) is not getattr(Plugin, hook)
    )


def describe(name: str, plugin_class: Any) -> PluginDescriptor:
    """Validate ``plugin_class`` and build its :class:`PluginDescriptor`.

    Raises :class:`InvalidDescriptor` listing every problem found.
    """

    if not (isinstance(plugin_class, type) and issubclass(plugin_class, Plugin)):
        raise InvalidDescriptor(
            name, [make_error("plugin.bad_type", "plugin must subclass contracts.plugin.Plugin", "$")]
        )

    issues: List[ValidationIssue] = []
    raw_info = plugin_class.info
    if not isinstance(raw_info, Mapping):
        issues.append(make_error("info.invalid", "info must be a mapping", "$"))
        raw_info = {}
    info = {"name": plugin_class.__name__, **copy.deepcopy(dict(raw_info))}
    issues.extend(info_issues(info))

    raw_deps = plugin_class.dependencies
    if isinstance(raw_deps, str) or not all(isinstance(dep, str) and dep for dep in raw_deps):
        issues.append(
            make_error("dependencies.invalid", "dependencies must be a list of module names", "$.dependencies")
        )
        raw_deps = ()

    capabilities = _capabilities(plugin_class)
    if "run" not in capabilities:
        issues.append(make_error("plugin.no_run", "plugin does not implement run()", "$.run"))

    if issues:
        raise InvalidDescriptor(name, issues)

    return PluginDescriptor(
        name=name,
        plugin_class=plugin_class,
        info=MappingProxyType(info),
        dependencies=tuple(raw_deps),
        capabilities=capabilities,
    )


__all__ = ["LIFECYCLE_HOOKS", "Plugin", "PluginDescriptor", "describe"]
