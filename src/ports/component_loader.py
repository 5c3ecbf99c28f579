"""Discovery and loading of plugin components from a directory tree."""

from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from pathlib import Path
from types import ModuleType
from typing import Dict, Iterable, Iterator, List, Type

from contracts.errors import PluginError
from contracts.plugin import Plugin, PluginDescriptor, describe

from ._loader import load_module, module_name_for, release_namespace

_LOGGER = logging.getLogger(__name__)

_WILDCARDS = set("*?[")


def _as_patterns(patterns: str | Iterable[str]) -> List[str]:
    if isinstance(patterns, str):
        return [patterns]
    return [str(pattern) for pattern in patterns]


def _plugin_class(module: ModuleType, name: str) -> Type[Plugin]:
    candidates = [
        value
        for value in vars(module).values()
        if isinstance(value, type)
        and issubclass(value, Plugin)
        and value is not Plugin
        and value.__module__ == module.__name__
    ]
    if len(candidates) != 1:
        raise PluginError(
            f"Plugin file '{name}' must define exactly one Plugin subclass, found {len(candidates)}"
        )
    return candidates[0]


class ComponentLoader:
    """Locate plugin files under ``directory`` and keep their descriptors.

    Plugin names are paths relative to ``directory`` without the ``.py``
    suffix, e.g. ``defaults/run_clock``. Loaded modules live in
    ``sys.modules`` under ``namespace`` until :meth:`clear` (or
    :func:`release_namespace`) drops them.
    """

    def __init__(self, directory: str | Path, namespace: str) -> None:
        self.directory = Path(directory)
        self.namespace = namespace
        self._descriptors: Dict[str, PluginDescriptor] = {}

    def available(self) -> List[str]:
        """Return every plugin name found on disk, sorted."""

        if not self.directory.is_dir():
            return []
        names: List[str] = []
        for path in sorted(self.directory.rglob("*.py")):
            relative = path.relative_to(self.directory)
            if any(part.startswith(("_", ".")) for part in relative.parts):
                continue
            names.append(relative.with_suffix("").as_posix())
        return names

    def parse(self, patterns: str | Iterable[str]) -> List[str]:
        """Expand shell-style ``patterns`` into plugin names.

        A pattern starting with ``-`` removes its matches from the selection.
        A pattern without wildcards that matches nothing raises
        :class:`PluginError`.
        """

        available = self.available()
        selected: List[str] = []
        excluded: set[str] = set()
        for pattern in _as_patterns(patterns):
            if pattern.startswith("-"):
                excluded.update(name for name in available if fnmatchcase(name, pattern[1:]))
                continue
            matches = [name for name in available if fnmatchcase(name, pattern)]
            if not matches and not _WILDCARDS.intersection(pattern):
                raise PluginError(f"Plugin '{pattern}' was not found in {self.directory}")
            for name in matches:
                if name not in selected:
                    selected.append(name)
        return [name for name in selected if name not in excluded]

    def load(self, patterns: str | Iterable[str]) -> List[str]:
        """Import every plugin matching ``patterns``; return the newly loaded names."""

        loaded: List[str] = []
        for name in self.parse(patterns):
            if name in self._descriptors:
                continue
            path = self.directory / f"{name}.py"
            try:
                module = load_module(self.namespace, name, path)
            except Exception as exc:
                raise PluginError(
                    f"Plugin '{name}' failed to import: {type(exc).__name__}: {exc}"
                ) from exc
            try:
                descriptor = describe(name, _plugin_class(module, name))
            except PluginError:
                release_namespace(module_name_for(self.namespace, name))
                raise
            self._descriptors[name] = descriptor
            loaded.append(name)
            _LOGGER.debug("Loaded plugin %s from %s", name, path)
        return loaded

    def register(self, name: str, plugin_class: Type[Plugin]) -> PluginDescriptor:
        """Add a plugin class that did not come from the plugin directory."""

        descriptor = describe(name, plugin_class)
        self._descriptors[name] = descriptor
        return descriptor

    def loaded(self) -> List[str]:
        """Loaded plugin names in discovery order."""

        return list(self._descriptors)

    def clear(self) -> None:
        """Forget every loaded plugin and release its modules."""

        self._descriptors.clear()
        release_namespace(self.namespace)

    def __getitem__(self, name: str) -> PluginDescriptor:
        return self._descriptors[name]

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)


__all__ = ["ComponentLoader", "release_namespace"]
