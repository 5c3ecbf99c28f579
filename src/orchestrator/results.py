"""Lock-protected store of plugin results shared across orchestration runs."""

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple

from ports import release_namespace

Resolver = Callable[[], Optional[Tuple[str, Mapping[str, Any]]]]


class ResultRegistry:
    """Map plugin names to ``{"results": payload, **info}`` entries.

    Build one registry and hand it to every :class:`PluginManager` that should
    share results; entries survive between runs until :meth:`reset`.
    ``namespace`` names the module namespace the plugins were imported under,
    released again by :meth:`reset`.

    Payloads are deep-copied on the way in and on the way out, so neither the
    registering plugin nor any reader shares mutable state with the registry.
    A payload that cannot be deep-copied fails the registration.
    """

    def __init__(self, namespace: str | None = None) -> None:
        self.namespace = namespace
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _store(self, name: str, results: Any, info: Mapping[str, Any]) -> None:
        self._entries[name] = {
            "results": copy.deepcopy(results),
            **copy.deepcopy(dict(info)),
        }

    def register(self, name: str, results: Any, info: Mapping[str, Any]) -> None:
        with self._lock:
            self._store(name, results, info)

    def resolve_and_register(self, resolve: Resolver, results: Any) -> Optional[str]:
        """Call ``resolve`` and store ``results`` in the same critical section.

        ``resolve`` returns the plugin name and its info, or ``None`` when the
        caller is unknown, in which case nothing is stored. Returns the name
        the entry was stored under.
        """

        with self._lock:
            resolved = resolve()
            if resolved is None:
                return None
            name, info = resolved
            self._store(name, results, info)
            return name

    def all(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of every entry; mutating it does not touch the registry."""

        with self._lock:
            return copy.deepcopy(self._entries)

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(name)
            return copy.deepcopy(entry) if entry is not None else None

    def reset(self) -> None:
        """Drop every entry and release the plugin modules under ``namespace``."""

        with self._lock:
            self._entries.clear()
            if self.namespace:
                release_namespace(self.namespace)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.all())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["ResultRegistry"]
