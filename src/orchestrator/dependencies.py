"""Check that the modules a plugin depends on can be imported."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import List, Tuple

from contracts.plugin import PluginDescriptor

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyReport:
    """Outcome of checking one plugin's dependencies."""

    name: str
    missing: Tuple[str, ...] = ()

    @property
    def satisfied(self) -> bool:
        return not self.missing

    @property
    def hint(self) -> str:
        return f"pip install {' '.join(self.missing)}"


def check(descriptor: PluginDescriptor) -> DependencyReport:
    """Import each declared dependency and report the ones that fail.

    Successful imports stay in ``sys.modules`` for the rest of the process.
    Nothing is ever installed.
    """

    missing: List[str] = []
    for module_name in descriptor.dependencies:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            _LOGGER.debug("Dependency %s of %s is not importable: %s", module_name, descriptor.name, exc)
            missing.append(module_name)
    return DependencyReport(name=descriptor.name, missing=tuple(missing))


__all__ = ["DependencyReport", "check"]
