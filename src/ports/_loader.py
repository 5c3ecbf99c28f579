"""Helpers for importing plugin modules from arbitrary file paths."""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import List


def module_name_for(namespace: str, plugin_name: str) -> str:
    """Return the ``sys.modules`` key used for ``plugin_name``."""

    dotted = plugin_name.replace("/", ".").replace("-", "_")
    return f"{namespace}.{dotted}"


def load_module(namespace: str, plugin_name: str, module_path: Path) -> ModuleType:
    """Import ``module_path`` under ``namespace`` and register it in ``sys.modules``.

    A module already registered under the same key is returned as-is.
    """

    module_name = module_name_for(namespace, plugin_name)
    cached = sys.modules.get(module_name)
    if cached is not None:
        return cached

    spec = importlib.util.spec_from_file_location(module_name, module_path.resolve())
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load module from {module_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def release_namespace(namespace: str) -> List[str]:
    """Drop every module registered under ``namespace``; return their names."""

    prefix = f"{namespace}."
    released = [name for name in list(sys.modules) if name == namespace or name.startswith(prefix)]
    for name in released:
        sys.modules.pop(name, None)
    return released


__all__ = ["load_module", "module_name_for", "release_namespace"]
