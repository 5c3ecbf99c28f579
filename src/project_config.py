"""Locate, load and cache the orchestrator's TOML configuration."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import-untyped]


_CONFIG_FILENAME = "config.toml"
CONFIG_ENV_VAR = "PLUGIN_ORCHESTRATOR_CONFIG"

_MISSING = object()


def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def config_path() -> Path:
    """The active configuration file.

    ``PLUGIN_ORCHESTRATOR_CONFIG`` selects another file; otherwise
    ``config.toml`` at the project root is used.
    """

    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return project_root() / _CONFIG_FILENAME


def config_dir() -> Path:
    """Directory that relative paths in the configuration are resolved against."""

    return config_path().parent


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """Load and cache the configuration as a dictionary.

    A missing default ``config.toml`` yields an empty configuration so the
    built-in defaults apply; a missing file named through
    ``PLUGIN_ORCHESTRATOR_CONFIG`` is an error.
    """
    path = config_path()
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        if CONFIG_ENV_VAR in os.environ:
            raise RuntimeError(
                f"Configuration file '{path}' named by {CONFIG_ENV_VAR} does not exist"
            ) from exc
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise RuntimeError(f"Configuration file '{path}' is not valid TOML: {exc}") from exc


def reload() -> None:
    """Drop the cached configuration so the next read hits the disk again."""

    get_config.cache_clear()


def get_section(path: str, default: Any = _MISSING) -> Any:
    """Retrieve a nested configuration value using dotted notation.

    Raises :class:`KeyError` when the path is absent and no ``default`` was
    given; ``None`` is an acceptable default.
    """

    data: Any = get_config()
    for part in path.split("."):
        if isinstance(data, dict) and part in data:
            data = data[part]
        elif default is not _MISSING:
            return default
        else:
            raise KeyError(f"Configuration path '{path}' not found")
    return data


__all__ = ["CONFIG_ENV_VAR", "config_dir", "config_path", "get_config", "get_section", "project_root", "reload"]
