"""Runtime settings resolved from ``config.toml``, the environment and CLI flags."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from project_config import config_dir, get_section

_DEF_DIRECTORY = "plugins"
_DEF_NAMESPACE = "orchestrator_plugins"
_DEF_DEFAULTS = ("defaults/*",)
_DEF_POLL_INTERVAL = 1.0
_DEF_SETTLE_DELAY = 1.0
_DEF_JOURNAL_DIR = "logs/plugins"
_DEF_JOURNAL_MAX_BYTES = 100 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    """Finalised orchestrator settings after precedence resolution."""

    directory: Path
    namespace: str
    defaults: Tuple[str, ...]
    poll_interval: float
    settle_delay: float
    journal_enabled: bool
    journal_dir: Path
    journal_max_bytes: int


def _merge_env(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    env: Dict[str, str] = {str(k): str(v) for k, v in os.environ.items()}
    if overrides:
        env.update({str(k): str(v) for k, v in overrides.items()})
    return env


def _coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in {"1", "true", "yes", "on"}:
            return True
        if normalised in {"0", "false", "no", "off"}:
            return False
    return None


def _coerce_seconds(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if seconds != seconds:  # NaN
        return None
    return max(0.0, seconds)


def _layered(env: Mapping[str, str], key: str) -> Optional[str]:
    for candidate in (f"CLI_PLUGINS_{key}", f"PLUGINS_{key}"):
        raw = env.get(candidate)
        if raw:
            return raw
    return None


def _resolve_seconds(section: Mapping[str, Any], env: Mapping[str, str], key: str, default: float) -> float:
    for candidate in (f"CLI_PLUGINS_{key}", f"PLUGINS_{key}"):
        value = _coerce_seconds(env.get(candidate))
        if value is not None:
            return value
    value = _coerce_seconds(section.get(key.lower()))
    return default if value is None else value


def _resolve_path(raw: str | Path) -> Path:
    path = Path(raw)
    if not path.is_absolute():
        path = config_dir() / path
    return path


def resolve_settings(env_overrides: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings`; ``CLI_`` keys beat ``PLUGINS_`` keys beat the TOML file."""

    env = _merge_env(env_overrides)
    plugins = get_section("PLUGINS", {})
    journal = get_section("JOURNAL", {})

    directory = _layered(env, "DIRECTORY") or plugins.get("directory", _DEF_DIRECTORY)
    namespace = _layered(env, "NAMESPACE") or plugins.get("namespace", _DEF_NAMESPACE)

    defaults_raw = plugins.get("defaults", list(_DEF_DEFAULTS))
    if isinstance(defaults_raw, str):
        defaults_raw = [defaults_raw]

    journal_enabled = _coerce_bool(journal.get("enabled"))
    override = _coerce_bool(_layered(env, "JOURNAL_ENABLED"))
    if override is not None:
        journal_enabled = override

    try:
        max_bytes = int(journal.get("max_bytes", _DEF_JOURNAL_MAX_BYTES))
    except (TypeError, ValueError):
        max_bytes = _DEF_JOURNAL_MAX_BYTES

    return Settings(
        directory=_resolve_path(directory),
        namespace=str(namespace),
        defaults=tuple(str(pattern) for pattern in defaults_raw),
        poll_interval=_resolve_seconds(plugins, env, "POLL_INTERVAL_S", _DEF_POLL_INTERVAL),
        settle_delay=_resolve_seconds(plugins, env, "SETTLE_DELAY_S", _DEF_SETTLE_DELAY),
        journal_enabled=bool(journal_enabled),
        journal_dir=_resolve_path(_layered(env, "JOURNAL_DIR") or journal.get("directory", _DEF_JOURNAL_DIR)),
        journal_max_bytes=max(1, max_bytes),
    )


__all__ = ["Settings", "resolve_settings"]
