#!/usr/bin/env python3
"""Smoke-test the default plugins through two managers sharing one registry."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from orchestrator import PluginManager, ResultRegistry, resolve_settings


def _run_batch(results: ResultRegistry) -> list[str]:
    manager = PluginManager.from_settings(
        resolve_settings({"CLI_PLUGINS_SETTLE_DELAY_S": "0", "CLI_PLUGINS_POLL_INTERVAL_S": "0.05"}),
        results=results,
    )
    manager.load_defaults()
    launched = manager.run()
    manager.block()
    if manager.busy() or manager.job_names():
        print(f"jobs still tracked after block(): {manager.job_names()}")
    return launched


def main() -> int:
    settings = resolve_settings()
    results = ResultRegistry(settings.namespace)

    first = _run_batch(results)
    second = _run_batch(results)
    if first != second:
        print(f"launch order changed between runs: {first} vs {second}")
        return 1

    missing = sorted(set(first) - set(results.all()))
    if missing:
        print(f"plugins finished without results: {', '.join(missing)}")
        return 1

    results.reset()
    if results.all():
        print("reset() left results behind")
        return 1

    print(f"smoke ok: {', '.join(first)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
