"""Launch-order policy for loaded plugins."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence


def run_order(names: Sequence[str], priority_of: Callable[[str], Optional[int]]) -> List[str]:
    """Return ``names`` in launch order.

    Plugins declaring a priority come first, lowest value first; plugins that
    share a priority keep their relative order in ``names``. Plugins without
    a priority follow, in the order they appear in ``names``.
    """

    buckets: Dict[int, List[str]] = {}
    unordered: List[str] = []
    for name in names:
        priority = priority_of(name)
        if priority is None:
            unordered.append(name)
        else:
            buckets.setdefault(priority, []).append(name)

    ordered: List[str] = []
    for priority in sorted(buckets):
        ordered.extend(buckets[priority])
    ordered.extend(unordered)
    return ordered


__all__ = ["run_order"]
