"""Resolve the options a plugin is instantiated with."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Tuple

from .errors import InvalidOptions
from .plugin import PluginDescriptor
from .schema import collect_issues, compile_options_schema


def prep_options(
    descriptor: PluginDescriptor,
    supplied: Mapping[str, Any] | None,
) -> Tuple[Dict[str, Any], List[str]]:
    """Merge ``supplied`` against the plugin's declared options schema.

    Keys the schema does not declare are dropped, missing keys take the
    declared ``default`` and the merged mapping is validated. Returns the
    options together with the names of the dropped keys.

    Raises :class:`InvalidOptions` when the merged options violate the schema.
    """

    supplied = dict(supplied or {})
    schema = descriptor.options_schema
    if not schema:
        return {}, sorted(supplied)

    properties = schema.get("properties", {})
    resolved: Dict[str, Any] = {}
    for key, prop in properties.items():
        if key in supplied:
            resolved[key] = supplied[key]
        elif isinstance(prop, Mapping) and "default" in prop:
            resolved[key] = copy.deepcopy(prop["default"])

    dropped = sorted(key for key in supplied if key not in properties)

    issues = collect_issues(compile_options_schema(schema), resolved, "options.invalid")
    if issues:
        raise InvalidOptions(descriptor.name, issues)
    return resolved, dropped


__all__ = ["prep_options"]
