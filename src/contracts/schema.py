"""JSON Schema helpers for plugin metadata and plugin options."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import jsonschema

from .errors import ValidationIssue, make_error

_VALIDATOR_CLS = jsonschema.Draft202012Validator

PLUGIN_INFO_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "plugin-orchestrator/plugin-info",
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "author": {"type": "string"},
        "version": {"type": "string"},
        "priority": {"type": "integer"},
        "options": {"type": "object"},
    },
    "required": ["name"],
}

_info_validator = _VALIDATOR_CLS(PLUGIN_INFO_SCHEMA)


def jsonschema_path(exc: jsonschema.ValidationError) -> str:
    """Render the location of *exc* as a ``$.a.b[0]`` style path."""

    path = list(exc.absolute_path)
    if not path:
        return "$"
    components: List[str] = ["$"]
    for part in path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def collect_issues(validator: Any, payload: Any, code: str) -> List[ValidationIssue]:
    """Run *validator* against *payload* and convert every error to an issue."""

    errors = sorted(validator.iter_errors(payload), key=lambda exc: list(exc.absolute_path))
    return [make_error(code, exc.message, jsonschema_path(exc)) for exc in errors]


def info_issues(info: Mapping[str, Any]) -> List[ValidationIssue]:
    """Validate a plugin ``info`` block, including its embedded options schema."""

    issues = collect_issues(_info_validator, dict(info), "info.invalid")
    options_schema = info.get("options")
    if isinstance(options_schema, dict):
        try:
            _VALIDATOR_CLS.check_schema(options_schema)
        except jsonschema.SchemaError as exc:
            issues.append(make_error("options.bad_schema", exc.message, "$.options"))
    return issues


def compile_options_schema(schema: Mapping[str, Any]) -> Any:
    """Build a validator for an options schema that already passed :func:`info_issues`."""

    return _VALIDATOR_CLS(dict(schema))


__all__ = [
    "PLUGIN_INFO_SCHEMA",
    "collect_issues",
    "compile_options_schema",
    "info_issues",
    "jsonschema_path",
]
