from __future__ import annotations

import pytest

from contracts import InvalidDescriptor, InvalidOptions, Plugin, describe, prep_options


class Configurable(Plugin):
    info = {
        "name": "Configurable",
        "priority": 2,
        "options": {
            "type": "object",
            "properties": {
                "depth": {"type": "integer", "minimum": 1, "default": 3},
                "tags": {"type": "array", "items": {"type": "string"}, "default": []},
                "label": {"type": "string"},
            },
            "required": ["depth"],
        },
    }
    dependencies = ["json"]

    def prepare(self) -> None:
        pass

    def run(self) -> None:
        pass


class Bare(Plugin):
    def run(self) -> None:
        pass


def test_describe_collects_metadata():
    descriptor = describe("sample/configurable", Configurable)
    assert descriptor.name == "sample/configurable"
    assert descriptor.priority == 2
    assert descriptor.dependencies == ("json",)
    assert descriptor.capabilities == frozenset({"prepare", "run"})
    assert descriptor.info["name"] == "Configurable"


def test_describe_defaults_name_to_class_name():
    descriptor = describe("bare", Bare)
    assert descriptor.info["name"] == "Bare"
    assert descriptor.priority is None
    assert descriptor.capabilities == frozenset({"run"})


def test_descriptor_info_is_read_only():
    descriptor = describe("bare", Bare)
    with pytest.raises(TypeError):
        descriptor.info["name"] = "other"  # type: ignore[index]


def test_describe_rejects_non_integer_priority():
    class BadPriority(Plugin):
        info = {"name": "bad", "priority": "high"}

        def run(self) -> None:
            pass

    with pytest.raises(InvalidDescriptor) as excinfo:
        describe("bad", BadPriority)
    assert [issue.path for issue in excinfo.value.issues] == ["$.priority"]


def test_describe_rejects_boolean_priority():
    class BoolPriority(Plugin):
        info = {"name": "bool", "priority": True}

        def run(self) -> None:
            pass

    with pytest.raises(InvalidDescriptor):
        describe("bool", BoolPriority)


def test_describe_requires_run():
    class NoRun(Plugin):
        info = {"name": "norun"}

    with pytest.raises(InvalidDescriptor) as excinfo:
        describe("norun", NoRun)
    assert excinfo.value.issues[0].code == "plugin.no_run"


def test_describe_rejects_string_dependencies():
    class StringDeps(Plugin):
        dependencies = "json"

        def run(self) -> None:
            pass

    with pytest.raises(InvalidDescriptor) as excinfo:
        describe("deps", StringDeps)
    assert excinfo.value.issues[0].code == "dependencies.invalid"


def test_describe_rejects_non_plugin():
    with pytest.raises(InvalidDescriptor):
        describe("object", object)


def test_describe_rejects_malformed_options_schema():
    class BadSchema(Plugin):
        info = {"name": "bad", "options": {"type": "not-a-type"}}

        def run(self) -> None:
            pass

    with pytest.raises(InvalidDescriptor) as excinfo:
        describe("bad", BadSchema)
    assert excinfo.value.issues[0].code == "options.bad_schema"


def test_prep_options_fills_defaults_and_drops_unknown():
    descriptor = describe("configurable", Configurable)
    options, dropped = prep_options(descriptor, {"label": "x", "colour": "red"})
    assert options == {"depth": 3, "tags": [], "label": "x"}
    assert dropped == ["colour"]


def test_prep_options_keeps_supplied_values():
    descriptor = describe("configurable", Configurable)
    options, dropped = prep_options(descriptor, {"depth": 7})
    assert options == {"depth": 7, "tags": []}
    assert dropped == []


def test_prep_options_defaults_are_copied():
    descriptor = describe("configurable", Configurable)
    first, _ = prep_options(descriptor, None)
    first["tags"].append("mutated")
    second, _ = prep_options(descriptor, None)
    assert second["tags"] == []


def test_prep_options_rejects_invalid_values():
    descriptor = describe("configurable", Configurable)
    with pytest.raises(InvalidOptions) as excinfo:
        prep_options(descriptor, {"depth": 0})
    assert excinfo.value.name == "configurable"
    assert excinfo.value.issues[0].path == "$.depth"


def test_prep_options_without_schema_yields_empty_options():
    descriptor = describe("bare", Bare)
    options, dropped = prep_options(descriptor, {"anything": 1})
    assert options == {}
    assert dropped == ["anything"]


def test_plugin_wait_returns_early_once_cancelled():
    plugin = Bare("bare")
    assert plugin.cancelled is False
    plugin.cancel()
    assert plugin.wait(5) is True
    assert plugin.cancelled is True


def test_register_results_without_manager_is_a_no_op():
    Bare("bare").register_results({"ignored": True})
