import pytest

from benq_projector import BenqProjectorError
from benq_projector.protocol import (
    CommandKind,
    CommandMeta,
    CommandTable,
    get_model,
    models,
)


def test_every_model_starts_with_power():
    assert len(models) > 0
    for model in models.values():
        first = next(iter(model.commands))
        assert first.code == "pow"
        assert first.name == "power"


def test_get_model_unknown_lists_known_models():
    with pytest.raises(BenqProjectorError) as exc_info:
        get_model("W9999")
    assert "W9999" in str(exc_info.value)
    assert "W1070" in str(exc_info.value)


def test_command_kinds():
    commands = get_model("W1070").commands
    assert commands.get("pow").kind == CommandKind.VALUE_QUERYABLE
    assert commands.get("menu").kind == CommandKind.ACTION_ONLY
    assert not commands.get("menu").is_queryable
    assert commands.get("ltim").is_query_only
    assert not commands.get("vol").is_query_only


def test_property_type_and_role():
    commands = get_model("W1070").commands
    assert commands.get("pow").property_type == "boolean"
    assert commands.get("pow").property_role == "media"
    assert commands.get("sour").property_type == "string"
    assert commands.get("vol").property_type == "string"
    assert commands.get("menu").property_role == "button"
    assert commands.get("ltim").property_role == "indicator"
    assert commands.get("ltim").property_type == "string"


def test_queryable_non_switch_commands_are_indicators():
    commands = get_model("W1070").commands
    for code in ("vol", "sour", "appmod", "ct", "ltim", "modelname"):
        assert commands.get(code).property_role == "indicator", code
    for code in ("pow", "mute", "blank", "3d", "3dinv"):
        assert commands.get(code).property_role == "media", code
    assert get_model("MX525").commands.get("audiosour").property_role == "media"


def test_validate_value():
    commands = get_model("W1070").commands
    sour = commands.get("sour")
    assert sour.validate_value("hdmi")
    assert sour.validate_value("?")
    assert not sour.validate_value("HDMI")
    assert not sour.validate_value("loud")
    assert commands.get("menu").validate_value("anything")


def test_table_rejects_duplicates():
    with pytest.raises(BenqProjectorError):
        CommandTable([CommandMeta("a", "alpha"), CommandMeta("a", "other")])
    with pytest.raises(BenqProjectorError):
        CommandTable([CommandMeta("a", "alpha"), CommandMeta("b", "alpha")])


def test_table_lookup_and_order():
    table = CommandTable([
        CommandMeta("pow", "power", "Power", {"on": "On", "off": "Off", "?": "Query"}),
        CommandMeta("menu", "menu"),
        CommandMeta("sour", "source", "Input source", {"hdmi": "HDMI", "?": "Query"}),
    ])
    assert [c.code for c in table] == ["pow", "menu", "sour"]
    assert table.codes == ["pow", "menu", "sour"]
    assert len(table) == 3
    assert "sour" in table
    assert "source" not in table
    assert table.get_by_name("source").code == "sour"
    assert table.resolve("source").code == "sour"
    assert table.resolve("pow").name == "power"
    assert table.resolve("nonexistent") is None


def test_description_defaults_to_name():
    meta = CommandMeta("menu", "menu")
    assert meta.description == "menu"
    assert meta.values is None
    assert meta.allowed_values == set()
