import pytest

from benq_projector import CONNECTION_PROPERTY
from benq_projector.client import InMemoryPropertyRegistry, PropertyInfo


def test_ensure_property_uses_command_metadata(registry, commands):
    registry.ensure_property(commands.get("pow"))
    registry.ensure_property(commands.get("ltim"))
    registry.ensure_property(commands.get("menu"))
    power = registry.get("power")
    assert (power.type, power.role, power.description) == ("boolean", "media", "Power")
    assert registry.get("lamp_hours").role == "indicator"
    assert registry.get("menu").role == "button"


def test_ensure_property_keeps_value(registry, commands):
    registry.ensure_property(commands.get("pow"))
    registry.set_value("power", True)
    registry.ensure_property(commands.get("pow"))
    assert registry.get("power").value is True


def test_set_value_notifies(registry, recorder):
    registry.set_value("anything", "x", ack=True)
    assert recorder.writes == [("anything", "x", True)]
    assert registry.get("anything").value == "x"


def test_write_is_unacknowledged(registry, recorder, commands):
    registry.ensure_property(commands.get("mute"))
    registry.write("mute", True)
    assert recorder.writes == [("mute", True, False)]
    assert registry.get("mute").ack is False


def test_write_unknown_raises(registry):
    with pytest.raises(KeyError):
        registry.write("nope", True)


def test_set_connected(registry, recorder):
    registry.set_connected(True)
    assert registry.connected
    assert recorder.writes == [(CONNECTION_PROPERTY, True, True)]


def test_failing_subscriber_does_not_stop_others():
    def broken(name, value, ack):
        raise RuntimeError("boom")

    seen = []
    registry = InMemoryPropertyRegistry()
    registry.subscribe(broken)
    registry.subscribe(lambda name, value, ack: seen.append((name, value, ack)))
    registry.set_value("x", 1)
    assert seen == [("x", 1, True)]
    assert registry.get("x").value == 1


def test_to_jsonable():
    info = PropertyInfo("power", "Power", "boolean", "media")
    info.value = True
    assert info.to_jsonable() == {
        "name": "power",
        "description": "Power",
        "type": "boolean",
        "role": "media",
        "value": True,
        "ack": True,
    }
