import logging

import pytest

from benq_projector.client import (
    BenqProjectorClientConfig,
    CommandDispatcher,
    ConnectionState,
    normalize_write_value,
)

from .conftest import WriteRecorder


@pytest.fixture
def writes():
    return WriteRecorder()


@pytest.fixture
def dispatcher(connected_context, commands, writes, config):
    return CommandDispatcher(connected_context, commands, writes, config)


def gates_open(context):
    return context.gate.can_send.is_open, context.gate.can_auto_query.is_open


def test_normalize_write_value():
    assert normalize_write_value(True) == ["on"]
    assert normalize_write_value("true") == ["on"]
    assert normalize_write_value(False) == ["off"]
    assert normalize_write_value("false") == ["off"]
    assert normalize_write_value("hdmi") == ["hdmi"]
    assert normalize_write_value(5) == ["5"]
    assert normalize_write_value(["a", 1]) == ["a", "1"]


def test_power_on(dispatcher, writes, connected_context, loop):
    assert dispatcher.dispatch("power", True)
    assert writes.data == [b"\r*pow=on#\r", b"\r*pow=on#\r"]
    assert gates_open(connected_context) == (False, False)
    loop.advance(19.9)
    assert gates_open(connected_context) == (False, False)
    loop.advance(0.1)
    assert gates_open(connected_context) == (True, True)


def test_power_off(dispatcher, writes, connected_context, loop):
    assert dispatcher.dispatch("power", False)
    assert writes.data == [b"\r*pow=off#\r", b"\r*pow=off#\r"]
    loop.advance(119.0)
    assert gates_open(connected_context) == (False, False)
    loop.advance(1.0)
    assert gates_open(connected_context) == (True, True)


def test_other_command_settles_briefly(dispatcher, writes, connected_context, loop):
    assert dispatcher.dispatch("source", "hdmi")
    assert writes.data == [b"\r*sour=hdmi#\r", b"\r*sour=hdmi#\r"]
    assert gates_open(connected_context) == (False, False)
    loop.advance(5.0)
    assert gates_open(connected_context) == (True, True)


def test_bare_code_accepted(dispatcher, writes):
    assert dispatcher.dispatch("pow", "on")
    assert writes.data == [b"\r*pow=on#\r", b"\r*pow=on#\r"]


def test_action_command(dispatcher, writes):
    assert dispatcher.dispatch("menu", True)
    assert writes.data == [b"\r*menu#\r", b"\r*menu#\r"]


def test_invalid_value_not_sent(dispatcher, writes, caplog):
    with caplog.at_level(logging.ERROR, logger="benq_projector"):
        assert not dispatcher.dispatch("mute", "loud")
    assert writes.data == []
    assert "*mute=loud#" in caplog.text


def test_command_built_from_metadata(dispatcher, writes):
    assert dispatcher.dispatch("source", "?")
    assert writes.data == [b"\r*sour=?#\r", b"\r*sour=?#\r"]
    assert not dispatcher.dispatch("source", ["hdmi", "rgb"])
    assert not dispatcher.dispatch("source", "hd#mi")
    assert len(writes.data) == 2


def test_unknown_property_not_sent(dispatcher, writes, connected_context, caplog):
    with caplog.at_level(logging.ERROR, logger="benq_projector"):
        assert not dispatcher.dispatch("warp_drive", True)
    assert writes.data == []
    assert "warp_drive" in caplog.text
    assert gates_open(connected_context) == (True, True)


def test_not_connected(dispatcher, writes, connected_context):
    connected_context.connection_state = ConnectionState.DISCONNECTED
    assert not dispatcher.dispatch("power", True)
    assert writes.data == []


def test_write_failure(connected_context, commands, config):
    writes = WriteRecorder(result=False)
    dispatcher = CommandDispatcher(connected_context, commands, writes, config)
    assert not dispatcher.dispatch("power", True)
    assert len(writes.data) == 1


def test_acknowledged_writes_ignored(dispatcher, writes):
    dispatcher.on_property_write("power", True, True)
    assert writes.data == []


def test_user_write_dispatched(dispatcher, writes):
    dispatcher.on_property_write("benq.0.mute", True, False)
    assert writes.data == [b"\r*mute=on#\r", b"\r*mute=on#\r"]


def test_registry_write_reaches_dispatcher(dispatcher, writes, registry, commands):
    registry.subscribe(dispatcher.on_property_write)
    registry.ensure_property(commands.get("sour"))
    registry.set_value("source", "hdmi", ack=True)
    assert writes.data == []
    registry.write("source", "rgb")
    assert writes.data == [b"\r*sour=rgb#\r", b"\r*sour=rgb#\r"]


def test_require_power_on(connected_context, commands, writes):
    config = BenqProjectorClientConfig(model="W1070", require_power_on=True)
    dispatcher = CommandDispatcher(connected_context, commands, writes, config)
    assert not dispatcher.dispatch("source", "hdmi")
    assert writes.data == []
    assert dispatcher.dispatch("power", True)
    assert len(writes.data) == 2
    connected_context.device_state["pow"] = True
    assert dispatcher.dispatch("source", "hdmi")
    assert len(writes.data) == 4
