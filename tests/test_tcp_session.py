import asyncio
import errno
import socket

from benq_projector.client import (
    BenqProjectorClientConfig,
    ConnectionState,
    SessionContext,
    TcpBenqProjectorSession,
    is_fatal_socket_error,
)
from benq_projector.emulator import BenqProjectorEmulator
from benq_projector.protocol import BenqCommand

from .conftest import wait_until


def fast_config(port, **kwargs):
    return BenqProjectorClientConfig(
        "127.0.0.1",
        port,
        "W1070",
        connect_timeout_secs=2.0,
        reconnect_delay_secs=0.05,
        poll_interval_secs=0.05,
        **kwargs,
    )


class SessionEvents:
    def __init__(self):
        self.data = []
        self.changes = []

    def on_data(self, data):
        self.data.append(data)

    def on_connection_change(self, connected):
        self.changes.append(connected)


def unused_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def test_is_fatal_socket_error():
    assert is_fatal_socket_error(ConnectionRefusedError())
    assert is_fatal_socket_error(TimeoutError())
    assert is_fatal_socket_error(socket.gaierror())
    assert is_fatal_socket_error(OSError(errno.EHOSTUNREACH, "unreachable"))
    assert not is_fatal_socket_error(ConnectionResetError())
    assert not is_fatal_socket_error(ValueError())


def test_write_without_connection(loop, context):
    events = SessionEvents()
    session = TcpBenqProjectorSession(context, fast_config(23), events.on_data, events.on_connection_change)
    assert not session.write(b"\r")
    assert not session.send(BenqCommand.query("vol"))
    assert len(context.pending) == 0


def test_unload_is_idempotent(loop, context):
    events = SessionEvents()
    session = TcpBenqProjectorSession(context, fast_config(23), events.on_data, events.on_connection_change)
    session.unload()
    session.unload()
    assert session.is_unloaded
    assert events.changes == [False]
    assert context.connection_state == ConnectionState.DISCONNECTED


def test_reconnect_timer_cancelled_by_unload(loop, context):
    events = SessionEvents()
    session = TcpBenqProjectorSession(context, fast_config(23), events.on_data, events.on_connection_change)
    context.gate.open_all()
    session.reconnect(1.0)
    assert not context.gate.can_send.is_open
    assert len(loop.pending) == 1
    session.unload()
    assert loop.pending == []
    session.reconnect()
    assert loop.pending == []


def test_connects_and_polls():
    async def run():
        async with BenqProjectorEmulator(port=0) as emulator:
            context = SessionContext(asyncio.get_running_loop())
            events = SessionEvents()
            session = TcpBenqProjectorSession(
                context, fast_config(emulator.port), events.on_data, events.on_connection_change)
            session.start()
            try:
                await wait_until(lambda: events.changes == [True], what="connect")
                assert context.is_connected
                assert context.gate.can_send.is_open
                assert context.gate.can_auto_query.is_open
                await wait_until(lambda: "*vol=?#" in emulator.received, what="poll")
                await wait_until(lambda: b"".join(events.data).count(b"*vol=5#") > 0, what="reply")
            finally:
                session.unload()
            assert events.changes[-1] is False
            assert not context.is_connected

    asyncio.run(run())


def test_poll_suppressed_while_gate_closed():
    async def run():
        async with BenqProjectorEmulator(port=0) as emulator:
            context = SessionContext(asyncio.get_running_loop())
            events = SessionEvents()
            session = TcpBenqProjectorSession(
                context, fast_config(emulator.port), events.on_data, events.on_connection_change)
            session.start()
            try:
                await wait_until(lambda: context.is_connected, what="connect")
                context.gate.can_send.close()
                received = len(emulator.received)
                await asyncio.sleep(0.3)
                assert len(emulator.received) <= received + 1
                context.gate.can_send.open()
                await wait_until(lambda: len(emulator.received) > received + 1, what="poll")
            finally:
                session.unload()

    asyncio.run(run())


def test_reconnects_after_drop():
    async def run():
        async with BenqProjectorEmulator(port=0) as emulator:
            context = SessionContext(asyncio.get_running_loop())
            events = SessionEvents()
            session = TcpBenqProjectorSession(
                context, fast_config(emulator.port), events.on_data, events.on_connection_change)
            session.start()
            try:
                await wait_until(lambda: events.changes == [True], what="connect")
                context.device_state["pow"] = True
                context.pending.add("vol", 0.0, 100.0)
                emulator.drop_sessions()
                await wait_until(lambda: events.changes == [True, False, True], what="reconnect")
                assert context.device_state == {}
                assert context.is_connected
            finally:
                session.unload()

    asyncio.run(run())


def test_connection_refused_retries_until_unloaded():
    async def run():
        context = SessionContext(asyncio.get_running_loop())
        events = SessionEvents()
        session = TcpBenqProjectorSession(
            context, fast_config(unused_port()), events.on_data, events.on_connection_change)
        session.start()
        try:
            await wait_until(lambda: len(events.changes) >= 2, what="retries")
            assert True not in events.changes
            assert not context.is_connected
        finally:
            session.unload()
        count = len(events.changes)
        await asyncio.sleep(0.2)
        assert len(events.changes) == count

    asyncio.run(run())
