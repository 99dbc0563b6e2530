# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
BenQ Projector TCP/IP session.

Maintains a single persistent TCP connection to the projector: connects,
polls to keep the link alive, and reconnects after a fixed delay whenever the
connection fails or drops, for as long as the session is loaded.

All socket activity is event driven on the asyncio loop. Handlers run one at a
time, so session state needs no locking.
"""

from __future__ import annotations

import asyncio
import errno
import socket

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import BenqCommand
from .client_config import BenqProjectorClientConfig
from .context import SessionContext, ConnectionState

_fatal_errnos = (errno.ECONNREFUSED, errno.ETIMEDOUT, errno.EHOSTUNREACH, errno.ENETUNREACH)

def is_fatal_socket_error(exc: BaseException) -> bool:
    """True for address resolution, connection refused and timeout errors, after which
       the socket is torn down immediately."""
    if isinstance(exc, (socket.gaierror, ConnectionRefusedError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in _fatal_errnos

class _BenqLineProtocol(asyncio.Protocol):
    """Forwards socket events for one connection to its session."""
    session: TcpBenqProjectorSession
    transport: Optional[asyncio.Transport] = None

    def __init__(self, session: TcpBenqProjectorSession):
        self.session = session

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        assert isinstance(transport, asyncio.Transport)
        self.transport = transport

    def data_received(self, data: bytes) -> None:
        self.session._on_data_received(self, data)

    def eof_received(self) -> Optional[bool]:
        # Let the transport close itself
        return None

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self.session._on_connection_lost(self, exc)

class TcpBenqProjectorSession:
    """BenQ Projector TCP/IP session manager."""

    context: SessionContext
    config: BenqProjectorClientConfig
    on_data: Callable[[bytes], Any]
    """Called with every chunk of bytes received."""
    on_connection_change: Callable[[bool], Any]
    """Called with True on connect, and with False on disconnect or a failed connection attempt."""

    _protocol: Optional[_BenqLineProtocol] = None
    _poll_timer: Optional[asyncio.TimerHandle] = None
    _reconnect_timer: Optional[asyncio.TimerHandle] = None
    _connect_task: Optional[asyncio.Task[None]] = None
    _unloaded: bool = False

    def __init__(
            self,
            context: SessionContext,
            config: BenqProjectorClientConfig,
            on_data: Callable[[bytes], Any],
            on_connection_change: Callable[[bool], Any],
          ) -> None:
        self.context = context
        self.config = config
        self.on_data = on_data
        self.on_connection_change = on_connection_change

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self.context.loop

    @property
    def is_connected(self) -> bool:
        return self.context.is_connected

    @property
    def is_unloaded(self) -> bool:
        return self._unloaded

    @property
    def transport(self) -> Optional[asyncio.Transport]:
        return None if self._protocol is None else self._protocol.transport

    def start(self) -> None:
        """Starts connecting in the background."""
        self._spawn_connect()

    async def connect(self) -> None:
        """Opens the connection to the projector.

        Does not raise on failure; a failed attempt is logged, published as a
        disconnect, and followed by a reconnect after the reconnect delay.
        """
        if self._unloaded:
            return
        self._cancel_poll_timer()
        self._cancel_reconnect_timer()
        if self._drop_transport():
            self._mark_disconnected()
        self.context.connection_state = ConnectionState.CONNECTING
        host = self.config.host
        port = self.config.port
        logger.debug(f"Connecting to projector at {host}:{port}")
        protocol = _BenqLineProtocol(self)
        self._protocol = protocol
        try:
            transport, _ = await asyncio.wait_for(
                self.loop.create_connection(lambda: protocol, host, port),
                self.config.connect_timeout_secs,
              )
        except asyncio.CancelledError:
            if self._protocol is protocol:
                self._protocol = None
            raise
        except Exception as e:
            if self._protocol is protocol:
                self._protocol = None
                self.on_error(e)
                self._on_close()
            return

        if self._protocol is not protocol or self._unloaded:
            # superseded while connecting
            transport.abort()
            return
        self._on_connected()

    def _spawn_connect(self) -> None:
        if self._unloaded:
            return
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        self._connect_task = self.loop.create_task(self.connect())

    def _on_connected(self) -> None:
        self.context.connection_state = ConnectionState.CONNECTED
        logger.info(f"{self}: Connected")
        self.context.gate.open_all()
        self._restart_poll_timer()
        self.on_connection_change(True)

    def on_error(self, exc: BaseException) -> None:
        """Handles a socket error. Connection-class errors tear the socket down at once;
           others wait for the close that follows."""
        logger.error(f"{self}: Socket error: {exc!r}")
        if is_fatal_socket_error(exc):
            transport = self.transport
            if transport is not None:
                transport.abort()

    def _on_data_received(self, protocol: _BenqLineProtocol, data: bytes) -> None:
        if protocol is not self._protocol:
            return
        logger.debug(f"Received: {data!r}")
        self.on_data(data)

    def _on_connection_lost(self, protocol: _BenqLineProtocol, exc: Optional[Exception]) -> None:
        if protocol is not self._protocol:
            # a connection we already abandoned
            return
        if exc is not None:
            self.on_error(exc)
        self._protocol = None
        self._on_close()

    def _on_close(self) -> None:
        if self.context.connection_state == ConnectionState.CONNECTED:
            logger.info(f"{self}: Disconnected")
        self._mark_disconnected()
        if not self._unloaded:
            self.reconnect()

    def _mark_disconnected(self) -> None:
        self.context.connection_state = ConnectionState.DISCONNECTED
        self._cancel_poll_timer()
        self.context.clear_device_state()
        self.on_connection_change(False)

    def reconnect(self, delay_secs: Optional[float]=None) -> None:
        """Drops any live connection and connects again after delay_secs
           (by default, the configured reconnect delay). Retries are unbounded."""
        if self._unloaded:
            return
        self.context.gate.close_all()
        self._cancel_poll_timer()
        if self._drop_transport():
            logger.info(f"{self}: Disconnected for reconnect")
            self._mark_disconnected()
        self._cancel_reconnect_timer()
        if delay_secs is None:
            delay_secs = self.config.reconnect_delay_secs
        logger.debug(f"{self}: Reconnecting in {delay_secs} seconds")
        self._reconnect_timer = self.loop.call_later(delay_secs, self._on_reconnect_timer)

    def _on_reconnect_timer(self) -> None:
        self._reconnect_timer = None
        self._spawn_connect()

    def _drop_transport(self) -> bool:
        """Abandons and aborts the current connection, if any. Returns True if it was connected."""
        was_connected = self.context.connection_state == ConnectionState.CONNECTED
        protocol = self._protocol
        self._protocol = None
        if protocol is not None and protocol.transport is not None:
            protocol.transport.abort()
        if self.context.connection_state == ConnectionState.CONNECTING:
            self.context.connection_state = ConnectionState.DISCONNECTED
        return was_connected

    def write(self, data: bytes) -> bool:
        """Writes raw bytes to the projector. Returns False if there is no live connection."""
        transport = self.transport
        if transport is None or transport.is_closing():
            logger.debug(f"Not connected; dropping write of {data!r}")
            return False
        transport.write(data)
        return True

    def send(self, command: BenqCommand) -> bool:
        """Sends a single command. Queries are tracked until their reply arrives."""
        logger.debug(f"Send Command: {command}")
        if not self.write(command.wire_bytes):
            return False
        if command.is_query:
            self.context.pending.add(command.code, self.loop.time(), self.config.reply_timeout_secs)
        return True

    def _restart_poll_timer(self) -> None:
        self._cancel_poll_timer()
        self._poll_timer = self.loop.call_later(self.config.poll_interval_secs, self._on_poll_timer)

    def _on_poll_timer(self) -> None:
        self._poll_timer = None
        for code in self.context.pending.expire(self.loop.time()):
            logger.debug(f"{self}: No reply to query for {code}")
        if self.context.gate.can_send.is_open:
            self.send(BenqCommand.query(self.config.poll_command))
        if self.is_connected:
            self._restart_poll_timer()

    def _cancel_poll_timer(self) -> None:
        if self._poll_timer is not None:
            self._poll_timer.cancel()
            self._poll_timer = None

    def _cancel_reconnect_timer(self) -> None:
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None

    def unload(self) -> None:
        """Tears the session down for good. Idempotent; safe if never connected."""
        if self._unloaded:
            return
        self._unloaded = True
        self._cancel_poll_timer()
        self._cancel_reconnect_timer()
        self.context.gate.cancel()
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        self._connect_task = None
        self._drop_transport()
        self._mark_disconnected()
        logger.debug(f"{self}: Cleaned everything up")

    def __str__(self) -> str:
        return f"TcpBenqProjectorSession({self.config.host}:{self.config.port})"

    def __repr__(self) -> str:
        return str(self)
