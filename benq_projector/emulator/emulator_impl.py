# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
BenQ Projector emulator.

Provides a simple emulation of a BenQ projector's text protocol on TCP/IP.
Each reply is written as one chunk, followed a moment later by the lone
carriage return that ends the reply, as a real projector's LAN bridge does.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..constants import DEFAULT_PORT
from ..exceptions import BenqProjectorError
from ..protocol import (
    BenqCommand,
    BenqModel,
    CommandKind,
    CommandMeta,
    CR_BYTES,
    POWER_CODE,
    QUERY_MARKER,
    models,
  )
from ..protocol.constants import ON, OFF

from .session import BenqProjectorEmulatorSession

TERMINATOR_DELAY = 0.02
"""Seconds between a reply and the lone CR that terminates it."""

def _initial_value(command_meta: CommandMeta) -> str:
    settable = command_meta.settable_values
    if settable == {"+", "-"}:
        return "5"
    if command_meta.is_query_only:
        return "1234" if command_meta.code == "ltim" else "unknown"
    if settable == {ON, OFF}:
        return OFF
    return sorted(settable)[0]

class BenqProjectorEmulator(AsyncContextManager['BenqProjectorEmulator']):
    model: BenqModel
    bind_addr: str
    port: int
    power_on: bool
    state: Dict[str, str]
    received: List[str]
    """Every command line received, in order."""
    sessions: Dict[int, BenqProjectorEmulatorSession]
    next_session_id: int = 0
    requests: asyncio.Queue[Optional[Tuple[BenqProjectorEmulatorSession, str]]]
    server: Optional[asyncio.Server] = None
    handler_task: Optional[asyncio.Task[None]] = None
    final_result: asyncio.Future[None]

    def __init__(
            self,
            model: Optional[Union[BenqModel, str]] = None,
            bind_addr: Optional[str] = None,
            port: int = DEFAULT_PORT,
            power_on: bool = True,
          ):
        if model is None:
            model = 'W1070'
        if isinstance(model, str):
            if not model in models:
                raise BenqProjectorError(f"Unknown model {model}")
            model = models[model]
        self.model = model
        self.bind_addr = '127.0.0.1' if bind_addr is None else bind_addr
        self.port = port
        self.power_on = power_on
        self.state = {}
        for command_meta in model.commands:
            if command_meta.is_queryable:
                self.state[command_meta.code] = _initial_value(command_meta)
        self.state["modelname"] = model.name.lower()
        self.received = []
        self.sessions = {}
        self.requests = asyncio.Queue()
        self.final_result = asyncio.get_running_loop().create_future()

    def alloc_session_id(self, session: BenqProjectorEmulatorSession) -> int:
        result = self.next_session_id
        self.next_session_id += 1
        self.sessions[result] = session
        return result

    def free_session_id(self, session_id: int) -> None:
        self.sessions.pop(session_id, None)

    def on_line_received(self, session: BenqProjectorEmulatorSession, line: str) -> None:
        """Called when a command line is received from a session."""
        self.received.append(line)
        self.requests.put_nowait((session, line))

    def handle_command(self, command: BenqCommand) -> str:
        """Handle a single command, and return the reply text (without the final CR)."""
        command_meta = self.model.commands.get(command.code)
        if command_meta is None:
            return "*Unsupported item#"
        if command.code == POWER_CODE:
            if command.value in (ON, OFF):
                self.power_on = command.value == ON
            return f"*{POWER_CODE}={ON if self.power_on else OFF}#"
        if not self.power_on:
            return "*Block item#"
        if command_meta.kind == CommandKind.ACTION_ONLY:
            return ''
        value = command.value
        current = self.state[command.code]
        if value == QUERY_MARKER:
            return f"*{command.code}={current}#"
        if value in ("+", "-") and value in command_meta.settable_values:
            self.state[command.code] = str(max(0, int(current) + (1 if value == "+" else -1)))
        elif value is not None and value in command_meta.settable_values:
            self.state[command.code] = value
        else:
            return "*Illegal format#"
        return f"*{command.code}={self.state[command.code]}#"

    async def handle_line(self, session: BenqProjectorEmulatorSession, line: str) -> None:
        """Handle a single command line, and write the reply."""
        try:
            command = BenqCommand.parse(line)
        except BenqProjectorError:
            reply = "*Illegal format#"
        else:
            reply = self.handle_command(command)
        logger.debug(f"{session}: {line} -> {reply}")
        session.write(f">{line}\r\n{reply}\r\n".encode('ascii'))
        await asyncio.sleep(TERMINATOR_DELAY)
        session.write(CR_BYTES)
        await asyncio.sleep(TERMINATOR_DELAY)

    def send_unsolicited(self, text: str) -> None:
        """Writes text to every connected session, e.g. on-screen volume bar output."""
        for session in list(self.sessions.values()):
            session.write(text.encode('ascii'))

    def drop_sessions(self) -> None:
        """Closes every client connection."""
        for session in list(self.sessions.values()):
            session.close()

    async def handle_requests(self) -> None:
        """Handle requests from sessions."""
        while True:
            session_and_line = await self.requests.get()
            try:
                if session_and_line is None:
                    logger.debug("Emulator handler: Received EOF; exiting")
                    break
                session, line = session_and_line
                try:
                    await self.handle_line(session, line)
                except asyncio.CancelledError:
                    logger.debug(f"{session}: Handler task cancelled; exiting")
                    break
                except Exception as e:
                    logger.exception(f"{session}: Handler task: Exception while handling request; killing session: {e}")
                    session.close()
            finally:
                self.requests.task_done()

    async def start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
            self.handler_task = asyncio.create_task(self.handle_requests())
            self.server = await loop.create_server(
                lambda: BenqProjectorEmulatorSession(self),
                host=self.bind_addr,
                port=self.port)
            if self.port == 0:
                self.port = self.server.sockets[0].getsockname()[1]
            logger.debug(f"Emulator: Listening on {self.bind_addr}:{self.port}")
            await self.server.start_serving()
        except BaseException as e:
            self.set_final_result(e)
            try:
                await self.wait_closed()
            except BaseException:
                pass
            raise

    async def run(self) -> None:
        """Runs the Emulator until it is closed."""
        async with self:
            await self.wait_closed()

    def close(self, exc: Optional[BaseException]=None) -> None:
        """Stops the Emulator."""
        self.set_final_result(exc)

    async def wait_closed(self) -> None:
        """Waits for the emulator to be fully closed. Does not initiate shutdown."""
        try:
            await self.final_result
        finally:
            try:
                if self.server is not None:
                    try:
                        self.drop_sessions()
                        self.server.close()
                    finally:
                        await self.server.wait_closed()
            finally:
                self.server = None
                if self.handler_task is not None:
                    try:
                        await self.handler_task
                    finally:
                        self.handler_task = None

    def set_final_result(self, exc: Optional[BaseException]=None) -> None:
        if not self.final_result.done():
            if exc is None:
                logger.debug(f"Emulator: Setting final result to success")
                self.final_result.set_result(None)
            else:
                logger.debug(f"Emulator: Setting final exception: {exc}")
                self.final_result.set_exception(exc)
            self.requests.put_nowait(None)
            if self.server is not None:
                self.server.close()

    async def __aenter__(self) -> BenqProjectorEmulator:
        await self.start()
        return self

    async def __aexit__(self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> None:
        self.set_final_result(exc)
        try:
            # ensure that final_result has been awaited
            await self.wait_closed()
        except Exception:
            pass

    def __str__(self) -> str:
        return f"BenqProjectorEmulator({self.model.name}, {self.bind_addr}:{self.port})"

    def __repr__(self) -> str:
        return str(self)
