# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
BenQ Projector client.

Ties a TCP session to the protocol layer and to a host property registry:
received bytes are assembled into frames, parsed into replies and applied to
device state; user writes to registry properties become projector commands.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..exceptions import BenqProjectorError
from ..pkg_logging import logger
from ..protocol import (
    BenqModel,
    FrameAssembler,
    ParsedReply,
    RecognizedError,
    Reply,
    ReplyParser,
    get_model,
  )

from .client_config import BenqProjectorClientConfig
from .context import SessionContext, ConnectionState
from .dispatcher import CommandDispatcher
from .registry import PropertyRegistry, InMemoryPropertyRegistry
from .state_sync import StateSynchronizer
from .tcp_session import TcpBenqProjectorSession

class BenqProjectorClient:
    """BenQ Projector TCP/IP client."""

    config: BenqProjectorClientConfig
    model: BenqModel
    registry: PropertyRegistry
    context: SessionContext
    session: TcpBenqProjectorSession
    assembler: FrameAssembler
    parser: ReplyParser
    sync: StateSynchronizer
    dispatcher: CommandDispatcher

    def __init__(
            self,
            config: Optional[BenqProjectorClientConfig]=None,
            registry: Optional[PropertyRegistry]=None,
            loop: Optional[asyncio.AbstractEventLoop]=None,
          ):
        """Creates a client. Does not connect; call start() for that.

        Raises BenqProjectorError if no model is configured or the model is
        not known; nothing is connected in that case.
        """
        self.config = BenqProjectorClientConfig(base_config=config)
        if self.config.model is None:
            logger.error("No projector model configured")
            raise BenqProjectorError("No projector model configured; set model or BENQ_PROJECTOR_MODEL")
        try:
            self.model = get_model(self.config.model)
        except BenqProjectorError as e:
            logger.error(str(e))
            raise
        self.registry = InMemoryPropertyRegistry() if registry is None else registry
        if loop is None:
            loop = asyncio.get_running_loop()
        commands = self.model.commands
        self.context = SessionContext(loop)
        self.session = TcpBenqProjectorSession(
            self.context,
            self.config,
            on_data=self._on_data,
            on_connection_change=self._on_connection_change,
          )
        self.assembler = FrameAssembler(self.session.write)
        self.parser = ReplyParser(commands)
        self.sync = StateSynchronizer(self.context, commands, self.registry, self.session.send, self.config)
        self.dispatcher = CommandDispatcher(self.context, commands, self.session.write, self.config)
        # Every command is writable from the start, even before the projector reports it
        for command_meta in commands:
            self.registry.ensure_property(command_meta)
        self.registry.subscribe(self.dispatcher.on_property_write)

    @property
    def device_state(self) -> Dict[str, DeviceValue]:
        return self.context.device_state

    @property
    def connection_state(self) -> ConnectionState:
        return self.context.connection_state

    @property
    def is_connected(self) -> bool:
        return self.context.is_connected

    def start(self) -> None:
        """Starts connecting; the client then stays connected until unloaded."""
        logger.debug(f"BenQ {self.model.name} connect to: {self.config.host}:{self.config.port}")
        self.session.start()

    def unload(self) -> None:
        """Disconnects and stops all timers. Idempotent."""
        self.sync.cancel_refresh()
        self.session.unload()

    def dispatch(self, name: str, value: Any) -> bool:
        """Sends the command for a property name. Returns True if it was written."""
        return self.dispatcher.dispatch(name, value)

    def handle_frame(self, frame: str) -> Reply:
        """Parses a frame and applies it to device state."""
        reply = self.parser.parse(frame)
        if isinstance(reply, ParsedReply):
            logger.debug(f"Received message: {reply.code}={reply.value!r}")
            self.sync.on_parsed_reply(reply.code, reply.value)
        elif isinstance(reply, RecognizedError):
            logger.warning(f"Projector reported error: {reply.token}")
        else:
            logger.debug(f"Ignored frame: {reply}")
        return reply

    def _on_data(self, data: bytes) -> None:
        for frame in self.assembler.feed(data):
            self.handle_frame(frame)

    def _on_connection_change(self, connected: bool) -> None:
        if connected:
            logger.info(f"BenQ {self.model.name} connected.")
        else:
            self.sync.cancel_refresh()
            self.assembler.reset()
        self.registry.set_connected(connected)

    async def __aenter__(self) -> BenqProjectorClient:
        logger.debug(f"{self}: Entering async context manager")
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType],
          ) -> None:
        logger.debug(f"{self}: Exiting async context manager, exc={exc_val}")
        self.unload()

    async def aclose(self) -> None:
        self.unload()

    @classmethod
    async def create(
            cls,
            host: Optional[str]=None,
            port: Optional[int]=None,
            model: Optional[str]=None,
            registry: Optional[PropertyRegistry]=None,
            config: Optional[BenqProjectorClientConfig]=None,
          ) -> Self:
        """Creates a client and starts connecting it."""
        config = BenqProjectorClientConfig(
            host=host,
            port=port,
            model=model,
            base_config=config,
          )
        self = cls(config, registry=registry)
        self.start()
        return self

    def __str__(self) -> str:
        return f"BenqProjectorClient(model={self.model.name}, session={self.session})"

    def __repr__(self) -> str:
        return str(self)
