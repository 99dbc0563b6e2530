# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A single client connection to the BenQ projector emulator.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import CR

if TYPE_CHECKING:
    from .emulator_impl import BenqProjectorEmulator

class BenqProjectorEmulatorSession(asyncio.Protocol):
    """Splits received bytes into CR-terminated command lines for the emulator."""
    emulator: BenqProjectorEmulator
    session_id: int
    transport: Optional[asyncio.Transport] = None
    buffer: str

    def __init__(self, emulator: BenqProjectorEmulator):
        self.emulator = emulator
        self.buffer = ''
        self.session_id = emulator.alloc_session_id(self)

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        assert isinstance(transport, asyncio.Transport)
        self.transport = transport
        logger.debug(f"{self}: Connection from {transport.get_extra_info('peername')}")

    def data_received(self, data: bytes) -> None:
        self.buffer += data.decode('ascii', errors='replace')
        while CR in self.buffer:
            line, self.buffer = self.buffer.split(CR, 1)
            line = line.strip()
            if line != '':
                self.emulator.on_line_received(self, line)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        logger.debug(f"{self}: Connection lost: {exc}")
        self.transport = None
        self.emulator.free_session_id(self.session_id)

    @property
    def is_open(self) -> bool:
        return self.transport is not None and not self.transport.is_closing()

    def write(self, data: bytes) -> None:
        if self.is_open:
            assert self.transport is not None
            self.transport.write(data)

    def close(self) -> None:
        if self.transport is not None:
            self.transport.close()

    def __str__(self) -> str:
        return f"EmulatorSession({self.session_id})"

    def __repr__(self) -> str:
        return str(self)
