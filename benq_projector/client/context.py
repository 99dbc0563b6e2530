# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Per-projector session state shared by the client components.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from ..internal_types import *
from ..pkg_logging import logger
from .gate import PermissionGate

class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"

class PendingRequests:
    """Outstanding queries, keyed by command code, with their reply deadlines.

    Only used to log reply latency and unanswered queries. Replies are applied
    to device state whether or not a query is outstanding.
    """
    _sent_at: Dict[str, float]
    _deadlines: Dict[str, float]

    def __init__(self) -> None:
        self._sent_at = {}
        self._deadlines = {}

    def add(self, code: str, now: float, timeout_secs: float) -> None:
        self._sent_at[code] = now
        self._deadlines[code] = now + timeout_secs

    def resolve(self, code: str, now: float) -> Optional[float]:
        """Removes the query for code, returning its latency, or None if there was none."""
        sent_at = self._sent_at.pop(code, None)
        self._deadlines.pop(code, None)
        return None if sent_at is None else now - sent_at

    def expire(self, now: float) -> List[str]:
        """Removes and returns the codes of queries whose deadline has passed."""
        expired = [code for code, deadline in self._deadlines.items() if deadline <= now]
        for code in expired:
            self._sent_at.pop(code, None)
            self._deadlines.pop(code, None)
        return expired

    def clear(self) -> None:
        self._sent_at.clear()
        self._deadlines.clear()

    def __contains__(self, code: object) -> bool:
        return code in self._deadlines

    def __len__(self) -> int:
        return len(self._deadlines)

class SessionContext:
    """Everything known about one projector session.

    One instance per projector; it outlives individual connections, and is
    reset rather than replaced when the connection drops.
    """
    loop: asyncio.AbstractEventLoop
    connection_state: ConnectionState
    device_state: Dict[str, DeviceValue]
    """Last known value for each command code, as last reported by the projector."""
    gate: PermissionGate
    pending: PendingRequests

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.connection_state = ConnectionState.DISCONNECTED
        self.device_state = {}
        self.gate = PermissionGate(loop)
        self.pending = PendingRequests()

    @property
    def is_connected(self) -> bool:
        return self.connection_state == ConnectionState.CONNECTED

    def clear_device_state(self) -> None:
        """Forgets all device state. Values must not outlive the connection they were read on."""
        if len(self.device_state) > 0:
            logger.debug(f"Clearing device state for {len(self.device_state)} commands")
        self.device_state.clear()
        self.pending.clear()

    def __str__(self) -> str:
        return f"SessionContext({self.connection_state.value}, {self.gate})"

    def __repr__(self) -> str:
        return str(self)
