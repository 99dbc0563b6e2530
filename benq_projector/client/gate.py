# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Timed permission gates that hold off autonomous traffic.

Each gate has at most one pending re-open timer. Closing or opening a gate
cancels any pending timer first, so a stale timer can never re-open a gate
that was closed again later.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger

class TimedGate:
    """A boolean permission that can be closed for a period of time."""
    name: str
    loop: asyncio.AbstractEventLoop
    _is_open: bool = False
    _reopen_timer: Optional[asyncio.TimerHandle] = None

    def __init__(self, name: str, loop: asyncio.AbstractEventLoop):
        self.name = name
        self.loop = loop

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def reopen_pending(self) -> bool:
        return self._reopen_timer is not None

    def cancel(self) -> None:
        """Cancels the pending re-open timer, if any. The gate stays as it is."""
        if self._reopen_timer is not None:
            self._reopen_timer.cancel()
            self._reopen_timer = None

    def open(self) -> None:
        self.cancel()
        self._is_open = True

    def close(self) -> None:
        """Closes the gate until open() or close_for() is called."""
        self.cancel()
        self._is_open = False

    def close_for(self, secs: float) -> None:
        """Closes the gate, re-opening it after secs seconds."""
        self.close()
        self._reopen_timer = self.loop.call_later(secs, self._on_reopen_timer)

    def _on_reopen_timer(self) -> None:
        self._reopen_timer = None
        self._is_open = True
        logger.debug(f"Gate {self.name} re-opened")

    def __str__(self) -> str:
        return f"TimedGate({self.name}, {'open' if self._is_open else 'closed'})"

    def __repr__(self) -> str:
        return str(self)

class PermissionGate:
    """The pair of gates that throttle autonomous traffic.

    can_send gates the keep-alive poll. can_auto_query gates the individual
    queries of a refresh sweep.
    """
    can_send: TimedGate
    can_auto_query: TimedGate

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.can_send = TimedGate("can_send", loop)
        self.can_auto_query = TimedGate("can_auto_query", loop)

    def open_all(self) -> None:
        self.can_send.open()
        self.can_auto_query.open()

    def close_all(self) -> None:
        self.can_send.close()
        self.can_auto_query.close()

    def close_all_for(self, secs: float) -> None:
        self.can_send.close_for(secs)
        self.can_auto_query.close_for(secs)

    def cancel(self) -> None:
        self.can_send.cancel()
        self.can_auto_query.cancel()

    def __str__(self) -> str:
        return f"PermissionGate(can_send={self.can_send.is_open}, can_auto_query={self.can_auto_query.is_open})"

    def __repr__(self) -> str:
        return str(self)
