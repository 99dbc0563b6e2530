# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Tracking of projector state and publication of changes to the host registry.

The projector does not report state changes on its own, so state is rebuilt
by a staggered refresh sweep that queries every command once per connection
(and once per detected power-on). Power state is never queried directly; it
is inferred from volume replies and explicit power replies.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import (
    BenqCommand,
    CommandMeta,
    CommandTable,
    POWER_CODE,
    VOLUME_CODE,
  )
from .client_config import BenqProjectorClientConfig
from .context import SessionContext
from .registry import PropertyRegistry

_MISSING = object()

class StateSynchronizer:
    """Applies parsed replies to the session's device state."""
    context: SessionContext
    commands: CommandTable
    registry: PropertyRegistry
    send: Callable[[BenqCommand], bool]
    config: BenqProjectorClientConfig
    _refresh_timers: List[asyncio.TimerHandle]

    def __init__(
            self,
            context: SessionContext,
            commands: CommandTable,
            registry: PropertyRegistry,
            send: Callable[[BenqCommand], bool],
            config: BenqProjectorClientConfig,
          ):
        self.context = context
        self.commands = commands
        self.registry = registry
        self.send = send
        self.config = config
        self._refresh_timers = []

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self.context.loop

    def publish(self, command_meta: CommandMeta, value: DeviceValue) -> None:
        """Pushes a value for a command to the host registry, acknowledged."""
        self.registry.ensure_property(command_meta)
        self.registry.set_value(command_meta.name, value, ack=True)

    def _on_power_evidence(self) -> None:
        if self.context.device_state.get(POWER_CODE) is True:
            return
        self.context.device_state[POWER_CODE] = True
        power_meta = self.commands.get(POWER_CODE)
        if power_meta is not None:
            logger.info(f"{power_meta.description} {{cmd: {POWER_CODE}, val: True}}")
            self.publish(power_meta, True)
        self.refresh_all()

    def on_parsed_reply(self, code: str, value: DeviceValue) -> None:
        """Applies a reply from the projector, publishing the value if it changed."""
        latency = self.context.pending.resolve(code, self.loop.time())
        if latency is not None:
            logger.debug(f"Reply for {code} received after {latency:.3f} seconds")
        command_meta = self.commands.get(code)
        if command_meta is None:
            logger.debug(f"Reply for unknown command code ignored: {{cmd: {code}, val: {value!r}}}")
            return

        if code == VOLUME_CODE or (code == POWER_CODE and value is True):
            self._on_power_evidence()

        previous = self.context.device_state.get(code, _MISSING)
        if previous is _MISSING or previous != value or type(previous) != type(value):
            self.context.device_state[code] = value
            logger.info(f"{command_meta.description} {{cmd: {code}, val: {value!r}}}")
            self.publish(command_meta, value)

    def cancel_refresh(self) -> None:
        """Cancels the remaining queries of any refresh sweep in progress."""
        for timer in self._refresh_timers:
            timer.cancel()
        self._refresh_timers = []

    def refresh_all(self) -> None:
        """Starts a refresh sweep, superseding any sweep in progress.

        The i-th command in table order is handled i * refresh_stagger_secs
        seconds from now, if autonomous queries are still allowed then.
        Keep-alive polling is suspended while the sweep runs.
        """
        self.cancel_refresh()
        self.context.gate.can_send.close_for(self.config.refresh_poll_suspend_secs)
        logger.debug(f"Starting refresh sweep of {len(self.commands)} commands")
        for i, command_meta in enumerate(self.commands):
            timer = self.loop.call_later(
                i * self.config.refresh_stagger_secs,
                self._refresh_one,
                command_meta,
              )
            self._refresh_timers.append(timer)

    def _refresh_one(self, command_meta: CommandMeta) -> None:
        if not self.context.gate.can_auto_query.is_open:
            logger.debug(f"Refresh of {command_meta.code} skipped; autonomous queries are held off")
            return
        if command_meta.is_queryable:
            if command_meta.code != POWER_CODE:
                logger.debug(f"Refresh: querying {command_meta.name}")
                self.send(BenqCommand.query(command_meta.code))
        else:
            # Action-only commands are triggers; their property rests at False
            self.publish(command_meta, False)

    def __str__(self) -> str:
        return f"StateSynchronizer({len(self.context.device_state)} known values)"

    def __repr__(self) -> str:
        return str(self)
