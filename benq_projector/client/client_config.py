# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
BenQ Projector client configuration.

Provides a general config object for a BenqProjectorClient, including
connection parameters, the projector model, and protocol timing.
"""

from __future__ import annotations

import os

from ..internal_types import *
from ..exceptions import BenqProjectorError
from ..constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    CONNECT_TIMEOUT,
    RECONNECT_DELAY,
    POLL_INTERVAL,
    DEFAULT_POLL_COMMAND,
    REFRESH_STAGGER,
    REFRESH_POLL_SUSPEND,
    POWER_ON_SETTLE,
    POWER_OFF_SETTLE,
    COMMAND_SETTLE,
    REPLY_TIMEOUT,
  )
from ..protocol import models

# Float-valued settings, all in seconds. Used for JSON round trips.
_timing_fields: Tuple[str, ...] = (
    "connect_timeout_secs",
    "reconnect_delay_secs",
    "poll_interval_secs",
    "refresh_stagger_secs",
    "refresh_poll_suspend_secs",
    "power_on_settle_secs",
    "power_off_settle_secs",
    "command_settle_secs",
    "reply_timeout_secs",
  )

class BenqProjectorClientConfig:
    """BenQ Projector client configuration."""
    host: str
    port: int
    model: Optional[str]
    connect_timeout_secs: float
    reconnect_delay_secs: float
    poll_interval_secs: float
    poll_command: str
    refresh_stagger_secs: float
    refresh_poll_suspend_secs: float
    power_on_settle_secs: float
    power_off_settle_secs: float
    command_settle_secs: float
    reply_timeout_secs: float
    require_power_on: bool

    def __init__(
            self,
            host: Optional[str]=None,
            port: Optional[int]=None,
            model: Optional[str]=None,
            *,
            connect_timeout_secs: Optional[float]=None,
            reconnect_delay_secs: Optional[float]=None,
            poll_interval_secs: Optional[float]=None,
            poll_command: Optional[str]=None,
            refresh_stagger_secs: Optional[float]=None,
            refresh_poll_suspend_secs: Optional[float]=None,
            power_on_settle_secs: Optional[float]=None,
            power_off_settle_secs: Optional[float]=None,
            command_settle_secs: Optional[float]=None,
            reply_timeout_secs: Optional[float]=None,
            require_power_on: Optional[bool]=None,
            base_config: Optional[BenqProjectorClientConfig]=None
          ) -> None:
        """Creates a configuration for a BenQ Projector client.

           Args:
             host: The hostname or IPV4 address of the projector (or its
                   serial-to-LAN bridge). May be suffixed with ":<port>" to
                   specify a non-default port, which will override the port
                   argument. If None, the host will be taken from the
                   BENQ_PROJECTOR_HOST environment variable, falling back
                   to DEFAULT_HOST.
             port: The TCP/IP port number to use. If None, the port will be
                   taken from BENQ_PROJECTOR_PORT, falling back to 23.
             model:
                   The projector model, which selects the command table.
                   If None, the model will be taken from BENQ_PROJECTOR_MODEL.
                   Raises BenqProjectorError if the model is not known.
             connect_timeout_secs:
                   The timeout for a single connection attempt, in seconds.
             reconnect_delay_secs:
                   The delay before reconnecting after a disconnect or a
                   failed connection attempt, in seconds.
             poll_interval_secs:
                   The interval between keep-alive polls, in seconds.
             poll_command:
                   The command code queried by the keep-alive poll.
             refresh_stagger_secs:
                   The spacing between queries of a refresh sweep, in seconds.
             refresh_poll_suspend_secs:
                   How long keep-alive polling is suspended after a refresh
                   sweep starts, in seconds.
             power_on_settle_secs, power_off_settle_secs, command_settle_secs:
                   How long autonomous traffic is suppressed after a
                   power-on, power-off, or any other command, in seconds.
             reply_timeout_secs:
                   How long a query may go unanswered before it is logged
                   as timed out, in seconds.
             require_power_on:
                   If True, commands other than power are only sent while the
                   projector is known to be on.
             base_config:
                     An optional base configuration to use.
        """
        if base_config is None:
            self.init_from_defaults()
        else:
            self.init_from_base_config(base_config)

        if host is not None and host != '':
            self.host = host

        if port is not None and port > 0:
            self.port = port

        if ':' in self.host:
            self.host, port_str = self.host.rsplit(':', 1)
            self.port = int(port_str)

        if model is not None and model != '':
            self.model = model

        if self.model is not None and not self.model in models:
            raise BenqProjectorError(f"Unknown BenQ projector model: {self.model}")

        for name, value in (
                ("connect_timeout_secs", connect_timeout_secs),
                ("reconnect_delay_secs", reconnect_delay_secs),
                ("poll_interval_secs", poll_interval_secs),
                ("refresh_stagger_secs", refresh_stagger_secs),
                ("refresh_poll_suspend_secs", refresh_poll_suspend_secs),
                ("power_on_settle_secs", power_on_settle_secs),
                ("power_off_settle_secs", power_off_settle_secs),
                ("command_settle_secs", command_settle_secs),
                ("reply_timeout_secs", reply_timeout_secs),
              ):
            if value is not None:
                if value < 0:
                    raise BenqProjectorError(f"{name} must not be negative: {value}")
                setattr(self, name, float(value))

        if poll_command is not None and poll_command != '':
            self.poll_command = poll_command

        if require_power_on is not None:
            self.require_power_on = require_power_on

    def init_from_defaults(self) -> None:
        """Initializes the configuration from defaults."""
        host = os.environ.get('BENQ_PROJECTOR_HOST')
        if host is None or host == '':
            host = DEFAULT_HOST
        self.host = host
        port_str = os.environ.get('BENQ_PROJECTOR_PORT')
        if port_str is None or port_str == '':
            port = DEFAULT_PORT
        else:
            port = int(port_str)
        self.port = port
        model = os.environ.get('BENQ_PROJECTOR_MODEL')
        self.model = None if model == '' else model
        self.connect_timeout_secs = CONNECT_TIMEOUT
        self.reconnect_delay_secs = RECONNECT_DELAY
        self.poll_interval_secs = POLL_INTERVAL
        self.poll_command = DEFAULT_POLL_COMMAND
        self.refresh_stagger_secs = REFRESH_STAGGER
        self.refresh_poll_suspend_secs = REFRESH_POLL_SUSPEND
        self.power_on_settle_secs = POWER_ON_SETTLE
        self.power_off_settle_secs = POWER_OFF_SETTLE
        self.command_settle_secs = COMMAND_SETTLE
        self.reply_timeout_secs = REPLY_TIMEOUT
        self.require_power_on = False

    def init_from_base_config(self, base_config: BenqProjectorClientConfig) -> None:
        """Initializes the configuration from a base configuration."""
        self.host = base_config.host
        self.port = base_config.port
        self.model = base_config.model
        for name in _timing_fields:
            setattr(self, name, getattr(base_config, name))
        self.poll_command = base_config.poll_command
        self.require_power_on = base_config.require_power_on

    @classmethod
    def from_jsonable(cls, jsonable: JsonableDict) -> Self:
        """Creates a configuration from a JSON-compatible dict, e.g. loaded from a config file.

        Missing keys take their defaults. Unknown keys raise BenqProjectorError.
        """
        known = set(_timing_fields) | {"host", "port", "model", "poll_command", "require_power_on"}
        unknown = set(jsonable.keys()) - known
        if len(unknown) > 0:
            raise BenqProjectorError(f"Unknown BenQ projector config keys: {', '.join(sorted(unknown))}")
        return cls(**jsonable)  # type: ignore[arg-type]

    def to_jsonable(self) -> JsonableDict:
        result: JsonableDict = {
            "host": self.host,
            "port": self.port,
            "model": self.model,
            "poll_command": self.poll_command,
            "require_power_on": self.require_power_on,
          }
        for name in _timing_fields:
            result[name] = getattr(self, name)
        return result

    def __str__(self) -> str:
        return (
            f"BenqProjectorClientConfig("
            f"host={self.host}, "
            f"port={self.port}, "
            f"model={self.model!r})"
          )

    def __repr__(self) -> str:
        return str(self)
