# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by benq_projector"""

DEFAULT_HOST = "192.168.1.53"
"""The host used when none is configured."""

DEFAULT_PORT = 23
"""The listen port number used by the projector (or its serial-to-LAN bridge) for TCP/IP control."""

CONNECT_TIMEOUT = 15.0
"""The timeout for connecting to the projector over TCP/IP, in seconds."""

RECONNECT_DELAY = 30.0
"""The delay between a disconnect (or failed connect) and the next connection attempt, in seconds.
   Reconnection is retried forever."""

POLL_INTERVAL = 10.0
"""The interval between keep-alive polls, in seconds."""

DEFAULT_POLL_COMMAND = "vol"
"""The command code queried by the keep-alive poll. A reply is also evidence that the projector is on."""

REFRESH_STAGGER = 5.0
"""Delay between consecutive queries of a refresh sweep, in seconds. Query i is sent i * REFRESH_STAGGER
   seconds after the sweep starts."""

REFRESH_POLL_SUSPEND = 60.0
"""Keep-alive polling is suspended for this many seconds after a refresh sweep starts, in seconds."""

POWER_ON_SETTLE = 20.0
"""Autonomous queries are suppressed for this long after a power-on command, in seconds."""

POWER_OFF_SETTLE = 120.0
"""Autonomous queries are suppressed for this long after a power-off command, in seconds."""

COMMAND_SETTLE = 5.0
"""Autonomous traffic is suppressed for this long after any other command, in seconds."""

REPLY_TIMEOUT = 5.0
"""Queries without a reply after this long are logged as timed out, in seconds. Instrumentation only."""

CONNECTION_PROPERTY = "info.connection"
"""Name of the host property that reflects connectivity."""
