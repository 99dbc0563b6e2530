# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
BenQ Projector client.

Maintains a persistent TCP/IP session with a projector and mirrors its state
into a host property registry.
"""

from .client_config import BenqProjectorClientConfig
from .context import SessionContext, ConnectionState, PendingRequests
from .gate import TimedGate, PermissionGate
from .registry import (
    PropertyInfo,
    PropertyRegistry,
    InMemoryPropertyRegistry,
  )
from .tcp_session import TcpBenqProjectorSession, is_fatal_socket_error
from .state_sync import StateSynchronizer
from .dispatcher import CommandDispatcher, normalize_write_value
from .client_impl import (
    BenqProjectorClient,
  )
