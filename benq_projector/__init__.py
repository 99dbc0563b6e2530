# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package benq_projector provides an API for controlling
BenQ projectors via their text-based TCP/IP (RS-232 over LAN) protocol.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict, DeviceValue

from .exceptions import BenqProjectorError

from .constants import DEFAULT_HOST, DEFAULT_PORT, POLL_INTERVAL, RECONNECT_DELAY, CONNECTION_PROPERTY

from .client import (
    BenqProjectorClient,
    BenqProjectorClientConfig,
    TcpBenqProjectorSession,
    SessionContext,
    ConnectionState,
    PermissionGate,
    StateSynchronizer,
    CommandDispatcher,
    PropertyInfo,
    PropertyRegistry,
    InMemoryPropertyRegistry,
  )

from .protocol import (
    BenqCommand,
    BenqModel,
    CommandKind,
    CommandMeta,
    CommandTable,
    FrameAssembler,
    ReplyParser,
    ParsedReply,
    RecognizedError,
    Unrecognized,
    models,
    get_model,
  )
