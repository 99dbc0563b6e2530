# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Low-level protocol definitions for BenQ projectors.

BenQ projectors are controlled with short ASCII commands ("*pow=on#") sent over
RS-232, or over TCP/IP via the projector's LAN port or a serial-to-LAN bridge.
"""

from .constants import (
    CR,
    CR_BYTES,
    QUERY_MARKER,
    MAX_BUFFER_LENGTH,
    ERROR_TOKENS,
    POWER_CODE,
    VOLUME_CODE,
  )

from .command_meta import (
    CommandKind,
    CommandMeta,
    CommandTable,
    BenqModel,
    models,
    get_model,
  )

from .command import (
    BenqCommand,
  )

from .framing import (
    FrameAssembler,
  )

from .response import (
    ParsedReply,
    RecognizedError,
    Unrecognized,
    Reply,
    ReplyParser,
    extract_payload,
    normalize_value,
  )
