# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Constants for the BenQ projector line protocol.

Commands are human-readable ASCII lines of the form "*<code>=<value>#" (or
"*<code>#" for bare actions), framed by carriage returns. There is no binary
framing, length prefix or request id; replies echo the command code.
"""

from __future__ import annotations

from ..internal_types import *

CR = "\r"
"""Terminates every command and every reply."""

CR_BYTES = CR.encode("ascii")

START_OF_COMMAND = "*"
END_OF_COMMAND = "#"
VALUE_SEPARATOR = "="

QUERY_MARKER = "?"
"""Sent as the value of a command to query its current state."""

MAX_BUFFER_LENGTH = 50
"""Receive buffers longer than this are assumed to be garbage and are discarded."""

MIN_REPLY_SEGMENT_LENGTH = 6
"""Segments shorter than this cannot hold a meaningful "code=value" reply."""

IDLE_PROMPT = "\r\n>\x00\r"
"""Prompt the projector emits when idle."""

REPEATED_IDLE_PROMPT = "\r\n>\x00\r\r\n>\x00\r\r\n>\x00"
"""Several idle prompts in a row, seen when the projector is waiting for input."""

MAX_LONE_PROMPT_LENGTH = 6
"""A buffer holding IDLE_PROMPT is only considered noise if it is shorter than this."""

ERROR_TOKENS: Tuple[str, ...] = (
    "Illegal format",
    "Unsupported item",
    "Block item",
  )
"""Error replies recognized verbatim in a frame. Later entries take precedence."""

VOLUME_BAR_MARKER = "VOL"
"""Text of the on-screen volume bar. Seen unsolicited; treated as a power-off signal."""

POWER_CODE = "pow"
VOLUME_CODE = "vol"

ON = "on"
OFF = "off"
