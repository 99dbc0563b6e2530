# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Interpretation of reply frames received from a BenQ projector.

A frame is whatever arrived between two lone carriage returns. It typically
holds the echo of the command followed by the reply, e.g.

    ">*vol=?#\\r\\r\\n*vol=5#\\r\\n\\r"

The payload is taken from the last "*"-delimited segment that looks like a
reply rather than an echoed query. This is a heuristic; some firmware may
interleave output differently.

Replies use lower-case codes. Upper-case "VOL" anywhere in a frame is the
on-screen volume bar, which is reported as power off.
"""

from __future__ import annotations

import re

from ..internal_types import *
from ..pkg_logging import logger
from .command_meta import CommandTable
from .constants import (
    CR,
    START_OF_COMMAND,
    END_OF_COMMAND,
    VALUE_SEPARATOR,
    QUERY_MARKER,
    MIN_REPLY_SEGMENT_LENGTH,
    ERROR_TOKENS,
    VOLUME_BAR_MARKER,
    POWER_CODE,
    ON,
    OFF,
  )

_whitespace_re = re.compile(r'\s')

class ParsedReply:
    """A reply carrying the current value of a command"""
    code: str
    value: DeviceValue
    raw: str

    def __init__(self, code: str, value: DeviceValue, raw: str=''):
        self.code = code
        self.value = value
        self.raw = raw

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ParsedReply) and self.code == other.code and self.value == other.value

    def __str__(self) -> str:
        return f"ParsedReply({self.code}={self.value!r})"

    def __repr__(self) -> str:
        return str(self)

class RecognizedError:
    """A reply consisting of one of the projector's error messages"""
    token: str
    raw: str

    def __init__(self, token: str, raw: str=''):
        self.token = token
        self.raw = raw

    def __str__(self) -> str:
        return f"RecognizedError({self.token})"

    def __repr__(self) -> str:
        return str(self)

class Unrecognized:
    """A frame that carried nothing usable"""
    raw: str
    reason: str

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        self.reason = reason

    def __str__(self) -> str:
        return f"Unrecognized({self.reason}: {self.raw!r})"

    def __repr__(self) -> str:
        return str(self)

Reply = Union[ParsedReply, RecognizedError, Unrecognized]

def _is_reply_segment(segment: str) -> bool:
    """True iff a "*"-delimited segment is long enough to hold a reply and is not an echoed query"""
    if len(segment) < MIN_REPLY_SEGMENT_LENGTH:
        return False
    value_index = segment.find(VALUE_SEPARATOR) + 1
    return segment[value_index:value_index + 1] != QUERY_MARKER

def extract_payload(frame: str) -> Optional[str]:
    """Returns the "code=value" payload of the last reply segment in a frame, or None.

    A reply segment ends at its first CR. Segments with no CR are not complete
    replies and are skipped.
    """
    result: Optional[str] = None
    for segment in frame.split(START_OF_COMMAND):
        if _is_reply_segment(segment):
            cr_index = segment.find(CR)
            if cr_index < 0:
                continue
            result = segment[:cr_index].replace(END_OF_COMMAND, '', 1)
    return result

def normalize_value(raw_value: str) -> DeviceValue:
    """Removes whitespace and lowercases a reply value; "on"/"off" become booleans."""
    value = _whitespace_re.sub('', raw_value).lower()
    if value == ON:
        return True
    if value == OFF:
        return False
    return value

def find_error_token(frame: str) -> Optional[str]:
    """Returns the error token in a frame. If several appear, the one latest in ERROR_TOKENS wins."""
    for token in reversed(ERROR_TOKENS):
        if token in frame:
            return token
    return None

class ReplyParser:
    """Turns frames into replies for the commands of one model"""
    commands: CommandTable

    def __init__(self, commands: CommandTable):
        self.commands = commands

    def parse(self, frame: str) -> Reply:
        token = find_error_token(frame)
        if token is not None:
            return RecognizedError(token, frame)

        if VOLUME_BAR_MARKER in frame:
            # Unsolicited volume bar text; taken as a power-off signal
            return ParsedReply(POWER_CODE, False, frame)

        payload = extract_payload(frame)
        if payload is None:
            return Unrecognized(frame, "no reply segment")
        parts = payload.split(VALUE_SEPARATOR)
        if len(parts) < 2 or parts[0] == '' or parts[1] == '':
            return Unrecognized(frame, f"not a code=value reply: {payload!r}")
        code = _whitespace_re.sub('', parts[0]).lower()
        value = normalize_value(parts[1])
        if code not in self.commands:
            logger.debug(f"Reply for unknown command code ignored: {{cmd: {code}, val: {value!r}}}")
            return Unrecognized(frame, f"unknown command code {code!r}")
        return ParsedReply(code, value, frame)
