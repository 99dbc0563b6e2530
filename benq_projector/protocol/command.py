# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

from __future__ import annotations

from ..internal_types import *
from ..exceptions import BenqProjectorError
from .command_meta import CommandMeta, CommandKind

from .constants import (
    CR,
    START_OF_COMMAND,
    END_OF_COMMAND,
    VALUE_SEPARATOR,
    QUERY_MARKER,
  )

class BenqCommand:
    """A command to a BenQ projector

    On the wire, a command is framed by carriage returns:

        \\r*<code>#\\r            (action)
        \\r*<code>=<value>#\\r    (set, or query when value is "?")
    """
    code: str
    value: Optional[str]

    def __init__(self, code: str, value: Optional[str]=None):
        if code == '' or any(c in code for c in (START_OF_COMMAND, END_OF_COMMAND, VALUE_SEPARATOR, CR)):
            raise BenqProjectorError(f"Invalid command code: {code!r}")
        if value is not None and any(c in value for c in (START_OF_COMMAND, END_OF_COMMAND, CR)):
            raise BenqProjectorError(f"Invalid command value: {value!r}")
        self.code = code
        self.value = value

    @property
    def is_query(self) -> bool:
        return self.value == QUERY_MARKER

    @property
    def body(self) -> str:
        """The command without framing, e.g. "*pow=on#" """
        if self.value is None:
            return f"{START_OF_COMMAND}{self.code}{END_OF_COMMAND}"
        return f"{START_OF_COMMAND}{self.code}{VALUE_SEPARATOR}{self.value}{END_OF_COMMAND}"

    @property
    def wire_text(self) -> str:
        return f"{CR}{self.body}{CR}"

    @property
    def wire_bytes(self) -> bytes:
        return self.wire_text.encode('ascii')

    @classmethod
    def query(cls, code: str) -> Self:
        """Creates a query ("code=?") command"""
        return cls(code, QUERY_MARKER)

    @classmethod
    def create_from_meta(cls, command_meta: CommandMeta, value: Optional[str]=None) -> Self:
        """Creates a command from command metadata, validating the value.

        The value is ignored for action-only commands.
        """
        if command_meta.kind == CommandKind.ACTION_ONLY:
            return cls(command_meta.code)
        if value is None or not command_meta.validate_value(value):
            raise BenqProjectorError(f"Value {value!r} is not allowed for command {command_meta.code}")
        return cls(command_meta.code, value)

    @classmethod
    def parse(cls, text: str) -> Self:
        """Parses the body of a command line ("*code=value#", surrounding whitespace allowed)"""
        body = text.strip()
        if not body.startswith(START_OF_COMMAND) or not body.endswith(END_OF_COMMAND):
            raise BenqProjectorError(f"Malformed command line: {text!r}")
        body = body[1:-1]
        if VALUE_SEPARATOR in body:
            code, value = body.split(VALUE_SEPARATOR, 1)
            return cls(code.lower(), value.lower())
        return cls(body.lower())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BenqCommand) and self.code == other.code and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.code, self.value))

    def __str__(self) -> str:
        return self.body

    def __repr__(self) -> str:
        return f"BenqCommand({self.body})"
