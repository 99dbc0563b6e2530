# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Translation of host property writes into projector commands.
"""

from __future__ import annotations

from ..internal_types import *
from ..exceptions import BenqProjectorError
from ..pkg_logging import logger
from ..protocol import (
    BenqCommand,
    CommandMeta,
    CommandTable,
    POWER_CODE,
  )
from ..protocol.constants import ON, OFF
from .client_config import BenqProjectorClientConfig
from .context import SessionContext

def normalize_write_value(value: Any) -> List[str]:
    """Converts a property value written by the host into command values.

    Booleans (and their string forms) become "on"/"off". Anything else is
    passed through as a single string value; lists and tuples are kept as
    multiple values.
    """
    if value is True or value == 'true':
        return [ON]
    if value is False or value == 'false':
        return [OFF]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]

class CommandDispatcher:
    """Sends commands to the projector on behalf of the host."""
    context: SessionContext
    commands: CommandTable
    write: Callable[[bytes], bool]
    config: BenqProjectorClientConfig

    def __init__(
            self,
            context: SessionContext,
            commands: CommandTable,
            write: Callable[[bytes], bool],
            config: BenqProjectorClientConfig,
          ):
        self.context = context
        self.commands = commands
        self.write = write
        self.config = config

    def on_property_write(self, property_id: str, value: Any, ack: bool) -> None:
        """Registry subscription callback. Acknowledged writes are our own and are ignored."""
        if ack:
            return
        logger.debug(f"Property {property_id} changed: {value!r} (ack = {ack})")
        name = property_id.rsplit('.', 1)[-1]
        self.dispatch(name, value)

    def apply_gate_policy(self, command_meta: CommandMeta, value: str) -> None:
        """Holds off autonomous traffic while the projector digests a command."""
        gate = self.context.gate
        if command_meta.code == POWER_CODE and value == OFF:
            gate.close_all_for(self.config.power_off_settle_secs)
        elif command_meta.code == POWER_CODE and value == ON:
            gate.close_all_for(self.config.power_on_settle_secs)
        else:
            gate.close_all_for(self.config.command_settle_secs)

    def dispatch(self, name: str, value: Any) -> bool:
        """Sends the command for property name with the given value.

        Returns True if the command was written to the projector. Errors are
        logged, never raised.
        """
        if not self.context.is_connected:
            logger.warning(f"Not connected to projector; command for {name}={value!r} dropped")
            return False

        command_meta = self.commands.resolve(name)
        if command_meta is None:
            logger.error(f"Error command: no command for property {name!r} (value {value!r})")
            return False

        wire_value = ','.join(normalize_write_value(value))
        self.apply_gate_policy(command_meta, wire_value)

        if (self.config.require_power_on and command_meta.code != POWER_CODE and
                self.context.device_state.get(POWER_CODE) is not True):
            logger.warning(f"Projector is not on; command for {name}={wire_value} not sent")
            return False

        try:
            command = BenqCommand.create_from_meta(command_meta, wire_value)
        except BenqProjectorError:
            logger.error(f"Error value command =*{command_meta.code}={wire_value}#")
            return False

        data = command.wire_bytes
        # The projector needs every command sent twice in a row
        if not self.write(data):
            logger.warning(f"Send failed for command {command}")
            return False
        self.write(data)
        logger.debug(f"Send Command: {command.wire_text!r}")
        return True

    def __str__(self) -> str:
        return f"CommandDispatcher({len(self.commands)} commands)"

    def __repr__(self) -> str:
        return str(self)
