# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Host property registry interface.

The client publishes projector state as named, typed properties in a registry
owned by the host platform, and receives user commands as writes to those
properties. Writes made by the client itself are acknowledged; writes made by
the user are not, and only unacknowledged writes are turned into commands.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..internal_types import *
from ..pkg_logging import logger
from ..constants import CONNECTION_PROPERTY
from ..protocol import CommandMeta

PropertyWriteCallback = Callable[[str, Any, bool], Any]
"""Called with (property_id, value, ack) for every property write."""

class PropertyInfo:
    """A typed property in the host registry"""
    name: str
    description: str
    type: str
    role: str
    value: Any = None
    ack: bool = True

    def __init__(self, name: str, description: str, type: str, role: str):
        self.name = name
        self.description = description
        self.type = type
        self.role = role

    @classmethod
    def from_command_meta(cls, command_meta: CommandMeta) -> Self:
        return cls(
            command_meta.name,
            command_meta.description,
            command_meta.property_type,
            command_meta.property_role,
          )

    def to_jsonable(self) -> JsonableDict:
        return {
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "role": self.role,
            "value": self.value,
            "ack": self.ack,
          }

    def __str__(self) -> str:
        return f"PropertyInfo({self.name}={self.value!r}, ack={self.ack})"

    def __repr__(self) -> str:
        return str(self)

class PropertyRegistry(ABC):
    """Abstract host property registry"""

    @abstractmethod
    def ensure_property(self, command_meta: CommandMeta) -> None:
        """Creates the property for a command if it does not exist yet.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    def set_value(self, name: str, value: Any, ack: bool=True) -> None:
        """Sets the value of a property.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    def set_connected(self, connected: bool) -> None:
        """Publishes the connectivity flag.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

    @abstractmethod
    def subscribe(self, callback: PropertyWriteCallback) -> None:
        """Registers a callback for all property writes.

        Must be implemented by subclasses.
        """
        raise NotImplementedError()

class InMemoryPropertyRegistry(PropertyRegistry):
    """A property registry that keeps properties in a dict.

    Used by the REST server, and handy for tests and scripts.
    """
    _properties: Dict[str, PropertyInfo]
    _subscribers: List[PropertyWriteCallback]
    connected: bool

    def __init__(self) -> None:
        self._properties = {}
        self._subscribers = []
        self.connected = False

    def ensure_property(self, command_meta: CommandMeta) -> None:
        if not command_meta.name in self._properties:
            info = PropertyInfo.from_command_meta(command_meta)
            logger.debug(f"Creating property {info.name} (type={info.type}, role={info.role})")
            self._properties[info.name] = info

    def set_value(self, name: str, value: Any, ack: bool=True) -> None:
        info = self._properties.get(name)
        if info is None:
            info = PropertyInfo(name, name, "boolean" if isinstance(value, bool) else "string", "state")
            self._properties[name] = info
        info.value = value
        info.ack = ack
        self._notify(name, value, ack)

    def set_connected(self, connected: bool) -> None:
        self.connected = connected
        self.set_value(CONNECTION_PROPERTY, connected, ack=True)

    def subscribe(self, callback: PropertyWriteCallback) -> None:
        self._subscribers.append(callback)

    def write(self, name: str, value: Any) -> None:
        """Writes a property on behalf of the user (unacknowledged).

        Raises KeyError if the property does not exist.
        """
        if not name in self._properties:
            raise KeyError(name)
        self.set_value(name, value, ack=False)

    def get(self, name: str) -> Optional[PropertyInfo]:
        return self._properties.get(name)

    def properties(self) -> List[PropertyInfo]:
        return list(self._properties.values())

    def _notify(self, name: str, value: Any, ack: bool) -> None:
        for callback in list(self._subscribers):
            try:
                callback(name, value, ack)
            except Exception as e:
                logger.exception(f"Property write subscriber failed for {name}={value!r}: {e}")

    def __str__(self) -> str:
        return f"InMemoryPropertyRegistry({len(self._properties)} properties)"

    def __repr__(self) -> str:
        return str(self)
