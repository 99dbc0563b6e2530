# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    AsyncContextManager,
    AsyncIterator,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Self,
    Set,
    Tuple,
    Type,
    Union,
  )

from types import TracebackType

Jsonable = Union[str, int, float, bool, None, Dict[str, Any], List[Any]]
"""A type that can be serialized to JSON"""

JsonableDict = Dict[str, Jsonable]
"""A dictionary that can be serialized to JSON"""

DeviceValue = Union[str, bool]
"""A normalized device state value: a lowercased string, or a bool for on/off tokens"""

__all__ = [
    "TYPE_CHECKING",
    "Any",
    "AsyncContextManager",
    "AsyncIterator",
    "Callable",
    "Dict",
    "Iterable",
    "Iterator",
    "List",
    "Optional",
    "Self",
    "Set",
    "Tuple",
    "Type",
    "Union",
    "TracebackType",
    "Jsonable",
    "JsonableDict",
    "DeviceValue",
  ]
