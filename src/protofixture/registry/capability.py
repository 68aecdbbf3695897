"""Capability surfaces a registry can require of its message types.

``LITE`` needs only the serialization surface every generated message has;
``FULL`` needs ``google.protobuf.message.Message`` (descriptors, field
presence, reflection).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from google.protobuf import message


@runtime_checkable
class MessageLite(Protocol):
    """Serialization surface shared by all generated message classes."""

    def SerializeToString(self, **kwargs: Any) -> bytes: ...

    def ParseFromString(self, serialized: bytes) -> Any: ...

    def ByteSize(self) -> int: ...

    def IsInitialized(self) -> bool: ...

    def Clear(self) -> None: ...


class Capability(str, Enum):
    LITE = "lite"
    FULL = "full"

    @property
    def base(self) -> type:
        if self is Capability.FULL:
            return message.Message
        return MessageLite


def satisfies(message_type: object, capability: Capability) -> bool:
    """True when ``message_type`` is a class exposing ``capability``."""
    if not isinstance(message_type, type):
        return False
    return issubclass(message_type, capability.base)


def is_default(instance: Any, capability: Capability = Capability.FULL) -> bool:
    """True when no field of ``instance`` is set."""
    if capability is Capability.FULL:
        return not instance.ListFields()
    return instance.ByteSize() == 0


__all__ = ["Capability", "MessageLite", "is_default", "satisfies"]
