"""Default-instance registry over a fixed set of generated message types."""

from __future__ import annotations

from typing import Generic, Iterable, TypeVar

from protofixture.errors import RegistryConfigurationError
from protofixture.registry.capability import Capability, satisfies


M = TypeVar("M")


def type_name(message_type: object) -> str:
    descriptor = getattr(message_type, "DESCRIPTOR", None)
    if descriptor is not None:
        return descriptor.full_name
    return getattr(message_type, "__qualname__", repr(message_type))


def default_instance(message_type: type[M]) -> M:
    """Return a freshly constructed instance with every field unset."""
    return message_type()


class DefaultInstanceRegistry(Generic[M]):
    """Hands out one default instance per configured message type.

    The type set and its order are fixed at construction. Every call to
    :meth:`get_default_instances` builds new instances, so callers own what
    they get back and calls never share state.
    """

    def __init__(
        self,
        message_types: Iterable[type[M]],
        *,
        capability: Capability | str = Capability.FULL,
    ) -> None:
        capability = Capability(capability)
        types = tuple(message_types)
        seen: set[type[M]] = set()
        for message_type in types:
            if not satisfies(message_type, capability):
                raise RegistryConfigurationError(
                    f"{type_name(message_type)} does not provide the "
                    f"'{capability.value}' message capability"
                )
            if message_type in seen:
                raise RegistryConfigurationError(
                    f"{type_name(message_type)} is configured more than once"
                )
            seen.add(message_type)
        self._capability = capability
        self._message_types = types

    @property
    def capability(self) -> Capability:
        return self._capability

    @property
    def message_types(self) -> tuple[type[M], ...]:
        return self._message_types

    @property
    def full_names(self) -> tuple[str, ...]:
        return tuple(type_name(message_type) for message_type in self._message_types)

    def __len__(self) -> int:
        return len(self._message_types)

    def get_default_instances(self) -> list[M]:
        return [default_instance(message_type) for message_type in self._message_types]


__all__ = ["DefaultInstanceRegistry", "default_instance", "type_name"]
