"""Descriptor catalog: the message types the default registry is built against."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from protofixture.errors import RegistryConfigurationError
from protofixture.registry.capability import Capability
from protofixture.registry.registry import DefaultInstanceRegistry
from protofixture.toolchain.loader import GeneratedModules


LOGGER = logging.getLogger("protofixture.registry.catalog")


@dataclass(slots=True, frozen=True)
class DescriptorEntry:
    """A configured message type and the schema file that defines it."""

    full_name: str
    source: str


# Order is part of the contract: tests assert on positions.
MAIN_DESCRIPTORS: tuple[DescriptorEntry, ...] = (
    DescriptorEntry("ws.antonov.protobuf.test.TestMessage", "test.proto"),
    DescriptorEntry("ws.antonov.protobuf.test.AnotherMessage", "test.proto"),
    DescriptorEntry("ws.antonov.protobuf.test.Item", "test.proto"),
    DescriptorEntry("ws.antonov.protobuf.test.DataMap", "test.proto"),
    DescriptorEntry("com.example.tutorial.Msg", "sample.proto"),
    DescriptorEntry("com.example.tutorial.SecondMsg", "sample.proto"),
)

# Compiled from the test source set only; not part of MAIN_DESCRIPTORS.
STANDALONE_TEST_DESCRIPTOR = DescriptorEntry("MsgTest", "msg_test.proto")


def resolve_message_type(modules: GeneratedModules, entry: DescriptorEntry) -> type:
    message_type = modules.message_class(entry.full_name)
    defined_in = message_type.DESCRIPTOR.file.name
    if defined_in != entry.source:
        raise RegistryConfigurationError(
            f"{entry.full_name} is defined in {defined_in}, expected {entry.source}"
        )
    return message_type


def resolve_message_types(
    modules: GeneratedModules,
    entries: Sequence[DescriptorEntry] = MAIN_DESCRIPTORS,
) -> list[type]:
    return [resolve_message_type(modules, entry) for entry in entries]


def build_registry(
    modules: GeneratedModules,
    entries: Sequence[DescriptorEntry] = MAIN_DESCRIPTORS,
    *,
    capability: Capability | str = Capability.FULL,
) -> DefaultInstanceRegistry:
    """Resolve ``entries`` against loaded bindings and bind them into a registry."""
    registry: DefaultInstanceRegistry = DefaultInstanceRegistry(
        resolve_message_types(modules, entries),
        capability=capability,
    )
    LOGGER.info(
        "Default-instance registry ready: %d message type(s), capability=%s",
        len(registry),
        registry.capability.value,
    )
    return registry


__all__ = [
    "DescriptorEntry",
    "MAIN_DESCRIPTORS",
    "STANDALONE_TEST_DESCRIPTOR",
    "build_registry",
    "resolve_message_type",
    "resolve_message_types",
]
