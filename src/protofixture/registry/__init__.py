"""Default-instance registry and the descriptor catalog it is built from."""

from .capability import Capability, MessageLite, is_default, satisfies
from .catalog import (
    MAIN_DESCRIPTORS,
    STANDALONE_TEST_DESCRIPTOR,
    DescriptorEntry,
    build_registry,
    resolve_message_type,
    resolve_message_types,
)
from .registry import DefaultInstanceRegistry, default_instance, type_name

__all__ = [
    "Capability",
    "MessageLite",
    "is_default",
    "satisfies",
    "DefaultInstanceRegistry",
    "default_instance",
    "type_name",
    "DescriptorEntry",
    "MAIN_DESCRIPTORS",
    "STANDALONE_TEST_DESCRIPTOR",
    "build_registry",
    "resolve_message_type",
    "resolve_message_types",
]
