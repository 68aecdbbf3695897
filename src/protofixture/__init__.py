"""protofixture - protobuf build verification harness.

Compiles message schemas with ``grpc_tools.protoc`` and exposes a
default-instance registry over the generated bindings.

Example:
    from protofixture.toolchain import ContractBuild
    from protofixture.registry import build_registry

    build = ContractBuild()
    registry = build_registry(build.load("main"))
    instances = registry.get_default_instances()
"""

PROTOFIXTURE_VERSION = "0.1.0"

from protofixture.errors import (
    ProtoCompilationError,
    ProtoFixtureError,
    ProtoSourceError,
    RegistryConfigurationError,
)

__all__ = [
    "PROTOFIXTURE_VERSION",
    "ProtoFixtureError",
    "ProtoSourceError",
    "ProtoCompilationError",
    "RegistryConfigurationError",
]
