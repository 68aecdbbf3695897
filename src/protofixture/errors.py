"""Error types shared by the toolchain and the registry.

Library code raises these; only the CLI turns them into exit codes.
"""

from __future__ import annotations


class ProtoFixtureError(RuntimeError):
    """Base class for protofixture failures."""

    pass


class ProtoSourceError(ProtoFixtureError):
    """Raised when a source set cannot be resolved to proto files."""

    pass


class ProtoCompilationError(ProtoFixtureError):
    """Raised when protoc exits with a non-zero status."""

    def __init__(self, message: str, *, returncode: int, args: list[str]) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.protoc_args = list(args)


class RegistryConfigurationError(ProtoFixtureError):
    """Raised when the descriptor set a registry is built against is malformed.

    Descriptors are fixed at build time, so this is fatal rather than
    something callers are expected to recover from.
    """

    pass


__all__ = [
    "ProtoFixtureError",
    "ProtoSourceError",
    "ProtoCompilationError",
    "RegistryConfigurationError",
]
