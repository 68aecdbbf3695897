"""Core shared primitives: configuration used by the toolchain and the CLI."""

from .config import ProtoFixtureSettings

__all__ = ["ProtoFixtureSettings"]
