"""Environment configuration for protofixture.

Values are loaded from environment variables or a local ``.env`` file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProtoFixtureSettings(BaseSettings):
    """Top-level configuration container for contract builds and the registry."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    contracts_dir: Path = Field(alias="PROTOFIXTURE_CONTRACTS_DIR", default=Path("./contracts"))
    build_dir: Path = Field(alias="PROTOFIXTURE_BUILD_DIR", default=Path("./build/generated"))

    # "lite" only requires the serialization surface; "full" requires
    # google.protobuf.message.Message (descriptors, field presence).
    capability: Literal["lite", "full"] = Field(alias="PROTOFIXTURE_CAPABILITY", default="full")

    generate_stubs: bool = Field(alias="PROTOFIXTURE_GENERATE_STUBS", default=True)
    generate_descriptor_set: bool = Field(
        alias="PROTOFIXTURE_GENERATE_DESCRIPTOR_SET", default=False
    )
    expected_instance_count: int = Field(
        alias="PROTOFIXTURE_EXPECTED_INSTANCE_COUNT", default=6
    )
    # Source set name -> additional directories or archives, e.g.
    # PROTOFIXTURE_EXTRA_SOURCES='{"main": ["lib/protos.tar.gz", "ext/"]}'
    extra_sources: dict[str, list[Path]] = Field(
        alias="PROTOFIXTURE_EXTRA_SOURCES", default_factory=dict
    )

    log_level: str = Field(alias="PROTOFIXTURE_LOG_LEVEL", default="INFO")

    def source_set_dir(self, name: str) -> Path:
        return self.contracts_dir / name

    def output_dir(self, name: str) -> Path:
        return self.build_dir / name


__all__ = ["ProtoFixtureSettings"]
