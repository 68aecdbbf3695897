"""Shared pytest fixtures and configuration.

The repository contracts are compiled once per session with the real
``grpc_tools.protoc``; tests that need generated bindings share that build.
"""

import os
from pathlib import Path

import pytest
from hypothesis import HealthCheck, settings

from protofixture.core import ProtoFixtureSettings
from protofixture.registry import build_registry
from protofixture.toolchain import ContractBuild

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=10,
    deadline=500,
)

settings.register_profile(
    "thorough",
    max_examples=1000,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session")
def contracts_dir(repo_root: Path) -> Path:
    """Return path to the repository's proto source sets."""
    return repo_root / "contracts"


# =============================================================================
# Contract Build Fixtures (compiled once per session)
# =============================================================================


@pytest.fixture(scope="session")
def build_settings(contracts_dir: Path, tmp_path_factory: pytest.TempPathFactory) -> ProtoFixtureSettings:
    return ProtoFixtureSettings(
        contracts_dir=contracts_dir,
        build_dir=tmp_path_factory.mktemp("generated"),
        generate_descriptor_set=True,
    )


@pytest.fixture(scope="session")
def contract_build(build_settings: ProtoFixtureSettings) -> ContractBuild:
    return ContractBuild(build_settings)


@pytest.fixture(scope="session")
def main_modules(contract_build: ContractBuild):
    modules = contract_build.load("main")
    modules.load()
    return modules


@pytest.fixture(scope="session")
def test_modules(contract_build: ContractBuild, main_modules):
    modules = contract_build.load("test")
    modules.load()
    return modules


@pytest.fixture
def registry(main_modules):
    return build_registry(main_modules)
