#!/usr/bin/env python3
"""Compile the repository's proto contracts into Python modules.

Writes one directory per source set under ``build/generated``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from protofixture.core import ProtoFixtureSettings
from protofixture.toolchain import ContractBuild

SOURCE_SETS = ("main", "test")


def main() -> int:
    repo_root = Path(__file__).resolve().parents[1]
    settings = ProtoFixtureSettings(
        contracts_dir=repo_root / "contracts",
        build_dir=repo_root / "build" / "generated",
        generate_descriptor_set=True,
    )
    logging.basicConfig(level=settings.log_level.upper())

    build = ContractBuild(settings)
    for name in SOURCE_SETS:
        result = build.build(name)
        print(f"{name}: {', '.join(result.modules)} -> {result.output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
