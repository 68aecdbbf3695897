"""Command-line entry point for contract builds and the registry smoke check.

Usage:
  protofixture compile main --descriptor-set
  protofixture compile grpc --plugin grpc --output-dir ./build/grpc
  protofixture verify --expected-count 6 --capability lite

``verify`` exits 0 when every check passes, 1 when a check fails and 2 on a
toolchain or configuration error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from protofixture.core import ProtoFixtureSettings
from protofixture.errors import ProtoFixtureError
from protofixture.registry import (
    STANDALONE_TEST_DESCRIPTOR,
    Capability,
    build_registry,
    default_instance,
    is_default,
    resolve_message_type,
    type_name,
)
from protofixture.toolchain import ContractBuild


LOGGER = logging.getLogger("protofixture.cli")

EXIT_OK = 0
EXIT_CHECK_FAILED = 1
EXIT_ERROR = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="protofixture", description="Protobuf build verification harness")
    p.add_argument("--contracts-dir", type=Path, default=None, help="Root holding one directory per source set")
    p.add_argument("--build-dir", type=Path, default=None, help="Where generated modules are written")
    p.add_argument("--log-level", default=None, help="Logging level (default from PROTOFIXTURE_LOG_LEVEL)")
    sub = p.add_subparsers(dest="command", required=True)

    c = sub.add_parser("compile", help="Compile one source set")
    c.add_argument("source_set", help="Source set name, e.g. main or test")
    c.add_argument("--output-dir", type=Path, default=None)
    c.add_argument("--depends-on", action="append", default=None, help="Source set whose protos are importable")
    c.add_argument("--plugin", action="append", choices=["grpc"], default=[])
    c.add_argument("--descriptor-set", action="store_true", help="Also write descriptor_set.desc")
    c.add_argument("--no-stubs", action="store_true", help="Skip .pyi generation")

    v = sub.add_parser("verify", help="Build main/test and check the default-instance registry")
    v.add_argument("--expected-count", type=int, default=None)
    v.add_argument("--capability", choices=[cap.value for cap in Capability], default=None)
    return p.parse_args(argv)


def _settings_from(ns: argparse.Namespace) -> ProtoFixtureSettings:
    overrides: dict[str, Any] = {
        "contracts_dir": ns.contracts_dir,
        "build_dir": ns.build_dir,
        "log_level": ns.log_level,
    }
    if ns.command == "compile" and ns.no_stubs:
        overrides["generate_stubs"] = False
    return ProtoFixtureSettings(**{k: v for k, v in overrides.items() if v is not None})


def _compile(ns: argparse.Namespace, settings: ProtoFixtureSettings) -> int:
    build = ContractBuild(settings)
    result = build.build(
        ns.source_set,
        depends_on=ns.depends_on,
        plugins=ns.plugin,
        output_dir=ns.output_dir,
        generate_descriptor_set=True if ns.descriptor_set else None,
    )
    payload = {
        "source_set": result.source_set,
        "output_dir": str(result.output_dir),
        "proto_files": list(result.proto_files),
        "modules": list(result.modules + result.service_modules),
        "descriptor_set": str(result.descriptor_set) if result.descriptor_set else None,
        "compile_ms": round(result.compile_ms, 1),
    }
    print(json.dumps(payload, indent=2))
    return EXIT_OK


def _verify(ns: argparse.Namespace, settings: ProtoFixtureSettings) -> int:
    expected = ns.expected_count if ns.expected_count is not None else settings.expected_instance_count
    capability = Capability(ns.capability or settings.capability)
    build = ContractBuild(settings)

    registry = build_registry(build.load("main"), capability=capability)
    instances = registry.get_default_instances()
    failures: list[str] = []
    if len(instances) != expected:
        failures.append(f"expected {expected} default instance(s), got {len(instances)}")
    for instance in instances:
        if not is_default(instance, capability):
            failures.append(f"{type_name(type(instance))} is not in its default state")

    standalone = resolve_message_type(build.load("test"), STANDALONE_TEST_DESCRIPTOR)
    if not is_default(default_instance(standalone), capability):
        failures.append(f"{STANDALONE_TEST_DESCRIPTOR.full_name} default instance has fields set")

    print(
        json.dumps(
            {
                "capability": capability.value,
                "instances": list(registry.full_names),
                "count": len(instances),
                "expected": expected,
                "passed": not failures,
            },
            indent=2,
        )
    )
    for failure in failures:
        LOGGER.error("Verification failed: %s", failure)
    return EXIT_CHECK_FAILED if failures else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    ns = _parse_args(list(sys.argv[1:] if argv is None else argv))
    try:
        settings = _settings_from(ns)
    except ValueError as exc:
        print(f"protofixture: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    handler = _compile if ns.command == "compile" else _verify
    try:
        return handler(ns, settings)
    except ProtoFixtureError as exc:
        LOGGER.error("%s", exc)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
