"""Compile source sets in dependency order and hand out their bindings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from protofixture.core import ProtoFixtureSettings
from protofixture.errors import ProtoSourceError
from protofixture.toolchain.compiler import CompilationResult, CompileRequest, ProtoCompiler
from protofixture.toolchain.loader import GeneratedModules
from protofixture.toolchain.sources import resolve_source_set


LOGGER = logging.getLogger("protofixture.toolchain.build")

# The test source set sees the main protos as imports.
DEFAULT_DEPENDENCIES: Mapping[str, tuple[str, ...]] = {"test": ("main",)}


@dataclass(frozen=True, slots=True)
class _BuildOptions:
    output_dir: Path
    generate_stubs: bool
    generate_descriptor_set: bool
    plugins: tuple[str, ...]


class ContractBuild:
    """Per-process build of the repository's proto source sets.

    Each source set is compiled once per instance into ``<build_dir>/<name>``
    and recompiled only when a later call asks for different outputs.
    Dependencies are compiled first and put on the import path, not
    recompiled into the dependent set.
    """

    def __init__(
        self,
        settings: ProtoFixtureSettings | None = None,
        *,
        compiler: ProtoCompiler | None = None,
        dependencies: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._settings = settings or ProtoFixtureSettings()
        self._compiler = compiler or ProtoCompiler()
        self._dependencies = {
            name: tuple(deps) for name, deps in (dependencies or DEFAULT_DEPENDENCIES).items()
        }
        self._results: dict[str, CompilationResult] = {}
        self._options: dict[str, _BuildOptions] = {}
        self._source_roots: dict[str, tuple[Path, ...]] = {}
        self._in_progress: set[str] = set()

    def dependencies_of(self, name: str) -> tuple[str, ...]:
        return self._dependencies.get(name, ())

    def build(
        self,
        name: str,
        *,
        depends_on: Sequence[str] | None = None,
        plugins: Sequence[str] = (),
        output_dir: Path | None = None,
        generate_descriptor_set: bool | None = None,
    ) -> CompilationResult:
        """Compile ``name`` (after its dependencies) and return the result.

        Passing ``depends_on`` records it for later :meth:`load` calls.
        """
        if depends_on is not None:
            self._dependencies[name] = tuple(depends_on)
        settings = self._settings
        options = _BuildOptions(
            output_dir=Path(output_dir) if output_dir is not None else settings.output_dir(name),
            generate_stubs=settings.generate_stubs,
            generate_descriptor_set=(
                settings.generate_descriptor_set
                if generate_descriptor_set is None
                else generate_descriptor_set
            ),
            plugins=tuple(plugins),
        )
        cached = self._results.get(name)
        if cached is not None:
            if self._options[name] == options:
                return cached
            LOGGER.info("Rebuilding source set '%s' with different outputs", name)
        if name in self._in_progress:
            raise ProtoSourceError(f"Source set dependency cycle through '{name}'")

        self._in_progress.add(name)
        try:
            deps = [self._dependency_result(dep) for dep in self.dependencies_of(name)]
            if deps:
                LOGGER.debug(
                    "Source set '%s' imports from %s", name, [dep.source_set for dep in deps]
                )
            source_set = resolve_source_set(
                name,
                settings.source_set_dir(name),
                settings.extra_sources.get(name, ()),
                staging_dir=settings.build_dir / "_staged" / name,
                import_roots=[root for dep in deps for root in self._roots_of(dep)],
            )
            request = CompileRequest(
                source_set=source_set,
                output_dir=options.output_dir,
                generate_stubs=options.generate_stubs,
                generate_descriptor_set=options.generate_descriptor_set,
                plugins=options.plugins,
            )
            result = self._compiler.compile(request)
        finally:
            self._in_progress.discard(name)

        self._results[name] = result
        self._options[name] = options
        self._source_roots[name] = source_set.roots + source_set.import_roots
        return result

    def load(self, name: str) -> GeneratedModules:
        """Return importable bindings for ``name``, building it if needed."""
        result = self._dependency_result(name)
        search_paths = [self._results[dep].output_dir for dep in self._all_dependencies(name)]
        return GeneratedModules(
            result.output_dir,
            result.modules + result.service_modules,
            search_paths=search_paths,
        )

    def _dependency_result(self, name: str) -> CompilationResult:
        # Whatever build already exists is good enough to import from.
        if name in self._in_progress:
            raise ProtoSourceError(f"Source set dependency cycle through '{name}'")
        cached = self._results.get(name)
        return cached if cached is not None else self.build(name)

    def _roots_of(self, result: CompilationResult) -> tuple[Path, ...]:
        return self._source_roots.get(result.source_set, ())

    def _all_dependencies(self, name: str) -> list[str]:
        ordered: list[str] = []
        for dep in self.dependencies_of(name):
            for transitive in (*self._all_dependencies(dep), dep):
                if transitive not in ordered:
                    ordered.append(transitive)
        return ordered


__all__ = ["ContractBuild", "DEFAULT_DEPENDENCIES"]
