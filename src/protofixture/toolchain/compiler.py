"""Drive ``grpc_tools.protoc`` over a source set."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Callable, Iterable

from google.protobuf import descriptor_pb2

from protofixture.errors import ProtoCompilationError
from protofixture.toolchain.sources import SourceSet


LOGGER = logging.getLogger("protofixture.toolchain.compiler")

DESCRIPTOR_SET_NAME = "descriptor_set.desc"
SUPPORTED_PLUGINS = frozenset({"grpc"})


def module_name_for(proto_path: Path | str, *, suffix: str = "_pb2") -> str:
    """Return the Python module protoc generates for a proto file.

    ``a/b-c.proto`` becomes ``a.b_c_pb2``: directories map to packages and
    dashes become underscores.
    """
    path = Path(proto_path)
    stem = path.name[: -len(".proto")] if path.name.endswith(".proto") else path.stem
    parts = [*path.parent.parts, stem]
    return ".".join(part.replace("-", "_") for part in parts if part not in ("", ".")) + suffix


def well_known_include_dir() -> Path:
    """Directory holding ``google/protobuf/*.proto`` as bundled with grpc_tools."""
    return Path(str(resources.files("grpc_tools") / "_proto"))


def _default_protoc(args: list[str]) -> int:
    from grpc_tools import protoc

    return protoc.main(args)


@dataclass(slots=True)
class CompileRequest:
    """What to compile and where to put the generated modules."""

    source_set: SourceSet
    output_dir: Path
    generate_stubs: bool = True
    generate_descriptor_set: bool = False
    plugins: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)
        self.plugins = tuple(self.plugins)
        unknown = set(self.plugins) - SUPPORTED_PLUGINS
        if unknown:
            raise ValueError(f"Unsupported protoc plugin(s): {sorted(unknown)}")


@dataclass(slots=True)
class CompilationResult:
    """Details captured for a completed protoc run."""

    source_set: str
    output_dir: Path
    proto_files: tuple[str, ...]
    modules: tuple[str, ...]
    service_modules: tuple[str, ...] = ()
    descriptor_set: Path | None = None
    compile_ms: float = 0.0
    protoc_args: list[str] = field(default_factory=list)

    def load_descriptor_set(self) -> descriptor_pb2.FileDescriptorSet:
        if self.descriptor_set is None:
            raise FileNotFoundError(
                f"No descriptor set was generated for source set '{self.source_set}'"
            )
        return descriptor_pb2.FileDescriptorSet.FromString(self.descriptor_set.read_bytes())


class ProtoCompiler:
    """Compiles one source set per call with the protoc bundled in grpcio-tools."""

    def __init__(
        self,
        *,
        protoc: Callable[[list[str]], int] | None = None,
        include_dirs: Iterable[Path] | None = None,
    ) -> None:
        self._protoc = protoc or _default_protoc
        self._include_dirs = (
            tuple(Path(path) for path in include_dirs)
            if include_dirs is not None
            else (well_known_include_dir(),)
        )

    def build_args(self, request: CompileRequest) -> list[str]:
        source_set = request.source_set
        out = str(request.output_dir)
        args = ["protoc"]
        for root in (*source_set.roots, *source_set.import_roots, *self._include_dirs):
            args.append(f"-I{root}")
        args.append(f"--python_out={out}")
        if request.generate_stubs:
            args.append(f"--pyi_out={out}")
        if "grpc" in request.plugins:
            args.append(f"--grpc_python_out={out}")
        if request.generate_descriptor_set:
            args.append(f"--descriptor_set_out={request.output_dir / DESCRIPTOR_SET_NAME}")
            args.append("--include_imports")
        args.extend(str(root / relative) for root, relative in source_set.proto_files())
        return args

    def compile(self, request: CompileRequest) -> CompilationResult:
        source_set = request.source_set
        files = [relative for _, relative in source_set.proto_files()]
        request.output_dir.mkdir(parents=True, exist_ok=True)
        args = self.build_args(request)
        LOGGER.debug("protoc %s", " ".join(args[1:]))

        start = time.perf_counter()
        returncode = self._protoc(args)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if returncode != 0:
            raise ProtoCompilationError(
                f"protoc failed for source set '{source_set.name}' (exit status {returncode})",
                returncode=returncode,
                args=args,
            )

        descriptor_set = (
            request.output_dir / DESCRIPTOR_SET_NAME if request.generate_descriptor_set else None
        )
        result = CompilationResult(
            source_set=source_set.name,
            output_dir=request.output_dir,
            proto_files=tuple(relative.as_posix() for relative in files),
            modules=tuple(module_name_for(relative) for relative in files),
            service_modules=(
                tuple(module_name_for(relative, suffix="_pb2_grpc") for relative in files)
                if "grpc" in request.plugins
                else ()
            ),
            descriptor_set=descriptor_set,
            compile_ms=elapsed_ms,
            protoc_args=args,
        )
        LOGGER.info(
            "Compiled source set '%s': %d proto file(s) in %.1f ms",
            source_set.name,
            len(files),
            elapsed_ms,
        )
        return result


__all__ = [
    "CompileRequest",
    "CompilationResult",
    "DESCRIPTOR_SET_NAME",
    "ProtoCompiler",
    "module_name_for",
    "well_known_include_dir",
]
