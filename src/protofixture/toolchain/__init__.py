"""Proto toolchain: source sets, protoc invocation and generated-module loading."""

from .build import DEFAULT_DEPENDENCIES, ContractBuild
from .compiler import (
    DESCRIPTOR_SET_NAME,
    CompilationResult,
    CompileRequest,
    ProtoCompiler,
    module_name_for,
    well_known_include_dir,
)
from .loader import GeneratedModules
from .sources import SourceSet, discover_proto_files, is_archive, resolve_source_set, stage_archive

__all__ = [
    "ContractBuild",
    "DEFAULT_DEPENDENCIES",
    "CompileRequest",
    "CompilationResult",
    "DESCRIPTOR_SET_NAME",
    "ProtoCompiler",
    "module_name_for",
    "well_known_include_dir",
    "GeneratedModules",
    "SourceSet",
    "discover_proto_files",
    "is_archive",
    "resolve_source_set",
    "stage_archive",
]
