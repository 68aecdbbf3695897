"""Tests for dependency-ordered contract builds and generated-module loading."""

import sys
from pathlib import Path

import pytest

from protofixture.core import ProtoFixtureSettings
from protofixture.errors import ProtoSourceError, RegistryConfigurationError
from protofixture.toolchain import (
    CompilationResult,
    CompileRequest,
    ContractBuild,
    GeneratedModules,
    ProtoCompiler,
    SourceSet,
)


class RecordingCompiler(ProtoCompiler):
    """Records compile order without running protoc."""

    def __init__(self) -> None:
        super().__init__(protoc=lambda args: 0, include_dirs=[])
        self.requests: list[CompileRequest] = []

    def compile(self, request: CompileRequest) -> CompilationResult:
        self.requests.append(request)
        return super().compile(request)


def _settings(tmp_path: Path, *sets: str) -> ProtoFixtureSettings:
    contracts = tmp_path / "contracts"
    for name in sets:
        (contracts / name).mkdir(parents=True)
        (contracts / name / f"{name}_schema.proto").write_text('syntax = "proto3";\n')
    return ProtoFixtureSettings(contracts_dir=contracts, build_dir=tmp_path / "build")


def test_dependencies_compiled_first_and_once(tmp_path: Path) -> None:
    compiler = RecordingCompiler()
    build = ContractBuild(_settings(tmp_path, "main", "test"), compiler=compiler)

    build.build("test")
    build.build("main")
    build.build("test")

    assert [request.source_set.name for request in compiler.requests] == ["main", "test"]
    test_request = compiler.requests[1]
    assert test_request.source_set.import_roots == ((tmp_path / "contracts" / "main").resolve(),)
    assert test_request.output_dir == tmp_path / "build" / "test"


def test_transitive_import_roots(tmp_path: Path) -> None:
    compiler = RecordingCompiler()
    build = ContractBuild(
        _settings(tmp_path, "main", "test", "integration"),
        compiler=compiler,
        dependencies={"test": ("main",), "integration": ("test",)},
    )
    build.build("integration")
    roots = compiler.requests[-1].source_set.import_roots
    assert [root.name for root in roots] == ["test", "main"]
    modules = build.load("integration")
    assert modules.output_dir == tmp_path / "build" / "integration"


def test_dependency_cycle_rejected(tmp_path: Path) -> None:
    build = ContractBuild(
        _settings(tmp_path, "a", "b"),
        compiler=RecordingCompiler(),
        dependencies={"a": ("b",), "b": ("a",)},
    )
    with pytest.raises(ProtoSourceError, match="dependency cycle"):
        build.build("a")


def test_self_dependency_rejected(tmp_path: Path) -> None:
    build = ContractBuild(_settings(tmp_path, "main"), compiler=RecordingCompiler())
    with pytest.raises(ProtoSourceError, match="dependency cycle through 'main'"):
        build.build("main", depends_on=("main",))


def test_changed_outputs_trigger_rebuild(tmp_path: Path) -> None:
    compiler = RecordingCompiler()
    build = ContractBuild(_settings(tmp_path, "main"), compiler=compiler)
    first = build.build("main")
    assert build.build("main") is first

    elsewhere = tmp_path / "elsewhere"
    result = build.build("main", output_dir=elsewhere, generate_descriptor_set=True, plugins=("grpc",))
    assert len(compiler.requests) == 2
    assert result.output_dir == elsewhere
    assert result.descriptor_set == elsewhere / "descriptor_set.desc"
    assert result.service_modules == ("main_schema_pb2_grpc",)
    assert build.load("main").output_dir == elsewhere


def test_dependents_reuse_existing_dependency_build(tmp_path: Path) -> None:
    compiler = RecordingCompiler()
    build = ContractBuild(_settings(tmp_path, "main", "test"), compiler=compiler)
    build.build("main", output_dir=tmp_path / "custom")
    build.build("test")
    assert [request.source_set.name for request in compiler.requests] == ["main", "test"]
    assert build.load("test")._search_paths == (tmp_path / "custom",)


def test_missing_source_set(tmp_path: Path) -> None:
    build = ContractBuild(_settings(tmp_path, "main"), compiler=RecordingCompiler())
    with pytest.raises(ProtoSourceError):
        build.build("grpc")


def test_extra_sources_from_settings(tmp_path: Path) -> None:
    ext = tmp_path / "ext"
    ext.mkdir()
    (ext / "more.proto").write_text('syntax = "proto3";\n')
    settings = _settings(tmp_path, "main").model_copy(update={"extra_sources": {"main": [ext]}})
    compiler = RecordingCompiler()
    result = ContractBuild(settings, compiler=compiler).build("main")
    assert result.proto_files == ("main_schema.proto", "more.proto")


def test_test_set_links_against_main(test_modules, main_modules) -> None:
    msg_test = test_modules.message_class("MsgTest")
    item_type = main_modules.message_class("ws.antonov.protobuf.test.Item")
    instance = msg_test()
    assert isinstance(instance.item, item_type)
    assert "msg_test_pb2" in sys.modules


def test_dependent_schema_imports_main_and_well_known_types(contract_build: ContractBuild) -> None:
    contract_build.build("dependent", depends_on=("main",))
    modules = contract_build.load("dependent")
    wrapper_type = modules.message_class("WrapperMessage")
    item_type = modules.message_class("ws.antonov.protobuf.test.Item")

    wrapper = wrapper_type()
    assert wrapper.item == item_type()
    assert not wrapper.HasField("item")
    assert wrapper.any.type_url == ""
    assert wrapper.DESCRIPTOR.fields_by_name["any"].message_type.full_name == "google.protobuf.Any"


def test_unknown_message_name(main_modules) -> None:
    with pytest.raises(RegistryConfigurationError, match="not defined"):
        main_modules.message_class("ws.antonov.protobuf.test.Missing")


def test_loader_leaves_sys_path_untouched(contract_build: ContractBuild) -> None:
    before = list(sys.path)
    contract_build.load("main").load()
    assert sys.path == before


def _compile_schema(tmp_path: Path, build: str, filename: str, body: str) -> GeneratedModules:
    root = tmp_path / build / "src"
    root.mkdir(parents=True)
    (root / filename).write_text(f'syntax = "proto3";\npackage relocation.pkg;\n{body}')
    result = ProtoCompiler().compile(
        CompileRequest(source_set=SourceSet(name=build, roots=(root,)), output_dir=tmp_path / build / "out")
    )
    return GeneratedModules(result.output_dir, result.modules)


class TestLoaderOutputDirectory:
    def test_same_schema_reimported_from_its_own_directory(self, tmp_path: Path) -> None:
        body = "message Same {\n  string name = 1;\n}\n"
        first = _compile_schema(tmp_path, "b1", "relocated.proto", body)
        second = _compile_schema(tmp_path, "b2", "relocated.proto", body)

        assert Path(first.module("relocated_pb2").__file__).parent == (tmp_path / "b1" / "out").resolve()
        assert Path(second.module("relocated_pb2").__file__).parent == (tmp_path / "b2" / "out").resolve()
        assert second.message_class("relocation.pkg.Same")().name == ""

    def test_diverging_schema_is_a_configuration_error(self, tmp_path: Path) -> None:
        first = _compile_schema(tmp_path, "b1", "diverging.proto", "message A {}\n")
        second = _compile_schema(tmp_path, "b2", "diverging.proto", "message A {}\nmessage B {}\n")
        loaded = first.module("diverging_pb2")

        with pytest.raises(RegistryConfigurationError, match="conflicts with the schema"):
            second.load()
        assert sys.modules["diverging_pb2"] is loaded
