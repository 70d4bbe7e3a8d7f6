"""Tests for full and incremental generation passes."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from projgen.config import load_config
from projgen.flags import GenerationFlags
from projgen.hooks import HookRegistry, PostProcessor
from projgen.orchestrator import ProjectGeneration

from tests._fixtures.graph_builder import GraphBuilder


class _RecordingFileIO:
    """FileIO stand-in writing into a dict."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.written: List[str] = []

    def exists(self, path: str) -> bool:
        return path in self.files

    def read_text(self, path: str) -> str:
        return self.files[path]

    def write_text(self, path: str, content: str) -> None:
        self.files[path] = content
        self.written.append(path)


class _Claiming(PostProcessor):
    def __init__(self) -> None:
        self.post_calls = 0

    def pre_generate(self) -> bool:
        return True

    def post_generate(self) -> None:
        self.post_calls += 1


def _graph(builder: GraphBuilder) -> None:
    builder.extensions(builtin=["cs"])
    builder.assembly("Core", ["Assets/Core/A.cs"], root="Assets/Core", references=["Util"])
    builder.assembly("Util", ["Assets/Util/U.cs"], root="Assets/Util")
    builder.assembly("Tools", ["Assets/Tools/T.cs"], root="Assets/Tools")


def _generation(builder: GraphBuilder, file_io: _RecordingFileIO) -> ProjectGeneration:
    return ProjectGeneration(
        builder.directory,
        builder.provider(),
        builder.settings(),
        file_io=file_io,  # type: ignore[arg-type]
    )


def _path(builder: GraphBuilder, name: str) -> str:
    return f"{builder.directory}/{name}"


def test_sync_writes_solution_and_projects(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    file_io = _RecordingFileIO()

    _generation(graph_builder, file_io).sync()

    assert sorted(file_io.written) == sorted(
        _path(graph_builder, name) for name in ("Game.sln", "Core.csproj", "Util.csproj", "Tools.csproj")
    )


def test_second_sync_performs_no_writes(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    generation = graph_builder.generation()

    generation.sync()
    first_writes = generation.synchronizer.writes
    generation.sync()

    assert first_writes == 4
    assert generation.synchronizer.writes == first_writes


def test_sync_is_idempotent_across_instances(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    graph_builder.generation().sync()
    before = graph_builder.read("Core.csproj")

    second = graph_builder.generation()
    second.sync()

    assert second.synchronizer.writes == 0
    assert graph_builder.read("Core.csproj") == before


def test_sync_if_needed_ignores_irrelevant_changes(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    file_io = _RecordingFileIO()
    generation = _generation(graph_builder, file_io)

    changed = generation.sync_if_needed(["Assets/Art/hero.png", "Assets/Core/README"], ["Assets/Core/Lib.DLL"])

    assert changed is False
    assert file_io.written == []


def test_sync_if_needed_regenerates_only_touched_projects(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    file_io = _RecordingFileIO()
    generation = _generation(graph_builder, file_io)

    assert generation.sync_if_needed(["Assets/Util/U.cs"], []) is True

    assert file_io.written == [_path(graph_builder, "Game.sln"), _path(graph_builder, "Util.csproj")]


def test_reimported_assembly_definition_triggers_regeneration(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    file_io = _RecordingFileIO()
    generation = _generation(graph_builder, file_io)

    assert generation.sync_if_needed([], ["Assets/Tools/Tools.asmdef"]) is True

    assert _path(graph_builder, "Tools.csproj") in file_io.written
    assert _path(graph_builder, "Core.csproj") not in file_io.written


def test_changes_in_excluded_packages_are_ignored(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    graph_builder.package("com.registry", "registry")
    file_io = _RecordingFileIO()
    generation = _generation(graph_builder, file_io)

    assert generation.sync_if_needed(["Packages/com.registry/Runtime/A.cs"], []) is False
    assert file_io.written == []


def test_pre_generate_claim_skips_default_generation(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    hook = _Claiming()
    generation = graph_builder.generation(hooks=[hook])

    generation.sync()

    assert generation.synchronizer.writes == 0
    assert hook.post_calls == 1
    assert not generation.has_solution_been_generated()


def test_solution_generated_flag(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    generation = graph_builder.generation()

    assert not generation.has_solution_been_generated()
    generation.sync()
    assert generation.has_solution_been_generated()
    assert generation.solution_file() == _path(graph_builder, "Game.sln")


def test_is_supported_file(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    generation = graph_builder.generation()

    assert generation.is_supported_file("Assets/Core/A.cs")
    assert generation.is_supported_file("Assets/Core/Core.asmdef")
    assert not generation.is_supported_file("Assets/Art/hero.png")


def test_flag_toggle_takes_effect_on_next_pass(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    graph_builder.package("com.registry", "registry")
    graph_builder.assembly("Registry", ["Packages/com.registry/Runtime/R.cs"])
    generation = graph_builder.generation()

    generation.sync()
    assert not (graph_builder.root / "Registry.csproj").exists()

    generation.settings.toggle(GenerationFlags.REGISTRY)
    generation.sync()
    assert (graph_builder.root / "Registry.csproj").exists()


def test_write_failure_propagates(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    file_io = _RecordingFileIO()

    def _fail(path: str, content: str) -> None:
        raise OSError("disk full")

    file_io.write_text = _fail  # type: ignore[method-assign]
    with pytest.raises(OSError):
        _generation(graph_builder, file_io).sync()


def test_rerun_after_partial_failure_heals_outputs(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    file_io = _RecordingFileIO()
    original_write = file_io.write_text
    failing = _path(graph_builder, "Util.csproj")

    def _flaky(path: str, content: str) -> None:
        if path == failing:
            raise OSError("disk full")
        original_write(path, content)

    file_io.write_text = _flaky  # type: ignore[method-assign]
    with pytest.raises(OSError):
        _generation(graph_builder, file_io).sync()
    assert failing not in file_io.files

    file_io.write_text = original_write  # type: ignore[method-assign]
    _generation(graph_builder, file_io).sync()
    assert failing in file_io.files

    file_io.written.clear()
    _generation(graph_builder, file_io).sync()
    assert file_io.written == []


def test_from_config_reads_manifest_and_settings(graph_builder: GraphBuilder) -> None:
    _graph(graph_builder)
    graph_builder.write_manifest()
    graph_builder.write(
        {
            ".projgen.yml": """
            project_name: Sample
            generation:
              default_flags: [local, embedded, registry]
            postprocessors:
              enabled: []
            flavor:
              build_target: StandaloneLinux64
              host_version: 2022.3.10f1
            """
        }
    )

    generation = ProjectGeneration.from_config(load_config(graph_builder.root))
    generation.sync()

    assert generation.settings.has(GenerationFlags.REGISTRY)
    assert len(generation.hooks) == 0
    root = Path(graph_builder.root).resolve()
    text = (root / "Core.csproj").read_text(encoding="utf-8")
    assert "<HostBuildTarget>StandaloneLinux64</HostBuildTarget>" in text
    assert (root / "Sample.sln").exists()
