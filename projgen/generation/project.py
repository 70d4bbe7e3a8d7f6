"""Renders one MSBuild project file per assembly."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..filtering import AssetFilter, scripting_language_for_extension
from ..guid import GuidGenerator
from ..logging import get_logger
from ..models import (
    Assembly,
    PackageInfo,
    ProjectProperties,
    ResponseFileData,
    ScriptingLanguage,
)
from ..paths import is_rooted, make_absolute, relative_to_directory, skip_path_prefix, stem_of, to_unix
from ..provider.base import MetadataProvider
from .templates import NEWLINE, get_template, xml_escape

PROJECT_EXTENSION = ".csproj"
DEFAULT_LANG_VERSION = "latest"
EDITOR_ASSEMBLY_OUTPUT = "Temp\\bin\\Debug\\"
PLAYER_ASSEMBLY_OUTPUT = "Temp\\bin\\Debug\\Player\\"
PLAYER_SUFFIX = ".Player"


class ProjectType(IntEnum):
    Game = 1
    GamePlugins = 3
    Editor = 5
    EditorPlugins = 7


def project_type_of(assembly_name: str) -> ProjectType:
    plugins = "firstpass" in assembly_name
    editor = "Editor" in assembly_name
    if plugins and editor:
        return ProjectType.EditorPlugins
    if plugins:
        return ProjectType.GamePlugins
    if editor:
        return ProjectType.Editor
    return ProjectType.Game


def assembly_name_for(output_path: str, name: str) -> str:
    """Return the rendered project name; player-graph assemblies get a suffix."""
    if output_path == PLAYER_ASSEMBLY_OUTPUT:
        return name + PLAYER_SUFFIX
    return name


def xml_filename(path: str) -> str:
    if not path:
        return path
    path = path.replace("%", "%25").replace(";", "%3b")
    return xml_escape(path)


def other_arguments(response_files: Sequence[ResponseFileData], name: str) -> List[str]:
    """Return values of ``/name:value`` or ``-name:value`` response-file arguments."""
    values: List[str] = []
    for data in response_files:
        for raw in data.other_arguments:
            if not raw:
                continue
            argument = raw.strip()
            if not argument.startswith(("/", "-")):
                continue
            index = argument.find(":")
            if index == -1:
                continue
            key = argument[1:index].strip()
            if key != name:
                continue
            values.append(argument[index + 1:].strip())
    return values


@dataclass
class Flavor:
    """Informational host details stamped into every project header."""

    build_target: str = ""
    host_version: str = ""
    package_version: str = ""


class ProjectFileGenerator:
    """Builds project document text for assemblies of one project group."""

    def __init__(
        self,
        project_name: str,
        project_directory: str,
        provider: MetadataProvider,
        asset_filter: AssetFilter,
        guid_generator: GuidGenerator | None = None,
        flavor: Flavor | None = None,
    ) -> None:
        self.project_name = project_name
        self.project_directory = to_unix(project_directory).rstrip("/")
        self.provider = provider
        self.filter = asset_filter
        self.guids = guid_generator or GuidGenerator()
        self.flavor = flavor or Flavor()
        self.logger = get_logger("generation.project")

    # ------------------------------------------------------------------
    # Naming

    def rendered_name(self, assembly: Assembly) -> str:
        return assembly_name_for(assembly.output_path, assembly.name)

    def project_file(self, assembly: Assembly) -> str:
        return posixpath.join(self.project_directory, f"{self.rendered_name(assembly)}{PROJECT_EXTENSION}")

    def project_guid(self, assembly: Assembly) -> str:
        return self.guids.project_guid(self.project_name, self.rendered_name(assembly))

    # ------------------------------------------------------------------
    # Per-pass inputs

    def build_additional_assets(self, asset_paths: Iterable[str]) -> Dict[str, str]:
        """Group non-source assets by owning assembly as ready-to-embed item lines."""
        lines_by_assembly: Dict[str, List[str]] = {}
        for asset in asset_paths:
            if self.filter.is_internalized(asset):
                continue
            supported, extension = self.filter.supported_extension(asset)
            if not supported or scripting_language_for_extension(extension) != ScriptingLanguage.NONE:
                continue
            assembly_name = self.provider.get_assembly_name_from_script_path(asset)
            if not assembly_name:
                self.logger.debug("No assembly owns %s; skipping", asset)
                continue
            assembly_name = stem_of(assembly_name)
            lines_by_assembly.setdefault(assembly_name, []).extend(self._include_asset("None", asset))
        return {name: NEWLINE.join(lines) for name, lines in lines_by_assembly.items()}

    def parse_response_files(self, assembly: Assembly) -> List[ResponseFileData]:
        options = assembly.compiler_options
        system_directories = self.provider.system_assembly_directories(options.api_compatibility_level)
        parsed: Dict[str, ResponseFileData] = {}
        for path in options.response_files:
            if path in parsed:
                continue
            parsed[path] = self.provider.parse_response_file(
                path, self.project_directory, system_directories
            )
        return list(parsed.values())

    # ------------------------------------------------------------------
    # Rendering

    def render(
        self,
        assembly: Assembly,
        additional_assets: Mapping[str, str],
        response_files: Sequence[ResponseFileData],
    ) -> str:
        compile_lines: List[str] = []
        dll_references: List[str] = []
        for source in assembly.source_files:
            if not self.filter.should_be_part_of_project(source):
                continue
            _, extension = self.filter.supported_extension(source)
            if extension == "dll":
                dll_references.append(source)
            else:
                compile_lines.extend(self._include_asset("Compile", source))

        internal_outputs = [
            reference.output_path
            for reference in assembly.assembly_references
            if not self._is_in_solution(reference)
        ]
        response_references = [
            reference for data in response_files for reference in data.full_path_references
        ]
        reference_lines = self._reference_lines(
            _unique(
                [
                    *assembly.compiled_assembly_references,
                    *response_references,
                    *dll_references,
                    *internal_outputs,
                ]
            )
        )

        project_reference_lines: List[str] = []
        for reference in assembly.assembly_references:
            if self._is_in_solution(reference):
                project_reference_lines.extend(self._project_reference(assembly, reference))

        return get_template("project.csproj.j2").render(
            p=self.project_properties(assembly, response_files),
            compile_lines=compile_lines,
            additional_assets=additional_assets.get(assembly.name, ""),
            reference_lines=reference_lines,
            has_assembly_references=bool(assembly.assembly_references),
            project_reference_lines=project_reference_lines,
        )

    def project_properties(
        self, assembly: Assembly, response_files: Sequence[ResponseFileData]
    ) -> ProjectProperties:
        options = assembly.compiler_options
        rendered = self.rendered_name(assembly)
        project_type = project_type_of(assembly.name)
        ruleset = self._normalized_path(options.ruleset_path) if options.ruleset_path else None
        return ProjectProperties(
            project_guid=self.guids.project_guid(self.project_name, rendered),
            lang_version=self.lang_version(response_files),
            assembly_name=rendered,
            root_namespace=self._root_namespace(assembly),
            output_path=assembly.output_path,
            defines=_unique([*assembly.defines, *(d for data in response_files for d in data.defines)]),
            unsafe=options.allow_unsafe_code or any(data.unsafe for data in response_files),
            analyzers=_unique(self._normalized_path(path) for path in options.analyzer_paths if path),
            ruleset_path=ruleset,
            flavoring_project_type=f"{project_type.name}:{int(project_type)}",
            flavoring_build_target=self.flavor.build_target,
            flavoring_host_version=self.flavor.host_version,
            flavoring_package_version=self.flavor.package_version,
        )

    def lang_version(self, response_files: Sequence[ResponseFileData]) -> str:
        values = other_arguments(response_files, "langversion")
        if values and values[0]:
            return values[0]
        return DEFAULT_LANG_VERSION

    # ------------------------------------------------------------------
    # Internal helpers

    def _is_in_solution(self, assembly: Assembly) -> bool:
        return any(self.filter.should_be_part_of_project(source) for source in assembly.source_files)

    def _root_namespace(self, assembly: Assembly) -> str:
        if assembly.root_namespace is not None:
            return assembly.root_namespace
        return self.provider.root_namespace

    def _normalized_path(self, path: str) -> str:
        return make_absolute(path, self.project_directory)

    def _relative_path_for(self, path: str) -> tuple[str, Optional[PackageInfo]]:
        package = self.filter.resolver.find(path)
        full_path = self.provider.resolve_path(path)
        return relative_to_directory(full_path, self.project_directory), package

    def _include_asset(self, tag: str, asset: str) -> List[str]:
        filename, package = self._relative_path_for(asset)
        include = xml_filename(filename)
        if is_rooted(filename) and package is not None:
            link = skip_path_prefix(to_unix(asset), to_unix(package.asset_path))
            return [
                f'    <{tag} Include="{include}">',
                f"      <Link>{xml_escape(link)}</Link>",
                f"    </{tag}>",
            ]
        return [f'    <{tag} Include="{include}" />']

    def _reference_lines(self, references: Iterable[str]) -> List[str]:
        lines: List[str] = []
        defined: set[str] = set()
        for reference in references:
            relative, _ = self._relative_path_for(reference)
            name = stem_of(relative)
            # Same file name from another directory is dropped; first one wins.
            if name in defined:
                continue
            defined.add(name)
            lines.extend(
                [
                    f'    <Reference Include="{xml_escape(name)}">',
                    f"      <HintPath>{xml_filename(relative)}</HintPath>",
                    "      <Private>False</Private>",
                    "    </Reference>",
                ]
            )
        return lines

    def _project_reference(self, assembly: Assembly, reference: Assembly) -> List[str]:
        # References follow the graph of the referencing project.
        reference_name = assembly_name_for(assembly.output_path, reference.name)
        guid = self.guids.project_guid(self.project_name, reference_name)
        return [
            f'    <ProjectReference Include="{xml_filename(reference_name)}{PROJECT_EXTENSION}">',
            f"      <Project>{{{guid}}}</Project>",
            f"      <Name>{xml_escape(reference_name)}</Name>",
            "    </ProjectReference>",
        ]


def _unique(values: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


__all__ = [
    "DEFAULT_LANG_VERSION",
    "EDITOR_ASSEMBLY_OUTPUT",
    "Flavor",
    "PLAYER_ASSEMBLY_OUTPUT",
    "ProjectFileGenerator",
    "ProjectType",
    "assembly_name_for",
    "other_arguments",
    "project_type_of",
]
