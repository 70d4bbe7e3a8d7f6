"""Full and incremental generation of project and solution files."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Collection, Iterable, List, Set

from .config import ProjGenConfig
from .filtering import AssetFilter, PackageResolver
from .flags import GenerationFlags, GenerationSettings
from .generation.project import (
    EDITOR_ASSEMBLY_OUTPUT,
    PLAYER_ASSEMBLY_OUTPUT,
    Flavor,
    ProjectFileGenerator,
)
from .generation.solution import SolutionFileGenerator, relevant_assemblies
from .guid import GuidGenerator
from .hooks import HookRegistry, discover_postprocessors
from .logging import get_logger
from .models import Assembly, AssemblyKind
from .paths import to_unix
from .provider import ManifestMetadataProvider, MetadataProvider
from .stores import SettingsStore
from .sync import FileIO, FileSynchronizer

_REIMPORT_TRIGGER_EXTENSIONS = (".dll", ".asmdef")


@dataclass
class SyncPass:
    """Collaborators scoped to a single sync call."""

    filter: AssetFilter
    projects: ProjectFileGenerator


class ProjectGeneration:
    """Keeps the generated solution and project files in step with the host."""

    def __init__(
        self,
        project_directory: str | Path,
        provider: MetadataProvider,
        settings: GenerationSettings,
        *,
        hooks: HookRegistry | None = None,
        file_io: FileIO | None = None,
        guid_generator: GuidGenerator | None = None,
        flavor: Flavor | None = None,
        project_name: str | None = None,
    ) -> None:
        self.project_directory = to_unix(str(project_directory)).rstrip("/")
        self.project_name = project_name or posixpath.basename(self.project_directory)
        self.provider = provider
        self.settings = settings
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.guids = guid_generator or GuidGenerator()
        self.flavor = flavor or Flavor()
        self.synchronizer = FileSynchronizer(file_io or FileIO(), self.hooks)
        self.solution = SolutionFileGenerator(self.project_name, self.project_directory, self.guids)
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_config(cls, config: ProjGenConfig, *, hooks: HookRegistry | None = None) -> "ProjectGeneration":
        provider = ManifestMetadataProvider.from_file(config.manifest, config.root)
        settings = GenerationSettings(SettingsStore(config.settings_path), default=config.default_flags)
        if hooks is None:
            hooks = HookRegistry(discover_postprocessors(config.postprocessors.enabled))
        flavor = Flavor(
            build_target=config.flavor.build_target,
            host_version=config.flavor.host_version,
            package_version=config.flavor.package_version,
        )
        return cls(
            config.root,
            provider,
            settings,
            hooks=hooks,
            flavor=flavor,
            project_name=config.project_name,
        )

    # ------------------------------------------------------------------
    # Entry points

    def sync(self) -> None:
        """Regenerate the solution and every eligible project file."""
        sync_pass = self.begin_pass()
        claimed = self.hooks.pre_generate()
        if claimed:
            self.logger.info("A post-processor generated the projects; skipping default generation")
        else:
            self._generate_all(sync_pass)
        self.hooks.post_generate()

    def sync_if_needed(self, affected_files: Iterable[str], reimported_files: Iterable[str]) -> bool:
        """Regenerate only what the changed paths touch; return False when nothing did."""
        sync_pass = self.begin_pass()
        affected = list(affected_files)
        reimported = list(reimported_files)
        if not self._has_relevant_changes(sync_pass, affected, reimported):
            return False

        assemblies = self.collect_assemblies(sync_pass)
        project_assemblies = relevant_assemblies(assemblies)
        self._sync_solution(assemblies)

        additional_assets = sync_pass.projects.build_additional_assets(self.provider.get_all_asset_paths())
        touched = self._assembly_names_for(affected) | self._assembly_names_for(reimported)
        regenerated = 0
        for assembly in project_assemblies:
            if assembly.name not in touched:
                continue
            self._sync_project(sync_pass, assembly, additional_assets)
            regenerated += 1
        self.logger.info(
            "Incremental sync regenerated the solution and %d of %d projects",
            regenerated,
            len(project_assemblies),
        )
        return True

    # ------------------------------------------------------------------
    # Queries

    def begin_pass(self) -> SyncPass:
        resolver = PackageResolver(self.provider)
        asset_filter = AssetFilter(self.provider, self.settings, resolver)
        projects = ProjectFileGenerator(
            self.project_name,
            self.project_directory,
            self.provider,
            asset_filter,
            guid_generator=self.guids,
            flavor=self.flavor,
        )
        return SyncPass(filter=asset_filter, projects=projects)

    def is_supported_file(self, path: str) -> bool:
        return self.begin_pass().filter.is_supported(path)

    def solution_file(self) -> str:
        return self.solution.solution_file()

    def has_solution_been_generated(self) -> bool:
        return self.synchronizer.file_io.exists(self.solution_file())

    def collect_assemblies(self, sync_pass: SyncPass) -> List[Assembly]:
        """Return editor assemblies, plus player ones when enabled, that have eligible sources."""
        graphs = [(AssemblyKind.EDITOR, EDITOR_ASSEMBLY_OUTPUT)]
        if self.settings.has(GenerationFlags.PLAYER_ASSEMBLIES):
            graphs.append((AssemblyKind.PLAYER, PLAYER_ASSEMBLY_OUTPUT))

        collected: List[Assembly] = []
        for kind, output_path in graphs:
            for assembly in self.provider.get_assemblies(kind):
                if any(sync_pass.filter.should_be_part_of_project(path) for path in assembly.source_files):
                    collected.append(replace(assembly, output_path=output_path))
        return collected

    # ------------------------------------------------------------------
    # Internal helpers

    def _generate_all(self, sync_pass: SyncPass) -> None:
        assemblies = self.collect_assemblies(sync_pass)
        additional_assets = sync_pass.projects.build_additional_assets(self.provider.get_all_asset_paths())
        self._sync_solution(assemblies)
        project_assemblies = relevant_assemblies(assemblies)
        for assembly in project_assemblies:
            self._sync_project(sync_pass, assembly, additional_assets)
        self.logger.info("Synced solution and %d projects", len(project_assemblies))

    def _sync_solution(self, assemblies: List[Assembly]) -> None:
        self.synchronizer.sync_solution(self.solution_file(), self.solution.render(assemblies))

    def _sync_project(self, sync_pass: SyncPass, assembly: Assembly, additional_assets: dict[str, str]) -> None:
        projects = sync_pass.projects
        text = projects.render(assembly, additional_assets, projects.parse_response_files(assembly))
        self.synchronizer.sync_project(projects.project_file(assembly), text)

    def _has_relevant_changes(
        self, sync_pass: SyncPass, affected: Collection[str], reimported: Collection[str]
    ) -> bool:
        if any(sync_pass.filter.should_be_part_of_project(path) for path in affected):
            return True
        return any(posixpath.splitext(to_unix(path))[1] in _REIMPORT_TRIGGER_EXTENSIONS for path in reimported)

    def _assembly_names_for(self, paths: Iterable[str]) -> Set[str]:
        names: Set[str] = set()
        for path in paths:
            name = self.provider.get_assembly_name_from_script_path(path)
            if not name or not name.strip():
                continue
            parts = [part for part in name.split(".dll") if part]
            if parts:
                names.add(parts[0])
        return names


__all__ = ["ProjectGeneration", "SyncPass"]
