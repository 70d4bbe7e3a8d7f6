"""Metadata provider backed by a YAML/JSON compilation manifest."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

from ..logging import get_logger
from ..models import (
    Assembly,
    AssemblyKind,
    CompilerOptions,
    PackageInfo,
    PackageSource,
    ResponseFileData,
)
from ..paths import make_absolute, to_unix
from .base import MetadataProvider
from .response_files import read_response_file

_SECTION_BY_KIND = {
    AssemblyKind.EDITOR: "assemblies",
    AssemblyKind.PLAYER: "player_assemblies",
}


class ManifestError(RuntimeError):
    """Raised when the compilation manifest is malformed."""


class ManifestMetadataProvider(MetadataProvider):
    """Serves the compilation graph described by a manifest document.

    The manifest is the hand-off format for build pipelines that cannot host
    projgen in-process: they dump their assemblies, packages and asset list
    once and projgen renders from that snapshot.
    """

    def __init__(self, data: Mapping[str, Any], project_directory: str) -> None:
        super().__init__(to_unix(project_directory))
        if not isinstance(data, Mapping):
            raise ManifestError("Compilation manifest must contain a mapping at the root")
        self._data = data
        self.logger = get_logger("provider")
        settings = _as_dict(data.get("settings"))
        self._user_extensions = _as_str_list(settings.get("user_extensions"))
        self._builtin_extensions = _as_str_list(settings.get("builtin_extensions"))
        self._root_namespace = str(settings.get("root_namespace") or "")
        self._packages = self._parse_packages(data.get("packages"))
        self._system_directories = {
            str(level): _as_str_list(directories)
            for level, directories in _as_dict(data.get("system_reference_directories")).items()
        }
        self._script_owners, self._root_owners = self._index_owners()

    @classmethod
    def from_file(cls, path: Path, project_directory: Path | None = None) -> "ManifestMetadataProvider":
        manifest_path = path.expanduser().resolve()
        try:
            text = manifest_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManifestError(f"Cannot read manifest {manifest_path}: {exc}") from exc
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ManifestError(f"Failed to parse {manifest_path.name}: {exc}") from exc
        base = project_directory if project_directory is not None else manifest_path.parent
        return cls(data, str(Path(base).resolve()))

    # ------------------------------------------------------------------
    # MetadataProvider API

    @property
    def project_supported_extensions(self) -> Sequence[str]:
        return list(self._user_extensions)

    @property
    def root_namespace(self) -> str:
        return self._root_namespace

    def builtin_extensions(self) -> Sequence[str]:
        return list(self._builtin_extensions)

    def get_assemblies(self, kind: AssemblyKind) -> Iterable[Assembly]:
        entries = self._data.get(_SECTION_BY_KIND[kind]) or []
        if not isinstance(entries, list):
            raise ManifestError(f"'{_SECTION_BY_KIND[kind]}' must be a list")
        return self._build_assemblies(entries)

    def get_all_asset_paths(self) -> Iterable[str]:
        assets = _as_str_list(self._data.get("assets"))
        if assets:
            return assets
        seen: Dict[str, None] = {}
        for entry in self._data.get("assemblies") or []:
            for source in _as_str_list(_as_dict(entry).get("source_files")):
                seen.setdefault(source, None)
        return list(seen)

    def get_assembly_name_from_script_path(self, path: str) -> Optional[str]:
        normalised = to_unix(path)
        owner = self._script_owners.get(normalised)
        if owner is None:
            owner = self._owner_by_root(normalised)
        if owner is None:
            return None
        return f"{owner}.dll"

    def find_package_info(self, package_root: str) -> Optional[PackageInfo]:
        return self._packages.get(package_root.lower())

    def parse_response_file(
        self,
        path: str,
        project_directory: str,
        system_reference_directories: Sequence[str],
    ) -> ResponseFileData:
        data = read_response_file(path, project_directory, system_reference_directories)
        for error in data.errors:
            self.logger.debug("Response file issue: %s", error)
        return data

    def system_assembly_directories(self, api_compatibility_level: str) -> Sequence[str]:
        return list(self._system_directories.get(api_compatibility_level, []))

    def resolve_path(self, path: str) -> str:
        normalised = to_unix(path)
        lowered = normalised.lower()
        for package in self._packages.values():
            if not package.resolved_path:
                continue
            prefix = package.asset_path.lower()
            if lowered == prefix or lowered.startswith(prefix + "/"):
                remainder = normalised[len(prefix):].lstrip("/")
                resolved = to_unix(package.resolved_path)
                return posixpath.join(resolved, remainder) if remainder else resolved
        return make_absolute(normalised, self.project_directory)

    # ------------------------------------------------------------------
    # Internal helpers

    def _parse_packages(self, raw: Any) -> Dict[str, PackageInfo]:
        packages: Dict[str, PackageInfo] = {}
        if raw is None:
            return packages
        if not isinstance(raw, list):
            raise ManifestError("'packages' must be a list")
        for entry in raw:
            entry = _as_dict(entry)
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                raise ManifestError("Every package needs a name")
            asset_path = to_unix(str(entry.get("asset_path") or f"Packages/{name}")).rstrip("/")
            source_name = str(entry.get("source") or "unknown").lower().replace("_", "").replace("-", "")
            try:
                source = PackageSource(source_name)
            except ValueError as exc:
                raise ManifestError(f"Unknown package source '{entry.get('source')}' for {name}") from exc
            resolved = entry.get("resolved_path")
            packages[asset_path.lower()] = PackageInfo(
                name=name,
                source=source,
                asset_path=asset_path,
                resolved_path=to_unix(str(resolved)) if resolved else None,
            )
        return packages

    def _index_owners(self) -> tuple[Dict[str, str], List[tuple[str, str]]]:
        scripts: Dict[str, str] = {}
        roots: List[tuple[str, str]] = []
        for entry in self._data.get("assemblies") or []:
            entry = _as_dict(entry)
            name = entry.get("name")
            if not isinstance(name, str):
                continue
            for source in _as_str_list(entry.get("source_files")):
                scripts.setdefault(to_unix(source), name)
            root = entry.get("root")
            if isinstance(root, str) and root:
                roots.append((to_unix(root).rstrip("/"), name))
        # Longest root wins so nested assembly definitions shadow their parents.
        roots.sort(key=lambda item: len(item[0]), reverse=True)
        return scripts, roots

    def _owner_by_root(self, path: str) -> Optional[str]:
        for root, name in self._root_owners:
            if path.startswith(root + "/"):
                return name
        return None

    def _build_assemblies(self, entries: List[Any]) -> List[Assembly]:
        assemblies: List[Assembly] = []
        by_name: Dict[str, Assembly] = {}
        pending: List[tuple[Assembly, List[str]]] = []
        for raw in entries:
            entry = _as_dict(raw)
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                raise ManifestError("Every assembly needs a name")
            options = _as_dict(entry.get("compiler_options"))
            ruleset = options.get("ruleset_path")
            assembly = Assembly(
                name=name,
                output_path=to_unix(str(entry.get("output_path") or f"Library/ScriptAssemblies/{name}.dll")),
                source_files=_as_str_list(entry.get("source_files")),
                defines=_as_str_list(entry.get("defines")),
                compiled_assembly_references=_as_str_list(entry.get("compiled_references")),
                compiler_options=CompilerOptions(
                    allow_unsafe_code=bool(options.get("allow_unsafe_code", False)),
                    response_files=_as_str_list(options.get("response_files")),
                    api_compatibility_level=str(options.get("api_compatibility_level") or "NET_Standard"),
                    analyzer_paths=_as_str_list(options.get("analyzer_paths")),
                    ruleset_path=str(ruleset) if ruleset else None,
                ),
                root_namespace=_as_optional_str(entry.get("root_namespace")),
            )
            assemblies.append(assembly)
            by_name[name] = assembly
            pending.append((assembly, _as_str_list(entry.get("references"))))

        for assembly, reference_names in pending:
            for reference_name in reference_names:
                reference = by_name.get(reference_name)
                if reference is None:
                    raise ManifestError(
                        f"Assembly '{assembly.name}' references unknown assembly '{reference_name}'"
                    )
                assembly.assembly_references.append(reference)
        return assemblies


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_optional_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and str(value) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ManifestError", "ManifestMetadataProvider"]
