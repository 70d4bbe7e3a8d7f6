"""Core data models shared across projgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ScriptingLanguage(Enum):
    NONE = "none"
    CSHARP = "csharp"


class AssemblyKind(Enum):
    """Which compilation graph an assembly belongs to."""

    EDITOR = "editor"
    PLAYER = "player"


class PackageSource(Enum):
    """Where a package found under ``Packages/`` originates from."""

    EMBEDDED = "embedded"
    REGISTRY = "registry"
    BUILT_IN = "builtin"
    UNKNOWN = "unknown"
    LOCAL = "local"
    GIT = "git"
    LOCAL_TARBALL = "localtarball"


@dataclass
class CompilerOptions:
    """Per-assembly compiler switches supplied by the build pipeline."""

    allow_unsafe_code: bool = False
    response_files: List[str] = field(default_factory=list)
    api_compatibility_level: str = "NET_Standard"
    analyzer_paths: List[str] = field(default_factory=list)
    ruleset_path: Optional[str] = None


@dataclass
class Assembly:
    """A named compilation unit as reported by the metadata provider."""

    name: str
    output_path: str
    source_files: List[str] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)
    assembly_references: List["Assembly"] = field(default_factory=list)
    compiled_assembly_references: List[str] = field(default_factory=list)
    compiler_options: CompilerOptions = field(default_factory=CompilerOptions)
    root_namespace: Optional[str] = None


@dataclass
class ResponseFileData:
    """Extra compiler arguments parsed from one response file."""

    defines: List[str] = field(default_factory=list)
    full_path_references: List[str] = field(default_factory=list)
    unsafe: bool = False
    other_arguments: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PackageInfo:
    """On-disk origin of a package root."""

    name: str
    source: PackageSource
    asset_path: str
    resolved_path: Optional[str] = None


@dataclass
class ProjectProperties:
    """Values rendered into a project file header."""

    project_guid: str
    lang_version: str
    assembly_name: str
    root_namespace: str
    output_path: str
    defines: List[str] = field(default_factory=list)
    unsafe: bool = False
    analyzers: List[str] = field(default_factory=list)
    ruleset_path: Optional[str] = None
    flavoring_project_type: str = ""
    flavoring_build_target: str = ""
    flavoring_host_version: str = ""
    flavoring_package_version: str = ""
