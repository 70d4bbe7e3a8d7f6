"""Contract for the host that supplies the compilation graph."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from ..models import Assembly, AssemblyKind, PackageInfo, ResponseFileData
from ..paths import make_absolute


class MetadataProvider(ABC):
    """Supplies assemblies, asset paths and package metadata for a project."""

    def __init__(self, project_directory: str) -> None:
        self.project_directory = project_directory

    @property
    @abstractmethod
    def project_supported_extensions(self) -> Sequence[str]:
        """Extensions the user asked to include, without leading dots."""

    @property
    def root_namespace(self) -> str:
        return ""

    def builtin_extensions(self) -> Sequence[str]:
        """Extensions the host always includes. Implementations may raise."""
        return ()

    @abstractmethod
    def get_assemblies(self, kind: AssemblyKind) -> Iterable[Assembly]:
        """Return every assembly of the requested compilation graph."""

    @abstractmethod
    def get_all_asset_paths(self) -> Iterable[str]:
        """Return every asset path known to the host, relative to the project."""

    @abstractmethod
    def get_assembly_name_from_script_path(self, path: str) -> Optional[str]:
        """Return the assembly file name (``Name.dll``) owning ``path``."""

    @abstractmethod
    def find_package_info(self, package_root: str) -> Optional[PackageInfo]:
        """Look up the package rooted at ``package_root`` (``packages/<name>``)."""

    @abstractmethod
    def parse_response_file(
        self,
        path: str,
        project_directory: str,
        system_reference_directories: Sequence[str],
    ) -> ResponseFileData:
        """Parse one response file into defines, references and arguments."""

    def system_assembly_directories(self, api_compatibility_level: str) -> Sequence[str]:
        return ()

    def resolve_path(self, path: str) -> str:
        """Return the absolute on-disk location of ``path`` using ``/`` separators."""
        return make_absolute(path, self.project_directory)


__all__ = ["MetadataProvider"]
