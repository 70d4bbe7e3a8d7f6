"""Renders the solution file listing every generated project."""

from __future__ import annotations

import os
import posixpath
import re
from dataclasses import dataclass
from typing import Iterable, List

from ..guid import GuidGenerator
from ..models import Assembly
from ..paths import to_unix
from .project import PROJECT_EXTENSION, assembly_name_for
from .templates import get_template

SOLUTION_EXTENSION = ".sln"
CSHARP_PROJECT_TYPE_GUID = "FAE04EC0-301F-11D3-BF4B-00C04F79EFBC"
CONFIGURATIONS = ("Debug", "Release")

_WINDOWS_INVALID = r'\?|&|\*|"|<|>|\||#|%|\^|;'
_INVALID_CHARACTERS = re.compile(_WINDOWS_INVALID if os.sep == "\\" else _WINDOWS_INVALID + r"|:")


def sanitize_solution_name(project_name: str) -> str:
    return _INVALID_CHARACTERS.sub("_", project_name)


def is_relevant_for_solution(assembly: Assembly) -> bool:
    # Extension check only; package-origin policy is not applied here.
    return any(posixpath.splitext(to_unix(source))[1] == ".cs" for source in assembly.source_files)


def relevant_assemblies(assemblies: Iterable[Assembly]) -> List[Assembly]:
    return [assembly for assembly in assemblies if is_relevant_for_solution(assembly)]


@dataclass(frozen=True)
class SolutionEntry:
    name: str
    file_name: str
    guid: str


class SolutionFileGenerator:
    """Builds the ``.sln`` document for a project group."""

    def __init__(
        self,
        project_name: str,
        project_directory: str,
        guid_generator: GuidGenerator | None = None,
    ) -> None:
        self.project_name = project_name
        self.project_directory = to_unix(project_directory).rstrip("/")
        self.guids = guid_generator or GuidGenerator()

    def solution_file(self) -> str:
        return posixpath.join(
            self.project_directory, f"{sanitize_solution_name(self.project_name)}{SOLUTION_EXTENSION}"
        )

    def entries(self, assemblies: Iterable[Assembly]) -> List[SolutionEntry]:
        entries: List[SolutionEntry] = []
        for assembly in relevant_assemblies(assemblies):
            name = assembly_name_for(assembly.output_path, assembly.name)
            entries.append(
                SolutionEntry(
                    name=name,
                    file_name=f"{name}{PROJECT_EXTENSION}",
                    guid=self.guids.project_guid(self.project_name, name),
                )
            )
        return entries

    def render(self, assemblies: Iterable[Assembly]) -> str:
        return get_template("solution.sln.j2").render(
            projects=self.entries(assemblies),
            project_type_guid=CSHARP_PROJECT_TYPE_GUID,
            configurations=CONFIGURATIONS,
        )


__all__ = [
    "CSHARP_PROJECT_TYPE_GUID",
    "SolutionFileGenerator",
    "is_relevant_for_solution",
    "relevant_assemblies",
    "sanitize_solution_name",
]
