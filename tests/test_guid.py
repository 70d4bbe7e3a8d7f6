"""Tests for deterministic project and solution identifiers."""

from __future__ import annotations

import re

from projgen.guid import GuidGenerator, identifier_for

_GUID_PATTERN = re.compile(r"^[0-9A-F]{8}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{12}$")


def test_identifier_uses_dotnet_byte_order() -> None:
    # md5("GameCore") = 3fdc6c96 9d9e bbfc 0011 50ca03c86a50
    assert identifier_for("GameCore") == "966CDC3F-9E9D-FCBB-0011-50CA03C86A50"


def test_project_guid_hashes_project_and_assembly_names() -> None:
    guids = GuidGenerator()
    assert guids.project_guid("Game", "Core") == identifier_for("GameCore")
    assert guids.project_guid("Game", "Core") == guids.project_guid("Game", "Core")
    assert guids.project_guid("Game", "Core") != guids.project_guid("Game", "Util")


def test_solution_guid_hashes_project_name_and_extension() -> None:
    assert GuidGenerator().solution_guid("Game", ".sln") == "0F1DE903-1039-247E-9A50-339DBAB32DF1"


def test_identifiers_are_uppercase_dashed_hex() -> None:
    for seed in ("", "Game", "Ünïcode.Player"):
        assert _GUID_PATTERN.match(identifier_for(seed))
