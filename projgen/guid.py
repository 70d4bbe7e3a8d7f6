"""Deterministic identifiers for generated projects and solutions."""

from __future__ import annotations

import hashlib
import uuid


def identifier_for(seed: str) -> str:
    """Return an upper-case dashed GUID derived from the MD5 of ``seed``.

    The digest is laid out with the little-endian field order used by .NET's
    ``Guid(byte[])`` constructor, so identifiers match the ones editors have
    already cached for the same assembly names.
    """
    digest = hashlib.md5(seed.encode("utf-8")).digest()
    return str(uuid.UUID(bytes_le=digest)).upper()


class GuidGenerator:
    """Computes project and solution identifiers for a project group."""

    def project_guid(self, project_name: str, assembly_name: str) -> str:
        return identifier_for(project_name + assembly_name)

    def solution_guid(self, project_name: str, extension: str) -> str:
        return identifier_for(project_name + extension)


__all__ = ["GuidGenerator", "identifier_for"]
