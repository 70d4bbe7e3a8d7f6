"""Generation flags controlling which package origins are generated."""

from __future__ import annotations

from enum import IntFlag
from typing import Iterable

from .logging import get_logger
from .models import PackageSource
from .stores import KeyValueStore

SETTINGS_KEY = "projgen_generation_flag"


class GenerationFlags(IntFlag):
    NONE = 0
    EMBEDDED = 1
    LOCAL = 2
    REGISTRY = 4
    GIT = 8
    BUILT_IN = 16
    UNKNOWN = 32
    PLAYER_ASSEMBLIES = 64
    LOCAL_TARBALL = 128


DEFAULT_FLAGS = GenerationFlags.LOCAL | GenerationFlags.EMBEDDED

FLAG_FOR_SOURCE = {
    PackageSource.EMBEDDED: GenerationFlags.EMBEDDED,
    PackageSource.REGISTRY: GenerationFlags.REGISTRY,
    PackageSource.BUILT_IN: GenerationFlags.BUILT_IN,
    PackageSource.UNKNOWN: GenerationFlags.UNKNOWN,
    PackageSource.LOCAL: GenerationFlags.LOCAL,
    PackageSource.GIT: GenerationFlags.GIT,
    PackageSource.LOCAL_TARBALL: GenerationFlags.LOCAL_TARBALL,
}


def parse_flag_name(name: str) -> GenerationFlags:
    """Return the flag for a config/CLI spelling such as ``local-tarball``."""
    key = name.strip().upper().replace("-", "_")
    aliases = {"BUILTIN": "BUILT_IN", "LOCALTARBALL": "LOCAL_TARBALL", "PLAYER": "PLAYER_ASSEMBLIES"}
    key = aliases.get(key, key)
    try:
        return GenerationFlags[key]
    except KeyError as exc:
        raise ValueError(f"Unknown generation flag: {name}") from exc


def combine_flags(names: Iterable[str]) -> GenerationFlags:
    result = GenerationFlags.NONE
    for name in names:
        result |= parse_flag_name(name)
    return result


def flag_names(flags: GenerationFlags) -> list[str]:
    return [member.name.lower() for member in GenerationFlags if member and member in flags]


class GenerationSettings:
    """Generation flags round-tripped through a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        default: GenerationFlags = DEFAULT_FLAGS,
        key: str = SETTINGS_KEY,
    ) -> None:
        self._store = store
        self._key = key
        self._flags = GenerationFlags(store.get_int(key, int(default)))
        self.logger = get_logger("flags")

    @property
    def flags(self) -> GenerationFlags:
        return self._flags

    def has(self, flag: GenerationFlags) -> bool:
        return flag in self._flags

    def allows(self, source: PackageSource) -> bool:
        """Return True when packages of ``source`` origin are generated."""
        return self.has(FLAG_FOR_SOURCE[source])

    def toggle(self, flag: GenerationFlags) -> GenerationFlags:
        self._set(self._flags ^ flag)
        self.logger.debug("Toggled %s; flags now %s", flag.name, flag_names(self._flags))
        return self._flags

    def reset(self) -> None:
        self._set(GenerationFlags.NONE)

    def _set(self, value: GenerationFlags) -> None:
        self._flags = GenerationFlags(value)
        self._store.set_int(self._key, int(self._flags))
        self._store.persist()


__all__ = [
    "DEFAULT_FLAGS",
    "GenerationFlags",
    "GenerationSettings",
    "combine_flags",
    "flag_names",
    "parse_flag_name",
]
