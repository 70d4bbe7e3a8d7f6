"""Decides which asset paths belong in the generated projects."""

from __future__ import annotations

from typing import Dict, Optional, Set, Tuple

from .flags import GenerationSettings
from .logging import get_logger
from .models import PackageInfo, ScriptingLanguage
from .paths import extension_of, to_unix
from .provider.base import MetadataProvider

PACKAGES_PREFIX = "packages/"
ALWAYS_SUPPORTED_EXTENSIONS = frozenset({"dll", "asmdef", "additionalfile"})


def resolve_package_root(path: str) -> Optional[str]:
    """Return the lower-cased ``packages/<name>`` root of ``path``, if any."""
    if path[: len(PACKAGES_PREFIX)].lower() != PACKAGES_PREFIX:
        return None
    separator = path.find("/", len(PACKAGES_PREFIX))
    if separator == -1:
        return path.lower()
    return path[:separator].lower()


def scripting_language_for_extension(extension_without_dot: str) -> ScriptingLanguage:
    return ScriptingLanguage.CSHARP if extension_without_dot == "cs" else ScriptingLanguage.NONE


class PackageResolver:
    """Per-pass cache of package lookups keyed by package root.

    A resolver lives for exactly one sync pass.
    """

    def __init__(self, provider: MetadataProvider) -> None:
        self._provider = provider
        self._cache: Dict[str, Optional[PackageInfo]] = {}

    def find(self, path: str) -> Optional[PackageInfo]:
        root = resolve_package_root(to_unix(path))
        if root is None:
            return None
        if root in self._cache:
            return self._cache[root]
        info = self._provider.find_package_info(root)
        self._cache[root] = info
        return info

    def is_internalized(self, path: str, settings: GenerationSettings) -> bool:
        """Return True when ``path`` sits in a package whose origin is not generated."""
        if not path.strip():
            return False
        info = self.find(path)
        if info is None:
            return False
        return not settings.allows(info.source)

    def __len__(self) -> int:
        return len(self._cache)


class AssetFilter:
    """Extension whitelist combined with the package-origin policy."""

    def __init__(
        self,
        provider: MetadataProvider,
        settings: GenerationSettings,
        resolver: PackageResolver,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self.resolver = resolver
        self.logger = get_logger("filtering")
        self._supported: Set[str] = set(ALWAYS_SUPPORTED_EXTENSIONS)
        self.refresh_extensions()

    @property
    def supported_extensions(self) -> frozenset[str]:
        return frozenset(self._supported)

    def refresh_extensions(self) -> None:
        supported = set(ALWAYS_SUPPORTED_EXTENSIONS)
        supported.update(self._provider.project_supported_extensions)
        try:
            supported.update(self._provider.builtin_extensions())
        except Exception as exc:
            self.logger.debug("Built-in extension list unavailable: %s", exc)
        self._supported = supported

    def supported_extension(self, path: str) -> Tuple[bool, str]:
        extension = extension_of(path)
        return extension in self._supported, extension

    def is_supported(self, path: str) -> bool:
        return self.supported_extension(path)[0]

    def is_internalized(self, path: str) -> bool:
        return self.resolver.is_internalized(path, self._settings)

    def should_be_part_of_project(self, path: str) -> bool:
        if not self.is_supported(path):
            return False
        return not self.is_internalized(path)


__all__ = [
    "ALWAYS_SUPPORTED_EXTENSIONS",
    "AssetFilter",
    "PackageResolver",
    "resolve_package_root",
    "scripting_language_for_extension",
]
