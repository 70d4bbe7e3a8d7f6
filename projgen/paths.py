"""Path helpers shared by the generators."""

from __future__ import annotations

import os
import posixpath

WIN_SEPARATOR = "\\"
UNIX_SEPARATOR = "/"


def to_unix(path: str) -> str:
    if not path:
        return path
    return path.replace(WIN_SEPARATOR, UNIX_SEPARATOR)


def is_rooted(path: str) -> bool:
    if not path:
        return False
    if os.path.isabs(path) or path.startswith((WIN_SEPARATOR, UNIX_SEPARATOR)):
        return True
    # Drive-letter paths are rooted on every host.
    return len(path) > 2 and path[1] == ":" and path[2] in (WIN_SEPARATOR, UNIX_SEPARATOR)


def make_absolute(path: str, base: str) -> str:
    """Return ``path`` anchored at ``base`` when relative, normalised to ``/``."""
    if not path:
        return ""
    unix = to_unix(path)
    if is_rooted(unix):
        return posixpath.normpath(unix)
    return posixpath.normpath(posixpath.join(to_unix(base), unix))


def relative_to_directory(path: str, directory: str) -> str:
    """Return ``path`` relative to ``directory`` with ``\\`` separators, or ``path``
    itself when it lies outside the directory."""
    directory = to_unix(directory).rstrip(UNIX_SEPARATOR)
    if path.startswith(directory + UNIX_SEPARATOR):
        return path[len(directory):].lstrip(UNIX_SEPARATOR).replace(UNIX_SEPARATOR, WIN_SEPARATOR)
    return path


def skip_path_prefix(path: str, prefix: str) -> str:
    for separator in (os.sep, UNIX_SEPARATOR):
        if path.startswith(f"{prefix}{separator}"):
            return path[len(prefix) + 1:]
    return path


def extension_of(path: str) -> str:
    """Return the lower-cased extension without its dot.

    Paths without an extension are returned unchanged; they never match a
    supported extension.
    """
    _, extension = posixpath.splitext(to_unix(path))
    if not extension:
        return path
    return extension.lstrip(".").lower()


def stem_of(path: str) -> str:
    name = posixpath.basename(to_unix(path))
    stem, _ = posixpath.splitext(name)
    return stem


__all__ = [
    "extension_of",
    "is_rooted",
    "make_absolute",
    "relative_to_directory",
    "skip_path_prefix",
    "stem_of",
    "to_unix",
]
