"""Parsing of compiler response files (``csc.rsp`` and friends)."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Iterable, List, Sequence

from ..models import ResponseFileData
from ..paths import is_rooted, make_absolute, to_unix

_DEFINE_KEYS = {"define", "d"}
_REFERENCE_KEYS = {"reference", "r"}


def read_response_file(
    path: str,
    project_directory: str,
    system_reference_directories: Sequence[str],
) -> ResponseFileData:
    """Read and parse a response file, relative paths anchored at the project."""
    full_path = Path(make_absolute(path, project_directory))
    try:
        text = full_path.read_text(encoding="utf-8")
    except OSError as exc:
        return ResponseFileData(errors=[f"{path}: {exc.strerror or exc}"])
    return parse_response_file(text, project_directory, system_reference_directories)


def parse_response_file(
    text: str,
    project_directory: str,
    system_reference_directories: Sequence[str] = (),
) -> ResponseFileData:
    """Split response-file text into defines, references and other arguments."""
    data = ResponseFileData()
    for token in _tokenize(text):
        if not token:
            continue
        if token[0] not in "-/" or len(token) < 2:
            data.other_arguments.append(token)
            continue

        body = token[1:]
        key, sep, value = body.partition(":")
        key = key.lower()

        if key in ("unsafe", "unsafe+") and not sep:
            data.unsafe = True
            continue
        if key == "unsafe-" and not sep:
            data.unsafe = False
            continue
        if key in _DEFINE_KEYS and sep:
            data.defines.extend(_split_values(value))
            continue
        if key in _REFERENCE_KEYS and sep:
            for reference in _split_values(value):
                resolved = _resolve_reference(
                    reference, project_directory, system_reference_directories
                )
                if resolved is None:
                    data.errors.append(f"Reference not found: {reference}")
                    continue
                data.full_path_references.append(resolved)
            continue

        data.other_arguments.append(token)
    return data


def _tokenize(text: str) -> Iterable[str]:
    lines: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    tokens = shlex.split("\n".join(lines), posix=False)
    return [_unquote(token) for token in tokens]


def _unquote(token: str) -> str:
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'":
        return token[1:-1]
    return token


def _split_values(value: str) -> List[str]:
    parts = value.replace(",", ";").split(";")
    return [part.strip().strip('"') for part in parts if part.strip()]


def _resolve_reference(
    reference: str,
    project_directory: str,
    system_reference_directories: Sequence[str],
) -> str | None:
    reference = to_unix(reference)
    if is_rooted(reference):
        return make_absolute(reference, project_directory)

    candidate = make_absolute(reference, project_directory)
    if Path(candidate).exists():
        return candidate

    for directory in system_reference_directories:
        candidate = make_absolute(reference, directory)
        if Path(candidate).exists():
            return candidate

    return None


__all__ = ["parse_response_file", "read_response_file"]
