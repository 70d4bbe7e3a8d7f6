"""Persistent key-value store for generation settings."""

from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Dict, Optional, Protocol

_STORE_VERSION = 1


class KeyValueStore(Protocol):
    """Integer settings that survive across process runs."""

    def get_int(self, key: str, default: int) -> int: ...

    def set_int(self, key: str, value: int) -> None: ...

    def persist(self) -> None: ...


class SettingsStore:
    """Stores integer settings in a versioned JSON file."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    def get_int(self, key: str, default: int) -> int:
        entry = self._entries.get(key)
        if not entry:
            return default
        value = entry.get("value")
        if not isinstance(value, int) or isinstance(value, bool):
            return default
        return value

    def set_int(self, key: str, value: int) -> None:
        self._entries[key] = {
            "value": int(value),
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        self._dirty = True

    def delete(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {
            "version": _STORE_VERSION,
            "entries": self._entries,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if "value" not in raw:
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


class MemorySettingsStore:
    """In-process store used when no settings file is configured."""

    def __init__(self, initial: Optional[Dict[str, int]] = None) -> None:
        self._values: Dict[str, int] = dict(initial or {})
        self.persist_calls = 0

    def get_int(self, key: str, default: int) -> int:
        return self._values.get(key, default)

    def set_int(self, key: str, value: int) -> None:
        self._values[key] = int(value)

    def persist(self) -> None:
        self.persist_calls += 1


__all__ = ["KeyValueStore", "MemorySettingsStore", "SettingsStore"]
