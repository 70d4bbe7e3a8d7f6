"""Tests for the settings store."""

from __future__ import annotations

import json
from pathlib import Path

from projgen.stores import MemorySettingsStore, SettingsStore


def test_settings_store_round_trip(tmp_path: Path) -> None:
    store_path = tmp_path / "state" / "settings.json"
    store = SettingsStore(store_path)
    store.set_int("projgen_generation_flag", 67)
    store.persist()

    loaded = SettingsStore(store_path)
    assert loaded.get_int("projgen_generation_flag", 0) == 67


def test_settings_store_returns_default_for_missing_key(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    assert store.get_int("missing", 3) == 3


def test_settings_store_ignores_corrupt_file(tmp_path: Path) -> None:
    store_path = tmp_path / "settings.json"
    store_path.write_text("{not json", encoding="utf-8")

    store = SettingsStore(store_path)
    assert store.get_int("projgen_generation_flag", 3) == 3


def test_settings_store_ignores_other_versions(tmp_path: Path) -> None:
    store_path = tmp_path / "settings.json"
    payload = {"version": 99, "entries": {"projgen_generation_flag": {"value": 5}}}
    store_path.write_text(json.dumps(payload), encoding="utf-8")

    assert SettingsStore(store_path).get_int("projgen_generation_flag", 3) == 3


def test_settings_store_persist_is_noop_when_clean(tmp_path: Path) -> None:
    store_path = tmp_path / "settings.json"
    SettingsStore(store_path).persist()
    assert not store_path.exists()


def test_settings_store_delete_removes_key(tmp_path: Path) -> None:
    store_path = tmp_path / "settings.json"
    store = SettingsStore(store_path)
    store.set_int("a", 1)
    store.persist()

    store.delete("a")
    store.persist()

    assert SettingsStore(store_path).get_int("a", 0) == 0


def test_memory_store_counts_persist_calls() -> None:
    store = MemorySettingsStore({"a": 2})
    store.set_int("b", 4)
    store.persist()

    assert store.get_int("a", 0) == 2
    assert store.get_int("b", 0) == 4
    assert store.persist_calls == 1
