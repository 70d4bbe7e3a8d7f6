"""Persistence backends for projgen settings."""

from .settings_store import KeyValueStore, MemorySettingsStore, SettingsStore

__all__ = ["KeyValueStore", "MemorySettingsStore", "SettingsStore"]
