"""Configuration loading for projgen (.projgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .flags import DEFAULT_FLAGS, GenerationFlags, combine_flags

CONFIG_FILENAME = ".projgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class FlavorConfig:
    """Informational host details stamped into generated projects."""

    build_target: str = ""
    host_version: str = ""
    package_version: str = ""


@dataclass
class PostProcessorConfig:
    """Which installed post-processor entry points to load."""

    enabled: Optional[List[str]] = None


@dataclass
class ProjGenConfig:
    """Represents the settings defined in .projgen.yml."""

    root: Path
    manifest: Path
    settings_path: Path
    project_name: Optional[str] = None
    default_flags: GenerationFlags = DEFAULT_FLAGS
    flavor: FlavorConfig = field(default_factory=FlavorConfig)
    postprocessors: PostProcessorConfig = field(default_factory=PostProcessorConfig)


def load_config(config_path: Path) -> ProjGenConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    defaults = ProjGenConfig(
        root=root,
        manifest=root / "compilation.yml",
        settings_path=root / ".projgen" / "settings.json",
    )

    if not config_file.exists():
        return defaults

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    manifest = _as_str(data.get("manifest"))
    settings_path = _as_str(data.get("settings_path"))

    generation_data = _as_dict(data.get("generation"))
    default_flags = defaults.default_flags
    if "default_flags" in generation_data:
        try:
            default_flags = combine_flags(_as_str_list(generation_data.get("default_flags")))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    flavor_data = _as_dict(data.get("flavor"))
    flavor = FlavorConfig(
        build_target=_as_str(flavor_data.get("build_target")) or "",
        host_version=_as_str(flavor_data.get("host_version")) or "",
        package_version=_as_str(flavor_data.get("package_version")) or "",
    )

    postprocessor_data = _as_dict(data.get("postprocessors"))
    postprocessors = PostProcessorConfig()
    if "enabled" in postprocessor_data:
        postprocessors.enabled = _as_str_list(postprocessor_data.get("enabled"))

    return ProjGenConfig(
        root=root,
        manifest=root / manifest if manifest else defaults.manifest,
        settings_path=root / settings_path if settings_path else defaults.settings_path,
        project_name=_as_str(data.get("project_name")),
        default_flags=default_flags,
        flavor=flavor,
        postprocessors=postprocessors,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "FlavorConfig", "ProjGenConfig", "load_config"]
