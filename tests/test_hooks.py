"""Tests for post-processor registration and discovery."""

from __future__ import annotations

from types import SimpleNamespace
from typing import List

import pytest

from projgen import hooks as hooks_module
from projgen.hooks import HookRegistry, PostProcessor, discover_postprocessors


class _Recorder(PostProcessor):
    def __init__(self, name: str, log: List[str], claim: bool = False) -> None:
        self.name = name
        self.log = log
        self.claim = claim

    def pre_generate(self) -> bool:
        self.log.append(f"pre:{self.name}")
        return self.claim

    def on_project_text_generated(self, path: str, text: str) -> str:
        return f"{text}+{self.name}"

    def post_generate(self) -> None:
        self.log.append(f"post:{self.name}")


class _Sample(PostProcessor):
    pass


def _entry_point(name: str, obj: object) -> SimpleNamespace:
    return SimpleNamespace(name=name, load=lambda: obj)


def test_pre_generate_calls_every_hook_and_ors_results() -> None:
    log: List[str] = []
    registry = HookRegistry([_Recorder("a", log, claim=True), _Recorder("b", log)])

    assert registry.pre_generate() is True
    assert log == ["pre:a", "pre:b"]


def test_pre_generate_without_claims_returns_false() -> None:
    assert HookRegistry([_Recorder("a", [])]).pre_generate() is False
    assert HookRegistry().pre_generate() is False


def test_text_hooks_are_chained_in_registration_order() -> None:
    registry = HookRegistry([_Recorder("a", []), _Recorder("b", [])])
    assert registry.on_project_text_generated("Core.csproj", "x") == "x+a+b"


def test_register_rejects_non_postprocessors() -> None:
    with pytest.raises(TypeError):
        HookRegistry().register(object())  # type: ignore[arg-type]


def test_unregister_removes_hook() -> None:
    hook = _Sample()
    registry = HookRegistry([hook])
    registry.unregister(hook)
    assert len(registry) == 0


def test_discover_loads_classes_and_instances(monkeypatch: pytest.MonkeyPatch) -> None:
    instance = _Sample()
    entries = [_entry_point("sample", _Sample), _entry_point("ready", instance)]
    monkeypatch.setattr(hooks_module, "_iter_entry_points", lambda: entries)

    discovered = discover_postprocessors()

    assert isinstance(discovered[0], _Sample)
    assert discovered[1] is instance


def test_discover_filters_enabled_names(monkeypatch: pytest.MonkeyPatch) -> None:
    entries = [_entry_point("sample", _Sample), _entry_point("other", _Sample)]
    monkeypatch.setattr(hooks_module, "_iter_entry_points", lambda: entries)

    assert len(discover_postprocessors(["Sample"])) == 1


def test_discover_reports_missing_enabled_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(hooks_module, "_iter_entry_points", lambda: [])
    with pytest.raises(ValueError):
        discover_postprocessors(["absent"])


def test_discover_rejects_non_postprocessor_entry_points(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(hooks_module, "_iter_entry_points", lambda: [_entry_point("bad", 42)])
    with pytest.raises(TypeError):
        discover_postprocessors()


def test_discover_rejects_factories_returning_other_objects(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(hooks_module, "_iter_entry_points", lambda: [_entry_point("odd", "text")])
    monkeypatch.setattr(hooks_module, "_coerce_postprocessor", lambda obj: obj)
    with pytest.raises(TypeError, match="odd"):
        discover_postprocessors()
