"""Post-processor hooks that may rewrite or replace generated files."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .logging import get_logger

_ENTRY_POINT_GROUP = "projgen.postprocessors"


class PostProcessor:
    """Base class for generation hooks; every callback defaults to a no-op."""

    def pre_generate(self) -> bool:
        """Return True to skip the default generation for this pass."""
        return False

    def on_project_text_generated(self, path: str, text: str) -> str:
        return text

    def on_solution_text_generated(self, path: str, text: str) -> str:
        return text

    def post_generate(self) -> None:
        """Called after every full sync, whether or not generation ran."""


class HookRegistry:
    """Ordered collection of post-processors invoked during a sync pass."""

    def __init__(self, hooks: Iterable[PostProcessor] | None = None) -> None:
        self._hooks: List[PostProcessor] = []
        self.logger = get_logger("hooks")
        for hook in hooks or ():
            self.register(hook)

    def register(self, hook: PostProcessor) -> PostProcessor:
        if not isinstance(hook, PostProcessor):
            raise TypeError(f"{hook!r} is not a PostProcessor")
        self._hooks.append(hook)
        return hook

    def unregister(self, hook: PostProcessor) -> None:
        self._hooks.remove(hook)

    def __iter__(self):
        return iter(list(self._hooks))

    def __len__(self) -> int:
        return len(self._hooks)

    def pre_generate(self) -> bool:
        # Every hook runs even after one has claimed the pass.
        claimed = False
        for hook in self._hooks:
            if hook.pre_generate():
                self.logger.debug("%s took over generation", type(hook).__name__)
                claimed = True
        return claimed

    def on_project_text_generated(self, path: str, text: str) -> str:
        for hook in self._hooks:
            text = hook.on_project_text_generated(path, text)
        return text

    def on_solution_text_generated(self, path: str, text: str) -> str:
        for hook in self._hooks:
            text = hook.on_solution_text_generated(path, text)
        return text

    def post_generate(self) -> None:
        for hook in self._hooks:
            hook.post_generate()


def discover_postprocessors(enabled: Sequence[str] | None = None) -> List[PostProcessor]:
    """Instantiate post-processors published under the entry-point group.

    ``enabled`` restricts loading to the named entry points; naming one that
    is not installed raises ``ValueError``.
    """

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    hooks: List[PostProcessor] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], PostProcessor]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, PostProcessor):
            raise TypeError(f"Post-processor factory for '{name}' did not return a PostProcessor instance")
        hooks.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load post-processor entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> PostProcessor:
            return _coerce_postprocessor(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown post-processors requested: {missing}")

    return hooks


def _coerce_postprocessor(obj: object) -> PostProcessor:
    if isinstance(obj, PostProcessor):
        return obj
    if isinstance(obj, type) and issubclass(obj, PostProcessor):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, PostProcessor):
            return instance
    raise TypeError("Post-processor entry point must be a PostProcessor subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points(group=_ENTRY_POINT_GROUP)


__all__ = ["HookRegistry", "PostProcessor", "discover_postprocessors"]
