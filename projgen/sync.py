"""Write-if-changed persistence for generated files."""

from __future__ import annotations

from pathlib import Path

from .hooks import HookRegistry
from .logging import get_logger


class FileIO:
    """Thin filesystem wrapper so tests can observe reads and writes.

    Text is read and written with ``newline=""`` so generated ``\\r\\n`` line
    endings reach the disk unchanged on every platform.
    """

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def read_text(self, path: str) -> str:
        with open(path, "r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def write_text(self, path: str, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)


class FileSynchronizer:
    """Runs post-processors, then writes only when content differs."""

    PROJECT_EXTENSION = ".csproj"

    def __init__(self, file_io: FileIO | None = None, hooks: HookRegistry | None = None) -> None:
        self.file_io = file_io or FileIO()
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.logger = get_logger("sync")
        self.writes = 0

    def sync_project(self, path: str, contents: str) -> bool:
        if path.endswith(self.PROJECT_EXTENSION):
            contents = self.hooks.on_project_text_generated(path, contents)
        return self.sync_file(path, contents)

    def sync_solution(self, path: str, contents: str) -> bool:
        contents = self.hooks.on_solution_text_generated(path, contents)
        return self.sync_file(path, contents)

    def sync_file(self, path: str, contents: str) -> bool:
        """Persist ``contents`` unless the file already holds them; return True on write."""
        try:
            if self.file_io.exists(path) and contents == self.file_io.read_text(path):
                self.logger.debug("Unchanged %s", path)
                return False
        except Exception:
            self.logger.exception("Could not compare %s; rewriting it", path)

        self.file_io.write_text(path, contents)
        self.writes += 1
        self.logger.debug("Wrote %s", path)
        return True


__all__ = ["FileIO", "FileSynchronizer"]
