"""FastAPI application entrypoint for projgen service mode."""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import Any, Callable, List, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ConfigError, load_config
from ..flags import flag_names, parse_flag_name
from ..logging import get_logger
from ..orchestrator import ProjectGeneration
from ..provider import ManifestError

GeneratorFactory = Callable[[str], ProjectGeneration]

_T = TypeVar("_T")

# One generation pass or settings update at a time, across every app instance.
_GENERATION_LOCK = threading.Lock()


class SyncRequest(BaseModel):
    path: str = "."


class SyncResponse(BaseModel):
    status: str
    solution_path: str


class SyncIfNeededRequest(BaseModel):
    path: str = "."
    affected: List[str] = []
    reimported: List[str] = []


class SyncIfNeededResponse(BaseModel):
    status: str
    regenerated: bool
    solution_path: str


class FlagsResponse(BaseModel):
    value: int
    flags: List[str]


class ToggleRequest(BaseModel):
    path: str = "."
    flags: List[str] = []
    reset: bool = False


class HealthResponse(BaseModel):
    status: str


def _default_generator(path: str) -> ProjectGeneration:
    return ProjectGeneration.from_config(load_config(Path(path)))


async def _run_blocking(call: Callable[[], _T]) -> _T:
    def _locked() -> _T:
        with _GENERATION_LOCK:
            return call()

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return _locked()
    return await loop.run_in_executor(None, _locked)


def _flags_response(generation: ProjectGeneration) -> FlagsResponse:
    flags = generation.settings.flags
    return FlagsResponse(value=int(flags), flags=flag_names(flags))


def create_app(generator_factory: GeneratorFactory = _default_generator) -> FastAPI:
    """Create the FastAPI application exposing projgen operations."""

    app = FastAPI(title="projgen Service", version="1.0.0")
    logger = get_logger("service")

    def generation_for(path: str) -> ProjectGeneration:
        return generator_factory(path)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/sync", response_model=SyncResponse)
    async def sync(payload: SyncRequest) -> SyncResponse:
        generation = generation_for(payload.path)
        await _run_blocking(generation.sync)
        return SyncResponse(status="ok", solution_path=generation.solution_file())

    @app.post("/sync-if-needed", response_model=SyncIfNeededResponse)
    async def sync_if_needed(payload: SyncIfNeededRequest) -> SyncIfNeededResponse:
        generation = generation_for(payload.path)

        def _run() -> bool:
            return generation.sync_if_needed(payload.affected, payload.reimported)

        regenerated = await _run_blocking(_run)
        return SyncIfNeededResponse(
            status="ok" if regenerated else "skipped",
            regenerated=regenerated,
            solution_path=generation.solution_file(),
        )

    async def path_query(path: str = ".") -> ProjectGeneration:
        return generation_for(path)

    @app.get("/flags", response_model=FlagsResponse)
    async def get_flags(generation: ProjectGeneration = Depends(path_query)) -> FlagsResponse:
        return await _run_blocking(lambda: _flags_response(generation))

    @app.post("/flags/toggle", response_model=FlagsResponse)
    async def toggle_flags(payload: ToggleRequest) -> FlagsResponse:
        toggles = [parse_flag_name(name) for name in payload.flags]
        generation = generation_for(payload.path)

        def _apply() -> FlagsResponse:
            if payload.reset:
                generation.settings.reset()
            for flag in toggles:
                generation.settings.toggle(flag)
            return _flags_response(generation)

        return await _run_blocking(_apply)

    @app.exception_handler(OSError)
    async def os_error_handler(_: Any, exc: OSError) -> JSONResponse:
        logger.error("Generation failed: %s", exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ManifestError)
    async def manifest_error_handler(_: Any, exc: ManifestError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
