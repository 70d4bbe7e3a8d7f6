"""Tests for the FastAPI service mode."""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from projgen.flags import GenerationFlags
from projgen.orchestrator import ProjectGeneration
from projgen.provider import ManifestError
from projgen.service import create_app

from tests._fixtures.graph_builder import GraphBuilder


class _Factory:
    """Hands out one generator per project path and records requests."""

    def __init__(self, builder: GraphBuilder) -> None:
        self.builder = builder
        self.paths: List[str] = []
        self._cache: Dict[str, ProjectGeneration] = {}

    def __call__(self, path: str) -> ProjectGeneration:
        self.paths.append(path)
        if path == "broken":
            raise ManifestError("Cannot read manifest broken/compilation.yml")
        if path not in self._cache:
            self._cache[path] = self.builder.generation()
        return self._cache[path]


@pytest.fixture
def factory(graph_builder: GraphBuilder) -> _Factory:
    graph_builder.extensions(builtin=["cs"])
    graph_builder.assembly("Core", ["Assets/Core/A.cs"], root="Assets/Core")
    return _Factory(graph_builder)


@pytest.fixture
def client(factory: _Factory) -> TestClient:
    return TestClient(create_app(factory))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_sync_endpoint(client: TestClient, factory: _Factory) -> None:
    response = client.post("/sync", json={"path": "game"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["solution_path"].endswith("/Game.sln")
    assert (factory.builder.root / "Core.csproj").exists()
    assert factory.paths == ["game"]


def test_sync_if_needed_endpoint_skips_irrelevant_changes(client: TestClient, factory: _Factory) -> None:
    response = client.post("/sync-if-needed", json={"path": "game", "affected": ["Assets/hero.png"]})

    assert response.status_code == 200
    assert response.json()["status"] == "skipped"
    assert response.json()["regenerated"] is False
    assert not (factory.builder.root / "Game.sln").exists()


def test_sync_if_needed_endpoint_regenerates(client: TestClient, factory: _Factory) -> None:
    response = client.post(
        "/sync-if-needed",
        json={"path": "game", "affected": [], "reimported": ["Assets/Core/Core.asmdef"]},
    )

    assert response.status_code == 200
    assert response.json()["regenerated"] is True
    assert (factory.builder.root / "Core.csproj").exists()


def test_flags_endpoints(client: TestClient) -> None:
    response = client.get("/flags", params={"path": "game"})
    assert response.status_code == 200
    assert response.json() == {"value": 3, "flags": ["embedded", "local"]}

    response = client.post("/flags/toggle", json={"path": "game", "flags": ["registry"]})
    assert response.status_code == 200
    assert response.json()["value"] == int(GenerationFlags.EMBEDDED | GenerationFlags.LOCAL | GenerationFlags.REGISTRY)

    response = client.post("/flags/toggle", json={"path": "game", "reset": True})
    assert response.json() == {"value": 0, "flags": []}


def test_unknown_flag_is_a_bad_request(client: TestClient) -> None:
    response = client.post("/flags/toggle", json={"path": "game", "flags": ["nightly"]})
    assert response.status_code == 400
    assert "nightly" in response.json()["detail"]


def test_manifest_errors_map_to_bad_request(client: TestClient) -> None:
    response = client.post("/sync", json={"path": "broken"})
    assert response.status_code == 400


def test_write_failures_map_to_server_error(client: TestClient, factory: _Factory) -> None:
    generation = factory("game")

    def _fail(path: str, content: str) -> None:
        raise PermissionError("read-only volume")

    generation.synchronizer.file_io.write_text = _fail  # type: ignore[method-assign]

    response = client.post("/sync", json={"path": "game"})

    assert response.status_code == 500
    assert response.json() == {"detail": "read-only volume"}


class _PassTracker:
    """Counts generation work running at the same time."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self.active = 0
        self.peak = 0

    def run(self, seconds: float = 0.05) -> None:
        with self._guard:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(seconds)
        with self._guard:
            self.active -= 1


class _SlowSettings:
    def __init__(self, tracker: _PassTracker) -> None:
        self.tracker = tracker
        self.flags = GenerationFlags.EMBEDDED | GenerationFlags.LOCAL

    def toggle(self, flag: GenerationFlags) -> GenerationFlags:
        self.tracker.run()
        self.flags ^= flag
        return self.flags

    def reset(self) -> None:
        self.flags = GenerationFlags.NONE


class _SlowGeneration:
    def __init__(self, tracker: _PassTracker) -> None:
        self.tracker = tracker
        self.settings = _SlowSettings(tracker)

    def sync(self) -> None:
        self.tracker.run()

    def sync_if_needed(self, affected: List[str], reimported: List[str]) -> bool:
        self.tracker.run()
        return True

    def solution_file(self) -> str:
        return "/work/Game/Game.sln"


async def _fire(app, requests: List[tuple[str, dict]]) -> List[int]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://projgen") as client:
        responses = await asyncio.gather(*(client.post(url, json=body) for url, body in requests))
    return [response.status_code for response in responses]


def test_generation_passes_run_one_at_a_time() -> None:
    tracker = _PassTracker()
    app = create_app(lambda path: _SlowGeneration(tracker))  # type: ignore[arg-type, return-value]
    requests = [
        ("/sync", {"path": "game"}),
        ("/sync", {"path": "game"}),
        ("/sync-if-needed", {"path": "game", "affected": ["Assets/A.cs"]}),
        ("/flags/toggle", {"path": "game", "flags": ["git"]}),
        ("/sync", {"path": "game"}),
    ]

    statuses = asyncio.run(_fire(app, requests))

    assert statuses == [200] * len(requests)
    assert tracker.peak == 1
