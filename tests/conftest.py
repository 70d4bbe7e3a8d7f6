from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.graph_builder import GraphBuilder


@pytest.fixture
def graph_builder(tmp_path: Path) -> GraphBuilder:
    """Provide a reusable compilation-graph builder rooted at the pytest tmp_path."""
    return GraphBuilder(tmp_path)
