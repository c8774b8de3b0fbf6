from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.repo_builder import RepoBuilder
from uigraph.engine import AnalysisEngine


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def engine(repo_builder: RepoBuilder) -> AnalysisEngine:
    """Analysis engine rooted at the builder's project, with a project marker in place."""
    repo_builder.write({"package.json": '{"name": "fixture-app"}\n'})
    return AnalysisEngine(repo_builder.path())
