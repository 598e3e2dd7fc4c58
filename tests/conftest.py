from __future__ import annotations

from pathlib import Path

import pytest

from templatesync.config import SyncConfig
from tests._fixtures.workspace_builder import WorkspaceBuilder


@pytest.fixture
def workspace_builder(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a reusable workspace builder rooted at the pytest tmp_path."""
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig()
