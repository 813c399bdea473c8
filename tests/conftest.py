from __future__ import annotations

from pathlib import Path

import pytest

from cellskel.engine import SkeletonEngine
from tests._fixtures.cell_builder import CellBuilder


@pytest.fixture
def cell_builder(tmp_path: Path) -> CellBuilder:
    """Provide a reusable cell builder rooted at the pytest tmp_path."""
    return CellBuilder(tmp_path)


@pytest.fixture
def engine() -> SkeletonEngine:
    """Engine with default thresholds."""
    return SkeletonEngine()
