from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.hdl_builder import HdlBuilder


@pytest.fixture
def hdl_builder(tmp_path: Path) -> HdlBuilder:
    """Provide a reusable source builder rooted at the pytest tmp_path."""
    return HdlBuilder(tmp_path)
