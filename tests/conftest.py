from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.lib_builder import LibBuilder


@pytest.fixture
def lib_builder(tmp_path: Path) -> LibBuilder:
    """Provide a throwaway library root with an rs/ source tree."""
    return LibBuilder(tmp_path)
