# tests/conftest.py
from pathlib import Path

import pytest

MAP_DIR = Path(__file__).resolve().parents[1] / "maps"


@pytest.fixture
def maps_dir() -> Path:
    return MAP_DIR
