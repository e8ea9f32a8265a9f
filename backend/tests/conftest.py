from __future__ import annotations

import pytest

from app.db.store import get_store
from app.main import app
from app.seed.seed_data import seed
from shiftbook.storage import DataStore


@pytest.fixture
def store_path(tmp_path):
    path = tmp_path / "store.json"
    seed(DataStore(path))
    app.dependency_overrides[get_store] = lambda: DataStore(path)
    yield path
    app.dependency_overrides.pop(get_store, None)
