from __future__ import annotations

from datetime import datetime, timezone

import pytest

from mill.db import connect, ensure_schema
from mill.ledger import LedgerStore
from mill.storage import SnapshotStorage

# Wednesday
NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def storage(tmp_path):
    return SnapshotStorage(tmp_path / "data")


@pytest.fixture
def store(storage):
    s = LedgerStore(storage).open()
    yield s
    s.close()


@pytest.fixture
def conn(tmp_path):
    c = connect(tmp_path / "app.db")
    ensure_schema(c)
    yield c
    c.close()
