"""
Shared test configuration.
Store and endpoint tests run against a file-backed SQLite database created per test,
so transactions, rollbacks, and row counts behave like a real relational store.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

TEST_ENV_DEFAULTS: dict[str, str] = {
    "PROJECT_NAME": "test-project",
    "ENV": "test",
    "LOG_LEVEL": "INFO",
    "DATABASE_URL": "sqlite+pysqlite:///:memory:",
}

# The API module builds its app at import time, so defaults must exist before collection.
for _key, _value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

from src.api.db_access import DatabaseClient  # noqa: E402
from src.api.services.catalog import CATALOG_DESCRIPTORS  # noqa: E402
from src.api.services.ddl import apply_catalog_ddl  # noqa: E402
from src.api.services.entity_store import EntityAssociationStore  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    for key, value in TEST_ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)


@pytest.fixture
def db_client(tmp_path: Path) -> Iterator[DatabaseClient]:
    """Database client over a fresh SQLite file with the catalog tables created."""

    client = DatabaseClient(database_url=f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")
    apply_catalog_ddl(client.engine)
    try:
        yield client
    finally:
        client.dispose()


@pytest.fixture
def stores(db_client: DatabaseClient) -> dict[str, EntityAssociationStore]:
    """One store per catalog entity, keyed by entity name."""

    return {
        descriptor.entity_name: EntityAssociationStore(descriptor=descriptor, db=db_client, max_page_limit=10)
        for descriptor in CATALOG_DESCRIPTORS
    }
