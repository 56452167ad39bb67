# This file provides shared helpers for API endpoint tests.
# It exists so tests can override the database client and entity stores without a real server database.
# The helpers build consistent config objects and scoped TestClient contexts.
# Centralized test wiring keeps API tests small and focused on behavior.

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from fastapi.testclient import TestClient

from src.api.api_config import ApiConfig
from src.api.app import app
from src.api.dependencies import (
    get_api_endpoint_store,
    get_api_tag_store,
    get_app_tag_store,
    get_application_store,
    get_attachment_store,
    get_config,
    get_database_client,
)
from src.api.services.ddl import build_catalog_metadata

STORE_DEPENDENCIES = {
    "api_tag": get_api_tag_store,
    "app_tag": get_app_tag_store,
    "api_endpoint": get_api_endpoint_store,
    "attachment": get_attachment_store,
    "application": get_application_store,
}


def build_test_config(*, default_page_limit: int = 2, max_page_limit: int = 5) -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Catalog API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        host="0.0.0.0",
        port=8000,
        environment="test",
        database_url="sqlite+pysqlite:///:memory:",
        default_page_limit=default_page_limit,
        max_page_limit=max_page_limit,
        auto_create_schema=False,
        allowed_origins=[],
        app_version="0.1.0",
    )


class FakeDBClient:
    """Simple fake DB dependency for health/readiness endpoint tests."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self._connected = connected
        if existing_tables is None:
            existing_tables = {table.name for table in build_catalog_metadata().sorted_tables}
        self._tables = existing_tables

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables


def _provide(value: Any) -> Callable[[], Any]:
    return lambda: value


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    db_client: Any | None = None,
    stores: Mapping[str, Any] | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()

    app.dependency_overrides[get_config] = lambda: resolved_config
    if db_client is not None:
        app.dependency_overrides[get_database_client] = lambda: db_client
    for entity_name, store in (stores or {}).items():
        app.dependency_overrides[STORE_DEPENDENCIES[entity_name]] = _provide(store)

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
