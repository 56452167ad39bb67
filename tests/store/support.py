# This file provides shared helpers for entity store tests.
# It exists so tests can seed tags and inspect raw table contents without repeating SQL.

from __future__ import annotations

from src.api.db_access import DatabaseClient
from src.api.services.entity_store import EntityAssociationStore


def count_rows(db: DatabaseClient, table_name: str, where: str = "", params: dict[str, object] | None = None) -> int:
    query = f"SELECT COUNT(*) FROM {table_name}"
    if where:
        query = f"{query} WHERE {where}"
    return int(db.fetch_scalar(query, params))


def seed_tags(store: EntityAssociationStore, *names: str) -> dict[str, str]:
    """Create tags and return their ids keyed by name."""

    return {name: store.create_entity(name=name) for name in names}


def association_tag_ids(db: DatabaseClient, endpoint_id: str) -> set[str]:
    rows = db.fetch_all(
        "SELECT api_tag_id FROM api_endpoint_tags WHERE api_endpoint_id = :endpoint_id",
        {"endpoint_id": endpoint_id},
    )
    return {str(row["api_tag_id"]) for row in rows}
