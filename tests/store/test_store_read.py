# This file tests single-entity lookups and paginated listing.
# It exists to lock down lookup-key validation, tag hydration, and deterministic page ordering.

from __future__ import annotations

import uuid
from datetime import UTC, datetime

import pytest

from src.api.services.entity_store import EntityAssociationStore
from src.api.services.errors import NotFoundError, ValidationError
from tests.store.support import seed_tags


def _create_endpoints(store: EntityAssociationStore, count: int) -> list[str]:
    return [
        store.create_entity(name=f"Endpoint {index}", fields={"deprecated": index % 2 == 0})
        for index in range(count)
    ]


def test_get_by_id_and_by_name_return_same_record(stores: dict[str, EntityAssociationStore]) -> None:
    seed_tags(stores["api_tag"], "public")
    endpoint_id = stores["api_endpoint"].create_entity(
        name="Orders API",
        fields={"deprecated": False},
        tag_names=["public"],
    )

    by_id = stores["api_endpoint"].get_entity(entity_id=endpoint_id)
    by_name = stores["api_endpoint"].get_entity(name="Orders API")

    assert by_id == by_name
    assert [tag.name for tag in by_id.tags or []] == ["public"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"entity_id": "", "name": "  "},
        {"entity_id": "6f1c1f0e-2f8c-4a55-9b7e-3d5f0a3c1b11", "name": "Orders API"},
    ],
)
def test_get_requires_exactly_one_lookup_key(
    stores: dict[str, EntityAssociationStore], kwargs: dict[str, str]
) -> None:
    with pytest.raises(ValidationError, match="Exactly one of id or name"):
        stores["api_endpoint"].get_entity(**kwargs)


def test_get_missing_entity_raises_not_found(stores: dict[str, EntityAssociationStore]) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        stores["api_endpoint"].get_entity(entity_id=str(uuid.uuid4()))

    assert exc_info.value.status_code == 404


def test_get_with_dangling_association_raises_not_found(
    stores: dict[str, EntityAssociationStore], db_client
) -> None:
    endpoint_id = stores["api_endpoint"].create_entity(name="Orders API", fields={"deprecated": False})
    db_client.execute(
        "INSERT INTO api_endpoint_tags (id, api_endpoint_id, api_tag_id) VALUES (:id, :owner, :tag)",
        {"id": str(uuid.uuid4()), "owner": endpoint_id, "tag": str(uuid.uuid4())},
    )

    with pytest.raises(NotFoundError, match="tags do not exist"):
        stores["api_endpoint"].get_entity(entity_id=endpoint_id)


def test_get_attachment_by_file_name(stores: dict[str, EntityAssociationStore]) -> None:
    stamp = datetime(2024, 3, 1, 12, 30, tzinfo=UTC)
    attachment_id = stores["attachment"].create_entity(
        name="contract.pdf",
        fields={"file": "Y29udHJhY3Q=", "file_timestamp": stamp},
    )

    record = stores["attachment"].get_entity(name="contract.pdf")

    assert record.id == attachment_id
    assert record.tags is None
    assert record.fields["file"] == "Y29udHJhY3Q="
    assert record.fields["file_timestamp"].replace(tzinfo=None) == stamp.replace(tzinfo=None)
    assert stores["attachment"].serialize(record)["file_name"] == "contract.pdf"


def test_list_pages_follow_id_order(stores: dict[str, EntityAssociationStore]) -> None:
    ids = sorted(_create_endpoints(stores["api_endpoint"], 5))

    first_page = stores["api_endpoint"].list_entities(page_offset=0, page_limit=2)
    second_page = stores["api_endpoint"].list_entities(page_offset=2, page_limit=2)
    last_page = stores["api_endpoint"].list_entities(page_offset=4, page_limit=2)

    assert [record.id for record in first_page] == ids[:2]
    assert [record.id for record in second_page] == ids[2:4]
    assert [record.id for record in last_page] == ids[4:]


def test_list_beyond_last_page_is_empty(stores: dict[str, EntityAssociationStore]) -> None:
    _create_endpoints(stores["api_endpoint"], 2)

    assert stores["api_endpoint"].list_entities(page_offset=5, page_limit=2) == []


def test_list_does_not_hydrate_tags(stores: dict[str, EntityAssociationStore]) -> None:
    seed_tags(stores["api_tag"], "public")
    stores["api_endpoint"].create_entity(name="Orders API", fields={"deprecated": False}, tag_names=["public"])

    records = stores["api_endpoint"].list_entities(page_offset=0, page_limit=5)

    assert len(records) == 1
    assert records[0].tags is None


@pytest.mark.parametrize(
    ("page_offset", "page_limit", "message"),
    [
        (0, 0, "page_limit must be > 0"),
        (-1, 2, "page_offset must be >= 0"),
        (0, 11, "page_limit must be <= 10"),
        (None, 2, "page_offset"),
    ],
)
def test_list_rejects_invalid_window(
    stores: dict[str, EntityAssociationStore],
    page_offset: int | None,
    page_limit: int,
    message: str,
) -> None:
    with pytest.raises(ValidationError, match=message):
        stores["api_endpoint"].list_entities(page_offset=page_offset, page_limit=page_limit)


@pytest.mark.parametrize(
    ("sort_field", "sort_order"),
    [("file", "asc"), ("name; DROP TABLE api_endpoints", "asc"), ("name", "sideways")],
)
def test_list_rejects_unsupported_sort(
    stores: dict[str, EntityAssociationStore], sort_field: str, sort_order: str
) -> None:
    with pytest.raises(ValidationError):
        stores["api_endpoint"].list_entities(
            page_offset=0,
            page_limit=5,
            sort_field=sort_field,
            sort_order=sort_order,
        )


def test_list_sorts_by_name_descending(stores: dict[str, EntityAssociationStore]) -> None:
    for name in ("Billing API", "Orders API", "Accounts API"):
        stores["api_endpoint"].create_entity(name=name, fields={"deprecated": False})

    records = stores["api_endpoint"].list_entities(
        page_offset=0,
        page_limit=5,
        sort_field="NAME",
        sort_order="DESC",
    )

    assert [record.name for record in records] == ["Orders API", "Billing API", "Accounts API"]


def test_list_partial_sort_falls_back_to_id_order(stores: dict[str, EntityAssociationStore]) -> None:
    ids = sorted(_create_endpoints(stores["api_endpoint"], 3))

    records = stores["api_endpoint"].list_entities(page_offset=0, page_limit=5, sort_field="name")

    assert [record.id for record in records] == ids


def test_count_entities_tracks_rows(stores: dict[str, EntityAssociationStore]) -> None:
    assert stores["api_endpoint"].count_entities() == 0

    _create_endpoints(stores["api_endpoint"], 3)

    assert stores["api_endpoint"].count_entities() == 3
