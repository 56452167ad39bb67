# This file tests API schema contracts, envelope helpers, and versioning utilities.
# It exists to detect accidental response-shape changes before release.
# The tests assert required paths and key fields remain present in OpenAPI output.

from __future__ import annotations

from src.api.app import app
from src.api.response_envelope import build_list_envelope, build_object_envelope, version_fields
from src.api.schemas.common import ListMetadata
from tests.api.support import build_test_config

ENTITY_PREFIXES = ("api-tags", "app-tags", "api-endpoints", "attachments", "applications")
ENTITY_ACTIONS = ("create", "get", "update", "delete", "list")


def test_openapi_contains_catalog_paths() -> None:
    schema = app.openapi()
    required_paths = {"/health", "/ready", "/version"}
    required_paths.update(
        f"/api/v1/{prefix}/{action}" for prefix in ENTITY_PREFIXES for action in ENTITY_ACTIONS
    )
    available_paths = set(schema.get("paths", {}).keys())
    missing = required_paths - available_paths
    assert not missing


def test_entity_routes_are_post_only() -> None:
    schema = app.openapi()
    for path, operations in schema["paths"].items():
        if path.startswith("/api/v1/"):
            assert set(operations) == {"post"}, path


def _component(components: dict, name: str) -> dict:
    matches = [schema for key, schema in components.items() if key.split("-")[0] == name]
    assert matches, name
    return matches[0]


def test_endpoint_schema_exposes_tag_attribute() -> None:
    components = app.openapi()["components"]["schemas"]

    assert "api_tags" in _component(components, "APIEndpointV1")["properties"]
    assert "app_tags" in _component(components, "ApplicationV1")["properties"]
    assert "deprecated" in _component(components, "APIEndpointV1")["required"]


def test_response_envelope_builders_include_version_and_request_fields() -> None:
    config = build_test_config()
    list_payload = build_list_envelope(
        config=config,
        request_id="req-1",
        data=[],
        pagination=ListMetadata(page_offset=0, page_limit=2, total_count=0, sort="id:asc"),
    )
    object_payload = build_object_envelope(
        config=config,
        request_id="req-2",
        data="6f1c1f0e-2f8c-4a55-9b7e-3d5f0a3c1b11",
    )

    assert list_payload.api_version == "v1"
    assert list_payload.schema_version == "1.0.0"
    assert list_payload.request_id == "req-1"
    assert list_payload.pagination.sort == "id:asc"
    assert object_payload.api_version == "v1"
    assert object_payload.request_id == "req-2"
    assert object_payload.generated_at.tzinfo is not None


def test_version_fields_follow_config_path() -> None:
    config = build_test_config().model_copy(update={"api_version_path": "/api/v2", "schema_version": "2.1.0"})

    assert version_fields(config) == {"api_version": "v2", "schema_version": "2.1.0"}
