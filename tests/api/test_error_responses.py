# This file tests that persistence failures reach clients as opaque DP-500 errors.
# It exists so database messages and table names never leak through the API error payload.

from __future__ import annotations

from typing import Any

from src.api.services.catalog import ATTACHMENT
from src.api.services.errors import PersistenceError
from tests.api.support import FakeDBClient, api_test_client


class FailingStore:
    descriptor = ATTACHMENT

    def create_entity(self, **_: Any) -> str:
        raise PersistenceError()

    def get_entity(self, **_: Any) -> Any:
        raise PersistenceError()


def test_persistence_error_returns_opaque_message() -> None:
    with api_test_client(db_client=FakeDBClient(), stores={"attachment": FailingStore()}) as client:
        response = client.post(
            "/api/v1/attachments/get",
            json={"payload": {"name": "contract.pdf"}},
        )

    assert response.status_code == 500
    payload = response.json()
    assert payload["error_code"] == "DP-500"
    assert payload["message"] == PersistenceError.DEFAULT_MESSAGE
    assert payload["details"] is None


def test_failed_create_uses_same_error_shape() -> None:
    with api_test_client(db_client=FakeDBClient(), stores={"attachment": FailingStore()}) as client:
        response = client.post(
            "/api/v1/attachments/create",
            json={"payload": {"file_name": "contract.pdf", "file": "Y29udHJhY3Q="}},
        )

    assert response.status_code == 500
    assert set(response.json()) == {"error_code", "message", "details", "request_id", "timestamp"}
