# This file builds the response envelopes returned by catalog and health endpoints.
# Envelopes are constructed as the typed response models, so a missing version or trace field
# fails here instead of at serialization time.

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from src.api.api_config import ApiConfig
from src.api.schemas.common import ListMetadata, ListResponseV1, ObjectResponseV1


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def version_fields(config: ApiConfig) -> dict[str, str]:
    """`api_version` label and `schema_version` carried by every response."""

    return {
        "api_version": config.api_version_label(),
        "schema_version": config.schema_version,
    }


def build_object_envelope(
    *,
    config: ApiConfig,
    request_id: str,
    data: Any,
    warnings: list[str] | None = None,
) -> ObjectResponseV1[Any]:
    return ObjectResponseV1[Any](
        **version_fields(config),
        request_id=request_id,
        generated_at=utc_now(),
        data=data,
        warnings=warnings,
    )


def build_list_envelope(
    *,
    config: ApiConfig,
    request_id: str,
    data: Sequence[Any],
    pagination: ListMetadata,
    warnings: list[str] | None = None,
) -> ListResponseV1[Any]:
    return ListResponseV1[Any](
        **version_fields(config),
        request_id=request_id,
        generated_at=utc_now(),
        data=list(data),
        pagination=pagination,
        warnings=warnings,
    )
