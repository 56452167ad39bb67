# This file defines shared schema pieces reused by every entity endpoint.
# It exists so request wrappers, envelope metadata, pagination, and error payloads stay consistent.
# Generic envelopes are parameterized by the entity model so each route keeps an explicit contract.
# These classes are also used by tests to validate response shape stability.

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field

PayloadT = TypeVar("PayloadT")
DataT = TypeVar("DataT")


class RequestEnvelope(BaseModel, Generic[PayloadT]):
    payload: PayloadT


class ListMetadata(BaseModel):
    page_offset: int = Field(ge=0)
    page_limit: int = Field(ge=1)
    total_count: int = Field(ge=0)
    sort: str


class EnvelopeFields(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    generated_at: datetime
    warnings: list[str] | None = None


class ObjectResponseV1(EnvelopeFields, Generic[DataT]):
    data: DataT


class ListResponseV1(EnvelopeFields, Generic[DataT]):
    data: list[DataT]
    pagination: ListMetadata


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: Any | None = None
    request_id: str
    timestamp: datetime


class GetEntityRequest(BaseModel):
    id: UUID | None = None
    name: str | None = None


class DeleteEntityRequest(BaseModel):
    id: UUID | None = None


class ListEntityRequest(BaseModel):
    page_offset: int = 0
    page_limit: int | None = None
    sort_field: str | None = None
    sort_order: str | None = None


class AuditFieldsV1(BaseModel):
    id: str
    version: int
    created: datetime | None = None
    changed: datetime | None = None
    creator_id: str | None = None
    changed_user: str | None = None
