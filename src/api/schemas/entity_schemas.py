# This file defines request and response schemas for the catalog entities.
# It exists so each entity's create/update payload and returned row shape are explicit contracts.
# Tag sets are requested by tag name and returned as full tag rows on single-entity reads.
# List responses omit tag sets, so the tag attributes default to None there.

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.schemas.common import AuditFieldsV1


class TagV1(AuditFieldsV1):
    name: str


class ApiTagV1(TagV1):
    pass


class AppTagV1(TagV1):
    pass


class CreateTagRequest(BaseModel):
    name: str
    creator_id: UUID | None = None


class UpdateTagRequest(BaseModel):
    id: UUID | None = None
    name: str
    changed_user: UUID | None = None
    version: int | None = None


class APIEndpointFields(BaseModel):
    name: str
    api_context: str | None = None
    api_reference_id: str | None = None
    api_resource: str | None = None
    api_scope: str | None = None
    api_scope_production: str | None = None
    api_security: str | None = None
    deprecated: bool | None = None
    description: str | None = None
    documentation: str | None = None
    endpoint_urls: str | None = None
    environment_id: UUID | None = None
    provider_id: UUID | None = None
    swagger: str | None = None
    tour: str | None = None
    api_version: str | None = None


class CreateAPIEndpointRequest(APIEndpointFields):
    api_tags: list[str] = Field(default_factory=list)
    creator_id: UUID | None = None


class UpdateAPIEndpointRequest(APIEndpointFields):
    id: UUID | None = None
    api_tags: list[str] = Field(default_factory=list)
    changed_user: UUID | None = None
    version: int | None = None


class APIEndpointV1(AuditFieldsV1):
    name: str
    api_context: str | None = None
    api_reference_id: str | None = None
    api_resource: str | None = None
    api_scope: str | None = None
    api_scope_production: str | None = None
    api_security: str | None = None
    deprecated: bool
    description: str | None = None
    documentation: str | None = None
    endpoint_urls: str | None = None
    environment_id: str | None = None
    provider_id: str | None = None
    swagger: str | None = None
    tour: str | None = None
    api_version: str | None = None
    api_tags: list[ApiTagV1] | None = None


class AttachmentFields(BaseModel):
    file_name: str
    file: str | None = None
    file_timestamp: datetime | None = None


class CreateAttachmentRequest(AttachmentFields):
    creator_id: UUID | None = None


class UpdateAttachmentRequest(AttachmentFields):
    id: UUID | None = None
    changed_user: UUID | None = None
    version: int | None = None


class AttachmentV1(AuditFieldsV1):
    file_name: str
    file: str
    file_timestamp: datetime | None = None


class ApplicationFields(BaseModel):
    name: str
    allowed_grant_types: str | None = None
    apic_hostname: str | None = None
    credentials_dev: str | None = None
    credentials_prod: str | None = None
    description: str | None = None
    id_dev: UUID | None = None
    id_prod: UUID | None = None
    image_id: UUID | None = None
    status: str | None = None
    client_id_dev: UUID | None = None
    client_id_prod: UUID | None = None
    client_secret: str | None = None
    client_uri_dev: str | None = None
    client_uri_prod: str | None = None
    created_event: str | None = None
    environment_id: UUID | None = None


class CreateApplicationRequest(ApplicationFields):
    app_tags: list[str] = Field(default_factory=list)
    creator_id: UUID | None = None


class UpdateApplicationRequest(ApplicationFields):
    id: UUID | None = None
    app_tags: list[str] = Field(default_factory=list)
    changed_user: UUID | None = None
    version: int | None = None


class ApplicationV1(AuditFieldsV1):
    name: str
    allowed_grant_types: str | None = None
    apic_hostname: str | None = None
    credentials_dev: str | None = None
    credentials_prod: str | None = None
    description: str | None = None
    id_dev: str | None = None
    id_prod: str | None = None
    image_id: str | None = None
    status: str | None = None
    client_id_dev: str | None = None
    client_id_prod: str | None = None
    client_secret: str | None = None
    client_uri_dev: str | None = None
    client_uri_prod: str | None = None
    created_event: str | None = None
    environment_id: str | None = None
    app_tags: list[AppTagV1] | None = None
