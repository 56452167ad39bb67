# This file declares the concrete entity shapes served by the API.
# It exists so table layouts, mandatory fields, and tag associations live in one reviewable place.
# Tag entities (API tags, application tags) are unique by name and reuse an existing row on create.
# Entities that carry tag sets point at the tag tables through their association descriptors.

from __future__ import annotations

from src.api.services.descriptors import AssociationDescriptor, EntityDescriptor, FieldSpec

API_ENDPOINT_TAGS = AssociationDescriptor(
    table="api_endpoint_tags",
    owner_column="api_endpoint_id",
    tag_column="api_tag_id",
    tag_table="api_tags",
    attribute="api_tags",
)

APPLICATION_APP_TAGS = AssociationDescriptor(
    table="application_app_tags",
    owner_column="application_id",
    tag_column="app_tag_id",
    tag_table="app_tags",
    attribute="app_tags",
)

API_TAG = EntityDescriptor(
    entity_name="api_tag",
    table="api_tags",
    unique_name=True,
    reuse_existing_by_name=True,
    update_requires_changed_user=True,
    referenced_by=(API_ENDPOINT_TAGS,),
)

APP_TAG = EntityDescriptor(
    entity_name="app_tag",
    table="app_tags",
    unique_name=True,
    reuse_existing_by_name=True,
    referenced_by=(APPLICATION_APP_TAGS,),
)

API_ENDPOINT = EntityDescriptor(
    entity_name="api_endpoint",
    table="api_endpoints",
    fields=(
        FieldSpec("api_context"),
        FieldSpec("api_reference_id"),
        FieldSpec("api_resource"),
        FieldSpec("api_scope"),
        FieldSpec("api_scope_production"),
        FieldSpec("api_security"),
        FieldSpec("deprecated", kind="bool", required=True, sortable=True),
        FieldSpec("description"),
        FieldSpec("documentation"),
        FieldSpec("endpoint_urls"),
        FieldSpec("environment_id", kind="uuid"),
        FieldSpec("provider_id", kind="uuid"),
        FieldSpec("swagger"),
        FieldSpec("tour"),
        FieldSpec("api_version", sortable=True),
    ),
    association=API_ENDPOINT_TAGS,
)

ATTACHMENT = EntityDescriptor(
    entity_name="attachment",
    table="attachments",
    name_column="file_name",
    fields=(
        FieldSpec("file", required=True),
        FieldSpec("file_timestamp", kind="timestamp", sortable=True),
    ),
)

APPLICATION = EntityDescriptor(
    entity_name="application",
    table="applications",
    fields=(
        FieldSpec("allowed_grant_types"),
        FieldSpec("apic_hostname"),
        FieldSpec("credentials_dev"),
        FieldSpec("credentials_prod"),
        FieldSpec("description"),
        FieldSpec("id_dev", kind="uuid"),
        FieldSpec("id_prod", kind="uuid"),
        FieldSpec("image_id", kind="uuid"),
        FieldSpec("status", sortable=True),
        FieldSpec("client_id_dev", kind="uuid"),
        FieldSpec("client_id_prod", kind="uuid"),
        FieldSpec("client_secret"),
        FieldSpec("client_uri_dev"),
        FieldSpec("client_uri_prod"),
        FieldSpec("created_event"),
        FieldSpec("environment_id", kind="uuid"),
    ),
    association=APPLICATION_APP_TAGS,
)

# Tag tables first so association foreign keys resolve during DDL.
CATALOG_DESCRIPTORS: tuple[EntityDescriptor, ...] = (
    API_TAG,
    APP_TAG,
    API_ENDPOINT,
    ATTACHMENT,
    APPLICATION,
)
