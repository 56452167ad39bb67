# This file provides dependency factories for FastAPI routes and middleware.
# It exists so the database client and entity stores are created once and shared through injection.
# Each store receives the database client explicitly; there is no module-level connection.
# Endpoint tests override these factories to point stores at a disposable database.

from __future__ import annotations

from functools import lru_cache

from src.api.api_config import ApiConfig, get_api_config
from src.api.db_access import DatabaseClient
from src.api.services.catalog import API_ENDPOINT, API_TAG, APP_TAG, APPLICATION, ATTACHMENT
from src.api.services.descriptors import EntityDescriptor
from src.api.services.entity_store import EntityAssociationStore


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(database_url=config.database_url)


def _build_store(descriptor: EntityDescriptor) -> EntityAssociationStore:
    config = get_api_config()
    return EntityAssociationStore(
        descriptor=descriptor,
        db=get_database_client(),
        max_page_limit=config.max_page_limit,
    )


@lru_cache(maxsize=1)
def get_api_tag_store() -> EntityAssociationStore:
    return _build_store(API_TAG)


@lru_cache(maxsize=1)
def get_app_tag_store() -> EntityAssociationStore:
    return _build_store(APP_TAG)


@lru_cache(maxsize=1)
def get_api_endpoint_store() -> EntityAssociationStore:
    return _build_store(API_ENDPOINT)


@lru_cache(maxsize=1)
def get_attachment_store() -> EntityAssociationStore:
    return _build_store(ATTACHMENT)


@lru_cache(maxsize=1)
def get_application_store() -> EntityAssociationStore:
    return _build_store(APPLICATION)


def get_config() -> ApiConfig:
    return get_api_config()
