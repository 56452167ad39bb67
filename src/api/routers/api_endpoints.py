# This file defines the API endpoint catalog routes under the versioned API path.
# Endpoints carry a set of API tags referenced by name; every tag must already exist.

from __future__ import annotations

from src.api.dependencies import get_api_endpoint_store
from src.api.routers.entities import build_entity_router
from src.api.schemas.entity_schemas import (
    APIEndpointV1,
    CreateAPIEndpointRequest,
    UpdateAPIEndpointRequest,
)

router = build_entity_router(
    prefix="/api-endpoints",
    tag="api-endpoints",
    store_dependency=get_api_endpoint_store,
    create_model=CreateAPIEndpointRequest,
    update_model=UpdateAPIEndpointRequest,
    entity_model=APIEndpointV1,
)
