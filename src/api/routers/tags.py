# This file defines the API tag and application tag endpoints under the versioned API path.
# Tags are plain named rows; creating a tag whose name exists returns the existing id.

from __future__ import annotations

from src.api.dependencies import get_api_tag_store, get_app_tag_store
from src.api.routers.entities import build_entity_router
from src.api.schemas.entity_schemas import ApiTagV1, AppTagV1, CreateTagRequest, UpdateTagRequest

api_tag_router = build_entity_router(
    prefix="/api-tags",
    tag="api-tags",
    store_dependency=get_api_tag_store,
    create_model=CreateTagRequest,
    update_model=UpdateTagRequest,
    entity_model=ApiTagV1,
)

app_tag_router = build_entity_router(
    prefix="/app-tags",
    tag="app-tags",
    store_dependency=get_app_tag_store,
    create_model=CreateTagRequest,
    update_model=UpdateTagRequest,
    entity_model=AppTagV1,
)
