# This file defines the application routes under the versioned API path.
# Applications carry a set of application tags referenced by name.

from __future__ import annotations

from src.api.dependencies import get_application_store
from src.api.routers.entities import build_entity_router
from src.api.schemas.entity_schemas import (
    ApplicationV1,
    CreateApplicationRequest,
    UpdateApplicationRequest,
)

router = build_entity_router(
    prefix="/applications",
    tag="applications",
    store_dependency=get_application_store,
    create_model=CreateApplicationRequest,
    update_model=UpdateApplicationRequest,
    entity_model=ApplicationV1,
)
