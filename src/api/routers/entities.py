# This file builds the create/get/update/delete/list routes shared by every catalog entity.
# It exists so each entity router only declares its path, store dependency, and schemas.
# Request bodies arrive wrapped as {"payload": {...}} and responses use the standard envelopes.
# Annotations here are evaluated eagerly because the body models are chosen per router.

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from src.api.api_config import ApiConfig
from src.api.dependencies import get_config
from src.api.response_envelope import build_list_envelope, build_object_envelope
from src.api.schemas.common import (
    DeleteEntityRequest,
    GetEntityRequest,
    ListEntityRequest,
    ListMetadata,
    ListResponseV1,
    ObjectResponseV1,
    RequestEnvelope,
)
from src.api.services.entity_store import EntityAssociationStore

ConfigDep = Annotated[ApiConfig, Depends(get_config)]


def split_payload(store: EntityAssociationStore, payload: BaseModel) -> dict[str, Any]:
    """Map a create/update payload onto the store's name, fields, and tag names."""

    descriptor = store.descriptor
    data = payload.model_dump()
    association = descriptor.association
    return {
        "name": data.get(descriptor.name_column),
        "fields": {name: data.get(name) for name in descriptor.field_names},
        "tag_names": data.get(association.attribute) if association is not None else None,
    }


def _object_envelope(request: Request, config: ApiConfig, data: Any) -> ObjectResponseV1[Any]:
    return build_object_envelope(config=config, request_id=request.state.request_id, data=data)


def build_entity_router(
    *,
    prefix: str,
    tag: str,
    store_dependency: Callable[[], EntityAssociationStore],
    create_model: type[BaseModel],
    update_model: type[BaseModel],
    entity_model: type[BaseModel],
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])
    StoreDep = Annotated[EntityAssociationStore, Depends(store_dependency)]

    @router.post("/create", response_model=ObjectResponseV1[str])
    def create_entity(
        request: Request,
        body: RequestEnvelope[create_model],  # type: ignore[valid-type]
        store: StoreDep,
        config: ConfigDep,
    ) -> ObjectResponseV1[Any]:
        payload = body.payload
        entity_id = store.create_entity(
            **split_payload(store, payload),
            creator_id=getattr(payload, "creator_id", None),
        )
        return _object_envelope(request, config, entity_id)

    @router.post("/get", response_model=ObjectResponseV1[entity_model])  # type: ignore[valid-type]
    def get_entity(
        request: Request,
        body: RequestEnvelope[GetEntityRequest],
        store: StoreDep,
        config: ConfigDep,
    ) -> ObjectResponseV1[Any]:
        record = store.get_entity(entity_id=body.payload.id, name=body.payload.name)
        return _object_envelope(request, config, store.serialize(record))

    @router.post("/update", response_model=ObjectResponseV1[str])
    def update_entity(
        request: Request,
        body: RequestEnvelope[update_model],  # type: ignore[valid-type]
        store: StoreDep,
        config: ConfigDep,
    ) -> ObjectResponseV1[Any]:
        payload = body.payload
        entity_id = store.update_entity(
            entity_id=getattr(payload, "id", None),
            **split_payload(store, payload),
            changed_user=getattr(payload, "changed_user", None),
            version=getattr(payload, "version", None),
        )
        return _object_envelope(request, config, entity_id)

    @router.post("/delete", response_model=ObjectResponseV1[bool])
    def delete_entity(
        request: Request,
        body: RequestEnvelope[DeleteEntityRequest],
        store: StoreDep,
        config: ConfigDep,
    ) -> ObjectResponseV1[Any]:
        return _object_envelope(request, config, store.delete_entity(entity_id=body.payload.id))

    @router.post("/list", response_model=ListResponseV1[entity_model])  # type: ignore[valid-type]
    def list_entities(
        request: Request,
        body: RequestEnvelope[ListEntityRequest],
        store: StoreDep,
        config: ConfigDep,
    ) -> ListResponseV1[Any]:
        payload = body.payload
        page_limit = payload.page_limit if payload.page_limit is not None else config.default_page_limit
        records = store.list_entities(
            page_offset=payload.page_offset,
            page_limit=page_limit,
            sort_field=payload.sort_field,
            sort_order=payload.sort_order,
        )
        sort = store.sort_spec(sort_field=payload.sort_field, sort_order=payload.sort_order)
        pagination = ListMetadata(
            page_offset=payload.page_offset,
            page_limit=page_limit,
            total_count=store.count_entities(),
            sort=sort.as_text,
        )
        return build_list_envelope(
            config=config,
            request_id=request.state.request_id,
            data=[store.serialize(record) for record in records],
            pagination=pagination,
        )

    return router
