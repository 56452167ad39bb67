"""Attachment routes; attachments are looked up by file name when no id is given."""

from __future__ import annotations

from src.api.dependencies import get_attachment_store
from src.api.routers.entities import build_entity_router
from src.api.schemas.entity_schemas import (
    AttachmentV1,
    CreateAttachmentRequest,
    UpdateAttachmentRequest,
)

router = build_entity_router(
    prefix="/attachments",
    tag="attachments",
    store_dependency=get_attachment_store,
    create_model=CreateAttachmentRequest,
    update_model=UpdateAttachmentRequest,
    entity_model=AttachmentV1,
)
