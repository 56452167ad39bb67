"""DDL helpers for the catalog tables."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import MetaData
from sqlalchemy.engine import Engine

from src.api.services.catalog import CATALOG_DESCRIPTORS
from src.api.services.descriptors import EntityDescriptor, build_association_table, build_table

LOGGER = logging.getLogger("catalog")


def build_catalog_metadata(descriptors: Iterable[EntityDescriptor] = CATALOG_DESCRIPTORS) -> MetaData:
    """Declare entity and association tables for every descriptor."""

    metadata = MetaData()
    resolved = list(descriptors)
    for descriptor in resolved:
        build_table(descriptor, metadata)
    for descriptor in resolved:
        if descriptor.association is not None:
            build_association_table(
                descriptor.association,
                owner_table=descriptor.table,
                metadata=metadata,
            )
    return metadata


def apply_catalog_ddl(engine: Engine, descriptors: Iterable[EntityDescriptor] = CATALOG_DESCRIPTORS) -> list[str]:
    """Create missing catalog tables and return the table names in dependency order."""

    metadata = build_catalog_metadata(descriptors)
    metadata.create_all(engine, checkfirst=True)
    table_names = [table.name for table in metadata.sorted_tables]
    LOGGER.info("catalog tables ensured: %s", ", ".join(table_names))
    return table_names
