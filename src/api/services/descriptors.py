# This file defines the descriptor types that configure the generic entity store.
# It exists so one store implementation can serve every "entity + tag set" table shape.
# Descriptors validate SQL identifiers up front because table and column names are interpolated.
# They also build SQLAlchemy table metadata used for DDL and typed statement parameters.

from __future__ import annotations

import re
from dataclasses import dataclass, field

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.types import TypeEngine

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

FIELD_KINDS = ("text", "bool", "uuid", "timestamp")

# Columns every entity table carries in addition to its descriptive fields.
AUDIT_COLUMNS: tuple[str, ...] = ("version", "created", "changed", "creator_id", "changed_user")


def safe_identifier(identifier: str) -> str:
    if not _IDENTIFIER_RE.match(identifier):
        raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
    return identifier


def sql_type_for(kind: str) -> TypeEngine:
    if kind == "bool":
        return Boolean()
    if kind == "uuid":
        return String(36)
    if kind == "timestamp":
        return DateTime(timezone=True)
    return Text()


@dataclass(frozen=True)
class FieldSpec:
    """One descriptive column of an entity table."""

    name: str
    kind: str = "text"
    required: bool = False
    sortable: bool = False

    def __post_init__(self) -> None:
        safe_identifier(self.name)
        if self.kind not in FIELD_KINDS:
            raise ValueError(f"Unsupported field kind {self.kind!r} for {self.name!r}")


@dataclass(frozen=True)
class AssociationDescriptor:
    """Join table linking an owning entity to tags resolved by name."""

    table: str
    owner_column: str
    tag_column: str
    tag_table: str
    attribute: str

    def __post_init__(self) -> None:
        for identifier in (self.table, self.owner_column, self.tag_column, self.tag_table):
            safe_identifier(identifier)


@dataclass(frozen=True)
class EntityDescriptor:
    """Table layout and behaviour switches for one entity shape."""

    entity_name: str
    table: str
    fields: tuple[FieldSpec, ...] = ()
    name_column: str = "name"
    association: AssociationDescriptor | None = None
    unique_name: bool = False
    reuse_existing_by_name: bool = False
    update_requires_changed_user: bool = False
    referenced_by: tuple[AssociationDescriptor, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        safe_identifier(self.table)
        safe_identifier(self.name_column)
        names = [self.name_column, *[spec.name for spec in self.fields]]
        reserved = {"id", *AUDIT_COLUMNS}
        clashes = sorted(reserved.intersection(names))
        if clashes:
            raise ValueError(f"{self.entity_name}: reserved column names used as fields: {clashes}")
        if len(set(names)) != len(names):
            raise ValueError(f"{self.entity_name}: duplicate column names in descriptor")
        if self.reuse_existing_by_name and not self.unique_name:
            raise ValueError(f"{self.entity_name}: reuse_existing_by_name requires unique_name")
        for reference in self.referenced_by:
            if reference.tag_table != self.table:
                raise ValueError(
                    f"{self.entity_name}: association {reference.table!r} does not reference {self.table!r}"
                )

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self.fields if spec.required)

    @property
    def columns(self) -> tuple[str, ...]:
        return ("id", self.name_column, *self.field_names, *AUDIT_COLUMNS)

    @property
    def sortable_columns(self) -> set[str]:
        sortable = {"id", self.name_column, "version", "created", "changed"}
        sortable.update(spec.name for spec in self.fields if spec.sortable)
        return sortable

    def column_types(self) -> dict[str, TypeEngine]:
        """SQLAlchemy types for columns whose driver representation needs processing."""

        types: dict[str, TypeEngine] = {
            "version": Integer(),
            "created": DateTime(timezone=True),
            "changed": DateTime(timezone=True),
        }
        for spec in self.fields:
            if spec.kind in {"bool", "timestamp"}:
                types[spec.name] = sql_type_for(spec.kind)
        return types


def build_table(descriptor: EntityDescriptor, metadata: MetaData) -> Table:
    """Declare the entity table for `descriptor` on `metadata`."""

    columns: list[Column] = [
        Column("id", String(36), primary_key=True),
        Column(
            descriptor.name_column,
            Text(),
            nullable=False,
            unique=descriptor.unique_name,
        ),
    ]
    for spec in descriptor.fields:
        columns.append(Column(spec.name, sql_type_for(spec.kind), nullable=not spec.required))
    columns.extend(
        [
            Column("version", Integer(), nullable=False, server_default="1"),
            Column("created", DateTime(timezone=True), nullable=False),
            Column("changed", DateTime(timezone=True), nullable=True),
            Column("creator_id", String(36), nullable=True),
            Column("changed_user", String(36), nullable=True),
        ]
    )
    return Table(descriptor.table, metadata, *columns)


def build_association_table(
    association: AssociationDescriptor, *, owner_table: str, metadata: MetaData
) -> Table:
    """Declare the join table for `association` on `metadata`."""

    return Table(
        association.table,
        metadata,
        Column("id", String(36), primary_key=True),
        Column(
            association.owner_column,
            String(36),
            ForeignKey(f"{owner_table}.id"),
            nullable=False,
            index=True,
        ),
        Column(
            association.tag_column,
            String(36),
            ForeignKey(f"{association.tag_table}.id"),
            nullable=False,
            index=True,
        ),
    )
