# This file implements transactional persistence for an entity and its tag associations.
# It exists so every catalog entity shares one create/get/update/delete/list implementation.
# Tag names are resolved to rows before a write, and the entity row plus its association rows
# are written inside one transaction so a failure never leaves a partial association set behind.

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, Integer, bindparam, text
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.sql.selectable import TextualSelect

from src.api.db_access import DatabaseClient, TransactionScope
from src.api.pagination import SortSpec, normalize_window, resolve_sort
from src.api.services.descriptors import EntityDescriptor, FieldSpec
from src.api.services.errors import NotFoundError, PersistenceError, StoreError, ValidationError

LOGGER = logging.getLogger("catalog")

_BIND_RE = re.compile(r"(?<!:):([a-zA-Z_][a-zA-Z0-9_]*)")

_TAG_COLUMNS = "id, name, version, created, changed, creator_id, changed_user"
_TAG_RESULT_TYPES = {
    "version": Integer(),
    "created": DateTime(timezone=True),
    "changed": DateTime(timezone=True),
}


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


@dataclass
class EntityRecord:
    """A materialized entity row, optionally with its resolved tags."""

    id: str
    name: str
    fields: dict[str, Any]
    version: int
    created: datetime | None = None
    changed: datetime | None = None
    creator_id: str | None = None
    changed_user: str | None = None
    tags: list[EntityRecord] | None = None

    def to_dict(self, *, name_key: str = "name", tags_key: str = "tags") -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            name_key: self.name,
            **self.fields,
            "version": self.version,
            "created": self.created,
            "changed": self.changed,
            "creator_id": self.creator_id,
            "changed_user": self.changed_user,
        }
        if self.tags is not None:
            payload[tags_key] = [tag.to_dict() for tag in self.tags]
        return payload


class EntityAssociationStore:
    """Validation, lookup, and transactional writes for one entity shape."""

    def __init__(
        self,
        *,
        descriptor: EntityDescriptor,
        db: DatabaseClient,
        max_page_limit: int = 200,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.db = db
        self.max_page_limit = max_page_limit
        self._clock = clock or _utc_now
        self._types = descriptor.column_types()
        self._fields_by_name: dict[str, FieldSpec] = {spec.name: spec for spec in descriptor.fields}
        self._label = descriptor.entity_name.replace("_", " ")

    # Public operations

    def create_entity(
        self,
        *,
        name: str | None,
        fields: Mapping[str, Any] | None = None,
        tag_names: Iterable[str] | None = None,
        creator_id: Any | None = None,
    ) -> str:
        entity_name = self._require_name(name)
        values = self._validated_fields(fields)
        requested_tags = self._distinct_tag_names(tag_names)

        if self.descriptor.reuse_existing_by_name:
            existing = self._fetch_by_name(entity_name)
            if existing is not None:
                LOGGER.info("%s exists name=%r id=%s", self.descriptor.entity_name, entity_name, existing["id"])
                return str(existing["id"])

        tags = self._resolve_tags(requested_tags)
        entity_id = str(uuid.uuid4())
        params: dict[str, Any] = {
            "id": entity_id,
            self.descriptor.name_column: entity_name,
            **values,
            "version": 1,
            "created": self._clock(),
            "changed": None,
            "creator_id": _optional_text(creator_id),
            "changed_user": None,
        }

        with self._write_scope("create", entity_id) as scope:
            scope.execute(self._insert_statement(), params)
            self._insert_associations(scope, entity_id, tags)

        LOGGER.info("%s created id=%s tags=%d", self.descriptor.entity_name, entity_id, len(tags))
        return entity_id

    def get_entity(self, *, entity_id: Any | None = None, name: str | None = None) -> EntityRecord:
        has_id = not _is_blank(entity_id)
        has_name = not _is_blank(name)
        if has_id == has_name:
            raise ValidationError("Exactly one of id or name must be provided.")

        if has_id:
            row = self._fetch_by_id(str(entity_id))
        else:
            row = self._fetch_by_name(str(name))
        if row is None:
            raise NotFoundError(f"{self._label.capitalize()} not found.")

        record = self._to_record(row)
        if self.descriptor.association is not None:
            record.tags = self._load_tags(record.id)
        return record

    def update_entity(
        self,
        *,
        entity_id: Any | None,
        name: str | None,
        fields: Mapping[str, Any] | None = None,
        tag_names: Iterable[str] | None = None,
        changed_user: Any | None = None,
        version: int | None = None,
    ) -> str:
        resolved_id = self._require_id(entity_id)
        entity_name = self._require_name(name)
        if self.descriptor.update_requires_changed_user and _is_blank(changed_user):
            raise ValidationError(
                "Mandatory fields are missing: changed_user",
                details={"missing": ["changed_user"]},
            )
        values = self._validated_fields(fields)
        requested_tags = self._distinct_tag_names(tag_names)

        existing = self._require_existing(resolved_id)
        if version is not None and version != existing["version"]:
            LOGGER.debug(
                "%s update id=%s caller version=%s stored version=%s; last writer wins",
                self.descriptor.entity_name,
                resolved_id,
                version,
                existing["version"],
            )
        if self.descriptor.unique_name:
            self._ensure_name_available(entity_name, resolved_id)
        tags = self._resolve_tags(requested_tags)

        params: dict[str, Any] = {
            "id": resolved_id,
            self.descriptor.name_column: entity_name,
            **values,
            "changed": self._clock(),
            "changed_user": _optional_text(changed_user),
        }

        with self._write_scope("update", resolved_id) as scope:
            if scope.execute(self._update_statement(), params) == 0:
                raise NotFoundError(f"{self._label.capitalize()} not found.")
            association = self.descriptor.association
            if association is not None:
                scope.execute(
                    f"DELETE FROM {association.table} WHERE {association.owner_column} = :owner_id",
                    {"owner_id": resolved_id},
                )
                self._insert_associations(scope, resolved_id, tags)

        LOGGER.info("%s updated id=%s tags=%d", self.descriptor.entity_name, resolved_id, len(tags))
        return resolved_id

    def delete_entity(self, *, entity_id: Any | None) -> bool:
        resolved_id = self._require_id(entity_id)
        self._require_existing(resolved_id)

        with self._write_scope("delete", resolved_id) as scope:
            association = self.descriptor.association
            if association is not None:
                scope.execute(
                    f"DELETE FROM {association.table} WHERE {association.owner_column} = :entity_id",
                    {"entity_id": resolved_id},
                )
            for reference in self.descriptor.referenced_by:
                scope.execute(
                    f"DELETE FROM {reference.table} WHERE {reference.tag_column} = :entity_id",
                    {"entity_id": resolved_id},
                )
            deleted = scope.execute(
                f"DELETE FROM {self.descriptor.table} WHERE id = :entity_id",
                {"entity_id": resolved_id},
            )
            if deleted == 0:
                raise NotFoundError(f"{self._label.capitalize()} not found.")

        LOGGER.info("%s deleted id=%s", self.descriptor.entity_name, resolved_id)
        return True

    def list_entities(
        self,
        *,
        page_offset: int | None,
        page_limit: int | None,
        sort_field: str | None = None,
        sort_order: str | None = None,
    ) -> list[EntityRecord]:
        try:
            window = normalize_window(
                page_offset=page_offset,
                page_limit=page_limit,
                max_page_limit=self.max_page_limit,
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        sort = self.sort_spec(sort_field=sort_field, sort_order=sort_order)

        order_sql = f"{sort.field} {sort.order.upper()}"
        if not sort.is_default:
            order_sql = f"{order_sql}, id ASC"

        query = self._select_statement(
            f"""
            SELECT {self._column_list()}
            FROM {self.descriptor.table}
            ORDER BY {order_sql}
            LIMIT :limit OFFSET :offset
            """
        )
        rows = self.db.fetch_all(query, {"limit": window.limit, "offset": window.offset})
        return [self._to_record(row) for row in rows]

    def count_entities(self) -> int:
        return int(self.db.fetch_scalar(f"SELECT COUNT(*) FROM {self.descriptor.table}"))

    def sort_spec(self, *, sort_field: str | None, sort_order: str | None) -> SortSpec:
        try:
            return resolve_sort(
                sort_field=sort_field,
                sort_order=sort_order,
                allowed_fields=self.descriptor.sortable_columns,
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def serialize(self, record: EntityRecord) -> dict[str, Any]:
        association = self.descriptor.association
        return record.to_dict(
            name_key=self.descriptor.name_column,
            tags_key=association.attribute if association is not None else "tags",
        )

    # Validation

    def _require_id(self, entity_id: Any | None) -> str:
        if _is_blank(entity_id):
            raise ValidationError("Id is missing.")
        return str(entity_id)

    def _require_name(self, name: str | None) -> str:
        if _is_blank(name):
            raise ValidationError(f"Mandatory fields are missing: {self.descriptor.name_column}")
        return str(name)

    def _validated_fields(self, fields: Mapping[str, Any] | None) -> dict[str, Any]:
        provided = dict(fields or {})
        unknown = sorted(set(provided) - set(self._fields_by_name))
        if unknown:
            raise ValidationError(
                f"Unknown fields for {self._label}: {', '.join(unknown)}",
                details={"unknown": unknown},
            )

        missing = [name for name in self.descriptor.required_fields if _is_blank(provided.get(name))]
        if missing:
            raise ValidationError(
                f"Mandatory fields are missing: {', '.join(missing)}",
                details={"missing": missing},
            )

        return {name: self._coerce(spec, provided.get(name)) for name, spec in self._fields_by_name.items()}

    def _coerce(self, spec: FieldSpec, value: Any) -> Any:
        if value is None:
            return None
        if spec.kind == "bool":
            if not isinstance(value, bool):
                raise ValidationError(f"{spec.name} must be a boolean.")
            return value
        if spec.kind == "uuid":
            try:
                return str(uuid.UUID(str(value)))
            except ValueError as exc:
                raise ValidationError(f"{spec.name} must be a UUID.") from exc
        if spec.kind == "timestamp":
            if not isinstance(value, datetime):
                raise ValidationError(f"{spec.name} must be a timestamp.")
            return value
        return str(value)

    def _distinct_tag_names(self, tag_names: Iterable[str] | None) -> list[str]:
        names: list[str] = []
        for tag_name in tag_names or []:
            if _is_blank(tag_name):
                raise ValidationError("Tag names must not be empty.")
            if tag_name not in names:
                names.append(tag_name)
        if names and self.descriptor.association is None:
            raise ValidationError(f"{self._label.capitalize()} does not accept tags.")
        return names

    def _ensure_name_available(self, name: str, entity_id: str) -> None:
        row = self.db.fetch_one(
            f"""
            SELECT id FROM {self.descriptor.table}
            WHERE {self.descriptor.name_column} = :name AND id <> :entity_id
            """,
            {"name": name, "entity_id": entity_id},
        )
        if row is not None:
            raise ValidationError(f"{self._label.capitalize()} name {name!r} is already in use.")

    # Lookups

    def _fetch_by_id(self, entity_id: str) -> dict[str, Any] | None:
        query = self._select_statement(
            f"SELECT {self._column_list()} FROM {self.descriptor.table} WHERE id = :entity_id"
        )
        return self.db.fetch_one(query, {"entity_id": entity_id})

    def _fetch_by_name(self, name: str) -> dict[str, Any] | None:
        query = self._select_statement(
            f"""
            SELECT {self._column_list()}
            FROM {self.descriptor.table}
            WHERE {self.descriptor.name_column} = :name
            ORDER BY id ASC
            LIMIT 1
            """
        )
        return self.db.fetch_one(query, {"name": name})

    def _require_existing(self, entity_id: str) -> dict[str, Any]:
        row = self._fetch_by_id(entity_id)
        if row is None:
            raise NotFoundError(f"{self._label.capitalize()} not found.")
        return row

    def _resolve_tags(self, tag_names: list[str]) -> list[dict[str, Any]]:
        association = self.descriptor.association
        if association is None or not tag_names:
            return []

        query = text(f"SELECT id, name FROM {association.tag_table} WHERE name IN :names").bindparams(
            bindparam("names", expanding=True)
        )
        rows = self.db.fetch_all(query, {"names": tag_names})
        found = {row["name"] for row in rows}
        missing = [tag_name for tag_name in tag_names if tag_name not in found]
        if missing or len(rows) != len(tag_names):
            raise NotFoundError("One or more tags do not exist.", details={"missing_tags": missing})
        return rows

    def _load_tags(self, entity_id: str) -> list[EntityRecord]:
        association = self.descriptor.association
        if association is None:
            return []

        link_rows = self.db.fetch_all(
            f"SELECT {association.tag_column} AS tag_id FROM {association.table} "
            f"WHERE {association.owner_column} = :owner_id",
            {"owner_id": entity_id},
        )
        tag_ids = sorted({str(row["tag_id"]) for row in link_rows})
        if not tag_ids:
            return []

        query = (
            text(
                f"""
                SELECT {_TAG_COLUMNS}
                FROM {association.tag_table}
                WHERE id IN :tag_ids
                ORDER BY name ASC, id ASC
                """
            )
            .bindparams(bindparam("tag_ids", expanding=True))
            .columns(**_TAG_RESULT_TYPES)
        )
        rows = self.db.fetch_all(query, {"tag_ids": tag_ids})
        if len(rows) != len(tag_ids):
            raise NotFoundError("One or more tags do not exist.")
        return [self._tag_record(row) for row in rows]

    # Writes

    @contextmanager
    def _write_scope(self, operation: str, entity_id: str) -> Iterator[TransactionScope]:
        try:
            with self.db.transaction() as scope:
                yield scope
        except StoreError:
            raise
        except Exception as exc:
            LOGGER.exception(
                "%s %s failed id=%s; transaction rolled back",
                self.descriptor.entity_name,
                operation,
                entity_id,
            )
            raise PersistenceError() from exc

    def _insert_associations(self, scope: TransactionScope, entity_id: str, tags: list[dict[str, Any]]) -> None:
        association = self.descriptor.association
        if association is None or not tags:
            return
        rows = [
            {"id": str(uuid.uuid4()), "owner_id": entity_id, "tag_id": str(tag["id"])}
            for tag in tags
        ]
        scope.execute(
            f"""
            INSERT INTO {association.table} (id, {association.owner_column}, {association.tag_column})
            VALUES (:id, :owner_id, :tag_id)
            """,
            rows,
        )

    # Statements

    def _column_list(self) -> str:
        return ", ".join(self.descriptor.columns)

    def _typed_statement(self, sql: str) -> TextClause:
        statement = text(sql)
        binds = [
            bindparam(name, type_=self._types[name])
            for name in sorted(set(_BIND_RE.findall(sql)))
            if name in self._types
        ]
        return statement.bindparams(*binds) if binds else statement

    def _select_statement(self, sql: str) -> TextualSelect:
        return self._typed_statement(sql).columns(**self._types)

    def _insert_statement(self) -> TextClause:
        columns = self.descriptor.columns
        placeholders = ", ".join(f":{column}" for column in columns)
        return self._typed_statement(
            f"INSERT INTO {self.descriptor.table} ({', '.join(columns)}) VALUES ({placeholders})"
        )

    def _update_statement(self) -> TextClause:
        assignments = [
            f"{column} = :{column}" for column in (self.descriptor.name_column, *self.descriptor.field_names)
        ]
        assignments.extend(
            [
                "version = version + 1",
                "changed = :changed",
                "changed_user = :changed_user",
            ]
        )
        return self._typed_statement(
            f"UPDATE {self.descriptor.table} SET {', '.join(assignments)} WHERE id = :id"
        )

    # Mapping

    def _to_record(self, row: Mapping[str, Any]) -> EntityRecord:
        return EntityRecord(
            id=str(row["id"]),
            name=row[self.descriptor.name_column],
            fields={name: row.get(name) for name in self.descriptor.field_names},
            version=int(row["version"]),
            created=row.get("created"),
            changed=row.get("changed"),
            creator_id=_optional_text(row.get("creator_id")),
            changed_user=_optional_text(row.get("changed_user")),
        )

    @staticmethod
    def _tag_record(row: Mapping[str, Any]) -> EntityRecord:
        return EntityRecord(
            id=str(row["id"]),
            name=row["name"],
            fields={},
            version=int(row["version"]),
            created=row.get("created"),
            changed=row.get("changed"),
            creator_id=_optional_text(row.get("creator_id")),
            changed_user=_optional_text(row.get("changed_user")),
        )
