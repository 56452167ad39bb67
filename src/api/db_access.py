# This file wraps database access so API services can run parameterized SQL safely.
# It exists to keep SQL execution details out of store and router code and make testing easier.
# The client exposes single-statement helpers plus a scoped transaction for multi-statement writes.
# A transaction scope commits only on clean exit and rolls back on every other exit path.

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.base import Executable

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

LOGGER = logging.getLogger("catalog.db")

Statement = str | Executable
Params = Mapping[str, Any] | Sequence[Mapping[str, Any]] | None


def _statement(query: Statement) -> Executable:
    return text(query) if isinstance(query, str) else query


def _bind(params: Params) -> dict[str, Any] | list[dict[str, Any]]:
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    return [dict(item) for item in params]


class TransactionScope:
    """Statement helpers bound to one open transaction."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    def execute(self, query: Statement, params: Params = None) -> int:
        bound = _bind(params)
        if isinstance(bound, list) and not bound:
            return 0
        result = self._connection.execute(_statement(query), bound)
        return int(result.rowcount)

    def fetch_all(self, query: Statement, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        rows = self._connection.execute(_statement(query), dict(params or {})).mappings().all()
        return [dict(row) for row in rows]

    def fetch_one(self, query: Statement, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        row = self._connection.execute(_statement(query), dict(params or {})).mappings().first()
        return dict(row) if row is not None else None


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for catalog read/write access."""

    def __init__(self, *, database_url: str) -> None:
        self._engine: Engine = create_engine(database_url, pool_pre_ping=True, future=True)

    @property
    def engine(self) -> Engine:
        return self._engine

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        self._validate_identifier(table_name)
        with self._engine.connect() as connection:
            return bool(self._engine.dialect.has_table(connection, table_name))

    def fetch_all(self, query: Statement, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        with self._engine.connect() as connection:
            rows = connection.execute(_statement(query), dict(params or {})).mappings().all()
        return [dict(row) for row in rows]

    def fetch_one(self, query: Statement, params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
        with self._engine.connect() as connection:
            row = connection.execute(_statement(query), dict(params or {})).mappings().first()
        return dict(row) if row is not None else None

    def fetch_scalar(self, query: Statement, params: Mapping[str, Any] | None = None) -> Any:
        with self._engine.connect() as connection:
            return connection.execute(_statement(query), dict(params or {})).scalar_one()

    def execute(self, query: Statement, params: Params = None) -> int:
        with self.transaction() as scope:
            return scope.execute(query, params)

    @contextmanager
    def transaction(self) -> Iterator[TransactionScope]:
        """Yield a scope whose statements commit together or not at all."""

        with self._engine.connect() as connection:
            transaction = connection.begin()
            try:
                yield TransactionScope(connection)
            except BaseException:
                LOGGER.debug("rolling back transaction")
                transaction.rollback()
                raise
            transaction.commit()

    def dispose(self) -> None:
        self._engine.dispose()

    def _validate_identifier(self, identifier: str) -> str:
        if not _IDENTIFIER_RE.match(identifier):
            raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
        return identifier
