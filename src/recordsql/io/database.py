"""
Database access wrappers around SQLAlchemy.

``Database`` wraps an Engine and runs each call in its own short transaction.
``Transaction`` wraps one Connection until commit or rollback. Both share
``QueryRunner``, which adds record-driven insert/update helpers and wraps
SQLAlchemy errors with the operation and table they came from.

Usage:
    db = Database.from_settings()

    db.insert("users", user, exclude={"id"})
    user_id = db.insert_and_get_id("users", user, exclude={"id"})

    with db.begin() as tx:
        tx.update("users", user, 'WHERE "id"=:id', exclude={"id"})
        row = tx.get('SELECT * FROM users WHERE "id"=:id', {"id": user_id})
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    ContextManager,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Protocol,
    TypeVar,
)

import sqlalchemy as sa
from sqlalchemy.engine import Connection, Engine, RootTransaction, RowMapping
from sqlalchemy.exc import SQLAlchemyError

from recordsql.config import Settings, get_settings
from recordsql.exceptions import (
    EmptyColumnListError,
    ExecutionFailed,
    RecordNotFoundError,
    describe_error,
)
from recordsql.infrastructure.sql import (
    InsertBuilder,
    PostgreSQLDialect,
    UpdateBuilder,
    extract_fields,
    record_params,
)
from recordsql.infrastructure.sql.core.fields import DEFAULT_MAX_DEPTH
from recordsql.infrastructure.sql.operations import Dialect
from recordsql.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class NamedExecutor(Protocol):
    """Runs SQL text with named parameters bound from a dictionary."""

    def execute_named(self, sql: str, params: Mapping[str, Any]) -> int: ...
    def query_one_named(self, sql: str, params: Mapping[str, Any]) -> Any: ...


class ConnectionExecutor:
    """NamedExecutor over a SQLAlchemy connection using ``sqlalchemy.text()``."""

    def __init__(self, conn: Connection):
        self.conn = conn

    def execute_named(self, sql: str, params: Mapping[str, Any]) -> int:
        """Execute a statement and return the number of affected rows."""
        result = self.conn.execute(sa.text(sql), dict(params))
        return result.rowcount

    def query_one_named(self, sql: str, params: Mapping[str, Any]) -> Any:
        """
        Execute a statement and return the first column of its single row.

        Raises:
            sqlalchemy.exc.NoResultFound: If the statement returned no rows
        """
        result = self.conn.execute(sa.text(sql), dict(params))
        return result.scalar_one()


class QueryRunner(ABC):
    """
    Query helpers shared by ``Database`` and ``Transaction``.

    Subclasses provide ``_connection()``, a context manager yielding the
    Connection each call runs on.
    """

    def __init__(
        self,
        dialect: Optional[Dialect] = None,
        max_record_depth: int = DEFAULT_MAX_DEPTH,
        id_column: str = "id",
    ):
        self.dialect = dialect or PostgreSQLDialect()
        self.max_record_depth = max_record_depth
        self.id_column = id_column
        self.inserts = InsertBuilder(self.dialect)
        self.updates = UpdateBuilder(self.dialect)

    @abstractmethod
    def _connection(self) -> ContextManager[Connection]:
        """Return a context manager yielding the Connection a call runs on."""

    def _executor(self, conn: Connection) -> NamedExecutor:
        return ConnectionExecutor(conn)

    def _options(self) -> dict:
        return {
            "dialect": self.dialect,
            "max_record_depth": self.max_record_depth,
            "id_column": self.id_column,
        }

    def _run(
        self, operation: str, table: Optional[str], call: Callable[[Connection], T]
    ) -> T:
        try:
            with self._connection() as conn:
                return call(conn)
        except SQLAlchemyError as exc:
            logger.error(
                "sql.execution_failed",
                operation=operation,
                table=table,
                error_type=type(exc).__name__,
                error=describe_error(exc),
            )
            raise ExecutionFailed(operation, exc, table=table) from exc

    def get(self, query: str, params: Optional[Mapping[str, Any]] = None) -> RowMapping:
        """
        Return the first row of a query.

        Raises:
            RecordNotFoundError: If the query returned no rows
            ExecutionFailed: If the database reported an error
        """
        row = self._run(
            "get",
            None,
            lambda conn: conn.execute(sa.text(query), dict(params or {})).mappings().first(),
        )
        if row is None:
            raise RecordNotFoundError(f"no rows returned by query: {query}")
        return row

    def select(
        self, query: str, params: Optional[Mapping[str, Any]] = None
    ) -> List[RowMapping]:
        """Return all rows of a query."""
        return self._run(
            "select",
            None,
            lambda conn: list(conn.execute(sa.text(query), dict(params or {})).mappings().all()),
        )

    def insert(self, table: str, record: Any, exclude: Iterable[str] = ()) -> int:
        """
        Insert a record into a table.

        Only annotated fields are inserted. ``exclude`` names columns to leave
        out, typically database-generated primary keys.

        Returns:
            Number of inserted rows
        """
        columns = extract_fields(record, exclude, self.max_record_depth)
        if not columns:
            raise EmptyColumnListError("insert into", table)

        sql = self.inserts.insert(table, columns)
        params = record_params(record, self.max_record_depth)
        logger.debug(
            "sql.insert",
            dialect=self.dialect.name,
            table=table,
            column_count=len(columns),
        )
        return self._run(
            "insert into",
            table,
            lambda conn: self._executor(conn).execute_named(sql, params),
        )

    def insert_and_get_id(
        self,
        table: str,
        record: Any,
        exclude: Iterable[str] = (),
        id_column: Optional[str] = None,
    ) -> Any:
        """
        Insert a record and return the generated identifier.

        Args:
            table: Table name
            record: Record to insert
            exclude: Columns to leave out of the INSERT
            id_column: Column to return (defaults to the runner's id_column)

        Returns:
            Value of the identifier column of the inserted row
        """
        id_column = id_column or self.id_column
        columns = extract_fields(record, exclude, self.max_record_depth)
        if not columns:
            raise EmptyColumnListError("insert into", table)

        sql = self.inserts.insert_returning(table, columns, id_column)
        params = record_params(record, self.max_record_depth)
        logger.debug(
            "sql.insert_returning",
            dialect=self.dialect.name,
            table=table,
            column_count=len(columns),
            id_column=id_column,
        )
        return self._run(
            "insert into",
            table,
            lambda conn: self._executor(conn).query_one_named(sql, params),
        )

    def update(
        self,
        table: str,
        record: Any,
        where_sql: str,
        exclude: Iterable[str] = (),
    ) -> int:
        """
        Update rows of a table from a record.

        Every annotated column not in ``exclude`` is set. Excluded columns
        are still bound, so ``where_sql`` may reference them, e.g.
        ``WHERE "id"=:id``.

        Returns:
            Number of updated rows
        """
        columns = extract_fields(record, exclude, self.max_record_depth)
        return self.update_fields(table, record, where_sql, columns)

    def update_fields(
        self,
        table: str,
        record: Any,
        where_sql: str,
        fields: Iterable[str],
    ) -> int:
        """Update only the given columns of a table from a record."""
        columns = list(fields)
        if not columns:
            raise EmptyColumnListError("update", table)

        sql = self.updates.update(table, columns, where_sql)
        params = record_params(record, self.max_record_depth)
        logger.debug(
            "sql.update",
            dialect=self.dialect.name,
            table=table,
            column_count=len(columns),
        )
        return self._run(
            "update",
            table,
            lambda conn: self._executor(conn).execute_named(sql, params),
        )


class Transaction(QueryRunner):
    """
    Query runner bound to a single connection and transaction.

    Usable as a context manager: commits on a clean exit, rolls back when
    the block raises.
    """

    def __init__(self, connection: Connection, transaction: RootTransaction, **options: Any):
        super().__init__(**options)
        self.connection = connection
        self.transaction = transaction

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        yield self.connection

    def commit(self) -> None:
        try:
            self.transaction.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "sql.execution_failed", operation="commit", error=describe_error(exc)
            )
            raise ExecutionFailed("commit", exc) from exc
        logger.debug("sql.transaction_committed")

    def rollback(self) -> None:
        if self.transaction.is_active:
            self.transaction.rollback()
            logger.debug("sql.transaction_rolled_back")

    def close(self) -> None:
        """Roll back anything uncommitted and release the connection."""
        self.rollback()
        self.connection.close()

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None and self.transaction.is_active:
                self.commit()
        finally:
            self.close()


class Database(QueryRunner):
    """Query runner over an Engine; each call runs in its own transaction."""

    def __init__(self, engine: Engine, **options: Any):
        super().__init__(**options)
        self.engine = engine

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        """Create a Database with an engine built from configuration."""
        settings = settings or get_settings()
        engine = sa.create_engine(
            settings.DATABASE_URL, echo=settings.DB_ECHO, hide_parameters=True
        )
        return cls(
            engine,
            max_record_depth=settings.max_record_depth,
            id_column=settings.id_column,
        )

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        with self.engine.begin() as conn:
            yield conn

    def begin(self) -> Transaction:
        """Start a transaction on a dedicated connection."""
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as exc:
            raise ExecutionFailed("begin", exc) from exc
        try:
            tx = conn.begin()
        except SQLAlchemyError as exc:
            conn.close()
            raise ExecutionFailed("begin", exc) from exc

        logger.debug("sql.transaction_started")
        return Transaction(conn, tx, **self._options())
