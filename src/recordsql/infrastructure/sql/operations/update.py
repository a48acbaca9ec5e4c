"""SQL UPDATE statement builder."""

from typing import Sequence

from .insert import Dialect


class UpdateBuilder:
    """
    Builder for UPDATE statements whose SET list binds same-named parameters.

    Example:
        >>> from recordsql.infrastructure.sql import PostgreSQLDialect, UpdateBuilder
        >>> builder = UpdateBuilder(PostgreSQLDialect())
        >>> print(builder.update("users", ["name"], 'WHERE "id"=:id'))
        UPDATE users SET "name"=:name WHERE "id"=:id
    """

    def __init__(self, dialect: Dialect):
        self.dialect = dialect

    def update(self, table: str, columns: Sequence[str], where_sql: str = "") -> str:
        return self.dialect.build_update(table, columns, where_sql)
