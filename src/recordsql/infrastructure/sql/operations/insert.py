"""
SQL INSERT statement builders.

Provides a high-level builder for INSERT statements, including the
INSERT ... RETURNING variant used to read back generated identifiers.
"""

from typing import Optional, Protocol, Sequence


class Dialect(Protocol):
    """Protocol for SQL dialects."""

    name: str

    def build_insert(self, table: str, columns: Sequence[str]) -> str: ...
    def build_insert_returning(
        self, table: str, columns: Sequence[str], id_column: str
    ) -> str: ...
    def build_update(
        self, table: str, columns: Sequence[str], where_sql: str = ""
    ) -> str: ...


class InsertBuilder:
    """
    High-level builder for INSERT statements.

    Example:
        >>> from recordsql.infrastructure.sql import InsertBuilder, PostgreSQLDialect
        >>> builder = InsertBuilder(PostgreSQLDialect())
        >>> print(builder.insert("users", ["name", "email"]))
        INSERT INTO users ("name", "email") VALUES (:name, :email)
    """

    def __init__(self, dialect: Dialect):
        """
        Initialize the InsertBuilder.

        Args:
            dialect: SQL dialect to use for statement generation
        """
        self.dialect = dialect

    def insert(self, table: str, columns: Sequence[str]) -> str:
        """Build a simple INSERT statement."""
        return self.dialect.build_insert(table, columns)

    def insert_returning(
        self, table: str, columns: Sequence[str], id_column: Optional[str] = None
    ) -> str:
        """
        Build an INSERT ... RETURNING statement.

        Args:
            table: Table name
            columns: List of column names to insert
            id_column: Identifier column to return (defaults to "id")

        Returns:
            INSERT ... RETURNING SQL statement
        """
        return self.dialect.build_insert_returning(table, columns, id_column or "id")
