"""
PostgreSQL-specific SQL dialect implementation.

Assembles full INSERT, INSERT ... RETURNING and UPDATE statements from the
fragment builders in ``core.parameters``.
"""

from typing import Sequence

from ..core.parameters import build_insert_clauses, build_update_set


class PostgreSQLDialect:
    """PostgreSQL SQL dialect implementation."""

    name = "postgresql"

    def build_insert(self, table: str, columns: Sequence[str]) -> str:
        """
        Build a simple INSERT statement.

        Args:
            table: Table name, used verbatim (may be schema-qualified)
            columns: List of column names

        Returns:
            INSERT SQL statement with named placeholders
        """
        column_clause, placeholder_clause = build_insert_clauses(columns)
        return f"INSERT INTO {table} ({column_clause}) VALUES ({placeholder_clause})"

    def build_insert_returning(
        self, table: str, columns: Sequence[str], id_column: str
    ) -> str:
        """
        Build an INSERT statement that returns the given identifier column.

        Args:
            table: Table name
            columns: List of column names to insert
            id_column: Column whose generated value is returned

        Returns:
            INSERT ... RETURNING SQL statement
        """
        return f"{self.build_insert(table, columns)} RETURNING {id_column}"

    def build_update(self, table: str, columns: Sequence[str], where_sql: str = "") -> str:
        """
        Build an UPDATE statement.

        Args:
            table: Table name
            columns: Columns to set from same-named parameters
            where_sql: Trailing clause, usually ``WHERE "id"=:id``

        Returns:
            UPDATE SQL statement
        """
        sql = f"UPDATE {table} SET {build_update_set(columns)}"
        if where_sql:
            sql = f"{sql} {where_sql}"
        return sql
