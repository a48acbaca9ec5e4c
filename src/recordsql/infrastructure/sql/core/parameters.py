"""
Named-parameter SQL fragments.

Builds the column, placeholder and SET lists used by INSERT and UPDATE
statements. Placeholders use the ``:name`` style understood by
``sqlalchemy.text()``, so the column name is also the bound parameter name.

These are pure string functions. An empty column list produces empty
clauses; callers must not turn those into statements.
"""

from typing import List, Sequence, Tuple

from .identifier import quote_identifier


def build_placeholders(columns: Sequence[str]) -> List[str]:
    """
    Build one named placeholder per column.

    Examples:
        >>> build_placeholders(["id", "name"])
        [':id', ':name']
    """
    return [f":{col}" for col in columns]


def build_insert_clauses(columns: Sequence[str]) -> Tuple[str, str]:
    """
    Build the column and VALUES lists of an INSERT statement.

    Args:
        columns: Ordered column names

    Returns:
        Tuple of (column clause, placeholder clause)

    Examples:
        >>> build_insert_clauses(["id", "name", "description"])
        ('"id", "name", "description"', ':id, :name, :description')
    """
    column_clause = ", ".join(quote_identifier(col) for col in columns)
    placeholder_clause = ", ".join(build_placeholders(columns))
    return column_clause, placeholder_clause


def build_update_set(columns: Sequence[str]) -> str:
    """
    Build the SET list of an UPDATE statement.

    Examples:
        >>> build_update_set(["name", "description"])
        '"name"=:name, "description"=:description'
    """
    return ", ".join(f"{quote_identifier(col)}=:{col}" for col in columns)
