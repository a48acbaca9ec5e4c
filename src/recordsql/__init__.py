"""
recordsql - record-to-SQL helpers over SQLAlchemy.

Generates INSERT and UPDATE statements from annotated dataclasses, pydantic
models and mappings, and runs them through SQLAlchemy with errors annotated
by operation and table.

Usage:
    >>> from recordsql.io import Database
    >>> from recordsql.infrastructure.sql import column, extract_fields
"""

__version__ = "0.1.0"
