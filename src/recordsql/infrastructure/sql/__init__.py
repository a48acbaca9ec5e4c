"""
SQL module for record-driven SQL generation.

This module provides reusable utilities for discovering annotated record
fields and building INSERT/UPDATE statements with quoted column names and
named placeholders.
"""

from .core.fields import column, extract_fields, record_params
from .core.identifier import quote_identifier
from .core.parameters import build_insert_clauses, build_update_set
from .dialects.postgresql import PostgreSQLDialect
from .operations.insert import InsertBuilder
from .operations.update import UpdateBuilder

__all__ = [
    "column",
    "extract_fields",
    "record_params",
    "quote_identifier",
    "build_insert_clauses",
    "build_update_set",
    "PostgreSQLDialect",
    "InsertBuilder",
    "UpdateBuilder",
]
