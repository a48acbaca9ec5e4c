"""Core SQL utilities package."""

from .fields import column, extract_fields, record_params
from .identifier import quote_identifier
from .parameters import build_insert_clauses, build_placeholders, build_update_set

__all__ = [
    "column",
    "extract_fields",
    "record_params",
    "quote_identifier",
    "build_insert_clauses",
    "build_placeholders",
    "build_update_set",
]
