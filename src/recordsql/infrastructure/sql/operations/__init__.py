"""Statement builders for write operations."""

from .insert import Dialect, InsertBuilder
from .update import UpdateBuilder

__all__ = ["Dialect", "InsertBuilder", "UpdateBuilder"]
