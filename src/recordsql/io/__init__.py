"""Database I/O: executor capability and query runners over SQLAlchemy."""

from .database import ConnectionExecutor, Database, NamedExecutor, QueryRunner, Transaction

__all__ = [
    "ConnectionExecutor",
    "Database",
    "NamedExecutor",
    "QueryRunner",
    "Transaction",
]
