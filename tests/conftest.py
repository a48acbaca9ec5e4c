"""Pytest configuration and shared database fixtures."""

from __future__ import annotations

import os
from typing import Generator

import pytest
import sqlalchemy as sa

# Ensure Settings() can initialize in test environments without bespoke .env files.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from recordsql.config import get_settings  # noqa: E402
from recordsql.io import Database  # noqa: E402

USERS_DDL = """
CREATE TABLE users (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "name" TEXT NOT NULL,
    "email" TEXT
)
"""

CUSTOMERS_DDL = """
CREATE TABLE customers (
    "id" INTEGER PRIMARY KEY AUTOINCREMENT,
    "name" TEXT NOT NULL,
    "street" TEXT,
    "city" TEXT
)
"""


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Give every test a fresh Settings instance."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sqlite_engine() -> Generator[sa.Engine, None, None]:
    """In-memory SQLite engine with the test tables created."""
    engine = sa.create_engine("sqlite://")
    with engine.begin() as conn:
        conn.execute(sa.text(USERS_DDL))
        conn.execute(sa.text(CUSTOMERS_DDL))
    yield engine
    engine.dispose()


@pytest.fixture
def db(sqlite_engine: sa.Engine) -> Database:
    return Database(sqlite_engine)
