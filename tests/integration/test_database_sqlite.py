"""
Integration tests running generated statements against in-memory SQLite.
"""

import logging

import pytest

from recordsql.exceptions import (
    EmptyColumnListError,
    ExecutionFailed,
    RecordNotFoundError,
    UnsupportedRecordShape,
    is_not_found_error,
)
from recordsql.io import Database
from tests.fixtures.records import Address, Customer, User

pytestmark = pytest.mark.integration

SELECT_USER = 'SELECT "id", "name", "email" FROM users WHERE "id"=:id'


def test_insert_only_annotated_columns(db: Database):
    user = User(id=0, name="Bob", email="bob@example.com", internal="skip me")

    assert db.insert("users", user, exclude={"id"}) == 1

    row = db.get(SELECT_USER, {"id": 1})
    assert row["name"] == "Bob"
    assert row["email"] == "bob@example.com"


def test_insert_mapping_record(db: Database):
    db.insert("users", {"name": "Ann", "email": None})

    rows = db.select('SELECT "name", "email" FROM users')
    assert [dict(r) for r in rows] == [{"name": "Ann", "email": None}]


def test_insert_and_get_id(db: Database):
    first = db.insert_and_get_id("users", User(name="Bob"), exclude={"id"})
    second = db.insert_and_get_id("users", User(name="Ann"), exclude={"id"})

    assert (first, second) == (1, 2)
    assert db.get(SELECT_USER, {"id": second})["name"] == "Ann"


def test_insert_nested_record(db: Database):
    customer = Customer(name="Ann", address=Address(street="Main St", city="Oslo"))

    db.insert("customers", customer, exclude={"id"})

    row = db.get('SELECT "name", "street", "city" FROM customers')
    assert dict(row) == {"name": "Ann", "street": "Main St", "city": "Oslo"}


def test_update_by_primary_key(db: Database):
    user_id = db.insert_and_get_id("users", User(name="Bob"), exclude={"id"})

    updated = db.update(
        "users",
        User(id=user_id, name="Robert", email="r@example.com"),
        'WHERE "id"=:id',
        exclude={"id"},
    )

    assert updated == 1
    row = db.get(SELECT_USER, {"id": user_id})
    assert row["name"] == "Robert"
    assert row["email"] == "r@example.com"


def test_update_fields_leaves_other_columns(db: Database):
    user_id = db.insert_and_get_id(
        "users", User(name="Bob", email="bob@example.com"), exclude={"id"}
    )

    db.update_fields("users", User(id=user_id, name="Rob"), 'WHERE "id"=:id', ["name"])

    row = db.get(SELECT_USER, {"id": user_id})
    assert row["name"] == "Rob"
    assert row["email"] == "bob@example.com"


def test_update_without_match_affects_no_rows(db: Database):
    assert db.update("users", User(id=99, name="Ghost"), 'WHERE "id"=:id', exclude={"id"}) == 0


def test_get_missing_row_is_not_found(db: Database):
    with pytest.raises(RecordNotFoundError) as exc_info:
        db.get(SELECT_USER, {"id": 404})

    assert is_not_found_error(exc_info.value)


def test_constraint_violation_is_wrapped(db: Database):
    db.insert("users", User(id=1, name="Bob"))

    with pytest.raises(ExecutionFailed) as exc_info:
        db.insert("users", User(id=1, name="Bob again"))

    assert "Cannot insert into table 'users'" in str(exc_info.value)
    assert not is_not_found_error(exc_info.value)


def test_failed_insert_does_not_expose_values(db: Database, caplog):
    caplog.set_level(logging.ERROR)

    with pytest.raises(ExecutionFailed) as exc_info:
        db.insert("users", {"name": None, "email": "SECRET-VALUE-123"})

    assert "NOT NULL" in str(exc_info.value)
    assert "SECRET-VALUE-123" not in str(exc_info.value)
    assert "SECRET-VALUE-123" not in str(exc_info.value.to_dict())
    assert caplog.records
    assert all("SECRET-VALUE-123" not in r.getMessage() for r in caplog.records)


def test_hyphenated_column_is_rejected(db: Database):
    with pytest.raises(UnsupportedRecordShape, match="first-name"):
        db.insert("users", {"first-name": "Ann", "name": "Ann"})

    assert db.select("SELECT * FROM users") == []


def test_unknown_table_is_wrapped(db: Database):
    with pytest.raises(ExecutionFailed) as exc_info:
        db.insert("missing_table", {"name": "Bob"})

    assert exc_info.value.table == "missing_table"


def test_empty_record_never_reaches_database(db: Database):
    with pytest.raises(EmptyColumnListError):
        db.insert("users", {})

    assert db.select("SELECT * FROM users") == []


def test_transaction_commits(db: Database):
    with db.begin() as tx:
        tx.insert("users", User(name="Bob"), exclude={"id"})
        tx.insert("users", User(name="Ann"), exclude={"id"})

    assert len(db.select("SELECT * FROM users")) == 2


def test_transaction_rolls_back_on_error(db: Database):
    with pytest.raises(RuntimeError):
        with db.begin() as tx:
            tx.insert("users", User(name="Bob"), exclude={"id"})
            raise RuntimeError("abort")

    assert db.select("SELECT * FROM users") == []


def test_explicit_rollback(db: Database):
    tx = db.begin()
    tx.insert("users", User(name="Bob"), exclude={"id"})
    tx.rollback()
    tx.close()

    assert db.select("SELECT * FROM users") == []
