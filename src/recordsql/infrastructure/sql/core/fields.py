"""
Record field discovery.

Reads persistence-column annotations from records and turns them into
ordered column lists and bound-parameter dictionaries.

A record is one of:
- a dataclass instance, annotated with ``field(metadata={"db": "name"})``
  (see :func:`column`)
- a pydantic model instance, annotated with
  ``Field(json_schema_extra={"db": "name"})``
- a mapping with string keys

Only annotated fields are persisted. A field annotated with ``"-"`` is
ignored entirely. Structured values held in a field are flattened into the
parent's column list.
"""

import dataclasses
import re
from functools import lru_cache
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from pydantic import BaseModel

from recordsql.exceptions import RecordNestingError, UnsupportedRecordShape

COLUMN_KEY = "db"
IGNORE_COLUMN = "-"
DEFAULT_MAX_DEPTH = 32

# Column names double as ``:name`` bind parameters
BIND_NAME_PATTERN = re.compile(r"\w+")


def column(name: str, **kwargs: Any) -> Any:
    """
    Declare a dataclass field mapped to a database column.

    Examples:
        >>> @dataclass
        ... class User:
        ...     id: int = column("id", default=0)
        ...     name: str = column("name", default="")
        ...     cache: dict = column("-", default_factory=dict)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[COLUMN_KEY] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def check_column_name(record_type: type, name: str) -> str:
    """Return name if it can be bound as a named parameter, else raise."""
    if not BIND_NAME_PATTERN.fullmatch(name):
        raise UnsupportedRecordShape(
            record_type,
            f"Column name '{name}' of {record_type.__name__} is not a valid "
            "bind parameter name (letters, digits and underscores only)",
        )
    return name


def is_structured(value: Any) -> bool:
    """Return True for dataclass and pydantic model instances (not classes)."""
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


@lru_cache(maxsize=None)
def annotated_fields(record_type: type) -> Tuple[Tuple[str, str], ...]:
    """
    Return ``(attribute, annotation)`` pairs for a record class.

    Pairs come in declaration order. Unannotated fields are included with an
    empty annotation so nested records held in them can still be flattened.
    The result is computed once per class.

    Raises:
        UnsupportedRecordShape: If the class is not a record, or an
            annotation is not usable as a bind parameter name
    """
    if dataclasses.is_dataclass(record_type):
        pairs = [
            (f.name, f.metadata.get(COLUMN_KEY, "") or "")
            for f in dataclasses.fields(record_type)
        ]
    elif isinstance(record_type, type) and issubclass(record_type, BaseModel):
        pairs = []
        for name, info in record_type.model_fields.items():
            extra = info.json_schema_extra
            annotation = extra.get(COLUMN_KEY, "") if isinstance(extra, dict) else ""
            pairs.append((name, annotation or ""))
    else:
        raise UnsupportedRecordShape(record_type)

    for _, annotation in pairs:
        if annotation and annotation != IGNORE_COLUMN:
            check_column_name(record_type, annotation)
    return tuple(pairs)


def _mapping_keys(record: Mapping) -> List[str]:
    keys = list(record.keys())
    for key in keys:
        if not isinstance(key, str):
            raise UnsupportedRecordShape(
                type(record),
                f"Mapping records need string keys, found: {type(key).__name__}",
            )
        check_column_name(type(record), key)
    return sorted(keys)


def _walk(
    record: Any, path: Tuple[type, ...], max_depth: int
) -> Iterator[Tuple[str, Any]]:
    record_type = type(record)
    if record_type in path:
        raise RecordNestingError(
            record_type, len(path), "record type is nested inside itself"
        )
    if len(path) >= max_depth:
        raise RecordNestingError(
            record_type, len(path), f"nesting exceeds {max_depth} levels"
        )
    path = path + (record_type,)

    for attr, annotation in annotated_fields(record_type):
        if annotation == IGNORE_COLUMN:
            continue
        value = getattr(record, attr)
        if annotation:
            yield annotation, value
        if is_structured(value):
            yield from _walk(value, path, max_depth)


def _exclude_set(exclude: Iterable[str]) -> set:
    if isinstance(exclude, str):
        return {exclude}
    return set(exclude)


def extract_fields(
    record: Any,
    exclude: Iterable[str] = (),
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> List[str]:
    """
    List the database columns of a record.

    Args:
        record: Dataclass instance, pydantic model instance or mapping
        exclude: Column names to leave out (e.g. primary keys on insert)
        max_depth: Maximum nesting level for structured values

    Returns:
        Column names in declaration order for structured records, or in
        sorted key order for mappings

    Raises:
        UnsupportedRecordShape: If the record has any other shape
        RecordNestingError: If nested records form a cycle or nest too deeply

    Examples:
        >>> extract_fields({"name": "Bob", "age": 3}, exclude={"age"})
        ['name']
    """
    excluded = _exclude_set(exclude)

    if isinstance(record, Mapping):
        return [key for key in _mapping_keys(record) if key not in excluded]
    if not is_structured(record):
        raise UnsupportedRecordShape(type(record))

    return [name for name, _ in _walk(record, (), max_depth) if name not in excluded]


def record_params(record: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Dict[str, Any]:
    """
    Build the bound-parameter dictionary for a record.

    Every annotated column is present, including ones a caller may exclude
    from the column list, so WHERE clauses such as ``"id"=:id`` can bind
    them. When nested records repeat a column name, the outermost value wins.

    Examples:
        >>> record_params({"id": 1, "name": "Bob"})
        {'id': 1, 'name': 'Bob'}
    """
    if isinstance(record, Mapping):
        _mapping_keys(record)
        return dict(record)
    if not is_structured(record):
        raise UnsupportedRecordShape(type(record))

    params: Dict[str, Any] = {}
    for name, value in _walk(record, (), max_depth):
        params.setdefault(name, value)
    return params
