"""
Exception hierarchy for record-to-SQL helpers.

Errors raised while reading records are deterministic and never retried.
Errors coming back from the database are wrapped with the operation and
table they belong to, keeping the original exception reachable through
``original_error`` and ``__cause__``.
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import NoResultFound, StatementError


def describe_error(err: BaseException) -> str:
    """
    Describe an error without the SQL statement or its bound parameters.

    SQLAlchemy statement errors render ``[parameters: ...]`` with record
    values; only the underlying driver error is kept.

    Examples:
        >>> describe_error(ValueError("boom"))
        'boom'
    """
    if isinstance(err, StatementError):
        if err.orig is not None:
            return str(err.orig)
        return str(err.args[0]) if err.args else type(err).__name__
    return str(err)


class RecordSQLError(Exception):
    """Base exception for all recordsql errors."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging."""
        return {
            "error_type": type(self).__name__,
            "message": str(self),
        }


class UnsupportedRecordShape(RecordSQLError):
    """
    Raised when a record is neither a structured object nor a mapping.

    Args:
        record_type: Type of the offending record
        message: Optional error description
    """

    def __init__(self, record_type: type, message: Optional[str] = None):
        self.record_type = record_type
        if message is None:
            message = (
                "Record must be a dataclass, a pydantic model or a mapping, "
                f"found: {record_type.__name__}"
            )
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["record_type"] = self.record_type.__name__
        return data


class RecordNestingError(UnsupportedRecordShape):
    """Raised when nested records form a cycle or nest too deeply."""

    def __init__(self, record_type: type, depth: int, reason: str):
        self.depth = depth
        super().__init__(
            record_type,
            f"Cannot flatten record {record_type.__name__} at depth {depth}: {reason}",
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["depth"] = self.depth
        return data


class EmptyColumnListError(RecordSQLError):
    """Raised before execution when a record yields no columns to write."""

    def __init__(self, operation: str, table: str):
        self.operation = operation
        self.table = table
        super().__init__(
            f"Cannot {operation} table '{table}': record has no persistable columns"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"operation": self.operation, "table": self.table})
        return data


class ExecutionFailed(RecordSQLError):
    """
    Wraps an error reported by the database with call-site context.

    Args:
        operation: Operation kind ("insert", "update", "select", ...)
        table: Table name the operation targeted (optional for raw queries)
        original_error: The exception being wrapped
    """

    def __init__(
        self,
        operation: str,
        original_error: BaseException,
        table: Optional[str] = None,
    ):
        self.operation = operation
        self.table = table
        self.original_error = original_error

        if table:
            message = f"Cannot {operation} table '{table}': {describe_error(original_error)}"
        else:
            message = f"Cannot run {operation} query: {describe_error(original_error)}"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "operation": self.operation,
                "table": self.table,
                "original_error_type": type(self.original_error).__name__,
                "original_error_message": describe_error(self.original_error),
            }
        )
        return data


class RecordNotFoundError(RecordSQLError):
    """Raised by lookups when the query succeeded but returned no rows."""

    def __init__(self, message: str = "no rows in result set"):
        super().__init__(message)


def is_not_found_error(err: Optional[BaseException]) -> bool:
    """
    Check whether an error means "no database error, but no row found".

    Follows ``original_error``, ``__cause__`` and ``__context__`` links, so the
    answer is the same however many times the error has been wrapped.
    """
    seen = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, (RecordNotFoundError, NoResultFound)):
            return True
        seen.add(id(err))
        err = (
            getattr(err, "original_error", None)
            or err.__cause__
            or err.__context__
        )
    return False
