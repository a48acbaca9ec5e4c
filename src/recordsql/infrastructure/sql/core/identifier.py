"""
SQL identifier handling utilities.

Column names taken from record annotations are always quoted, so mixed-case,
reserved-word and non-ASCII names survive unchanged. Record annotations are
also limited to word characters because each name doubles as a ``:name``
bind parameter.
"""


def quote_identifier(name: str) -> str:
    """
    Quote a SQL column identifier with double quotes.

    Args:
        name: The identifier to quote

    Returns:
        Quoted identifier with internal double quotes doubled

    Raises:
        ValueError: If name is empty

    Examples:
        >>> quote_identifier("年金计划号")
        '"年金计划号"'
        >>> quote_identifier("user")
        '"user"'
        >>> quote_identifier('odd"name')
        '"odd""name"'
    """
    if not name or not isinstance(name, str):
        raise ValueError("Identifier name must be non-empty string")

    escaped = name.replace('"', '""')
    return f'"{escaped}"'
