"""Configuration management for recordsql.

Usage:
    >>> from recordsql.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.LOG_LEVEL)
"""

from recordsql.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
