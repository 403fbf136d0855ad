"""
Custom exceptions for the live query store.
"""

from __future__ import annotations

from typing import Optional


class LiveQueryError(Exception):
    """Base exception for all livequery errors."""
    pass


class RegistrationError(LiveQueryError):
    """Raised when a document cannot be registered as a live query."""

    def __init__(self, message: str, operation_name: Optional[str] = None):
        self.operation_name = operation_name
        super().__init__(
            f"Cannot register live query{f' {operation_name!r}' if operation_name else ''}: {message}"
        )


class ConfigError(LiveQueryError):
    """Raised when store configuration is invalid."""
    pass
