"""Exceptions raised by rejected writes and malformed framework files."""

from __future__ import annotations


class FrameworkError(Exception):
    """Base class for all framework errors."""


class DuplicateKeyError(FrameworkError, ValueError):
    """Raised when an add or rename would collide with an existing key."""

    def __init__(self, key: str, message: str = "") -> None:
        self.key = key
        super().__init__(message or f"'{key}' already exists.")


class EmptyKeyError(FrameworkError, ValueError):
    """Raised when a key component is empty."""


class UnknownReferenceError(FrameworkError, LookupError):
    """Raised when a write names a row, safeguard, node or attribute that does not exist."""


class NotApplicableError(FrameworkError, ValueError):
    """Raised when a taxonomy node lies outside a safeguard's applicable asset types."""


class FrameworkConfigError(FrameworkError, ValueError):
    """Raised when a framework definition cannot be turned into a store."""
