"""Store and repository exceptions.

Raised by every backend so use cases and the worker never see driver
specific errors.
"""
from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base exception for store operations."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class InsertError(RepositoryError):
    """A write could not be staged or persisted."""


class FetchError(RepositoryError):
    """A read failed, or a targeted record does not exist."""


class UpdateError(RepositoryError):
    """An in-place update failed."""


class DeleteError(RepositoryError):
    """A delete failed."""


class CorruptedDataError(RepositoryError):
    """Stored data cannot be turned back into a valid domain value.

    Also raised by the in-memory backend when a repository's crash flag is
    set, to simulate a broken store.
    """


class TransactionError(RepositoryError):
    """A unit of work could not be opened, committed or rolled back."""
