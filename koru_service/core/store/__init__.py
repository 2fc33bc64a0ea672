"""Unit-of-work store contract and repository protocols."""

from koru_service.core.store.base import Store, Transaction
from koru_service.core.store.exceptions import (
    CorruptedDataError,
    DeleteError,
    FetchError,
    InsertError,
    RepositoryError,
    TransactionError,
    UpdateError,
)

__all__ = [
    "CorruptedDataError",
    "DeleteError",
    "FetchError",
    "InsertError",
    "RepositoryError",
    "Store",
    "Transaction",
    "TransactionError",
    "UpdateError",
]
