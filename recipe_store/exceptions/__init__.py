# Base exception class
from .base import RecipeStoreError

from .domain_exceptions import (
    ValidationError,
    InvalidIdentifierError,
    ItemNotFoundError,
    ConflictError,
    TransactionAbortedError,
    StorageUnavailableError,
    MalformedRecordError,
)

__all__ = [
    # Base exception
    "RecipeStoreError",

    # Domain exceptions (alphabetically ordered)
    "ConflictError",
    "InvalidIdentifierError",
    "ItemNotFoundError",
    "MalformedRecordError",
    "StorageUnavailableError",
    "TransactionAbortedError",
    "ValidationError",
]
