"""
Tagged outcomes returned by the access facade.

Every facade call returns a ``Result`` whose ``kind`` is one of
``ResultKind``. Failures carry a message, optional field-level details and
a ``retryable`` flag; nothing vendor-specific leaks through.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import (
    ConflictError,
    ItemNotFoundError,
    MalformedRecordError,
    RecipeStoreError,
    StorageUnavailableError,
    TransactionAbortedError,
    ValidationError,
)


class ResultKind(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_FAILED = "validation_failed"
    TRANSACTION_ABORTED = "transaction_aborted"
    STORAGE_UNAVAILABLE = "storage_unavailable"


class Result(BaseModel):
    """Outcome of one facade operation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: ResultKind
    value: Any = None
    message: Optional[str] = None
    details: List[Dict[str, Any]] = Field(default_factory=list)
    retryable: bool = False

    @property
    def ok(self) -> bool:
        return self.kind == ResultKind.OK

    @classmethod
    def success(cls, value: Any = None) -> 'Result':
        return cls(kind=ResultKind.OK, value=value)

    @classmethod
    def from_error(cls, error: RecipeStoreError) -> 'Result':
        """Classify a store error into its outcome kind."""
        message = _public_message(error)
        if isinstance(error, ValidationError):
            details = [] if _from_vendor(error) else error.errors
            return cls(kind=ResultKind.VALIDATION_FAILED, message=message, details=details)
        if isinstance(error, ItemNotFoundError):
            return cls(kind=ResultKind.NOT_FOUND, message=message)
        if isinstance(error, ConflictError):
            return cls(kind=ResultKind.CONFLICT, message=message)
        if isinstance(error, TransactionAbortedError):
            return cls(
                kind=ResultKind.TRANSACTION_ABORTED,
                message=message,
                details=[{'operation': i, 'reason': reason} for i, reason in enumerate(error.cancellation_reasons)],
                retryable=True,
            )
        if isinstance(error, StorageUnavailableError):
            return cls(kind=ResultKind.STORAGE_UNAVAILABLE, message=message, retryable=error.retryable)
        if isinstance(error, MalformedRecordError):
            return cls(kind=ResultKind.STORAGE_UNAVAILABLE, message="Stored record could not be read", retryable=False)
        return cls(kind=ResultKind.STORAGE_UNAVAILABLE, message=message, retryable=False)

    def unwrap(self) -> Any:
        """Return ``value`` for a successful result, raise otherwise."""
        if not self.ok:
            raise ValueError(f"{self.kind.value}: {self.message}")
        return self.value


# Messages used when the error text came straight from the AWS SDK
VENDOR_MESSAGES = {
    ValidationError: "Request rejected by storage",
    ItemNotFoundError: "Item not found",
    ConflictError: "Conditional write failed",
    TransactionAbortedError: "Transaction was cancelled, retry the operation",
    StorageUnavailableError: "Storage is unavailable",
}


def _from_vendor(error: RecipeStoreError) -> bool:
    return isinstance(error.original_error, (ClientError, BotoCoreError))


def _public_message(error: RecipeStoreError) -> str:
    if not _from_vendor(error):
        return error.message
    for error_class, message in VENDOR_MESSAGES.items():
        if isinstance(error, error_class):
            return message
    return "Storage request failed"
