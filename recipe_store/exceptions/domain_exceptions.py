"""
Domain-Specific Exceptions for the Recipe Store

Every failure leaving the storage layer is one of these classes. Vendor error
codes are translated into them by the table gateway, so callers only ever see
this closed set.

Organized by category:
1. Data Validation Errors
2. Resource Not Found Errors
3. Conflict and Transaction Errors
4. Infrastructure Errors
"""

from typing import Any, Dict, List, Optional

from .base import RecipeStoreError


# =============================================================================
# Data Validation Errors
# =============================================================================

class ValidationError(RecipeStoreError):
    """Raised when caller input fails validation.

    Used for:
    - Pydantic schema failures on write DTOs
    - Malformed pagination tokens
    - Invalid transaction shapes

    Never retried automatically; the caller has to fix the input.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Field-level violations, each with 'field', 'message' and 'type'
            original_error: The original exception that caused this error
        """
        self.errors = errors or []
        context = {
            'validation_errors': self.errors
        }
        super().__init__(message, original_error, context)


class InvalidIdentifierError(ValidationError):
    """Raised when a key component (username, recipe id) is empty."""

    def __init__(self, component: str):
        self.component = component
        super().__init__(
            f"Identifier component '{component}' must not be empty",
            errors=[{'field': component, 'message': 'must not be empty', 'type': 'invalid_identifier'}]
        )


# =============================================================================
# Resource Not Found Errors
# =============================================================================

class ItemNotFoundError(RecipeStoreError):
    """Raised when a specific item is not in the table.

    Absence is a legitimate terminal outcome, not a fault.
    """

    def __init__(self, table_name: str, key: dict, original_error: Optional[Exception] = None):
        """Initialize item not found error.

        Args:
            table_name: Name of the DynamoDB table
            key: The key that was not found
            original_error: The original exception that caused this error
        """
        self.table_name = table_name
        self.key = key
        message = f"Item not found in table '{table_name}' with key: {key}"
        context = {
            'table_name': table_name,
            'key': key
        }
        super().__init__(message, original_error, context)


# =============================================================================
# Conflict and Transaction Errors
# =============================================================================

class ConflictError(RecipeStoreError):
    """Raised when a uniqueness or precondition check fails.

    Used for:
    - ConditionalCheckFailedException on create-if-absent puts
    - Duplicate likes
    - Ambiguous recipe ids shared by several owners
    """

    def __init__(self, message: str, resource_id: Optional[str] = None, original_error: Optional[Exception] = None):
        """Initialize conflict error.

        Args:
            message: Human-readable error message
            resource_id: ID of the conflicting resource (e.g., USER#alice)
            original_error: The original exception that caused this error
        """
        self.resource_id = resource_id
        context = {}
        if resource_id:
            context['resource_id'] = resource_id
        super().__init__(message, original_error, context)


class TransactionAbortedError(RecipeStoreError):
    """Raised when a TransactWriteItems call is cancelled as a whole.

    No partial effect occurred. ``cancellation_reasons`` holds one code per
    operation in request order ('None' for operations that would have
    succeeded), letting the caller tell a failed precondition from
    concurrent interference.
    """

    def __init__(self, message: str, cancellation_reasons: Optional[List[str]] = None, original_error: Optional[Exception] = None):
        self.cancellation_reasons = cancellation_reasons or []
        context = {}
        if self.cancellation_reasons:
            context['cancellation_reasons'] = self.cancellation_reasons
        super().__init__(message, original_error, context)

    def failed_operations(self, code: str = 'ConditionalCheckFailed') -> List[int]:
        """Return indexes of the operations cancelled with ``code``."""
        return [i for i, reason in enumerate(self.cancellation_reasons) if reason == code]

    @property
    def is_conditional_failure(self) -> bool:
        return bool(self.failed_operations())


# =============================================================================
# Infrastructure Errors
# =============================================================================

class StorageUnavailableError(RecipeStoreError):
    """Raised when the store cannot serve the request.

    Used for:
    - Throttling and capacity errors
    - Service errors and timeouts
    - Endpoint, credential and network failures (``retryable=False`` when the
      fault will not clear on its own)
    """

    def __init__(self, message: str, retryable: bool = True, original_error: Optional[Exception] = None):
        """Initialize storage unavailable error.

        Args:
            message: Human-readable error message
            retryable: Whether retrying with backoff can succeed
            original_error: The original exception that caused this error
        """
        self.retryable = retryable
        super().__init__(message, original_error, {'retryable': retryable})


class MalformedRecordError(RecipeStoreError):
    """Raised when a stored item cannot be decoded into an entity."""

    def __init__(self, message: str, item_key: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        self.item_key = item_key
        context = {}
        if item_key:
            context['item_key'] = item_key
        super().__init__(message, original_error, context)
