"""
Recipe Store Utilities - Consolidated Module

Helpers shared by the models, the gateway and the handlers:

- Timestamp handling (UTC-only, fixed-width ISO strings so that lexical order
  on the ``createdAt`` index sort key is chronological order)
- Value conversion between Python and DynamoDB types
- Record dispatch (``encode_record`` / ``decode_record``) on ``recordType``
- Expression building (key conditions per access pattern, update expressions)
- Opaque pagination tokens
"""

import base64
import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from boto3.dynamodb.conditions import Key

from .exceptions import MalformedRecordError, ValidationError
from .keys import AccessPattern, PARTITION_KEY, RECORD_TYPE_ATTR, SORT_KEY, RecordType

logger = logging.getLogger(__name__)


# =============================================================================
# Timestamp Utilities
# =============================================================================

def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC.

    Naive datetimes are assumed to already be in UTC.

    Examples:
        >>> to_utc(datetime(2024, 1, 1, 10, 0))  # -> 2024-01-01 10:00:00+00:00
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Serialize a datetime for storage.

    Always microsecond precision with an explicit offset, e.g.
    ``2024-01-01T10:00:00.000000+00:00``.
    """
    return to_utc(dt).isoformat(timespec="microseconds")


# =============================================================================
# Value Conversion
# =============================================================================

def to_dynamodb_value(obj: Any) -> Any:
    """Recursively convert Python values to types boto3 accepts.

    - datetime -> fixed-width UTC ISO string
    - float -> Decimal (boto3 rejects floats)
    - Enum -> its value
    """
    if isinstance(obj, dict):
        return {k: to_dynamodb_value(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [to_dynamodb_value(v) for v in obj]
    elif isinstance(obj, datetime):
        return format_timestamp(obj)
    elif isinstance(obj, bool):
        return obj
    elif isinstance(obj, float):
        return Decimal(str(obj))
    elif hasattr(obj, "value") and isinstance(getattr(obj, "value"), str):
        return obj.value
    return obj


def from_dynamodb_number(value: Any) -> Any:
    """Turn an integral Decimal read from DynamoDB into an int."""
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return int(value)
    return value


# =============================================================================
# Record Dispatch
# =============================================================================

def _entity_classes():
    # Imported here to avoid circular imports (models -> utils -> models)
    from .models.domain_models import Like, Recipe, User
    return {
        RecordType.USER.value: User,
        RecordType.RECIPE.value: Recipe,
        RecordType.LIKE.value: Like,
    }


def encode_record(entity) -> Dict[str, Any]:
    """Encode any domain entity into its raw table item."""
    return entity.to_dynamodb_item()


def decode_record(item: Dict[str, Any]):
    """Decode a raw table item into the entity named by its ``recordType``.

    Raises:
        MalformedRecordError: If ``recordType`` is missing or unknown, or the
            item does not satisfy the entity schema
    """
    record_type = item.get(RECORD_TYPE_ATTR)
    entity_class = _entity_classes().get(record_type)
    if entity_class is None:
        key = {k: item.get(k) for k in (PARTITION_KEY, SORT_KEY)}
        raise MalformedRecordError(f"Unknown recordType {record_type!r}", key)
    return entity_class.from_dynamodb_item(item)


# =============================================================================
# Expression Building
# =============================================================================

def build_key_condition(pattern: AccessPattern, identifier: str = ""):
    """Build the KeyConditionExpression serving an access pattern.

    Args:
        pattern: Entry of ``ACCESS_PATTERNS``
        identifier: Logical identifier appended to the partition prefix

    Returns:
        KeyConditionExpression for boto3

    Example:
        >>> build_key_condition(ACCESS_PATTERNS['recipes_by_owner'], 'alice')
        # Key('PK').eq('USER#alice') & Key('SK').begins_with('RECIPE#')
    """
    condition = Key(pattern.partition_attribute).eq(pattern.partition_value(identifier))
    if pattern.sort_attribute and pattern.sort_prefix:
        condition = condition & Key(pattern.sort_attribute).begins_with(pattern.sort_prefix)
    return condition


def build_update_expression(changes: Dict[str, Any]) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """Build an UpdateExpression from attribute changes.

    Attributes set to None are removed. Attribute names always go through
    ExpressionAttributeNames so reserved words are safe.

    Returns:
        Tuple of (UpdateExpression, ExpressionAttributeNames, ExpressionAttributeValues)

    Example:
        >>> build_update_expression({'title': 'Soup', 'bio': None})
        ('SET #f0 = :v0 REMOVE #f1', {'#f0': 'title', '#f1': 'bio'}, {':v0': 'Soup'})
    """
    if not changes:
        raise ValidationError("Update must change at least one attribute")

    set_parts = []
    remove_parts = []
    names = {}
    values = {}

    for i, (attribute, value) in enumerate(changes.items()):
        name_ref = f"#f{i}"
        names[name_ref] = attribute
        if value is None:
            remove_parts.append(name_ref)
        else:
            value_ref = f":v{i}"
            values[value_ref] = to_dynamodb_value(value)
            set_parts.append(f"{name_ref} = {value_ref}")

    clauses = []
    if set_parts:
        clauses.append("SET " + ", ".join(set_parts))
    if remove_parts:
        clauses.append("REMOVE " + ", ".join(remove_parts))
    return " ".join(clauses), names, values


# =============================================================================
# Pagination Tokens
# =============================================================================

def encode_page_token(last_key: Optional[Dict[str, Any]]) -> Optional[str]:
    """Wrap a LastEvaluatedKey into an opaque, URL-safe token."""
    if not last_key:
        return None
    payload = json.dumps(to_dynamodb_value(last_key), sort_keys=True, separators=(",", ":"), default=str)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_page_token(token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Unwrap a token produced by ``encode_page_token``.

    Raises:
        ValidationError: If the token was not produced by this library
    """
    if not token:
        return None
    try:
        last_key = json.loads(base64.urlsafe_b64decode(token.encode("ascii")).decode("utf-8"))
    except ValueError as e:
        raise ValidationError(
            "Invalid pagination token",
            errors=[{'field': 'page_token', 'message': 'not a valid continuation token', 'type': 'invalid_token'}],
            original_error=e
        ) from e
    if not isinstance(last_key, dict) or not all(isinstance(v, str) for v in last_key.values()):
        raise ValidationError(
            "Invalid pagination token",
            errors=[{'field': 'page_token', 'message': 'not a valid continuation token', 'type': 'invalid_token'}]
        )
    return last_key


__all__ = [
    # Timestamps
    "utc_now",
    "to_utc",
    "format_timestamp",

    # Value conversion
    "to_dynamodb_value",
    "from_dynamodb_number",

    # Record dispatch
    "encode_record",
    "decode_record",

    # Expression building
    "build_key_condition",
    "build_update_expression",

    # Pagination
    "encode_page_token",
    "decode_page_token",
]
