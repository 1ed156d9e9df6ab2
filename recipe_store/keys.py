"""
Key Schema for the single recipe table

All entity kinds share one table keyed by the generic ``PK``/``SK`` pair.
Keys are derived from logical identifiers only, so they can be recomputed at
any time without touching storage:

    User    PK=USER#<username>   SK=USER#<username>
    Recipe  PK=USER#<username>   SK=RECIPE#<id>
    Like    PK=LIKE#<recipeId>   SK=LIKE#<username>

The two secondary indexes are overloaded: ``GSI1_SK`` re-partitions on ``SK``
alone and ``GSI2_TYPE`` partitions on ``recordType`` sorted by ``createdAt``.
``ACCESS_PATTERNS`` records which index and key prefix serves each query
intent.
"""

from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

from .exceptions import InvalidIdentifierError

# Physical attribute names
PARTITION_KEY = "PK"
SORT_KEY = "SK"
RECORD_TYPE_ATTR = "recordType"
CREATED_AT_ATTR = "createdAt"
UPDATED_AT_ATTR = "updatedAt"
LIKE_COUNT_ATTR = "likeCount"

# Secondary index names
SORT_KEY_INDEX = "GSI1_SK"
RECORD_TYPE_INDEX = "GSI2_TYPE"

# Key prefixes
USER_PREFIX = "USER#"
RECIPE_PREFIX = "RECIPE#"
LIKE_PREFIX = "LIKE#"


class RecordType(str, Enum):
    """Discriminator stored in ``recordType``; immutable once written."""
    USER = "USER"
    RECIPE = "RECIPE"
    LIKE = "LIKE"


class ItemKey(NamedTuple):
    """Primary key of one item."""
    pk: str
    sk: str

    def as_dict(self) -> Dict[str, str]:
        return {PARTITION_KEY: self.pk, SORT_KEY: self.sk}

    def __str__(self) -> str:
        return f"{self.pk}|{self.sk}"


def _require(component: str, value: Optional[str]) -> str:
    if value is None or value == "":
        raise InvalidIdentifierError(component)
    return value


def user_key(username: str) -> ItemKey:
    """Key of the user profile item."""
    username = _require("username", username)
    return ItemKey(USER_PREFIX + username, USER_PREFIX + username)


def recipe_key(username: str, recipe_id: str) -> ItemKey:
    """Key of a recipe, stored in its owner's partition."""
    username = _require("username", username)
    recipe_id = _require("recipe_id", recipe_id)
    return ItemKey(USER_PREFIX + username, RECIPE_PREFIX + recipe_id)


def like_key(recipe_id: str, username: str) -> ItemKey:
    """Key of one user's like on a recipe, stored in the recipe's like partition."""
    recipe_id = _require("recipe_id", recipe_id)
    username = _require("username", username)
    return ItemKey(LIKE_PREFIX + recipe_id, LIKE_PREFIX + username)


def key_for_record(record_type: RecordType, attributes: Dict[str, Any]) -> ItemKey:
    """Derive the key of an item from its logical attributes."""
    if record_type == RecordType.USER:
        return user_key(attributes.get("username"))
    if record_type == RecordType.RECIPE:
        return recipe_key(attributes.get("username"), attributes.get("id"))
    if record_type == RecordType.LIKE:
        return like_key(attributes.get("recipeId"), attributes.get("username"))
    raise ValueError(f"Unsupported record type: {record_type}")


# =============================================================================
# Access patterns
# =============================================================================

class AccessPattern:
    """Maps a query intent to the index and key prefix that serves it."""

    def __init__(
        self,
        name: str,
        partition_attribute: str,
        partition_prefix: str = "",
        index_name: Optional[str] = None,
        sort_attribute: Optional[str] = None,
        sort_prefix: Optional[str] = None,
        fixed_partition: Optional[str] = None,
    ):
        self.name = name
        self.index_name = index_name  # None means the base table
        self.partition_attribute = partition_attribute
        self.partition_prefix = partition_prefix
        self.sort_attribute = sort_attribute
        self.sort_prefix = sort_prefix
        self.fixed_partition = fixed_partition

    def partition_value(self, identifier: str = "") -> str:
        """Partition key value for ``identifier`` under this pattern."""
        if self.fixed_partition is not None:
            return self.fixed_partition
        return self.partition_prefix + _require(self.name, identifier)

    def __repr__(self) -> str:
        return f"AccessPattern({self.name!r}, index={self.index_name!r})"


ACCESS_PATTERNS: Dict[str, AccessPattern] = {
    pattern.name: pattern for pattern in [
        AccessPattern("user_by_name", PARTITION_KEY, USER_PREFIX,
                      sort_attribute=SORT_KEY, sort_prefix=USER_PREFIX),
        AccessPattern("recipes_by_owner", PARTITION_KEY, USER_PREFIX,
                      sort_attribute=SORT_KEY, sort_prefix=RECIPE_PREFIX),
        AccessPattern("likes_for_recipe", PARTITION_KEY, LIKE_PREFIX,
                      sort_attribute=SORT_KEY, sort_prefix=LIKE_PREFIX),
        # GSI1_SK: the sort key becomes the partition, so every owner's copy of
        # RECIPE#<id> and every LIKE#<username> across recipes group together
        AccessPattern("recipe_by_id", SORT_KEY, RECIPE_PREFIX, index_name=SORT_KEY_INDEX),
        AccessPattern("likes_by_user", SORT_KEY, LIKE_PREFIX, index_name=SORT_KEY_INDEX),
        # GSI2_TYPE: chronological listing per entity kind
        AccessPattern("recipes_by_created_at", RECORD_TYPE_ATTR, index_name=RECORD_TYPE_INDEX,
                      sort_attribute=CREATED_AT_ATTR, fixed_partition=RecordType.RECIPE.value),
        AccessPattern("users_by_created_at", RECORD_TYPE_ATTR, index_name=RECORD_TYPE_INDEX,
                      sort_attribute=CREATED_AT_ATTR, fixed_partition=RecordType.USER.value),
    ]
}
