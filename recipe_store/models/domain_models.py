"""
Domain Models for the Recipe Store

The stored entities of the single recipe table and the table's layout
metadata.

Organized by:
1. Table Metadata Classes
2. User Domain
3. Recipe Domain
4. Like Domain

Each entity carries its ``RECORD_TYPE`` discriminator, derives its key from
logical identifiers (see ``recipe_store.keys``) and is encoded/decoded by
``RecordMixin``.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..keys import (
    CREATED_AT_ATTR,
    PARTITION_KEY,
    RECORD_TYPE_ATTR,
    RECORD_TYPE_INDEX,
    SORT_KEY,
    SORT_KEY_INDEX,
    RecordType,
)
from .base import DateTimeMixin, RecordMixin


# =============================================================================
# DynamoDB Table Metadata Classes
# =============================================================================

class GSIDefinition:
    """Defines a Global Secondary Index for DynamoDB."""
    def __init__(
        self,
        name: str,
        partition_key: str,
        sort_key: Optional[str] = None,
        projection: Optional[List[str]] = None
    ):
        self.name = name
        self.partition_key = partition_key
        self.sort_key = sort_key
        self.projection = projection  # None means ALL attributes


class TableMeta:
    """Base class for table metadata definitions."""
    table_name: str
    partition_key: str
    sort_key: Optional[str] = None
    gsis: List[GSIDefinition] = []

    @classmethod
    def get_key_fields(cls) -> List[str]:
        """Get DynamoDB item key field names."""
        fields = [cls.partition_key]
        if cls.sort_key:
            fields.append(cls.sort_key)
        return fields

    @classmethod
    def get_key_attributes(cls) -> List[str]:
        """Every attribute used as a key by the table or one of its indexes."""
        attributes = cls.get_key_fields()
        for gsi in cls.gsis:
            for attribute in (gsi.partition_key, gsi.sort_key):
                if attribute and attribute not in attributes:
                    attributes.append(attribute)
        return attributes


class RecipeTable(TableMeta):
    """Layout of the single table holding users, recipes and likes."""
    table_name = "recipes"
    partition_key = PARTITION_KEY
    sort_key = SORT_KEY
    gsis = [
        GSIDefinition(
            name=SORT_KEY_INDEX,
            partition_key=SORT_KEY
        ),
        GSIDefinition(
            name=RECORD_TYPE_INDEX,
            partition_key=RECORD_TYPE_ATTR,
            sort_key=CREATED_AT_ATTR
        ),
    ]


# =============================================================================
# User Domain
# =============================================================================

class User(RecordMixin, DateTimeMixin, BaseModel):
    """
    A user profile.

    Stored at ``PK=USER#<username>``, ``SK=USER#<username>``. The username is
    immutable; renaming a user means creating a new profile.
    """

    RECORD_TYPE = RecordType.USER

    username: str = Field(..., min_length=1, description="Unique, immutable user name")
    display_name: Optional[str] = Field(None, description="Name shown to other users")
    email: Optional[str] = Field(None, description="Contact email address")
    bio: Optional[str] = Field(None, description="Free-form profile text")

    # Timestamps - normalized to UTC by DateTimeMixin
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# =============================================================================
# Recipe Domain
# =============================================================================

class Recipe(RecordMixin, DateTimeMixin, BaseModel):
    """
    A recipe owned by one user.

    Stored in the owner's partition at ``SK=RECIPE#<id>``. ``like_count`` equals
    the number of Like records for the recipe; it is only ever changed inside
    the like/unlike transactions.
    """

    RECORD_TYPE = RecordType.RECIPE

    id: str = Field(..., min_length=1, description="Recipe identifier")
    username: str = Field(..., min_length=1, description="Owner's user name")
    title: str = Field(..., min_length=1, description="Recipe title")
    description: Optional[str] = Field(None, description="Short description")
    ingredients: List[str] = Field(default_factory=list, description="Ingredient lines")
    instructions: List[str] = Field(default_factory=list, description="Preparation steps")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    like_count: int = Field(..., ge=0, description="Number of likes")

    # Timestamps - normalized to UTC by DateTimeMixin
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# =============================================================================
# Like Domain
# =============================================================================

class Like(RecordMixin, DateTimeMixin, BaseModel):
    """
    One user's like of one recipe.

    Stored at ``PK=LIKE#<recipeId>``, ``SK=LIKE#<username>`` so a user can like
    a recipe at most once. ``recipe_owner`` remembers which partition holds the
    liked recipe.
    """

    RECORD_TYPE = RecordType.LIKE

    recipe_id: str = Field(..., min_length=1, description="Liked recipe identifier")
    username: str = Field(..., min_length=1, description="User who liked the recipe")
    recipe_owner: Optional[str] = Field(None, description="Owner of the liked recipe")

    created_at: datetime = Field(..., description="When the like was recorded")
