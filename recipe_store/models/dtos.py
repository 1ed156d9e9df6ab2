"""
Write-Optimized DTOs (Data Transfer Objects)

Input schemas for create and update operations. Every write is validated
against one of these before anything is sent to the table, so a rejected
write performs zero storage operations.

Conventions:
- Field names are snake_case; camelCase aliases are accepted (``displayName``)
- Unknown top-level attributes are folded into ``extensions``
- Extensions may never use a name the stored entity reserves, which is how
  patches are kept away from ``likeCount``, ``recordType``, timestamps and
  key attributes
"""

from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .domain_models import Recipe, User

USERNAME_PATTERN = r'^[A-Za-z0-9_.-]{1,64}$'
RECIPE_ID_PATTERN = r'^[A-Za-z0-9_-]{1,64}$'
EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class ExtensibleInput(BaseModel):
    """
    Base for write DTOs that accept attributes beyond the declared fields.

    Subclasses set ``ENTITY`` to the stored model whose reserved attribute
    names the extensions must avoid.
    """

    ENTITY: ClassVar[type]

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
    )

    extensions: Dict[str, Any] = Field(default_factory=dict, description="Additional attributes to store")

    @model_validator(mode='before')
    @classmethod
    def collect_extensions(cls, data: Any) -> Any:
        """Move undeclared top-level attributes into ``extensions``."""
        if not isinstance(data, dict):
            return data

        known = set()
        for name, field in cls.model_fields.items():
            known.add(name)
            if field.alias:
                known.add(field.alias)

        extras = {k: v for k, v in data.items() if k not in known}
        if not extras:
            return data

        existing = data.get('extensions') or {}
        if not isinstance(existing, dict):
            return data  # let field validation report the bad type

        data = {k: v for k, v in data.items() if k in known}
        data['extensions'] = {**existing, **extras}
        return data

    @field_validator('extensions')
    @classmethod
    def validate_extension_names(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        reserved = sorted(set(v) & cls.ENTITY.reserved_attributes())
        if reserved:
            raise ValueError(f"Attributes cannot be set here: {reserved}")
        for name in v:
            if not isinstance(name, str) or not name:
                raise ValueError("Attribute names must be non-empty strings")
        return v

    def changed_attributes(self) -> Dict[str, Any]:
        """On-disk attribute changes carried by this DTO, extensions included.

        Only fields the caller actually supplied are returned; an explicit
        None means "remove the attribute".
        """
        changes = dict(self.extensions)
        changes.update(self.model_dump(by_alias=True, exclude_unset=True, exclude={'extensions'}))
        return changes


# =============================================================================
# User DTOs
# =============================================================================

class UserCreate(ExtensibleInput):
    """Input for creating a user profile."""

    ENTITY = User

    username: str = Field(..., pattern=USERNAME_PATTERN, description="Unique user name")
    display_name: Optional[str] = Field(None, min_length=1, max_length=100, description="Name shown to other users")
    email: Optional[str] = Field(None, max_length=254, pattern=EMAIL_PATTERN, description="Contact email address")
    bio: Optional[str] = Field(None, max_length=1000, description="Free-form profile text")


class UserUpdate(ExtensibleInput):
    """Partial update of a user profile. The username cannot change."""

    ENTITY = User

    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=254, pattern=EMAIL_PATTERN)
    bio: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode='after')
    def validate_not_empty(self) -> 'UserUpdate':
        if not self.changed_attributes():
            raise ValueError("Update must change at least one attribute")
        return self


# =============================================================================
# Recipe DTOs
# =============================================================================

class RecipeCreate(ExtensibleInput):
    """
    Input for creating a recipe.

    ``id`` is generated when omitted. ``like_count`` is accepted only so that
    callers echoing a full record are told plainly that it must start at zero.
    """

    ENTITY = Recipe

    id: Optional[str] = Field(None, pattern=RECIPE_ID_PATTERN, description="Recipe identifier")
    title: str = Field(..., min_length=1, max_length=200, description="Recipe title")
    description: Optional[str] = Field(None, max_length=2000, description="Short description")
    ingredients: List[str] = Field(default_factory=list, max_length=200)
    instructions: List[str] = Field(default_factory=list, max_length=200)
    tags: List[str] = Field(default_factory=list, max_length=50)
    like_count: int = Field(default=0, description="Must be 0 on create")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title must not be blank")
        return v

    @field_validator('like_count')
    @classmethod
    def validate_like_count(cls, v: int) -> int:
        if v != 0:
            raise ValueError("likeCount must be 0 when creating a recipe")
        return v

    @field_validator('ingredients', 'instructions', 'tags')
    @classmethod
    def validate_entries(cls, v: List[str]) -> List[str]:
        if any(not entry.strip() for entry in v):
            raise ValueError("Entries must not be blank")
        return v


class RecipeOwner(BaseModel):
    """Owner named in the request path of a recipe write."""

    model_config = ConfigDict(extra='forbid')

    username: str = Field(..., pattern=USERNAME_PATTERN, description="Owner's user name")


class RecipePatch(ExtensibleInput):
    """
    Partial update of a recipe's descriptive fields.

    Owner, id, ``likeCount`` and timestamps are not patchable.
    """

    ENTITY = Recipe

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    ingredients: Optional[List[str]] = Field(None, max_length=200)
    instructions: Optional[List[str]] = Field(None, max_length=200)
    tags: Optional[List[str]] = Field(None, max_length=50)

    @model_validator(mode='after')
    def validate_patch(self) -> 'RecipePatch':
        if 'title' in self.model_fields_set and (self.title is None or not self.title.strip()):
            raise ValueError("Title cannot be removed or blank")
        if not self.changed_attributes():
            raise ValueError("Update must change at least one attribute")
        return self


# =============================================================================
# Like DTOs
# =============================================================================

class LikeCreate(BaseModel):
    """Input for liking a recipe."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
    )

    recipe_id: str = Field(..., pattern=RECIPE_ID_PATTERN, description="Recipe to like")
    username: str = Field(..., pattern=USERNAME_PATTERN, description="User liking the recipe")
