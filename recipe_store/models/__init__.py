# Base mixins
from .base import (
    DateTimeMixin,
    RecordMixin,
)

# Stored entities and table layout
from .domain_models import (
    GSIDefinition,
    TableMeta,
    RecipeTable,
    User,
    Recipe,
    Like,
)

# Read-side containers
from .views import Page

# Write DTOs
from .dtos import (
    UserCreate,
    UserUpdate,
    RecipeCreate,
    RecipeOwner,
    RecipePatch,
    LikeCreate,
    USERNAME_PATTERN,
    RECIPE_ID_PATTERN,
)

__all__ = [
    # Base mixins
    "DateTimeMixin",
    "RecordMixin",

    # Table layout
    "GSIDefinition",
    "TableMeta",
    "RecipeTable",

    # Entities
    "User",
    "Recipe",
    "Like",

    # Read models
    "Page",

    # Write models (DTOs)
    "UserCreate",
    "UserUpdate",
    "RecipeCreate",
    "RecipeOwner",
    "RecipePatch",
    "LikeCreate",
    "USERNAME_PATTERN",
    "RECIPE_ID_PATTERN",
]
