"""
Recipes Read API

Serves every recipe read through the access pattern built for it:

- one recipe by owner and id: GetItem on the base table
- recipes of one owner: Query on ``PK=USER#<owner>``, ``SK`` begins with ``RECIPE#``
- recipes by id regardless of owner: Query on ``GSI1_SK`` with ``SK=RECIPE#<id>``
- all recipes in creation order: Query on ``GSI2_TYPE`` with ``recordType=RECIPE``

Listings are paged with opaque tokens, or iterated lazily with
``iter_recipes``.
"""

import logging
from typing import Iterator, List, Optional

from ...config import RecipeStoreConfig
from ...core import create_table_gateway
from ...keys import ACCESS_PATTERNS, recipe_key
from ...models import Page, Recipe
from ...utils import build_key_condition, decode_page_token, encode_page_token

logger = logging.getLogger(__name__)


class RecipeScope:
    """Which recipes a listing covers.

    Build one with ``RecipeScope.all()``, ``RecipeScope.owner('alice')`` or
    ``RecipeScope.recipe_id('r1')``.
    """

    ALL = "all"
    OWNER = "owner"
    RECIPE_ID = "recipe_id"

    _PATTERNS = {
        ALL: 'recipes_by_created_at',
        OWNER: 'recipes_by_owner',
        RECIPE_ID: 'recipe_by_id',
    }

    def __init__(self, kind: str, value: str = "", newest_first: bool = False):
        if kind not in self._PATTERNS:
            raise ValueError(f"Unknown recipe scope: {kind}")
        self.kind = kind
        self.value = value
        self.newest_first = newest_first

    @classmethod
    def all(cls, newest_first: bool = False) -> 'RecipeScope':
        return cls(cls.ALL, newest_first=newest_first)

    @classmethod
    def owner(cls, username: str) -> 'RecipeScope':
        return cls(cls.OWNER, username)

    @classmethod
    def recipe_id(cls, recipe_id: str) -> 'RecipeScope':
        return cls(cls.RECIPE_ID, recipe_id)

    @property
    def pattern(self):
        return ACCESS_PATTERNS[self._PATTERNS[self.kind]]

    def __eq__(self, other) -> bool:
        if not isinstance(other, RecipeScope):
            return NotImplemented
        return (self.kind, self.value, self.newest_first) == (other.kind, other.value, other.newest_first)

    def __repr__(self) -> str:
        return f"RecipeScope({self.kind!r}, {self.value!r})"


class RecipesReadApi:
    """Read-only API for recipes."""

    def __init__(self, config: RecipeStoreConfig, gateway=None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def get_recipe(self, username: str, recipe_id: str) -> Recipe:
        """
        Get one recipe by owner and id.

        Raises:
            ItemNotFoundError: If the recipe does not exist
        """
        item = self.gateway.get_item(recipe_key(username, recipe_id).as_dict())
        return Recipe.from_dynamodb_item(item)

    def find_by_id(self, recipe_id: str) -> List[Recipe]:
        """Every recipe stored under ``recipe_id``, whatever its owner.

        Normally zero or one; more than one means several owners picked the
        same id. Reads the eventually consistent ``GSI1_SK`` index.
        """
        return list(self.iter_recipes(RecipeScope.recipe_id(recipe_id)))

    def list_recipes(
        self,
        scope: Optional[RecipeScope] = None,
        limit: Optional[int] = None,
        page_token: Optional[str] = None
    ) -> Page:
        """
        Fetch one page of recipes.

        Args:
            scope: Defaults to ``RecipeScope.all()``
            limit: Maximum number of recipes on the page
            page_token: ``next_token`` of the previous page

        Returns:
            Page of Recipe

        Raises:
            ValidationError: If ``page_token`` is not a token from this API
        """
        scope = scope or RecipeScope.all()
        pattern = scope.pattern
        items, last_key = self.gateway.query_page(
            build_key_condition(pattern, scope.value),
            index_name=pattern.index_name,
            limit=limit,
            exclusive_start_key=decode_page_token(page_token),
            scan_index_forward=not scope.newest_first,
        )
        return Page(items=[Recipe.from_dynamodb_item(item) for item in items],
                    next_token=encode_page_token(last_key))

    def iter_recipes(self, scope: Optional[RecipeScope] = None, page_size: Optional[int] = None) -> Iterator[Recipe]:
        """Lazily iterate every recipe in ``scope``; each call starts over."""
        scope = scope or RecipeScope.all()
        pattern = scope.pattern
        for item in self.gateway.iter_query(
            build_key_condition(pattern, scope.value),
            index_name=pattern.index_name,
            page_size=page_size,
            scan_index_forward=not scope.newest_first,
        ):
            yield Recipe.from_dynamodb_item(item)
