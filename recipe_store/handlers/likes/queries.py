"""
Likes Read API

- Point read of one like
- Likes of one recipe: Query on ``PK=LIKE#<recipeId>``
- Likes given by one user: Query on ``GSI1_SK`` with ``SK=LIKE#<username>``
"""

import logging
from typing import Optional

from ...config import RecipeStoreConfig
from ...core import create_table_gateway
from ...exceptions import ItemNotFoundError
from ...keys import ACCESS_PATTERNS, like_key
from ...models import Like, Page
from ...utils import build_key_condition, decode_page_token, encode_page_token

logger = logging.getLogger(__name__)


class LikesReadApi:
    """Read-only API for likes."""

    def __init__(self, config: RecipeStoreConfig, gateway=None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def get_like(self, recipe_id: str, username: str) -> Like:
        """
        Raises:
            ItemNotFoundError: If ``username`` has not liked ``recipe_id``
        """
        item = self.gateway.get_item(like_key(recipe_id, username).as_dict())
        return Like.from_dynamodb_item(item)

    def has_liked(self, recipe_id: str, username: str) -> bool:
        try:
            self.get_like(recipe_id, username)
        except ItemNotFoundError:
            return False
        return True

    def list_likes(self, recipe_id: str, limit: Optional[int] = None, page_token: Optional[str] = None) -> Page:
        """One page of the likes of a recipe, ordered by username."""
        return self._query(ACCESS_PATTERNS['likes_for_recipe'], recipe_id, limit, page_token)

    def list_user_likes(self, username: str, limit: Optional[int] = None, page_token: Optional[str] = None) -> Page:
        """One page of the likes a user has given (eventually consistent)."""
        return self._query(ACCESS_PATTERNS['likes_by_user'], username, limit, page_token)

    def _query(self, pattern, identifier: str, limit: Optional[int], page_token: Optional[str]) -> Page:
        items, last_key = self.gateway.query_page(
            build_key_condition(pattern, identifier),
            index_name=pattern.index_name,
            limit=limit,
            exclusive_start_key=decode_page_token(page_token),
        )
        return Page(items=[Like.from_dynamodb_item(item) for item in items],
                    next_token=encode_page_token(last_key))
