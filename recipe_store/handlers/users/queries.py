"""
Users Read API

- Point read of a profile by username
- Chronological listing of all users on the ``GSI2_TYPE`` index
"""

import logging
from typing import Optional

from ...config import RecipeStoreConfig
from ...core import create_table_gateway
from ...keys import ACCESS_PATTERNS, user_key
from ...models import Page, User
from ...utils import build_key_condition, decode_page_token, encode_page_token

logger = logging.getLogger(__name__)


class UsersReadApi:
    """Read-only API for user profiles."""

    def __init__(self, config: RecipeStoreConfig, gateway=None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def get_user(self, username: str) -> User:
        """
        Get a user profile.

        Raises:
            ItemNotFoundError: If the user does not exist
            InvalidIdentifierError: If username is empty
        """
        item = self.gateway.get_item(user_key(username).as_dict())
        return User.from_dynamodb_item(item)

    def list_users(self, limit: Optional[int] = None, page_token: Optional[str] = None) -> Page:
        """
        List users oldest first.

        The index is eventually consistent; a just-created user may be missing
        from the first pages for a short while.
        """
        pattern = ACCESS_PATTERNS['users_by_created_at']
        items, last_key = self.gateway.query_page(
            build_key_condition(pattern),
            index_name=pattern.index_name,
            limit=limit,
            exclusive_start_key=decode_page_token(page_token),
        )
        return Page(items=[User.from_dynamodb_item(item) for item in items],
                    next_token=encode_page_token(last_key))
