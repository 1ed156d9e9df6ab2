"""
Users Write API

Profile mutations:
- Create-if-absent with ``attribute_not_exists(PK)``
- Field-level updates that leave the username and ``createdAt`` untouched
- Idempotent delete
"""

import logging

from ...config import RecipeStoreConfig
from ...core import create_table_gateway
from ...exceptions import ConflictError, ItemNotFoundError
from ...keys import UPDATED_AT_ATTR, user_key
from ...models import User, UserCreate, UserUpdate
from ...utils import build_update_expression, utc_now

logger = logging.getLogger(__name__)


class UsersWriteApi:
    """Write-only API for user profiles."""

    def __init__(self, config: RecipeStoreConfig, gateway=None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def create_user(self, user_data: UserCreate) -> User:
        """
        Create a user profile.

        DynamoDB Operation: PutItem with ``attribute_not_exists(PK)``

        Raises:
            ConflictError: If the username is taken
        """
        now = utc_now()
        user = User(
            **user_data.model_dump(exclude={'extensions'}),
            extensions=user_data.extensions,
            created_at=now,
            updated_at=now,
        )

        try:
            self.gateway.put_item(user.to_dynamodb_item(), condition_expression='attribute_not_exists(PK)')
        except ConflictError as e:
            raise ConflictError(f"User '{user.username}' already exists", str(user.key), original_error=e) from e

        logger.info(f"Created user {user.username}")
        return user

    def update_user(self, username: str, changes: UserUpdate) -> User:
        """
        Apply a partial update to a profile.

        DynamoDB Operation: UpdateItem (SET/REMOVE on the changed attributes and
        ``updatedAt``) with ``attribute_exists(PK)``, returning ALL_NEW.

        Raises:
            ItemNotFoundError: If the user does not exist
        """
        key = user_key(username)
        attribute_changes = changes.changed_attributes()
        attribute_changes[UPDATED_AT_ATTR] = utc_now()
        update_expression, names, values = build_update_expression(attribute_changes)

        try:
            attributes = self.gateway.update_item(
                key.as_dict(),
                update_expression,
                expression_attribute_values=values,
                expression_attribute_names=names,
                condition_expression='attribute_exists(PK)',
                return_values='ALL_NEW',
            )
        except ConflictError as e:
            raise ItemNotFoundError(self.gateway.table_name, key.as_dict(), original_error=e) from e

        return User.from_dynamodb_item(attributes)

    def delete_user(self, username: str) -> None:
        """
        Delete a profile. Deleting a missing user succeeds.

        The user's recipes and likes are left in place.
        """
        self.gateway.delete_item(user_key(username).as_dict())
        logger.info(f"Deleted user {username}")
