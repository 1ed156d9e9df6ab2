"""
Likes Write API

Liking and unliking keep ``Recipe.likeCount`` equal to the number of Like
records by changing both in one TransactWriteItems call:

    like:    Update recipe  SET likeCount = likeCount + 1   if recipe exists
             Put like                                        if like absent

    unlike:  Delete like                                     if like exists
             Update recipe  SET likeCount = likeCount - 1   if recipe exists and likeCount > 0

Either both writes happen or neither does. The cancellation reason of each
operation tells a missing recipe from a duplicate like.
"""

import logging

from ...config import RecipeStoreConfig
from ...core import create_table_gateway
from ...exceptions import ConflictError, ItemNotFoundError, TransactionAbortedError
from ...keys import LIKE_COUNT_ATTR, like_key, recipe_key
from ...models import Like, LikeCreate
from ...utils import utc_now
from ..recipes.queries import RecipesReadApi
from .queries import LikesReadApi

logger = logging.getLogger(__name__)

INCREMENT_LIKES = f'SET {LIKE_COUNT_ATTR} = {LIKE_COUNT_ATTR} + :one'
DECREMENT_LIKES = f'SET {LIKE_COUNT_ATTR} = {LIKE_COUNT_ATTR} - :one'


class LikesWriteApi:
    """Write-only API for likes."""

    def __init__(self, config: RecipeStoreConfig, gateway=None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)
        self.recipes = RecipesReadApi(config, self.gateway)
        self.likes = LikesReadApi(config, self.gateway)

    def resolve_recipe_owner(self, recipe_id: str) -> str:
        """
        Find the owner of ``recipe_id`` through the ``GSI1_SK`` index.

        Raises:
            ItemNotFoundError: If no recipe has this id
            ConflictError: If several owners use the same id
        """
        owners = sorted({recipe.username for recipe in self.recipes.find_by_id(recipe_id)})
        if not owners:
            raise ItemNotFoundError(self.gateway.table_name, {'recipeId': recipe_id})
        if len(owners) > 1:
            raise ConflictError(f"Recipe id '{recipe_id}' is ambiguous, owned by {owners}", recipe_id)
        return owners[0]

    def like_recipe(self, like_data: LikeCreate) -> Like:
        """
        Record that a user likes a recipe and increment its like count.

        DynamoDB Operation: TransactWriteItems [Update recipe, Put like]

        Returns:
            The stored Like

        Raises:
            ItemNotFoundError: If the recipe does not exist
            ConflictError: If the user already likes the recipe
            TransactionAbortedError: If the transaction lost a race; retryable
        """
        owner = self.resolve_recipe_owner(like_data.recipe_id)
        like = Like(
            recipe_id=like_data.recipe_id,
            username=like_data.username,
            recipe_owner=owner,
            created_at=utc_now(),
        )
        target = recipe_key(owner, like.recipe_id)

        try:
            self.gateway.transact_write_items([
                self.gateway.update_operation(
                    target.as_dict(),
                    INCREMENT_LIKES,
                    condition_expression='attribute_exists(PK)',
                    expression_attribute_values={':one': 1},
                ),
                self.gateway.put_operation(
                    like.to_dynamodb_item(),
                    condition_expression='attribute_not_exists(PK)',
                ),
            ])
        except TransactionAbortedError as e:
            failed = e.failed_operations()
            if 0 in failed:
                raise ItemNotFoundError(self.gateway.table_name, target.as_dict(), original_error=e) from e
            if 1 in failed:
                raise ConflictError(
                    f"User '{like.username}' already likes recipe '{like.recipe_id}'",
                    str(like.key), original_error=e
                ) from e
            raise

        logger.info(f"{like.username} liked recipe {like.recipe_id}")
        return like

    def unlike_recipe(self, recipe_id: str, username: str) -> None:
        """
        Remove a like and decrement the recipe's like count.

        DynamoDB Operation: TransactWriteItems [Delete like, Update recipe]

        If the recipe itself is gone, the orphaned like is deleted on its own.

        Raises:
            ItemNotFoundError: If the user does not like the recipe
            ConflictError: If the counter is already zero while the like exists
            TransactionAbortedError: If the transaction lost a race; retryable
        """
        like = self.likes.get_like(recipe_id, username)
        owner = like.recipe_owner or self.resolve_recipe_owner(recipe_id)
        target = recipe_key(owner, recipe_id)
        key = like_key(recipe_id, username)

        try:
            self.gateway.transact_write_items([
                self.gateway.delete_operation(
                    key.as_dict(),
                    condition_expression='attribute_exists(PK)',
                ),
                self.gateway.update_operation(
                    target.as_dict(),
                    DECREMENT_LIKES,
                    condition_expression='attribute_exists(PK) AND likeCount > :zero',
                    expression_attribute_values={':one': 1, ':zero': 0},
                ),
            ])
        except TransactionAbortedError as e:
            failed = e.failed_operations()
            if 0 in failed:
                raise ItemNotFoundError(self.gateway.table_name, key.as_dict(), original_error=e) from e
            if 1 in failed:
                self._remove_orphaned_like(key, target, e)
                return
            raise

        logger.info(f"{username} unliked recipe {recipe_id}")

    def _remove_orphaned_like(self, key, target, error: TransactionAbortedError) -> None:
        try:
            self.gateway.get_item(target.as_dict())
        except ItemNotFoundError:
            logger.warning(f"Recipe {target} no longer exists, deleting orphaned like {key}")
            self.gateway.delete_item(key.as_dict())
            return
        raise ConflictError(
            f"Like count of {target} is already zero while like {key} exists",
            str(target), original_error=error
        ) from error
