"""
Recipes Write API

- Create-if-absent in the owner's partition
- Field-level patches (the like counter is never part of a patch)
- Idempotent delete without cascading to likes
"""

import logging
import uuid

from ...config import RecipeStoreConfig
from ...core import create_table_gateway
from ...exceptions import ConflictError, ItemNotFoundError
from ...keys import UPDATED_AT_ATTR, recipe_key
from ...models import Recipe, RecipeCreate, RecipePatch
from ...utils import build_update_expression, utc_now
from .queries import RecipesReadApi

logger = logging.getLogger(__name__)


class RecipesWriteApi:
    """Write-only API for recipes."""

    def __init__(self, config: RecipeStoreConfig, gateway=None):
        self.config = config
        self.gateway = gateway or create_table_gateway(config)
        self.read_api = RecipesReadApi(config, self.gateway)

    def create_recipe(self, username: str, recipe_data: RecipeCreate) -> Recipe:
        """
        Create a recipe owned by ``username``.

        DynamoDB Operation: PutItem with ``attribute_not_exists(PK)``. An id
        already used by another owner is rejected as well, because likes
        address recipes by id alone.

        Raises:
            InvalidIdentifierError: If ``username`` is empty
            ConflictError: If the id is already taken
        """
        recipe_id = recipe_data.id or uuid.uuid4().hex
        key = recipe_key(username, recipe_id)

        now = utc_now()
        recipe = Recipe(
            **recipe_data.model_dump(exclude={'extensions', 'id', 'like_count'}),
            id=recipe_id,
            username=username,
            like_count=0,
            extensions=recipe_data.extensions,
            created_at=now,
            updated_at=now,
        )

        owners = [existing.username for existing in self.read_api.find_by_id(recipe.id)]
        if owners and username not in owners:
            raise ConflictError(f"Recipe id '{recipe.id}' is already used by another user", str(key))

        try:
            self.gateway.put_item(recipe.to_dynamodb_item(), condition_expression='attribute_not_exists(PK)')
        except ConflictError as e:
            raise ConflictError(f"Recipe '{recipe.id}' already exists for user '{username}'", str(key), original_error=e) from e

        logger.info(f"Created recipe {recipe.id} for {username}")
        return recipe

    def update_recipe(self, username: str, recipe_id: str, patch: RecipePatch) -> Recipe:
        """
        Patch a recipe's descriptive fields.

        DynamoDB Operation: UpdateItem on the patched attributes and
        ``updatedAt`` only, with ``attribute_exists(PK)``. A concurrent like
        is never overwritten because ``likeCount`` is not written here.

        Raises:
            ItemNotFoundError: If the recipe does not exist
        """
        key = recipe_key(username, recipe_id)
        attribute_changes = patch.changed_attributes()
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

        return Recipe.from_dynamodb_item(attributes)

    def delete_recipe(self, username: str, recipe_id: str) -> None:
        """
        Delete a recipe. Deleting a missing recipe succeeds.

        Likes of the recipe are not removed; they stay listable until unliked.
        """
        self.gateway.delete_item(recipe_key(username, recipe_id).as_dict())
        logger.info(f"Deleted recipe {recipe_id} of {username}")
