"""
Access Facade

``RecipeStore`` is the single entry point used by request handlers. Each
operation validates its input, runs the matching read or write API and
returns a tagged ``Result`` instead of raising.

Example:
    store = RecipeStore(RecipeStoreConfig.from_env())

    result = store.create_recipe("alice", {"title": "Soup", "ingredients": ["water"]})
    if result.ok:
        recipe = result.value

    store.like_recipe(recipe.id, "bob")
    store.get_recipe("alice", recipe.id).value.like_count  # 1
"""

import logging
from typing import Any, Callable, Dict, Optional

from .config import RecipeStoreConfig
from .core import create_table_gateway
from .exceptions import (
    MalformedRecordError,
    RecipeStoreError,
    StorageUnavailableError,
    TransactionAbortedError,
    ValidationError,
)
from .handlers import (
    LikesReadApi,
    LikesWriteApi,
    RecipeScope,
    RecipesReadApi,
    RecipesWriteApi,
    UsersReadApi,
    UsersWriteApi,
)
from .models import LikeCreate, RecipeCreate, RecipeOwner, RecipePatch, UserCreate, UserUpdate
from .results import Result
from .validation import validate

logger = logging.getLogger(__name__)


class RecipeStore:
    """
    Facade over users, recipes and likes stored in one table.

    All APIs share one TableGateway, so one boto3 resource serves the whole
    store. Instances hold no other state and are safe to reuse across
    invocations of a warm container.
    """

    def __init__(self, config: Optional[RecipeStoreConfig] = None, gateway=None):
        self.config = config or RecipeStoreConfig.from_env()
        self.config.configure_logging()
        self.gateway = gateway or create_table_gateway(self.config)

        self.users = UsersReadApi(self.config, self.gateway)
        self.user_writes = UsersWriteApi(self.config, self.gateway)
        self.recipes = RecipesReadApi(self.config, self.gateway)
        self.recipe_writes = RecipesWriteApi(self.config, self.gateway)
        self.likes = LikesReadApi(self.config, self.gateway)
        self.like_writes = LikesWriteApi(self.config, self.gateway)

    def _run(self, operation: str, action: Callable[[], Any]) -> Result:
        try:
            return Result.success(action())
        except MalformedRecordError as e:
            logger.error(f"{operation} read a malformed record: {e}")
            return Result.from_error(e)
        except (TransactionAbortedError, StorageUnavailableError) as e:
            logger.warning(f"{operation} failed: {e}")
            return Result.from_error(e)
        except ValidationError as e:
            logger.debug(f"{operation} rejected: {e}")
            return Result.from_error(e)
        except RecipeStoreError as e:
            logger.info(f"{operation}: {e.message}")
            return Result.from_error(e)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def create_user(self, payload: Dict[str, Any]) -> Result:
        """Create a profile. ``conflict`` if the username is taken."""
        return self._run("create_user", lambda: self.user_writes.create_user(validate(UserCreate, payload)))

    def get_user(self, username: str) -> Result:
        return self._run("get_user", lambda: self.users.get_user(username))

    def update_user(self, username: str, changes: Dict[str, Any]) -> Result:
        """Partially update a profile. ``not_found`` if it does not exist."""
        return self._run("update_user", lambda: self.user_writes.update_user(username, validate(UserUpdate, changes)))

    def delete_user(self, username: str) -> Result:
        return self._run("delete_user", lambda: self.user_writes.delete_user(username))

    def list_users(self, page_token: Optional[str] = None, limit: Optional[int] = None) -> Result:
        return self._run("list_users", lambda: self.users.list_users(limit=limit, page_token=page_token))

    # -------------------------------------------------------------------------
    # Recipes
    # -------------------------------------------------------------------------

    def create_recipe(self, username: str, payload: Dict[str, Any]) -> Result:
        """
        Create a recipe owned by ``username``.

        Invalid input yields ``validation_failed`` with one detail per field
        and performs no storage write. Owner existence is not checked.
        """
        def action():
            owner = validate(RecipeOwner, {"username": username})
            recipe_data = validate(RecipeCreate, payload)
            return self.recipe_writes.create_recipe(owner.username, recipe_data)
        return self._run("create_recipe", action)

    def get_recipe(self, username: str, recipe_id: str) -> Result:
        return self._run("get_recipe", lambda: self.recipes.get_recipe(username, recipe_id))

    def update_recipe(self, username: str, recipe_id: str, patch: Dict[str, Any]) -> Result:
        """Patch descriptive fields; ``likeCount`` is rejected as a patch field."""
        def action():
            recipe_patch = validate(RecipePatch, patch)
            return self.recipe_writes.update_recipe(username, recipe_id, recipe_patch)
        return self._run("update_recipe", action)

    def delete_recipe(self, username: str, recipe_id: str) -> Result:
        """Delete a recipe; ``ok`` even if it did not exist. Likes are kept."""
        return self._run("delete_recipe", lambda: self.recipe_writes.delete_recipe(username, recipe_id))

    def list_recipes(
        self,
        scope: Optional[RecipeScope] = None,
        page_token: Optional[str] = None,
        limit: Optional[int] = None
    ) -> Result:
        """One page of recipes in ``scope`` (default: all, oldest first)."""
        return self._run("list_recipes", lambda: self.recipes.list_recipes(scope, limit=limit, page_token=page_token))

    # -------------------------------------------------------------------------
    # Likes
    # -------------------------------------------------------------------------

    def like_recipe(self, recipe_id: str, username: str) -> Result:
        """
        Like a recipe and increment its count atomically.

        ``not_found`` if the recipe does not exist, ``conflict`` if already
        liked, retryable ``transaction_aborted`` on a lost race.
        """
        def action():
            like_data = validate(LikeCreate, {'recipe_id': recipe_id, 'username': username})
            return self.like_writes.like_recipe(like_data)
        return self._run("like_recipe", action)

    def unlike_recipe(self, recipe_id: str, username: str) -> Result:
        """Remove a like and decrement the count atomically."""
        def action():
            like_data = validate(LikeCreate, {'recipe_id': recipe_id, 'username': username})
            return self.like_writes.unlike_recipe(like_data.recipe_id, like_data.username)
        return self._run("unlike_recipe", action)

    def list_likes(self, recipe_id: str, page_token: Optional[str] = None, limit: Optional[int] = None) -> Result:
        return self._run("list_likes", lambda: self.likes.list_likes(recipe_id, limit=limit, page_token=page_token))

    def list_user_likes(self, username: str, page_token: Optional[str] = None, limit: Optional[int] = None) -> Result:
        return self._run(
            "list_user_likes", lambda: self.likes.list_user_likes(username, limit=limit, page_token=page_token)
        )
