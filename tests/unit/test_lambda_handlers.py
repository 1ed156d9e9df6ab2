"""
Tests for the API Gateway handlers with the store mocked out.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from recipe_store import lambda_handlers
from recipe_store.exceptions import ConflictError, TransactionAbortedError, ValidationError
from recipe_store.handlers import RecipeScope
from recipe_store.models import Page, Recipe
from recipe_store.results import Result

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def event(method, resource, path=None, query=None, body=None):
    return {
        "httpMethod": method,
        "resource": resource,
        "pathParameters": path,
        "queryStringParameters": query,
        "body": body if body is None or isinstance(body, str) else json.dumps(body),
    }


def parse(response):
    return response["statusCode"], json.loads(response["body"])


@pytest.fixture
def store():
    with patch.object(lambda_handlers, "get_store") as get_store:
        get_store.return_value = Mock()
        yield get_store.return_value


class TestRouting:

    def test_unknown_route(self, store):
        status, body = parse(lambda_handlers.handler(event("PUT", "/v1/unknown"), None))

        assert status == 404
        assert body["message"] == "Error: Route not found"

    def test_create_recipe(self, store):
        recipe = Recipe(id="r1", username="alice", title="Soup", like_count=0, created_at=NOW, updated_at=NOW)
        store.create_recipe.return_value = Result.success(recipe)

        response = lambda_handlers.handler(
            event("POST", "/v1/recipes/{username}", {"username": "alice"}, body={"title": "Soup"}), None
        )
        status, body = parse(response)

        assert status == 201
        assert body["data"]["id"] == "r1"
        assert body["data"]["likeCount"] == 0
        assert response["headers"]["Content-Type"] == "application/json"
        store.create_recipe.assert_called_once_with("alice", {"title": "Soup"})

    def test_list_recipes_by_owner(self, store):
        store.list_recipes.return_value = Result.success(Page(items=[], next_token=None))

        lambda_handlers.handler(event("GET", "/v1/recipes/{username}", {"username": "alice"}, {"limit": "5"}), None)

        store.list_recipes.assert_called_once_with(RecipeScope.owner("alice"), page_token=None, limit=5)

    def test_list_recipes_by_id(self, store):
        store.list_recipes.return_value = Result.success(Page(items=[], next_token=None))

        lambda_handlers.handler(event("GET", "/v1/recipes", query={"id": "r1"}), None)

        assert store.list_recipes.call_args[0][0] == RecipeScope.recipe_id("r1")

    def test_list_all_newest_first(self, store):
        store.list_recipes.return_value = Result.success(Page(items=[], next_token="abc"))

        status, body = parse(lambda_handlers.handler(event("GET", "/v1/recipes", query={"order": "desc"}), None))

        assert status == 200
        assert body["data"] == {"items": [], "nextToken": "abc"}
        assert store.list_recipes.call_args[0][0] == RecipeScope.all(newest_first=True)

    def test_like_recipe(self, store):
        store.like_recipe.return_value = Result.success(None)

        status, _ = parse(lambda_handlers.like_recipe(
            event("POST", "/v1/likes", body={"recipeId": "r1", "username": "bob"}), None
        ))

        assert status == 201
        store.like_recipe.assert_called_once_with("r1", "bob")


class TestStatusMapping:

    def test_validation_failed(self, store):
        errors = [{'field': 'title', 'message': 'Field required', 'type': 'missing'}]
        store.create_recipe.return_value = Result.from_error(ValidationError("Invalid RecipeCreate", errors=errors))

        status, body = parse(lambda_handlers.create_recipe(
            event("POST", "/v1/recipes/{username}", {"username": "alice"}, body={}), None
        ))

        assert status == 400
        assert body["data"] == {"errors": errors}

    def test_conflict(self, store):
        store.like_recipe.return_value = Result.from_error(ConflictError("User 'bob' already likes recipe 'r1'"))

        status, body = parse(lambda_handlers.like_recipe(
            event("POST", "/v1/likes", body={"recipeId": "r1", "username": "bob"}), None
        ))

        assert status == 409
        assert body["message"] == "Error: User 'bob' already likes recipe 'r1'"

    def test_transaction_aborted_flags_retry(self, store):
        store.like_recipe.return_value = Result.from_error(TransactionAbortedError("lost race", ['TransactionConflict']))

        status, body = parse(lambda_handlers.like_recipe(
            event("POST", "/v1/likes", body={"recipeId": "r1", "username": "bob"}), None
        ))

        assert status == 409
        assert body["data"]["retryable"] is True

    def test_bad_json(self, store):
        status, body = parse(lambda_handlers.create_recipe(
            event("POST", "/v1/recipes/{username}", {"username": "alice"}, body="{not json"), None
        ))

        assert status == 400
        store.create_recipe.assert_not_called()

    def test_bad_limit(self, store):
        status, _ = parse(lambda_handlers.list_users(event("GET", "/v1/users", query={"limit": "ten"}), None))

        assert status == 400
        store.list_users.assert_not_called()

    def test_decimal_extensions_serialized(self):
        response = lambda_handlers.api_response(200, "ok", {"servings": Decimal("4"), "rating": Decimal("4.5")})

        assert json.loads(response["body"])["data"] == {"servings": 4, "rating": 4.5}
