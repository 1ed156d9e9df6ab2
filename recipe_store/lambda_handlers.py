"""
API Gateway (REST, proxy integration) handlers for the recipe store.

Each route of the public API maps onto one ``RecipeStore`` operation:

    POST   /v1/users/{username}                create_user
    GET    /v1/users/{username}                get_user
    PATCH  /v1/users/{username}                update_user
    DELETE /v1/users/{username}                delete_user
    GET    /v1/users                           list_users
    POST   /v1/recipes/{username}              create_recipe
    GET    /v1/recipes/{username}              list_recipes (owner)
    GET    /v1/recipes                         list_recipes (all, or ?id=<recipeId>)
    GET    /v1/recipes/{username}/{id}         get_recipe
    PATCH  /v1/recipes/{username}/{id}         update_recipe
    DELETE /v1/recipes/{username}/{id}         delete_recipe
    POST   /v1/likes                           like_recipe
    DELETE /v1/likes/{recipeId}/{username}     unlike_recipe
    GET    /v1/likes/{recipeId}                list_likes

Responses have the shape ``{"message": ..., "data": ...}``. ``handler`` routes
on ``resource`` and ``httpMethod``; the per-route functions can also be wired
to separate Lambda functions.
"""

import base64
import functools
import json
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from .facade import RecipeStore
from .handlers import RecipeScope
from .results import Result, ResultKind

logger = logging.getLogger(__name__)

HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}

STATUS_BY_KIND = {
    ResultKind.OK: 200,
    ResultKind.VALIDATION_FAILED: 400,
    ResultKind.NOT_FOUND: 404,
    ResultKind.CONFLICT: 409,
    ResultKind.TRANSACTION_ABORTED: 409,
    ResultKind.STORAGE_UNAVAILABLE: 503,
}

_store: Optional[RecipeStore] = None


def get_store() -> RecipeStore:
    """Store shared by invocations of one container."""
    global _store
    if _store is None:
        _store = RecipeStore()
    return _store


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return int(obj) if obj == obj.to_integral_value() else float(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def api_response(status_code: int, message: str, data: Any = None) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": HEADERS,
        "body": json.dumps({"message": message, "data": data}, default=_json_default),
    }


def _serialize(value: Any) -> Any:
    if hasattr(value, "to_api_dict"):
        return value.to_api_dict()
    return value


def result_response(result: Result, success_message: str, created: bool = False) -> Dict[str, Any]:
    """Turn a facade result into an API Gateway response."""
    if result.ok:
        return api_response(201 if created else 200, success_message, _serialize(result.value))

    data = None
    if result.details:
        data = {"errors": result.details}
    if result.retryable:
        data = dict(data or {}, retryable=True)
    return api_response(STATUS_BY_KIND[result.kind], f"Error: {result.message}", data)


class BadRequest(Exception):
    """Request could not be parsed."""


def _endpoint(func):
    @functools.wraps(func)
    def wrapper(event, context):
        try:
            return func(event, context)
        except BadRequest as e:
            return api_response(400, f"Error: {e}")
    return wrapper


def _path(event: Dict[str, Any], name: str) -> str:
    return (event.get("pathParameters") or {}).get(name) or ""


def _query(event: Dict[str, Any], name: str) -> Optional[str]:
    return (event.get("queryStringParameters") or {}).get(name)


def _limit(event: Dict[str, Any]) -> Optional[int]:
    raw = _query(event, "limit")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise BadRequest("limit must be an integer") from e


def _body(event: Dict[str, Any]) -> Dict[str, Any]:
    raw = event.get("body") or "{}"
    try:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        body = json.loads(raw)
    except ValueError as e:
        raise BadRequest("body is not valid JSON") from e
    if not isinstance(body, dict):
        raise BadRequest("body must be a JSON object")
    return body


# =============================================================================
# Users
# =============================================================================

@_endpoint
def create_user(event, context):
    payload = dict(_body(event), username=_path(event, "username"))
    return result_response(get_store().create_user(payload), "Success: User created", created=True)


@_endpoint
def get_user(event, context):
    return result_response(get_store().get_user(_path(event, "username")), "Success: User retrieved")


@_endpoint
def update_user(event, context):
    result = get_store().update_user(_path(event, "username"), _body(event))
    return result_response(result, "Success: User updated")


@_endpoint
def delete_user(event, context):
    return result_response(get_store().delete_user(_path(event, "username")), "Success: User deleted")


@_endpoint
def list_users(event, context):
    result = get_store().list_users(page_token=_query(event, "nextToken"), limit=_limit(event))
    return result_response(result, "Success: Users retrieved")


# =============================================================================
# Recipes
# =============================================================================

@_endpoint
def create_recipe(event, context):
    result = get_store().create_recipe(_path(event, "username"), _body(event))
    return result_response(result, "Success: Recipe created", created=True)


@_endpoint
def get_recipe(event, context):
    result = get_store().get_recipe(_path(event, "username"), _path(event, "id"))
    return result_response(result, "Success: Item retrieved")


@_endpoint
def update_recipe(event, context):
    result = get_store().update_recipe(_path(event, "username"), _path(event, "id"), _body(event))
    return result_response(result, "Success: Recipe updated")


@_endpoint
def delete_recipe(event, context):
    result = get_store().delete_recipe(_path(event, "username"), _path(event, "id"))
    return result_response(result, "Success: Recipe deleted")


@_endpoint
def list_recipes(event, context):
    username = _path(event, "username")
    recipe_id = _query(event, "id")
    if username:
        scope = RecipeScope.owner(username)
    elif recipe_id:
        scope = RecipeScope.recipe_id(recipe_id)
    else:
        scope = RecipeScope.all(newest_first=_query(event, "order") == "desc")
    result = get_store().list_recipes(scope, page_token=_query(event, "nextToken"), limit=_limit(event))
    return result_response(result, "Success: Items retrieved")


# =============================================================================
# Likes
# =============================================================================

@_endpoint
def like_recipe(event, context):
    body = _body(event)
    result = get_store().like_recipe(body.get("recipeId", ""), body.get("username", ""))
    return result_response(result, "Success: Like created", created=True)


@_endpoint
def unlike_recipe(event, context):
    result = get_store().unlike_recipe(_path(event, "recipeId"), _path(event, "username"))
    return result_response(result, "Success: Like deleted")


@_endpoint
def list_likes(event, context):
    result = get_store().list_likes(
        _path(event, "recipeId"), page_token=_query(event, "nextToken"), limit=_limit(event)
    )
    return result_response(result, "Success: Likes retrieved")


ROUTES = {
    ("POST", "/v1/users/{username}"): create_user,
    ("GET", "/v1/users/{username}"): get_user,
    ("PATCH", "/v1/users/{username}"): update_user,
    ("DELETE", "/v1/users/{username}"): delete_user,
    ("GET", "/v1/users"): list_users,
    ("POST", "/v1/recipes/{username}"): create_recipe,
    ("GET", "/v1/recipes/{username}"): list_recipes,
    ("GET", "/v1/recipes"): list_recipes,
    ("GET", "/v1/recipes/{username}/{id}"): get_recipe,
    ("PATCH", "/v1/recipes/{username}/{id}"): update_recipe,
    ("DELETE", "/v1/recipes/{username}/{id}"): delete_recipe,
    ("POST", "/v1/likes"): like_recipe,
    ("DELETE", "/v1/likes/{recipeId}/{username}"): unlike_recipe,
    ("GET", "/v1/likes/{recipeId}"): list_likes,
}


def handler(event, context):
    """Single entry point dispatching on ``httpMethod`` and ``resource``."""
    route = ROUTES.get((event.get("httpMethod"), event.get("resource")))
    if route is None:
        return api_response(404, "Error: Route not found")
    return route(event, context)
