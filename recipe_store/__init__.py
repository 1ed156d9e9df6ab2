"""
Recipe Store

Storage core for a recipe-sharing service: users, recipes and likes kept in
one DynamoDB table, with the like counter of every recipe maintained
transactionally.

Architecture:
- facade.py: RecipeStore, the single entry point returning tagged Results
- handlers/: read (queries) and write (commands) APIs per entity kind
- core/: TableGateway over boto3 and the physical table definition
- models/: entities with their item codec, write DTOs and pages
- keys.py: key construction and access patterns
- validation.py: input validation producing field-level violations
- lambda_handlers.py: API Gateway adapter

Usage:
    from recipe_store import RecipeStore, RecipeStoreConfig, RecipeScope

    store = RecipeStore(RecipeStoreConfig.from_env())
    store.create_recipe("alice", {"id": "r1", "title": "Soup"})
    store.like_recipe("r1", "bob")
    page = store.list_recipes(RecipeScope.owner("alice")).value
"""

from .config import RecipeStoreConfig
from .exceptions import (
    ConflictError,
    InvalidIdentifierError,
    ItemNotFoundError,
    MalformedRecordError,
    RecipeStoreError,
    StorageUnavailableError,
    TransactionAbortedError,
    ValidationError,
)
from .facade import RecipeStore
from .handlers import RecipeScope
from .models import Like, Page, Recipe, User
from .results import Result, ResultKind
from .utils import decode_record, encode_record

__version__ = "0.1.0"

__all__ = [
    # Entry point
    "RecipeStore",
    "RecipeStoreConfig",
    "RecipeScope",
    "Result",
    "ResultKind",

    # Entities
    "User",
    "Recipe",
    "Like",
    "Page",

    # Codec
    "encode_record",
    "decode_record",

    # Exceptions
    "RecipeStoreError",
    "ValidationError",
    "InvalidIdentifierError",
    "ItemNotFoundError",
    "ConflictError",
    "TransactionAbortedError",
    "StorageUnavailableError",
    "MalformedRecordError",
]
