"""
Handler Layer for the Recipe Store

Application-level read and write APIs, one subdirectory per entity kind:

- users/   profile reads and writes
- recipes/ recipe reads (point, per owner, per id, chronological) and writes
- likes/   like listings and the transactional like/unlike writes

Each subdirectory splits reads (queries.py) from writes (commands.py). All
APIs in one process can share a single TableGateway.

Architecture:
handlers/ (this layer) -> core/ (infrastructure) -> DynamoDB
handlers/ (this layer) <- models/ (entities and DTOs)
"""

from .users.queries import UsersReadApi
from .users.commands import UsersWriteApi
from .recipes.queries import RecipeScope, RecipesReadApi
from .recipes.commands import RecipesWriteApi
from .likes.queries import LikesReadApi
from .likes.commands import LikesWriteApi

__all__ = [
    'UsersReadApi',
    'UsersWriteApi',
    'RecipeScope',
    'RecipesReadApi',
    'RecipesWriteApi',
    'LikesReadApi',
    'LikesWriteApi',
]
