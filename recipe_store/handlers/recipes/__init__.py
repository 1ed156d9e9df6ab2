"""
Recipe APIs, split into reads (queries.py) and writes (commands.py).
"""

from .queries import RecipeScope, RecipesReadApi
from .commands import RecipesWriteApi

__all__ = [
    "RecipeScope",
    "RecipesReadApi",
    "RecipesWriteApi",
]
