from .config import RecipeStoreConfig

__all__ = ["RecipeStoreConfig"]
