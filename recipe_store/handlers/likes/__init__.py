"""
Like APIs, split into reads (queries.py) and transactional writes (commands.py).
"""

from .queries import LikesReadApi
from .commands import LikesWriteApi

__all__ = [
    "LikesReadApi",
    "LikesWriteApi",
]
