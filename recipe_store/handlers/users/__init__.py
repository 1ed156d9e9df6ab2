"""
User profile APIs, split into reads (queries.py) and writes (commands.py).
"""

from .queries import UsersReadApi
from .commands import UsersWriteApi

__all__ = [
    "UsersReadApi",
    "UsersWriteApi",
]
