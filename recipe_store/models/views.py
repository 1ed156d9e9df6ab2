"""
Read-side result containers.
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """
    One page of a listing.

    ``next_token`` is opaque; pass it back unchanged to fetch the following
    page. It is None once the listing is exhausted. Concatenating every page
    of a listing yields the full listing with no duplicates or gaps.
    """

    items: List[T] = Field(default_factory=list)
    next_token: Optional[str] = Field(None, description="Continuation token for the next page")

    @property
    def has_more(self) -> bool:
        return self.next_token is not None

    def __len__(self) -> int:
        return len(self.items)

    def to_api_dict(self) -> dict:
        return {
            'items': [_api_item(item) for item in self.items],
            'nextToken': self.next_token,
        }


def _api_item(item: Any) -> Any:
    if hasattr(item, 'to_api_dict'):
        return item.to_api_dict()
    return item
