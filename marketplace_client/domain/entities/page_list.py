"""Paged list snapshot exposed by list pagers."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class ListMode(str, Enum):
    BROWSE = "browse"
    SEARCH = "search"


@dataclass(frozen=True)
class PageList(Generic[T]):
    """Ordered, de-duplicated list of items as currently visible.

    In BROWSE mode `items` is the concatenation, in fetch order, of every page
    fetched since the filter signature last changed. In SEARCH mode it is the
    result set of `query`.
    """

    items: Tuple[T, ...] = ()
    page: int = 1
    has_next_page: bool = False
    mode: ListMode = ListMode.BROWSE
    query: Optional[str] = None
    total_items: Optional[int] = None

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items
