"""Pagination block of list responses and the decoded page it belongs to."""

from dataclasses import dataclass
from typing import Generic, Optional, Tuple, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

T = TypeVar("T")


class Pagination(BaseModel):
    """``pagination`` object of the response envelope."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    current_page: int = Field(ge=1, validation_alias=AliasChoices("currentPage", "current_page"))
    total_pages: int = Field(default=0, ge=0, validation_alias=AliasChoices("totalPages", "total_pages"))
    has_next_page: bool = Field(default=False, validation_alias=AliasChoices("hasNextPage", "has_next_page"))
    has_prev_page: bool = Field(default=False, validation_alias=AliasChoices("hasPrevPage", "has_prev_page"))
    total_items: int = Field(default=0, ge=0, validation_alias=AliasChoices("totalItems", "total_items"))
    limit: int = Field(default=0, ge=0)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One fetched page of items.

    `pagination` is None for endpoints that return a flat result set
    (search), in which case the page is the whole result.
    """

    items: Tuple[T, ...]
    pagination: Optional[Pagination] = None

    @property
    def has_next_page(self) -> bool:
        return bool(self.pagination and self.pagination.has_next_page)

    @property
    def total_items(self) -> Optional[int]:
        return self.pagination.total_items if self.pagination else None
