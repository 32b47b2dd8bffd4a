"""Query cache entry entity."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

from marketplace_client.domain.value_objects.cache_key import CacheKey
from marketplace_client.domain.value_objects.error import TranslatedError

T = TypeVar("T")


class CacheStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Immutable snapshot of one cached read.

    A new fetch never mutates an entry; it stores a new one under the same key.

    Attributes:
        key: The cache key.
        data: Last successfully fetched value (kept while a refetch is loading
            or after a refetch fails).
        status: Lifecycle status of the most recent fetch.
        fetched_at: When `data` was fetched.
        stale_after: When `data` stops being fresh by age.
        error: Translated failure of the most recent fetch, if it failed.
        invalidated: Set by explicit invalidation; forces the next fetch.
    """

    key: CacheKey
    data: Optional[T] = None
    status: CacheStatus = CacheStatus.IDLE
    fetched_at: Optional[datetime] = None
    stale_after: Optional[datetime] = None
    error: Optional[TranslatedError] = None
    invalidated: bool = False

    def is_stale(self, now: datetime) -> bool:
        if self.fetched_at is None or self.invalidated:
            return True
        return self.stale_after is not None and now >= self.stale_after

    def is_fresh(self, now: datetime) -> bool:
        return self.status is CacheStatus.SUCCESS and not self.is_stale(now)

    def mark_invalidated(self) -> "CacheEntry[T]":
        return replace(self, invalidated=True)
