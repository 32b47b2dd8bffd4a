import os
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

# Adjust sys.path to include the repository root
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from marketplace_client.domain.entities.pagination import Page, Pagination
from marketplace_client.domain.entities.product import Product
from marketplace_client.domain.interfaces.token_store import ITokenStore
from marketplace_client.domain.services.cache.query_cache import QueryCache
from marketplace_client.domain.value_objects.token_pair import TokenPair


class FakeClock:
    """Deterministic UTC clock for cooldowns, staleness and token expiry."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class MemoryTokenStore(ITokenStore):
    """In-process token store; `fail_with` makes every call raise."""

    def __init__(self, pair: Optional[TokenPair] = None):
        self.pair = pair
        self.fail_with: Optional[Exception] = None
        self.saves = 0
        self.clears = 0

    async def save(self, pair: TokenPair) -> None:
        self._maybe_fail()
        self.saves += 1
        self.pair = pair

    async def load(self) -> Optional[TokenPair]:
        self._maybe_fail()
        return self.pair

    async def clear(self) -> None:
        self._maybe_fail()
        self.clears += 1
        self.pair = None

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


def make_product(product_id: str, title: Optional[str] = None, price: float = 10) -> Product:
    return Product(id=product_id, title=title or f"Product {product_id}", price=price)


def make_page(items: List[Product], page: int = 1, has_next_page: bool = False,
              total_items: Optional[int] = None, limit: int = 10) -> Page[Product]:
    return Page(
        items=tuple(items),
        pagination=Pagination(
            current_page=page,
            total_pages=page + (1 if has_next_page else 0),
            has_next_page=has_next_page,
            has_prev_page=page > 1,
            total_items=total_items if total_items is not None else len(items),
            limit=limit,
        ),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return QueryCache(stale_seconds=300, retry_attempts=1, retry_wait_seconds=0, clock=clock, language="en")


@pytest.fixture
def token_store():
    return MemoryTokenStore()
