"""Unit tests for the client composition root."""

import gc

import httpx
import pytest

from conftest import MemoryTokenStore
from marketplace_client import MarketplaceClient
from marketplace_client.core.config.settings import Settings


@pytest.fixture
def config():
    return Settings(_env_file=None, API_BASE_URL="http://market.test/api")


@pytest.fixture
def transport():
    return httpx.MockTransport(lambda request: httpx.Response(404, json={"success": False}))


class TestPagerTracking:
    @pytest.mark.asyncio
    async def test_released_pagers_are_not_retained(self, config, transport):
        # Arrange
        client = MarketplaceClient(config, token_store=MemoryTokenStore(), transport=transport)
        kept = client.products_pager()

        # Act
        for _ in range(5):
            client.posts_pager()
        gc.collect()

        # Assert
        assert list(client._pagers) == [kept]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_closes_live_pagers(self, config, transport):
        client = MarketplaceClient(config, token_store=MemoryTokenStore(), transport=transport)
        products = client.products_pager()
        posts = client.posts_pager()

        await client.aclose()

        assert products.closed
        assert posts.closed
        assert len(client._pagers) == 0
        assert client.session.closed
