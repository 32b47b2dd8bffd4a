"""Unit tests for the mutation coordinator."""

import pytest
from unittest.mock import AsyncMock

from conftest import make_product
from marketplace_client.core.exceptions import ApiError, ConfigurationError
from marketplace_client.domain.entities.user import UserProfile
from marketplace_client.domain.services.mutations.mutation_coordinator import (
    MutationCoordinator,
    ResourceMutations,
)
from marketplace_client.domain.value_objects.cache_key import CacheKey
from marketplace_client.domain.value_objects.error import ErrorKind

LIST_KEY = CacheKey.build("products", "list", page=1, limit=10)
SEARCH_KEY = CacheKey.build("products", "search", query="lamp")
ITEM_KEY = CacheKey.item("products", "p1")
POSTS_KEY = CacheKey.build("posts", "list", page=1, limit=10)

DRAFT = {
    "title": "Desk lamp",
    "description": "Brass, works fine",
    "price": 25,
    "location": {"name": "Berlin", "longitude": 13.4, "latitude": 52.5},
}


@pytest.fixture
def products_api():
    api = AsyncMock()
    api.create_product.return_value = make_product("p99", "Desk lamp")
    api.update_product.return_value = make_product("p1", "Renamed")
    api.delete_product.return_value = None
    return api


@pytest.fixture
def auth_api():
    api = AsyncMock()
    api.update_profile.return_value = UserProfile(id="u1", email="ana@example.com", first_name="Ana")
    return api


@pytest.fixture
def coordinator(cache, products_api, auth_api):
    return MutationCoordinator(
        cache,
        {"products": ResourceMutations.for_products(products_api)},
        auth_api=auth_api,
        language="en",
    )


async def seed(cache, *keys):
    for key in keys:
        await cache.fetch(key, AsyncMock(return_value=str(key)))


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_invalidates_every_product_list(self, coordinator, cache, products_api):
        await seed(cache, LIST_KEY, SEARCH_KEY, POSTS_KEY)

        result = await coordinator.create("products", DRAFT)

        assert result.ok
        assert result.value.id == "p99"
        assert cache.is_stale(LIST_KEY)
        assert cache.is_stale(SEARCH_KEY)
        assert not cache.is_stale(POSTS_KEY)
        draft = products_api.create_product.await_args.args[0]
        assert draft.location.name == "Berlin"

    @pytest.mark.asyncio
    async def test_invalid_payload_rejected_before_request(self, coordinator, products_api):
        result = await coordinator.create("products", {**DRAFT, "price": -5, "title": ""})

        assert result.kind is ErrorKind.VALIDATION
        assert {"price", "title"} <= set(result.error.fields)
        products_api.create_product.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_create_leaves_cache_untouched(self, coordinator, cache, products_api):
        await seed(cache, LIST_KEY)
        products_api.create_product.side_effect = ApiError(500, "boom")

        result = await coordinator.create("products", DRAFT)

        assert result.kind is ErrorKind.SERVER
        assert not cache.is_stale(LIST_KEY)
        products_api.create_product.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_resource_is_a_configuration_error(self, coordinator):
        with pytest.raises(ConfigurationError):
            await coordinator.create("cars", DRAFT)


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_invalidates_item_and_lists(self, coordinator, cache, products_api):
        await seed(cache, LIST_KEY, ITEM_KEY)

        result = await coordinator.update("products", "p1", {"title": "Renamed"})

        assert result.value.title == "Renamed"
        assert cache.is_stale(ITEM_KEY)
        assert cache.is_stale(LIST_KEY)
        item_id, changes = products_api.update_product.await_args.args
        assert item_id == "p1"
        assert changes.model_dump(exclude_unset=True) == {"title": "Renamed"}

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, coordinator, products_api):
        result = await coordinator.update("products", "p1", {})

        assert result.kind is ErrorKind.VALIDATION
        products_api.update_product.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_invalidates_product_lists(self, coordinator, cache, products_api):
        await seed(cache, LIST_KEY, SEARCH_KEY, ITEM_KEY)

        result = await coordinator.delete("products", "p1")

        assert result.value == "p1"
        assert all(cache.is_stale(key) for key in (LIST_KEY, SEARCH_KEY, ITEM_KEY))
        assert not coordinator.is_pending("products", "p1")

    @pytest.mark.asyncio
    async def test_failed_delete_is_not_retried(self, coordinator, cache, products_api):
        await seed(cache, LIST_KEY)
        products_api.delete_product.side_effect = ApiError(503, "unavailable")

        result = await coordinator.delete("products", "p1")

        assert result.kind is ErrorKind.SERVER
        products_api.delete_product.assert_awaited_once()
        assert not cache.is_stale(LIST_KEY)


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_profile_update_invalidates_profile(self, coordinator, cache, auth_api):
        await seed(cache, CacheKey.profile(), LIST_KEY)

        result = await coordinator.update_profile({"first_name": "Ana"})

        assert result.value.first_name == "Ana"
        assert cache.is_stale(CacheKey.profile())
        assert not cache.is_stale(LIST_KEY)

    @pytest.mark.asyncio
    async def test_empty_profile_update_rejected(self, coordinator, auth_api):
        result = await coordinator.update_profile({})

        assert result.kind is ErrorKind.VALIDATION
        auth_api.update_profile.assert_not_awaited()
