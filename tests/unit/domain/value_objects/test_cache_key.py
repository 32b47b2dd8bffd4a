"""Unit tests for canonical cache keys."""

import pytest

from marketplace_client.domain.value_objects.cache_key import CacheKey


class TestCacheKey:
    def test_filters_sorted_and_none_dropped(self):
        key = CacheKey.build("products", "list", page=1, limit=10, sort_by=None, order="asc")

        assert str(key) == "products:list?limit=10&order=asc&page=1"

    def test_same_filters_in_any_order_are_equal(self):
        first = CacheKey.build("products", "list", page=2, order="desc")
        second = CacheKey.build("products", "list", order="desc", page=2)

        assert first == second
        assert hash(first) == hash(second)

    def test_parse_is_inverse_of_str(self):
        key = CacheKey.build("products", "search", query="red chair")

        assert CacheKey.parse(str(key)) == key
        assert CacheKey.parse(str(key)).get("query") == "red chair"

    def test_item_and_profile_keys(self):
        assert str(CacheKey.item("products", "42")) == "products:item?id=42"
        assert str(CacheKey.profile()) == "auth:profile"

    def test_matches_resource_scope_and_params(self):
        key = CacheKey.build("products", "list", page=1, order="asc")

        assert key.matches("products")
        assert key.matches("products", "list")
        assert key.matches("products", "list", {"order": "asc"})
        assert not key.matches("products", "search")
        assert not key.matches("posts")
        assert not key.matches("products", params={"order": "desc"})

    def test_with_params_replaces_filter(self):
        key = CacheKey.build("products", "list", page=1, limit=10)

        assert key.with_params(page=2) == CacheKey.build("products", "list", page=2, limit=10)

    @pytest.mark.parametrize("resource", ["", "a:b", "a?b"])
    def test_invalid_resource_rejected(self, resource):
        with pytest.raises(ValueError):
            CacheKey(resource=resource)
