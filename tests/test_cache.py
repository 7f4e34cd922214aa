"""Tests for the best-effort Redis cache."""
from decimal import Decimal

import redis

from app.utils.cache import CacheService


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection refused")

    def delete(self, key):
        raise redis.ConnectionError("connection refused")


def test_values_round_trip_as_json(fake_cache):
    cache = CacheService(client=fake_cache, ttl=60)

    assert cache.set("product", "1", {"name": "Phone", "price": Decimal("10.50")}) is True
    assert fake_cache.store["product:1"] == '{"name": "Phone", "price": "10.50"}'
    assert cache.get("product", "1") == {"name": "Phone", "price": "10.50"}


def test_missing_and_corrupt_entries_are_misses(fake_cache):
    cache = CacheService(client=fake_cache, ttl=60)
    fake_cache.store["product:2"] = "{not json"

    assert cache.get("product", "1") is None
    assert cache.get("product", "2") is None


def test_delete_many(fake_cache):
    cache = CacheService(client=fake_cache, ttl=60)
    cache.set("product", "1", {"id": 1})
    cache.set("product", "2", {"id": 2})

    cache.delete_many("product", [1, 2, 3])

    assert fake_cache.store == {}


def test_redis_outage_is_a_miss_not_an_error():
    cache = CacheService(client=BrokenRedis(), ttl=60)

    assert cache.get("product", "1") is None
    assert cache.set("product", "1", {"id": 1}) is False
    assert cache.delete("product", "1") is False
