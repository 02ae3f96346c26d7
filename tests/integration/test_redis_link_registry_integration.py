"""
Integration tests for RedisLinkRegistry against a real Redis server.

Skipped when no server is reachable at REDIS_HOST/REDIS_PORT.
"""

import os
import time

import pytest
import redis

from mediarelay.domain.errors import DuplicateIdError
from mediarelay.domain.links.entities import LinkEntry
from mediarelay.infrastructure.redis_link_registry import RedisLinkRegistry
from mediarelay.infrastructure.redis_repository import RedisRepository

PREFIX = "mediarelay-it"


@pytest.fixture
def redis_client():
    """
    Yields a clean Redis client for integration testing.
    """
    host = os.getenv("REDIS_HOST", "localhost")
    port = int(os.getenv("REDIS_PORT", 6379))
    db = int(os.getenv("REDIS_DB", 15))

    client = redis.Redis(host=host, port=port, db=db, decode_responses=False)

    try:
        client.ping()
    except redis.ConnectionError:
        pytest.skip("Redis service not available. Skipping integration tests.")

    client.flushdb()
    yield client
    client.flushdb()
    client.close()


@pytest.fixture
def link_registry(redis_client):
    return RedisLinkRegistry(RedisRepository(redis_client, PREFIX), grace_seconds=60)


def _entry(link_id, expires_at, key="u/1-abcdef01-a.png"):
    return LinkEntry.create(link_id, "media", key, expires_at)


def test_insert_and_get(link_registry):
    entry = _entry("Ab3dE6gH", int(time.time()) + 3600)

    link_registry.insert(entry)

    assert link_registry.get("Ab3dE6gH") == entry
    assert link_registry.exists("Ab3dE6gH")


def test_duplicate_insert_keeps_first_entry(link_registry):
    first = _entry("Ab3dE6gH", int(time.time()) + 3600, key="u/1-aaaaaaaa-first.png")
    link_registry.insert(first)

    with pytest.raises(DuplicateIdError):
        link_registry.insert(_entry("Ab3dE6gH", int(time.time()) + 7200, key="u/2-bbbbbbbb-second.png"))

    assert link_registry.get("Ab3dE6gH") == first


def test_entry_key_carries_ttl_with_grace(link_registry, redis_client):
    link_registry.insert(_entry("Ab3dE6gH", int(time.time()) + 3600))

    ttl = redis_client.ttl(f"{PREFIX}:link:Ab3dE6gH")

    assert 3600 < ttl <= 3660


def test_delete_removes_entry_and_index_member(link_registry, redis_client):
    link_registry.insert(_entry("Ab3dE6gH", 1000))

    assert link_registry.delete("Ab3dE6gH") is True
    assert link_registry.delete("Ab3dE6gH") is False
    assert link_registry.get("Ab3dE6gH") is None
    assert redis_client.zcard(f"{PREFIX}:link_expiry") == 0


def test_find_expired_is_ordered_and_limited(link_registry):
    now = int(time.time())
    link_registry.insert(_entry("exp00003", now - 10))
    link_registry.insert(_entry("exp00001", now - 300))
    link_registry.insert(_entry("exp00002", now - 200))
    link_registry.insert(_entry("live0001", now + 3600))

    page = link_registry.find_expired(now, limit=2)

    assert [e.id for e in page] == ["exp00001", "exp00002"]
    assert [e.id for e in link_registry.find_expired(now, limit=10)] == [
        "exp00001", "exp00002", "exp00003",
    ]


def test_find_expired_prunes_vanished_entries(link_registry, redis_client):
    link_registry.insert(_entry("gone0001", 1000))
    redis_client.delete(f"{PREFIX}:link:gone0001")

    assert link_registry.find_expired(int(time.time()), limit=10) == []
    assert redis_client.zcard(f"{PREFIX}:link_expiry") == 0


def test_create_entry_reserves_fresh_slug(link_registry):
    entry = link_registry.create_entry("media", "u/1-abcdef01-a.png", int(time.time()) + 60)

    assert len(entry.id) == 8
    assert link_registry.get(entry.id) == entry
