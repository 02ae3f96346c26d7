"""
Redis Link Registry Implementation

Concrete Redis-based implementation of the LinkRegistry interface.
Entries are JSON strings under ``link:<id>``; a sorted set ``link_expiry``
indexes ids by expiry so the janitor can page through expired links
without scanning the keyspace.
"""

import json
import logging
from typing import List, Optional

from redis.exceptions import RedisError

from mediarelay.domain.errors import DuplicateIdError, LinkRegistryError
from mediarelay.domain.links.entities import LinkEntry
from mediarelay.domain.links.repositories import LinkRegistry

logger = logging.getLogger(__name__)

DEFAULT_GRACE_SECONDS = 7 * 24 * 3600

# SET NX and the index update happen in one script so a duplicate id
# can never leave a half-written entry behind
_INSERT_SCRIPT = """
local entry_key = KEYS[1]
local index_key = KEYS[2]
local payload = ARGV[1]
local ttl = tonumber(ARGV[2])
local expires_at = ARGV[3]
local link_id = ARGV[4]

local ok = redis.call('SET', entry_key, payload, 'NX', 'EX', ttl)
if not ok then
    return 0
end
redis.call('ZADD', index_key, expires_at, link_id)
return 1
"""

_DELETE_SCRIPT = """
local removed = redis.call('DEL', KEYS[1])
redis.call('ZREM', KEYS[2], ARGV[1])
return removed
"""


class RedisLinkRegistry(LinkRegistry):
    """
    Redis-based implementation of LinkRegistry.

    Entry keys carry a Redis TTL of remaining lifetime plus a grace period.
    The TTL is only a backstop: within the grace period the entry is still
    readable, so resolution reports expired rather than notfound, and the
    janitor can still find the object key to delete.
    """

    def __init__(self, redis_repository, grace_seconds: int = DEFAULT_GRACE_SECONDS):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
            grace_seconds: How long entries outlive their expiry in Redis
        """
        self.redis_repo = redis_repository
        self.key_prefix = "link"
        self.index_key = "link_expiry"
        self.grace_seconds = grace_seconds

    def _entry_key(self, link_id: str) -> str:
        return f"{self.key_prefix}:{link_id}"

    def insert(self, entry: LinkEntry) -> None:
        """Atomically insert an entry, failing on an existing id."""
        ttl = max(1, entry.remaining_seconds()) + self.grace_seconds

        try:
            inserted = self.redis_repo.run_script(
                _INSERT_SCRIPT,
                [self._entry_key(entry.id), self.index_key],
                [json.dumps(entry.to_dict()), ttl, entry.expires_at, entry.id],
            )
        except RedisError as e:
            raise LinkRegistryError(f"Failed to insert link {entry.id}", e) from e

        if inserted != 1:
            raise DuplicateIdError(f"Link id already exists: {entry.id}")

    def get(self, link_id: str) -> Optional[LinkEntry]:
        """Retrieve an entry by id."""
        data = self.redis_repo.get_json(self._entry_key(link_id))
        if data is None:
            return None

        try:
            return LinkEntry.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Error deserializing link {link_id}: {e}")
            return None

    def delete(self, link_id: str) -> bool:
        """Delete an entry and its index member."""
        try:
            removed = self.redis_repo.run_script(
                _DELETE_SCRIPT,
                [self._entry_key(link_id), self.index_key],
                [link_id],
            )
        except RedisError as e:
            raise LinkRegistryError(f"Failed to delete link {link_id}", e) from e
        return bool(removed)

    def exists(self, link_id: str) -> bool:
        """Check if an id is taken."""
        try:
            return self.redis_repo.exists(self._entry_key(link_id))
        except RedisError as e:
            raise LinkRegistryError(f"Failed to check link {link_id}", e) from e

    def find_expired(self, now: int, limit: int) -> List[LinkEntry]:
        """
        Page through the expiry index for entries expired at now.

        Index members whose entry has already vanished (Redis TTL backstop)
        are pruned from the index and not returned.
        """
        try:
            members = self.redis_repo.redis.zrangebyscore(
                self.redis_repo._make_key(self.index_key),
                "-inf",
                now,
                start=0,
                num=limit,
            )
            link_ids = [m.decode("utf-8") if isinstance(m, bytes) else m for m in members]
            values = self.redis_repo.get_many_json([self._entry_key(i) for i in link_ids])
        except RedisError as e:
            raise LinkRegistryError("Failed to list expired links", e) from e

        expired = []
        orphaned = []
        for link_id, data in zip(link_ids, values):
            if data is None:
                orphaned.append(link_id)
                continue
            try:
                expired.append(LinkEntry.from_dict(data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Error deserializing expired link {link_id}: {e}")
                orphaned.append(link_id)

        if orphaned:
            self._prune_index(orphaned)
        return expired

    def _prune_index(self, link_ids: List[str]) -> None:
        try:
            self.redis_repo.redis.zrem(self.redis_repo._make_key(self.index_key), *link_ids)
            logger.info(f"Pruned {len(link_ids)} orphaned ids from the expiry index")
        except RedisError as e:
            logger.warning(f"Failed to prune expiry index: {e}")
