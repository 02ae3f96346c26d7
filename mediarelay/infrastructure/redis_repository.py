"""
Redis Repository Base Class

Provides JSON storage, key prefixing and script execution for
Redis-backed repositories, plus the pooled connection manager.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisRepository:
    """Base Redis repository with prefixed keys and JSON values."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Args:
            key: Redis key

        Returns:
            Dictionary if found and valid JSON, None otherwise
        """
        try:
            data = self.redis.get(self._make_key(key))
            if data is None:
                return None
            return self.decode_json(data)
        except (RedisError, ValueError) as e:
            logger.warning(f"Error getting JSON data for key {key}: {e}")
            return None

    def get_many_json(self, keys: List[str]) -> List[Optional[Dict[str, Any]]]:
        """
        Fetch several JSON values in one round trip.

        Returns:
            One entry per key, None where the key is missing or unreadable

        Raises:
            RedisError: If the pipeline fails
        """
        if not keys:
            return []

        pipeline = self.redis.pipeline(transaction=False)
        for key in keys:
            pipeline.get(self._make_key(key))

        values = []
        for raw in pipeline.execute():
            try:
                values.append(self.decode_json(raw) if raw is not None else None)
            except ValueError as e:
                logger.warning(f"Skipping unreadable JSON value: {e}")
                values.append(None)
        return values

    def exists(self, key: str) -> bool:
        """
        Check if a key exists in Redis.

        Raises:
            RedisError: If the check cannot be performed
        """
        return self.redis.exists(self._make_key(key)) > 0

    def run_script(self, script: str, keys: List[str], args: List[Any]) -> Any:
        """
        Execute a Lua script atomically against prefixed keys.

        Raises:
            RedisError: If the script fails
        """
        redis_keys = [self._make_key(key) for key in keys]
        return self.redis.eval(script, len(redis_keys), *redis_keys, *args)

    @staticmethod
    def decode_json(raw) -> Dict[str, Any]:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = 'localhost', port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20,
                 socket_timeout: float = 5.0, decode_responses: bool = False):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisError:
            return False
