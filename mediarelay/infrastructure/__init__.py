"""Infrastructure layer for Redis, object storage and other external services."""

from .local_blob_store import LocalBlobStore
from .memory_link_registry import MemoryLinkRegistry
from .redis_link_registry import RedisLinkRegistry
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import StorageFactory

__all__ = [
    'LocalBlobStore',
    'MemoryLinkRegistry',
    'RedisConnectionManager',
    'RedisLinkRegistry',
    'RedisRepository',
    'StorageFactory',
]
