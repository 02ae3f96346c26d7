"""
Storage Factory

Selects the blob store and link registry backends from configuration, so
the application layer depends only on the BlobStore and LinkRegistry
interfaces.
"""

import logging

from mediarelay.config.settings import ConfigurationError, RelayConfig
from mediarelay.domain.blob_storage.blob_store import BlobStore
from mediarelay.domain.links.repositories import LinkRegistry

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    Factory for creating storage backends.

    Selection Logic:
    - STORAGE_BACKEND=gcs   -> GCSBlobStore
    - STORAGE_BACKEND=local -> LocalBlobStore under LOCAL_STORAGE_DIR
    - REGISTRY_BACKEND=redis  -> RedisLinkRegistry (Redis must be initialized)
    - REGISTRY_BACKEND=memory -> MemoryLinkRegistry

    There is no silent fallback between backends: a misconfigured backend
    is a startup error.
    """

    @staticmethod
    def create_blob_store(config: RelayConfig) -> BlobStore:
        """
        Create the blob store named by config.storage_backend.

        Raises:
            ConfigurationError: If the backend is unknown or cannot be initialized
        """
        if config.storage_backend == "local":
            from mediarelay.infrastructure.local_blob_store import LocalBlobStore

            try:
                store = LocalBlobStore(
                    config.local_storage_dir,
                    secret=config.link_secret,
                    base_url=config.public_base_url,
                )
            except OSError as e:
                raise ConfigurationError(f"Failed to initialize local storage: {e}") from e
            logger.info(f"Using local filesystem storage at {config.local_storage_dir}")
            return store

        if config.storage_backend == "gcs":
            from mediarelay.config.gcs_config import create_gcs_client
            from mediarelay.infrastructure.gcs_blob_store import GCSBlobStore

            try:
                client = create_gcs_client(config.google_credentials)
            except Exception as e:
                raise ConfigurationError(f"Failed to initialize GCS client: {e}") from e
            logger.info(f"Using GCS storage with bucket {config.storage_bucket}")
            return GCSBlobStore(client)

        raise ConfigurationError(f"Unknown storage backend: {config.storage_backend}")

    @staticmethod
    def create_link_registry(config: RelayConfig) -> LinkRegistry:
        """
        Create the link registry named by config.registry_backend.

        Raises:
            ConfigurationError: If the backend is unknown
            RuntimeError: If the Redis backend is selected before init_redis()
        """
        if config.registry_backend == "memory":
            from mediarelay.infrastructure.memory_link_registry import MemoryLinkRegistry

            logger.warning("Using in-memory link registry; links will not survive a restart")
            return MemoryLinkRegistry()

        if config.registry_backend == "redis":
            from mediarelay.config.redis_config import get_redis_repository
            from mediarelay.infrastructure.redis_link_registry import RedisLinkRegistry

            return RedisLinkRegistry(
                get_redis_repository(config.redis_key_prefix),
                grace_seconds=config.registry_grace_seconds,
            )

        raise ConfigurationError(f"Unknown registry backend: {config.registry_backend}")
