"""
Blob Store Interface

Abstract interface for the object storage that holds uploaded media.
The domain layer only sees put / sign / remove / exists / list_keys; concrete
backends (Google Cloud Storage, local filesystem) live in infrastructure.
"""

from abc import ABC, abstractmethod
from typing import List

MIN_SIGNED_URL_TTL = 30
MAX_SIGNED_URL_TTL = 7 * 24 * 3600


def clamp_signed_url_ttl(ttl_seconds: int) -> int:
    """
    Clamp a requested signed URL lifetime into [30 s, 7 days].

    Args:
        ttl_seconds: Requested lifetime (may be negative or huge)

    Returns:
        Lifetime in seconds within the safety range
    """
    return max(MIN_SIGNED_URL_TTL, min(int(ttl_seconds), MAX_SIGNED_URL_TTL))


class BlobStore(ABC):
    """
    Interface for object storage operations.

    Contract Guarantees:
    - put() never overwrites silently: without upsert an existing key is an error
    - sign() clamps the lifetime itself, whatever the caller asked for
    - remove() is idempotent
    - Backend failures surface as BlobStoreError subclasses whose messages
      are for logs only

    Thread Safety:
    - Implementations must be safe for concurrent use from request threads
    """

    @abstractmethod
    def put(self, bucket: str, key: str, data: bytes, content_type: str,
            upsert: bool = False) -> None:
        """
        Store an object.

        Args:
            bucket: Storage namespace
            key: Object key (e.g., 'u/1700000000000-ab12cd34-clip.mp4')
            data: Object content
            content_type: MIME type stored with the object
            upsert: Allow replacing an existing object

        Raises:
            ObjectAlreadyExistsError: If key exists and upsert is False
            StorageWriteError: If the backend fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def sign(self, bucket: str, key: str, ttl_seconds: int) -> str:
        """
        Generate a time-limited read URL for an object.

        Args:
            bucket: Storage namespace
            key: Object key
            ttl_seconds: Requested lifetime, clamped with clamp_signed_url_ttl

        Returns:
            Signed URL string

        Raises:
            ObjectNotFoundError: If the object does not exist
            StorageError: On transient backend failure
        """
        pass  # pragma: no cover

    @abstractmethod
    def remove(self, bucket: str, key: str) -> None:
        """
        Delete an object. A missing object is not an error.

        Raises:
            StorageError: If the backend fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, bucket: str, key: str) -> bool:
        """Check if an object exists."""
        pass  # pragma: no cover

    @abstractmethod
    def list_keys(self, bucket: str, prefix: str, limit: int) -> List[str]:
        """
        List up to limit object keys starting with prefix, in ascending
        lexicographic order.

        Raises:
            StorageError: If the backend fails
        """
        pass  # pragma: no cover
