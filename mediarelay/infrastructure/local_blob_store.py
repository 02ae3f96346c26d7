"""
Local Filesystem Blob Store

Concrete BlobStore for development and tests. Objects live under
``<base_path>/<bucket>/<key>``; the content type is kept in a JSON sidecar
under ``<base_path>/.meta``. Signed URLs point at the application's own
``/files`` route and carry an HMAC-SHA256 signature over bucket, key and
expiry.
"""

import hashlib
import hmac
import json
import logging
import time
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import quote, urlencode

from mediarelay.domain.blob_storage.blob_store import BlobStore, clamp_signed_url_ttl
from mediarelay.domain.blob_storage.media_types import DEFAULT_CONTENT_TYPE
from mediarelay.domain.errors import (
    ObjectAlreadyExistsError,
    ObjectNotFoundError,
    StorageError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

FILES_ROUTE_PREFIX = "/files"
_META_DIR = ".meta"


class LocalBlobStore(BlobStore):
    """
    Local filesystem implementation of BlobStore.

    Thread Safety:
        Writes use exclusive create, so two writers of the same key cannot
        both succeed. Reads and deletes are plain filesystem calls.

    Attributes:
        base_path: Root directory for all buckets
        base_url: Prefix for signed URLs ("" yields host-relative URLs)
    """

    def __init__(self, base_path: str, secret: str, base_url: str = ""):
        """
        Initialize the local blob store.

        Args:
            base_path: Root directory (created if missing)
            secret: Key for signing /files URLs
            base_url: Public origin to prefix signed URLs with

        Raises:
            ValueError: If secret is empty
            OSError: If the base directory cannot be created
        """
        if not secret:
            raise ValueError("secret cannot be empty")

        self.base_path = Path(base_path).resolve()
        self.base_url = base_url.rstrip("/")
        self._secret = secret.encode("utf-8")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _object_path(self, bucket: str, key: str) -> Path:
        return self._contained(self.base_path / bucket / key)

    def _meta_path(self, bucket: str, key: str) -> Path:
        return self._contained(self.base_path / _META_DIR / bucket / f"{key}.json")

    def _contained(self, path: Path) -> Path:
        resolved = path.resolve()
        if resolved == self.base_path or self.base_path not in resolved.parents:
            raise ObjectNotFoundError(f"Path escapes storage root: {path}")
        return resolved

    def put(self, bucket: str, key: str, data: bytes, content_type: str,
            upsert: bool = False) -> None:
        if not key or not key.strip():
            raise ValueError("key cannot be empty")

        full_path = self._object_path(bucket, key)
        mode = "wb" if upsert else "xb"

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            with open(full_path, mode) as f:
                f.write(data)
        except FileExistsError as e:
            raise ObjectAlreadyExistsError(f"Object already exists: {bucket}/{key}", e) from e
        except OSError as e:
            raise StorageWriteError(f"Failed to save {bucket}/{key}: {e}", e) from e

        try:
            meta_path = self._meta_path(bucket, key)
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.write_text(json.dumps({"content_type": content_type}))
        except OSError as e:
            # An object without metadata is unreachable by any link; drop it
            full_path.unlink(missing_ok=True)
            raise StorageWriteError(f"Failed to save metadata for {bucket}/{key}: {e}", e) from e

    def sign(self, bucket: str, key: str, ttl_seconds: int) -> str:
        ttl = clamp_signed_url_ttl(ttl_seconds)
        if not self.exists(bucket, key):
            raise ObjectNotFoundError(f"Object not found: {bucket}/{key}")

        expires = int(time.time()) + ttl
        query = urlencode({"expires": expires, "signature": self._signature(bucket, key, expires)})
        return f"{self.base_url}{FILES_ROUTE_PREFIX}/{quote(bucket)}/{quote(key)}?{query}"

    def remove(self, bucket: str, key: str) -> None:
        try:
            self._object_path(bucket, key).unlink(missing_ok=True)
            self._meta_path(bucket, key).unlink(missing_ok=True)
        except ObjectNotFoundError:
            logger.debug(f"Ignoring remove outside storage root: {bucket}/{key}")
        except OSError as e:
            raise StorageError(f"Failed to delete {bucket}/{key}: {e}", e) from e

    def exists(self, bucket: str, key: str) -> bool:
        try:
            return self._object_path(bucket, key).is_file()
        except ObjectNotFoundError:
            return False

    def list_keys(self, bucket: str, prefix: str, limit: int) -> List[str]:
        if limit <= 0:
            return []

        try:
            bucket_path = self._contained(self.base_path / bucket)
        except ObjectNotFoundError:
            return []
        if not bucket_path.is_dir():
            return []

        try:
            keys = sorted(
                key for key in (p.relative_to(bucket_path).as_posix()
                                for p in bucket_path.rglob("*") if p.is_file())
                if key.startswith(prefix)
            )
        except OSError as e:
            raise StorageError(f"Failed to list {bucket}/{prefix}: {e}", e) from e
        return keys[:limit]

    def _signature(self, bucket: str, key: str, expires: int) -> str:
        message = f"{bucket}/{key}:{expires}"
        return hmac.new(self._secret, message.encode("utf-8"), hashlib.sha256).hexdigest()

    def verify_signature(self, bucket: str, key: str, expires: str, signature: str,
                         now: Optional[int] = None) -> bool:
        """
        Validate a /files URL signature.

        Args:
            bucket: Bucket from the URL path
            key: Object key from the URL path
            expires: Raw ``expires`` query value
            signature: Raw ``signature`` query value
            now: Current epoch seconds (defaults to time.time)

        Returns:
            True if the signature matches and has not expired
        """
        try:
            expires_at = int(expires)
        except (TypeError, ValueError):
            return False

        if now is None:
            now = int(time.time())
        if now >= expires_at:
            return False

        expected = self._signature(bucket, key, expires_at)
        return hmac.compare_digest(signature or "", expected)

    def open_object(self, bucket: str, key: str) -> Tuple[bytes, str]:
        """
        Read an object and its stored content type.

        Raises:
            ObjectNotFoundError: If the object does not exist
        """
        full_path = self._object_path(bucket, key)
        try:
            data = full_path.read_bytes()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(f"Object not found: {bucket}/{key}", e) from e
        except OSError as e:
            raise StorageError(f"Failed to read {bucket}/{key}: {e}", e) from e

        content_type = DEFAULT_CONTENT_TYPE
        try:
            meta = json.loads(self._meta_path(bucket, key).read_text())
            content_type = meta.get("content_type") or DEFAULT_CONTENT_TYPE
        except (OSError, ValueError) as e:
            logger.debug(f"No readable metadata for {bucket}/{key}: {e}")
        return data, content_type
