"""
Upload Service

Application service that validates an upload, stores it and mints the
links that point at it.
"""

import logging
import secrets
import time
from typing import Callable, Optional

from mediarelay.domain.blob_storage.blob_store import BlobStore
from mediarelay.domain.blob_storage.media_types import (
    clean_filename,
    is_allowed_media_type,
    normalize_content_type,
)
from mediarelay.domain.errors import (
    BlobStoreError,
    FileTooLargeError,
    LinkRegistryError,
    MissingFileError,
    ObjectAlreadyExistsError,
    StorageWriteError,
    UnsupportedFileTypeError,
)
from mediarelay.domain.links.identifier_codec import IdentifierCodec
from mediarelay.domain.links.pending import pending_marker_key
from mediarelay.domain.links.repositories import LinkRegistry
from mediarelay.domain.links.value_objects import TokenPayload

from .upload_result import UploadResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 26 * 1024 * 1024
MAX_KEY_ATTEMPTS = 3


class UploadService:
    """
    Application service for the upload workflow.

    Workflow:
    1. Reject missing, unsupported or oversized files before any write
    2. Store the object under a fresh, never-overwritten key
    3. Record a registry entry under a unique slug
    4. Mint a signed token for the same target

    A registry failure does not fail the upload: the signed token becomes
    the primary link instead, and a pending marker lets the janitor reclaim
    the object once the token expires.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        link_registry: LinkRegistry,
        codec: IdentifierCodec,
        bucket: str,
        link_ttl_seconds: int,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize Upload Service with dependencies.

        Args:
            blob_store: Object storage for uploaded media
            link_registry: Registry recording slug -> object mappings
            codec: Identifier codec for slugs and tokens
            bucket: Bucket every upload is stored in
            link_ttl_seconds: Lifetime of new links
            max_upload_bytes: Size limit enforced before storing
            clock: Returns current epoch seconds as float (defaults to time.time)
        """
        self.blob_store = blob_store
        self.link_registry = link_registry
        self.codec = codec
        self.bucket = bucket
        self.link_ttl_seconds = link_ttl_seconds
        self.max_upload_bytes = max_upload_bytes
        self._clock = clock or time.time

    def upload(self, filename: Optional[str], data: Optional[bytes],
               declared_mime: Optional[str]) -> UploadResult:
        """
        Store an uploaded file and create its links.

        Args:
            filename: Client-supplied file name
            data: File content (None when the request had no file)
            declared_mime: Client-declared MIME type

        Returns:
            UploadResult with the primary and legacy link ids

        Raises:
            MissingFileError: If no file was supplied
            UnsupportedFileTypeError: If the MIME type is not image/, audio/ or video/
            FileTooLargeError: If the file exceeds max_upload_bytes
            StorageWriteError: If the object could not be stored
        """
        self._validate(filename, data, declared_mime)

        clean_name = clean_filename(filename)
        content_type = normalize_content_type(clean_name, declared_mime)

        now = self._clock()
        object_key = self._store(clean_name, data, content_type, now)
        expires_at = int(now) + self.link_ttl_seconds

        legacy_id = self.codec.issue_token(TokenPayload(self.bucket, object_key, expires_at))

        try:
            entry = self.link_registry.create_entry(self.bucket, object_key, expires_at)
            link_id = entry.id
        except LinkRegistryError as e:
            logger.error(f"Registry write failed for {object_key}, using signed token link: {e}",
                         exc_info=True)
            link_id = legacy_id
            self._mark_pending(object_key, expires_at)

        logger.info(f"Stored upload {object_key} ({len(data)} bytes, {content_type}), "
                    f"link {link_id[:8]} expires at {expires_at}")

        return UploadResult(
            link_id=link_id,
            legacy_id=legacy_id,
            bucket=self.bucket,
            object_key=object_key,
            content_type=content_type,
            expires_at=expires_at,
        )

    def _validate(self, filename: Optional[str], data: Optional[bytes],
                  declared_mime: Optional[str]) -> None:
        if data is None or not filename:
            raise MissingFileError("No file in upload request")
        if not is_allowed_media_type(declared_mime):
            raise UnsupportedFileTypeError(f"Unsupported MIME type: {declared_mime!r}")
        if len(data) > self.max_upload_bytes:
            raise FileTooLargeError(
                f"Upload of {len(data)} bytes exceeds limit of {self.max_upload_bytes}"
            )

    def _store(self, clean_name: str, data: bytes, content_type: str, now: float) -> str:
        """Put the object under a new key, drawing another on collision."""
        for attempt in range(1, MAX_KEY_ATTEMPTS + 1):
            object_key = f"u/{int(now * 1000)}-{secrets.token_hex(4)}-{clean_name}"
            try:
                self.blob_store.put(self.bucket, object_key, data, content_type, upsert=False)
                return object_key
            except ObjectAlreadyExistsError:
                logger.warning(f"Object key collision on {object_key} (attempt {attempt})")

        raise StorageWriteError("Could not find a free object key")

    def _mark_pending(self, object_key: str, expires_at: int) -> None:
        """Leave a marker so the janitor reclaims an object no registry entry points at."""
        marker = pending_marker_key(expires_at, object_key)
        try:
            self.blob_store.put(self.bucket, marker, b"", "application/octet-stream", upsert=True)
        except BlobStoreError as e:
            logger.error(f"Could not record {self.bucket}/{object_key} for reclaim, "
                         f"it will outlive its link: {e}")
