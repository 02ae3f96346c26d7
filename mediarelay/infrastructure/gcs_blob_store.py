"""
Google Cloud Storage Blob Store

Concrete BlobStore backed by the google-cloud-storage library. Buckets are
addressed per call, so one client serves every namespace the registry
refers to.
"""

import logging
from datetime import timedelta
from typing import List

from google.api_core.exceptions import PreconditionFailed
from google.cloud import storage
from google.cloud.exceptions import NotFound

from mediarelay.domain.blob_storage.blob_store import BlobStore, clamp_signed_url_ttl
from mediarelay.domain.errors import (
    ObjectAlreadyExistsError,
    ObjectNotFoundError,
    StorageError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)


class GCSBlobStore(BlobStore):
    """
    Google Cloud Storage implementation of BlobStore.

    Thread Safety:
        The GCS client handles concurrent operations safely; blob handles
        are created per call and never shared.

    Attributes:
        client: Google Cloud Storage client instance
    """

    def __init__(self, client: storage.Client):
        """
        Initialize the GCS blob store.

        Args:
            client: Authenticated storage client (see config.gcs_config)
        """
        self.client = client

    def _blob(self, bucket: str, key: str) -> storage.Blob:
        if not key or not key.strip():
            raise ValueError("key cannot be empty")
        return self.client.bucket(bucket).blob(key)

    def put(self, bucket: str, key: str, data: bytes, content_type: str,
            upsert: bool = False) -> None:
        """
        Upload bytes to GCS.

        Without upsert the upload carries ``if_generation_match=0`` so GCS
        itself rejects an existing object; there is no check-then-write race.
        """
        blob = self._blob(bucket, key)
        kwargs = {} if upsert else {"if_generation_match": 0}

        try:
            blob.upload_from_string(data, content_type=content_type, **kwargs)
        except PreconditionFailed as e:
            raise ObjectAlreadyExistsError(f"Object already exists: {bucket}/{key}", e) from e
        except Exception as e:
            # Retry deadlines and transport failures arrive outside the API error types
            raise StorageWriteError(f"Failed to upload {bucket}/{key} to GCS: {e}", e) from e

    def sign(self, bucket: str, key: str, ttl_seconds: int) -> str:
        """
        Generate a v4 signed GET URL.

        Raises:
            ObjectNotFoundError: If the blob doesn't exist
            StorageError: If signing fails
        """
        ttl = clamp_signed_url_ttl(ttl_seconds)
        blob = self._blob(bucket, key)

        try:
            if not blob.exists():
                raise ObjectNotFoundError(f"Blob not found: {bucket}/{key}")

            return blob.generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=ttl),
                method="GET",
            )
        except ObjectNotFoundError:
            raise
        except NotFound as e:
            raise ObjectNotFoundError(f"Blob not found: {bucket}/{key}", e) from e
        except Exception as e:
            # Includes credentials without a signing key (AttributeError/ValueError)
            raise StorageError(f"Failed to generate signed URL: {e}", e) from e

    def remove(self, bucket: str, key: str) -> None:
        """Delete a blob. A missing blob counts as removed."""
        blob = self._blob(bucket, key)

        try:
            blob.delete()
        except NotFound:
            logger.debug(f"Blob already gone: {bucket}/{key}")
        except Exception as e:
            raise StorageError(f"Failed to delete {bucket}/{key} from GCS: {e}", e) from e

    def exists(self, bucket: str, key: str) -> bool:
        blob = self._blob(bucket, key)

        try:
            return blob.exists()
        except Exception as e:
            raise StorageError(f"Failed to check {bucket}/{key} in GCS: {e}", e) from e

    def list_keys(self, bucket: str, prefix: str, limit: int) -> List[str]:
        """List blob names under prefix; GCS returns them in lexicographic order."""
        if limit <= 0:
            return []

        try:
            return [b.name for b in self.client.list_blobs(bucket, prefix=prefix, max_results=limit)]
        except Exception as e:
            raise StorageError(f"Failed to list {bucket}/{prefix} in GCS: {e}", e) from e
