"""
Blob Storage Domain

Object storage contract and the media type rules applied before storing.
"""

from .blob_store import (
    MAX_SIGNED_URL_TTL,
    MIN_SIGNED_URL_TTL,
    BlobStore,
    clamp_signed_url_ttl,
)
from .media_types import (
    clean_filename,
    is_allowed_media_type,
    normalize_content_type,
)

__all__ = [
    "BlobStore",
    "MIN_SIGNED_URL_TTL",
    "MAX_SIGNED_URL_TTL",
    "clamp_signed_url_ttl",
    "clean_filename",
    "is_allowed_media_type",
    "normalize_content_type",
]
