"""
Upload Result Value Object

Encapsulates the outcome of a successful upload.
"""

from dataclasses import dataclass
from typing import Any, Dict
from urllib.parse import quote

SHORT_LINK_PREFIX = "/r/"


def short_link_path(link_id: str) -> str:
    return f"{SHORT_LINK_PREFIX}{quote(link_id, safe='')}"


@dataclass(frozen=True)
class UploadResult:
    """
    Value object describing a stored upload and the links that reach it.

    link_id is the registry slug, or the signed token when the registry
    could not record the link. legacy_id is always the signed token.
    """

    link_id: str
    legacy_id: str
    bucket: str
    object_key: str
    content_type: str
    expires_at: int

    @property
    def registry_backed(self) -> bool:
        return self.link_id != self.legacy_id

    @property
    def receiver_path(self) -> str:
        return short_link_path(self.link_id)

    @property
    def legacy_path(self) -> str:
        return short_link_path(self.legacy_id)

    def to_response(self, public_base_url: str) -> Dict[str, Any]:
        """
        Build the upload endpoint's JSON body.

        Args:
            public_base_url: Origin for the absolute link, without trailing slash
        """
        return {
            "success": True,
            "receiverUrl": self.receiver_path,
            "absoluteReceiverUrl": f"{public_base_url.rstrip('/')}{self.receiver_path}",
            "legacyReceiverUrl": self.legacy_path,
        }
