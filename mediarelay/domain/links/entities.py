"""
Link Entities

Domain entity for registry-backed short links.
"""

import time
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LinkEntry:
    """
    Entity mapping a short id to a stored object and its expiry.

    Frozen on purpose: expires_at is fixed at creation and never extended.
    Timestamps are integer seconds since the epoch.
    """
    id: str
    bucket: str
    object_key: str
    expires_at: int
    created_at: Optional[int] = None

    @classmethod
    def create(cls, link_id: str, bucket: str, object_key: str,
               expires_at: int) -> 'LinkEntry':
        """
        Factory method to create a new link entry stamped with the current time.

        Args:
            link_id: Unique short id
            bucket: Storage bucket holding the object
            object_key: Key of the object inside the bucket
            expires_at: Absolute expiry in epoch seconds

        Returns:
            New LinkEntry instance
        """
        return cls(
            id=link_id,
            bucket=bucket,
            object_key=object_key,
            expires_at=int(expires_at),
            created_at=int(time.time()),
        )

    def is_expired(self, now: Optional[int] = None) -> bool:
        """
        Check if the link has expired.

        Args:
            now: Current epoch seconds (defaults to the wall clock)

        Returns:
            True once now has reached expires_at
        """
        if now is None:
            now = int(time.time())
        return now >= self.expires_at

    def remaining_seconds(self, now: Optional[int] = None) -> int:
        """Seconds until expiry (0 if expired)."""
        if now is None:
            now = int(time.time())
        return max(0, self.expires_at - now)

    def to_dict(self) -> dict:
        """Convert to dictionary for persistence."""
        return {
            "id": self.id,
            "bucket": self.bucket,
            "obj_key": self.object_key,
            "exp": self.expires_at,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LinkEntry':
        """Create LinkEntry from its persisted dictionary."""
        return cls(
            id=data["id"],
            bucket=data["bucket"],
            object_key=data["obj_key"],
            expires_at=int(data["exp"]),
            created_at=data.get("created_at"),
        )
