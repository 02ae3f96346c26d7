"""
Link Value Objects

Immutable value objects for signed token payloads, classified link
references and resolution outcomes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from mediarelay.domain.errors import MalformedTokenError


@dataclass(frozen=True)
class TokenPayload:
    """
    Payload carried inside a self-contained signed token.

    The wire form uses the compact keys b/k/exp so tokens issued by earlier
    deployments decode to the same payload.
    """
    bucket: str
    object_key: str
    expires_at: int

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at

    def to_wire(self) -> dict:
        """Wire dictionary; key order is part of the signed bytes."""
        return {"b": self.bucket, "k": self.object_key, "exp": self.expires_at}

    @classmethod
    def from_wire(cls, data: dict) -> 'TokenPayload':
        """
        Build a payload from a decoded wire dictionary.

        Raises:
            MalformedTokenError: If a field is missing or has the wrong type
        """
        bucket = data.get("b")
        object_key = data.get("k")
        expires_at = data.get("exp")

        if not isinstance(bucket, str) or not bucket:
            raise MalformedTokenError("Token payload has no bucket")
        if not isinstance(object_key, str) or not object_key:
            raise MalformedTokenError("Token payload has no object key")
        # bool is an int subclass; a literal true is not an expiry
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)) or expires_at <= 0:
            raise MalformedTokenError("Token payload has no valid expiry")

        return cls(bucket=bucket, object_key=object_key, expires_at=int(expires_at))


@dataclass(frozen=True)
class TokenReference:
    """A public id that decoded as a valid signed token."""
    payload: TokenPayload


@dataclass(frozen=True)
class SlugReference:
    """A public id that must be looked up in the link registry."""
    slug: str


LinkReference = Union[TokenReference, SlugReference]


class ResolutionStatus(Enum):
    """Terminal states of a resolve request."""

    RESOLVED = "resolved"
    NOT_FOUND = "notfound"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a public link id."""
    status: ResolutionStatus
    signed_url: Optional[str] = None

    @classmethod
    def resolved(cls, signed_url: str) -> 'Resolution':
        return cls(ResolutionStatus.RESOLVED, signed_url)

    @classmethod
    def not_found(cls) -> 'Resolution':
        return cls(ResolutionStatus.NOT_FOUND)

    @classmethod
    def expired(cls) -> 'Resolution':
        return cls(ResolutionStatus.EXPIRED)

    @property
    def is_resolved(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED
