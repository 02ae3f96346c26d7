"""
Links Domain

Short link lifecycle: identifier schemes, the link registry contract,
resolution and expiry sweeping.
"""

from .entities import LinkEntry
from .identifier_codec import IdentifierCodec, decode_token, encode_token, generate_slug
from .repositories import LinkRegistry
from .services import LinkJanitor, LinkResolver, SweepReport
from .value_objects import (
    Resolution,
    ResolutionStatus,
    SlugReference,
    TokenPayload,
    TokenReference,
)

__all__ = [
    "IdentifierCodec",
    "LinkEntry",
    "LinkJanitor",
    "LinkRegistry",
    "LinkResolver",
    "Resolution",
    "ResolutionStatus",
    "SlugReference",
    "SweepReport",
    "TokenPayload",
    "TokenReference",
    "decode_token",
    "encode_token",
    "generate_slug",
]
