"""
Pending Reclaim Markers

An upload whose registry write failed is only reachable through its signed
token, so the registry's expiry index never sees it. The upload service
leaves an empty marker object next to it instead:

    pending/<expires_at, 12 digits>/<object key>

Zero-padding makes lexicographic key order equal expiry order, so the
janitor can list markers oldest-first and stop at the first live one.
"""

from typing import Optional, Tuple

PENDING_PREFIX = "pending/"
_EXPIRY_WIDTH = 12


def pending_marker_key(expires_at: int, object_key: str) -> str:
    """Build the marker key recording object_key for reclaim at expires_at."""
    return f"{PENDING_PREFIX}{int(expires_at):0{_EXPIRY_WIDTH}d}/{object_key}"


def parse_pending_marker(marker_key: str) -> Optional[Tuple[int, str]]:
    """
    Split a marker key into (expires_at, object_key).

    Returns:
        None if the key is not a well-formed marker
    """
    if not marker_key.startswith(PENDING_PREFIX):
        return None

    expiry, sep, object_key = marker_key[len(PENDING_PREFIX):].partition("/")
    if not sep or not object_key or len(expiry) != _EXPIRY_WIDTH or not expiry.isdigit():
        return None
    return int(expiry), object_key
