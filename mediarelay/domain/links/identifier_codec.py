"""
Identifier Codec

Generates and validates the two public identifier schemes:

- slugs: short random strings that need a registry lookup
- tokens: self-contained ``base64url(payload).base64url(tag)`` strings whose
  HMAC-SHA256 tag authenticates the payload, so no registry is needed

Both schemes are accepted side by side; ``IdentifierCodec.classify`` decides
which one a raw id belongs to.
"""

import base64
import binascii
import hashlib
import hmac
import json
import secrets
import string
from typing import Any, Dict

from mediarelay.domain.errors import InvalidSignatureError, MalformedTokenError, TokenError

from .value_objects import LinkReference, SlugReference, TokenPayload, TokenReference

SLUG_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase
DEFAULT_SLUG_LENGTH = 8
TOKEN_SEPARATOR = "."


def generate_slug(length: int = DEFAULT_SLUG_LENGTH) -> str:
    """
    Generate a cryptographically random slug over the 62-symbol alphabet.

    Args:
        length: Number of symbols (default: 8)

    Returns:
        Random slug string
    """
    if length <= 0:
        raise ValueError("Slug length must be positive")
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(text: str) -> bytes:
    """Strict base64url decoding; anything outside the alphabet is malformed."""
    try:
        padded = text.encode("ascii") + b"=" * (-len(text) % 4)
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (UnicodeEncodeError, binascii.Error) as e:
        raise MalformedTokenError("Token part is not valid base64url", e) from e


def _sign(payload_bytes: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), payload_bytes, hashlib.sha256).digest()


def encode_token(payload: Dict[str, Any], secret: str) -> str:
    """
    Encode a payload as a signed token.

    Args:
        payload: JSON-serializable dictionary
        secret: Shared signing secret

    Returns:
        ``base64url(payload) + "." + base64url(tag)``
    """
    payload_bytes = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    tag = _sign(payload_bytes, secret)
    return f"{_b64url_encode(payload_bytes)}{TOKEN_SEPARATOR}{_b64url_encode(tag)}"


def decode_token(token: str, secret: str) -> Dict[str, Any]:
    """
    Verify and decode a signed token.

    Args:
        token: Raw token string
        secret: Shared signing secret

    Returns:
        Decoded payload dictionary

    Raises:
        MalformedTokenError: If the separator or a part is missing, a part is
            not base64url, or the verified payload is not a JSON object
        InvalidSignatureError: If the tag does not match the payload
    """
    parts = str(token).split(TOKEN_SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedTokenError("Token must have exactly two non-empty parts")

    payload_bytes = _b64url_decode(parts[0])
    tag = _b64url_decode(parts[1])

    # Constant-time comparison to prevent timing attacks
    if not hmac.compare_digest(tag, _sign(payload_bytes, secret)):
        raise InvalidSignatureError("Token signature mismatch")

    try:
        payload = json.loads(payload_bytes.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedTokenError("Token payload is not valid JSON", e) from e

    if not isinstance(payload, dict):
        raise MalformedTokenError("Token payload is not an object")
    return payload


class IdentifierCodec:
    """
    Issues and reads public link identifiers with a shared secret.
    """

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("secret cannot be empty")
        self._secret = secret

    def new_slug(self, length: int = DEFAULT_SLUG_LENGTH) -> str:
        return generate_slug(length)

    def issue_token(self, payload: TokenPayload) -> str:
        """Mint a signed token for a storage target."""
        return encode_token(payload.to_wire(), self._secret)

    def read_token(self, token: str) -> TokenPayload:
        """
        Verify a token and return its typed payload.

        Raises:
            TokenError: If the token is malformed or forged
        """
        return TokenPayload.from_wire(decode_token(token, self._secret))

    def classify(self, raw_id: str) -> LinkReference:
        """
        Decide which identifier scheme a public id belongs to.

        A verifiable token is always a TokenReference; anything else,
        including malformed or forged tokens, is a SlugReference.
        """
        try:
            return TokenReference(self.read_token(raw_id))
        except TokenError:
            return SlugReference(raw_id)
