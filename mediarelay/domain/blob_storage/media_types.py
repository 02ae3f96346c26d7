"""
Media Type Rules

Which uploads are accepted, and which content type they are stored with.
"""

import re

ALLOWED_MIME_PREFIXES = ("image/", "audio/", "video/")

# Players classify .mp4 files declared as audio/mp4 as audio-only
STRONG_VIDEO_EXTENSIONS = frozenset({"mp4", "mov", "m4v", "3gp", "3gpp"})
CANONICAL_VIDEO_MIME = "video/mp4"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\-]+")


def is_allowed_media_type(mime_type: str) -> bool:
    """True if the declared MIME type is an image, audio or video type."""
    return (mime_type or "").lower().startswith(ALLOWED_MIME_PREFIXES)


def clean_filename(filename: str) -> str:
    """Replace every run of unsafe characters with a single underscore."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", filename or "")
    return cleaned or "file"


def file_extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def normalize_content_type(filename: str, declared_mime: str) -> str:
    """
    Pick the content type an object is stored with.

    Known video container extensions are forced to video/mp4 whatever the
    client declared; everything else keeps its declared type.
    """
    if file_extension(filename) in STRONG_VIDEO_EXTENSIONS:
        return CANONICAL_VIDEO_MIME
    return declared_mime or DEFAULT_CONTENT_TYPE
