"""
Relay Configuration

Reads every runtime setting from the environment in one place.
"""

import os
from typing import List, Union


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


STORAGE_BACKENDS = ("gcs", "local")
REGISTRY_BACKENDS = ("redis", "memory")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


class RelayConfig:
    """Application configuration."""

    def __init__(self):
        # Public surface
        self.public_base_url = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")
        self.cors_origin = os.getenv("CORS_ORIGIN", "*")
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = _env_int("PORT", 3000)
        self.debug = _env_flag("FLASK_DEBUG")
        self.viewer_path = os.getenv("VIEWER_PATH", "/receiver.html")
        self.expired_path = os.getenv("EXPIRED_PATH", "/expired.html")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Links
        self.link_secret = os.getenv("LINK_SECRET", "")
        self.link_ttl_hours = _env_int("LINK_TTL_HOURS", 72)
        self.max_upload_mb = _env_int("MAX_UPLOAD_MB", 26)

        # Storage
        self.storage_backend = os.getenv("STORAGE_BACKEND", "gcs").lower()
        self.storage_bucket = os.getenv("STORAGE_BUCKET", "mediarelay")
        self.local_storage_dir = os.getenv("LOCAL_STORAGE_DIR", "/tmp/mediarelay")
        self.google_credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

        # Registry
        self.registry_backend = os.getenv("REGISTRY_BACKEND", "redis").lower()
        self.redis_key_prefix = os.getenv("REDIS_KEY_PREFIX", "mediarelay")
        self.registry_grace_seconds = _env_int("REGISTRY_GRACE_SECONDS", 7 * 24 * 3600)

        # Janitor
        self.janitor_batch_limit = _env_int("JANITOR_BATCH_LIMIT", 500)
        self.janitor_interval_seconds = _env_int("JANITOR_INTERVAL_SECONDS", 3600)

    @property
    def link_ttl_seconds(self) -> int:
        return self.link_ttl_hours * 3600

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def cors_origins(self) -> Union[str, List[str]]:
        """CORS_ORIGIN as flask-cors expects it: "*" or a list of origins."""
        origins = [o.strip() for o in self.cors_origin.split(",") if o.strip()]
        if not origins or "*" in origins:
            return "*"
        return origins

    def validate(self) -> None:
        """
        Check required settings before anything is served.

        Raises:
            ConfigurationError: On the first missing or invalid setting
        """
        if not self.link_secret:
            raise ConfigurationError("LINK_SECRET is required")
        if not self.storage_bucket:
            raise ConfigurationError("STORAGE_BUCKET is required")
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ConfigurationError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}"
            )
        if self.registry_backend not in REGISTRY_BACKENDS:
            raise ConfigurationError(
                f"REGISTRY_BACKEND must be one of {', '.join(REGISTRY_BACKENDS)}"
            )
        if self.link_ttl_hours <= 0:
            raise ConfigurationError("LINK_TTL_HOURS must be positive")
        if self.max_upload_mb <= 0:
            raise ConfigurationError("MAX_UPLOAD_MB must be positive")
        if self.janitor_batch_limit <= 0:
            raise ConfigurationError("JANITOR_BATCH_LIMIT must be positive")
