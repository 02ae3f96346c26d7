"""Configuration for the web process and Celery workers."""

from .settings import ConfigurationError, RelayConfig

__all__ = ['ConfigurationError', 'RelayConfig']
