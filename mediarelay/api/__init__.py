"""
HTTP API

Plain Flask blueprints for the upload endpoint, short link redirects,
health checks and (with the local blob store) signed file downloads.
"""

from .files import files_bp
from .links import links_bp
from .system import system_bp
from .upload import upload_bp

__all__ = ['files_bp', 'links_bp', 'system_bp', 'upload_bp']
