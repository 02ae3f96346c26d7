"""Application layer: orchestrates domain services for the API and tasks."""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .upload_result import UploadResult
from .upload_service import UploadService

__all__ = [
    'DependencyContainer',
    'DependencyNotFoundError',
    'UploadResult',
    'UploadService',
]
