"""
Dependency Injection Container

Manages service lifecycles and dependency resolution. The app factory
registers every service here; routes and tasks resolve them by type.
"""

import logging
import threading
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Dependency injection container holding one shared instance per type.

    Tests swap a service with ``override`` without rebuilding the app.
    Thread-safe for concurrent access.
    """

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._overrides: Dict[Type, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register a singleton service (single instance shared across all resolutions).

        Example:
            container.register_singleton(LinkRegistry, redis_link_registry)
        """
        with self._lock:
            self._singletons[interface] = implementation
            logger.debug(f"Registered singleton: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered service; overrides win over registrations.

        Raises:
            DependencyNotFoundError: If the interface is not registered
        """
        with self._lock:
            if interface in self._overrides:
                return self._overrides[interface]

            if interface not in self._singletons:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                )
            return self._singletons[interface]

    def override(self, interface: Type[T], implementation: T) -> None:
        """Override a registered service (primarily for testing)."""
        with self._lock:
            self._overrides[interface] = implementation
            logger.debug(f"Overridden: {interface.__name__}")
