"""
Link Registry

Repository interface for the durable id -> LinkEntry mapping.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from mediarelay.domain.errors import DuplicateIdError, LinkRegistryError

from .entities import LinkEntry
from .identifier_codec import DEFAULT_SLUG_LENGTH, generate_slug

logger = logging.getLogger(__name__)


class LinkRegistry(ABC):
    """
    Abstract repository interface for short link persistence.

    Contract Guarantees:
    - insert() is atomic: two concurrent inserts of the same id cannot both succeed
    - delete() is idempotent
    - get() returns None for unknown ids

    Backends implement the abstract methods; id reservation and the
    insert retry loop live here so every backend behaves the same.
    """

    slug_length = DEFAULT_SLUG_LENGTH
    widened_slug_length = 10
    max_reserve_attempts = 5
    max_insert_attempts = 5

    @abstractmethod
    def insert(self, entry: LinkEntry) -> None:
        """
        Store a new entry.

        Raises:
            DuplicateIdError: If entry.id is already present
            LinkRegistryError: If the backend fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, link_id: str) -> Optional[LinkEntry]:
        """
        Retrieve an entry by id.

        Returns:
            LinkEntry if found, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, link_id: str) -> bool:
        """
        Remove an entry. Deleting a missing id is not an error.

        Returns:
            True if an entry was removed, False if there was nothing to remove

        Raises:
            LinkRegistryError: If the backend fails
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, link_id: str) -> bool:
        """Check if an id is taken."""
        pass  # pragma: no cover

    @abstractmethod
    def find_expired(self, now: int, limit: int) -> List[LinkEntry]:
        """
        Find entries whose expiry has passed.

        Args:
            now: Current epoch seconds
            limit: Maximum number of entries to return

        Returns:
            Up to limit entries with expires_at <= now

        Raises:
            LinkRegistryError: If the backend fails
        """
        pass  # pragma: no cover

    def reserve_unique_id(self) -> str:
        """
        Draw a slug that is not currently taken.

        Tries max_reserve_attempts slugs of slug_length, then widens the
        id space by two symbols per round.

        Raises:
            DuplicateIdError: If every candidate was taken
        """
        length = self.slug_length
        for _ in range(self.max_reserve_attempts):
            candidate = generate_slug(length)
            if not self.exists(candidate):
                return candidate

        length = self.widened_slug_length
        for _ in range(self.max_reserve_attempts):
            logger.warning(f"Slug collisions at length {length - 2}, widening to {length}")
            candidate = generate_slug(length)
            if not self.exists(candidate):
                return candidate
            length += 2

        raise DuplicateIdError("Could not reserve a unique link id")

    def create_entry(self, bucket: str, object_key: str, expires_at: int) -> LinkEntry:
        """
        Reserve an id and insert a new entry under it.

        A concurrent writer may claim the reserved id between reservation
        and insert; the loser draws a new id.

        Returns:
            The inserted LinkEntry

        Raises:
            LinkRegistryError: If the backend fails or no id could be claimed
        """
        for attempt in range(1, self.max_insert_attempts + 1):
            try:
                entry = LinkEntry.create(self.reserve_unique_id(), bucket, object_key, expires_at)
                self.insert(entry)
                return entry
            except DuplicateIdError:
                logger.info(f"Link id taken concurrently (attempt {attempt}), drawing a new one")

        raise LinkRegistryError("Exhausted attempts to insert a unique link id")
