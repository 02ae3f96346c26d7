"""
In-Memory Link Registry

Process-local LinkRegistry for development and tests. Entries do not
survive a restart and are not shared between worker processes.
"""

import threading
from typing import Dict, List, Optional

from mediarelay.domain.errors import DuplicateIdError
from mediarelay.domain.links.entities import LinkEntry
from mediarelay.domain.links.repositories import LinkRegistry


class MemoryLinkRegistry(LinkRegistry):
    """Dictionary-backed LinkRegistry guarded by a lock."""

    def __init__(self):
        self._entries: Dict[str, LinkEntry] = {}
        self._lock = threading.Lock()

    def insert(self, entry: LinkEntry) -> None:
        with self._lock:
            if entry.id in self._entries:
                raise DuplicateIdError(f"Link id already exists: {entry.id}")
            self._entries[entry.id] = entry

    def get(self, link_id: str) -> Optional[LinkEntry]:
        with self._lock:
            return self._entries.get(link_id)

    def delete(self, link_id: str) -> bool:
        with self._lock:
            return self._entries.pop(link_id, None) is not None

    def exists(self, link_id: str) -> bool:
        with self._lock:
            return link_id in self._entries

    def find_expired(self, now: int, limit: int) -> List[LinkEntry]:
        with self._lock:
            expired = [e for e in self._entries.values() if e.expires_at <= now]
        expired.sort(key=lambda e: e.expires_at)
        return expired[:limit]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
