"""
Link Services

Domain services for resolving public link ids and sweeping expired links.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from mediarelay.domain.blob_storage.blob_store import BlobStore, clamp_signed_url_ttl
from mediarelay.domain.errors import BlobStoreError, LinkRegistryError

from .entities import LinkEntry
from .identifier_codec import IdentifierCodec
from .pending import PENDING_PREFIX, parse_pending_marker
from .repositories import LinkRegistry
from .value_objects import Resolution, TokenReference

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def _wall_clock() -> int:
    return int(time.time())


def _short(link_id: str) -> str:
    return link_id[:8]


class LinkResolver:
    """
    Domain service turning a public id into a signed URL, or a
    not-found / expired outcome.

    Signed tokens are tried before registry slugs, so both schemes can be
    served during a migration window.
    """

    def __init__(self, codec: IdentifierCodec, link_registry: LinkRegistry,
                 blob_store: BlobStore, clock: Optional[Clock] = None):
        """
        Initialize LinkResolver.

        Args:
            codec: Identifier codec holding the token secret
            link_registry: Registry for slug lookups
            blob_store: Store that signs read URLs
            clock: Returns current epoch seconds (defaults to time.time)
        """
        self.codec = codec
        self.link_registry = link_registry
        self.blob_store = blob_store
        self._clock = clock or _wall_clock

    def resolve(self, raw_id: str) -> Resolution:
        """
        Resolve a public link id.

        Args:
            raw_id: Path segment from /r/<id>

        Returns:
            Resolution with status resolved, notfound or expired
        """
        if not raw_id:
            return Resolution.not_found()

        now = self._clock()
        reference = self.codec.classify(raw_id)

        if isinstance(reference, TokenReference):
            target = reference.payload
            if target.is_expired(now):
                logger.info(f"Token link expired: {_short(raw_id)}")
                return Resolution.expired()
        else:
            entry = self._lookup(reference.slug)
            if entry is None:
                return Resolution.not_found()
            if entry.is_expired(now):
                logger.info(f"Link expired: {entry.id}, evicting")
                self.evict(entry)
                return Resolution.expired()
            target = entry

        return self._sign(target.bucket, target.object_key, target.expires_at, now)

    def evict(self, entry: LinkEntry) -> None:
        """
        Delete an expired entry's object and registry row.

        Each deletion is attempted even if the other fails; leftovers are
        picked up by the janitor.
        """
        try:
            self.blob_store.remove(entry.bucket, entry.object_key)
        except BlobStoreError as e:
            logger.warning(f"Failed to remove object {entry.object_key} for link {entry.id}: {e}")

        try:
            self.link_registry.delete(entry.id)
        except LinkRegistryError as e:
            logger.warning(f"Failed to delete registry entry {entry.id}: {e}")

    def _lookup(self, slug: str) -> Optional[LinkEntry]:
        try:
            return self.link_registry.get(slug)
        except LinkRegistryError as e:
            logger.error(f"Registry lookup failed for {_short(slug)}: {e}")
            return None

    def _sign(self, bucket: str, object_key: str, expires_at: int, now: int) -> Resolution:
        ttl = clamp_signed_url_ttl(expires_at - now)
        try:
            signed_url = self.blob_store.sign(bucket, object_key, ttl)
        except BlobStoreError as e:
            # Backend detail stays in the log; the caller just sees notfound
            logger.warning(f"Could not sign {bucket}/{object_key}: {e}")
            return Resolution.not_found()
        return Resolution.resolved(signed_url)


@dataclass
class SweepReport:
    """Statistics from one janitor run."""
    examined: int = 0
    blobs_removed: int = 0
    entries_removed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "examined": self.examined,
            "blobs_removed": self.blobs_removed,
            "entries_removed": self.entries_removed,
            "errors": list(self.errors),
        }


class LinkJanitor:
    """
    Domain service reclaiming storage and registry space for expired links.

    Runs are bounded by a batch limit; anything left over is handled by the
    next run. Resolution enforces expiry on its own, so a late sweep never
    lets an expired link be served.

    With a pending_bucket, leftover budget also goes to uploads that only
    got a signed token link (see pending.py).
    """

    DEFAULT_BATCH_LIMIT = 500

    def __init__(self, link_registry: LinkRegistry, blob_store: BlobStore,
                 batch_limit: int = DEFAULT_BATCH_LIMIT, clock: Optional[Clock] = None,
                 pending_bucket: Optional[str] = None):
        self.link_registry = link_registry
        self.blob_store = blob_store
        self.batch_limit = batch_limit
        self.pending_bucket = pending_bucket
        self._clock = clock or _wall_clock

    def sweep(self, batch_limit: Optional[int] = None, now: Optional[int] = None) -> SweepReport:
        """
        Delete up to batch_limit expired entries and their objects.

        Returns:
            SweepReport with counts and error messages
        """
        limit = batch_limit if batch_limit is not None else self.batch_limit
        if now is None:
            now = self._clock()
        report = SweepReport()

        if limit <= 0:
            return report

        self._sweep_registry(now, limit, report)
        if self.pending_bucket is not None and report.examined < limit:
            self._sweep_pending(now, limit - report.examined, report)

        logger.info(
            f"Sweep completed - Examined: {report.examined}, "
            f"Objects: {report.blobs_removed}, "
            f"Entries: {report.entries_removed}, "
            f"Errors: {len(report.errors)}"
        )
        return report

    def _sweep_registry(self, now: int, limit: int, report: SweepReport) -> None:
        try:
            expired = self.link_registry.find_expired(now, limit)
        except LinkRegistryError as e:
            error_msg = f"Error listing expired links: {e}"
            report.errors.append(error_msg)
            logger.error(error_msg, exc_info=True)
            return

        for entry in expired:
            report.examined += 1

            try:
                self.blob_store.remove(entry.bucket, entry.object_key)
                report.blobs_removed += 1
            except BlobStoreError as e:
                error_msg = f"Error removing object {entry.bucket}/{entry.object_key}: {e}"
                report.errors.append(error_msg)
                logger.warning(error_msg)

            try:
                self.link_registry.delete(entry.id)
                report.entries_removed += 1
            except LinkRegistryError as e:
                error_msg = f"Error deleting link {entry.id}: {e}"
                report.errors.append(error_msg)
                logger.warning(error_msg)

    def _sweep_pending(self, now: int, limit: int, report: SweepReport) -> None:
        bucket = self.pending_bucket
        try:
            markers = self.blob_store.list_keys(bucket, PENDING_PREFIX, limit)
        except BlobStoreError as e:
            error_msg = f"Error listing pending uploads: {e}"
            report.errors.append(error_msg)
            logger.error(error_msg)
            return

        for marker in markers:
            parsed = parse_pending_marker(marker)
            if parsed is None:
                logger.warning(f"Skipping malformed pending marker {bucket}/{marker}")
                continue

            expires_at, object_key = parsed
            # Markers list in expiry order
            if expires_at > now:
                break

            report.examined += 1
            try:
                self.blob_store.remove(bucket, object_key)
                report.blobs_removed += 1
                self.blob_store.remove(bucket, marker)
            except BlobStoreError as e:
                error_msg = f"Error removing pending upload {bucket}/{object_key}: {e}"
                report.errors.append(error_msg)
                logger.warning(error_msg)
