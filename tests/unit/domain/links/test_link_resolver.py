"""
Unit Tests for LinkResolver

Resolution of registry slugs and signed tokens, expiry enforcement,
eager eviction and signed URL lifetime clamping.
"""

from mediarelay.domain.blob_storage.blob_store import MAX_SIGNED_URL_TTL, MIN_SIGNED_URL_TTL
from mediarelay.domain.errors import LinkRegistryError
from mediarelay.domain.links.entities import LinkEntry
from mediarelay.domain.links.identifier_codec import encode_token
from mediarelay.domain.links.services import LinkResolver
from mediarelay.domain.links.value_objects import ResolutionStatus, TokenPayload

BUCKET = "media"
KEY = "u/1700000000000-ab12cd34-clip.mp4"


def _resolver(codec, registry, blob_store, clock):
    return LinkResolver(codec, registry, blob_store, clock=clock)


def _stored_entry(registry, blob_store, expires_at, link_id="Ab3dE6gH"):
    blob_store.put(BUCKET, KEY, b"data", "video/mp4")
    entry = LinkEntry.create(link_id, BUCKET, KEY, expires_at)
    registry.insert(entry)
    return entry


class TestSlugResolution:
    def test_live_slug_resolves_to_signed_url(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now + 3600)

        resolution = _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert resolution.status is ResolutionStatus.RESOLVED
        assert resolution.signed_url.startswith(f"https://blobs.test/{BUCKET}/{KEY}")
        assert blob_store.signed_ttls() == [3600]

    def test_unknown_slug_is_not_found(self, codec, registry, blob_store, clock):
        resolution = _resolver(codec, registry, blob_store, clock).resolve("zzzzzzzz")

        assert resolution.status is ResolutionStatus.NOT_FOUND
        assert blob_store.calls("sign") == []

    def test_empty_id_is_not_found(self, codec, registry, blob_store, clock):
        resolution = _resolver(codec, registry, blob_store, clock).resolve("")

        assert resolution.status is ResolutionStatus.NOT_FOUND

    def test_expired_slug_is_evicted(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now - 1)

        resolution = _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert resolution.status is ResolutionStatus.EXPIRED
        assert registry.get(entry.id) is None
        assert not blob_store.exists(BUCKET, KEY)
        assert blob_store.calls("sign") == []

    def test_expiry_at_exact_instant(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now)

        resolution = _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert resolution.status is ResolutionStatus.EXPIRED

    def test_second_resolve_after_eviction_is_not_found(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now - 10)
        resolver = _resolver(codec, registry, blob_store, clock)

        resolver.resolve(entry.id)

        assert resolver.resolve(entry.id).status is ResolutionStatus.NOT_FOUND

    def test_failed_blob_removal_still_deletes_entry(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now - 10)
        blob_store.fail_remove = True

        resolution = _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert resolution.status is ResolutionStatus.EXPIRED
        assert registry.get(entry.id) is None

    def test_registry_failure_is_not_found(self, codec, blob_store, clock):
        class BrokenRegistry:
            def get(self, link_id):
                raise LinkRegistryError("connection lost")

        resolution = LinkResolver(codec, BrokenRegistry(), blob_store, clock=clock).resolve("Ab3dE6gH")

        assert resolution.status is ResolutionStatus.NOT_FOUND

    def test_missing_object_is_not_found(self, codec, registry, blob_store, clock):
        entry = LinkEntry.create("Ab3dE6gH", BUCKET, KEY, clock.now + 3600)
        registry.insert(entry)

        resolution = _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert resolution.status is ResolutionStatus.NOT_FOUND

    def test_signing_failure_is_not_found(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now + 3600)
        blob_store.fail_sign = True

        resolution = _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert resolution.status is ResolutionStatus.NOT_FOUND
        assert resolution.signed_url is None


class TestTokenResolution:
    def test_valid_token_resolves_without_registry(self, codec, registry, blob_store, clock):
        blob_store.put(BUCKET, KEY, b"data", "video/mp4")
        token = codec.issue_token(TokenPayload(BUCKET, KEY, clock.now + 7200))

        resolution = _resolver(codec, registry, blob_store, clock).resolve(token)

        assert resolution.status is ResolutionStatus.RESOLVED
        assert blob_store.signed_ttls() == [7200]

    def test_expired_token_deletes_nothing(self, codec, registry, blob_store, clock):
        blob_store.put(BUCKET, KEY, b"data", "video/mp4")
        token = codec.issue_token(TokenPayload(BUCKET, KEY, clock.now - 1))

        resolution = _resolver(codec, registry, blob_store, clock).resolve(token)

        assert resolution.status is ResolutionStatus.EXPIRED
        assert blob_store.exists(BUCKET, KEY)
        assert blob_store.calls("remove") == []

    def test_forged_token_is_looked_up_as_slug(self, codec, registry, blob_store, clock):
        blob_store.put(BUCKET, KEY, b"data", "video/mp4")
        forged = encode_token({"b": BUCKET, "k": KEY, "exp": clock.now + 3600}, "wrong-secret")

        resolution = _resolver(codec, registry, blob_store, clock).resolve(forged)

        assert resolution.status is ResolutionStatus.NOT_FOUND
        assert blob_store.calls("sign") == []

    def test_token_shaped_slug_in_registry_still_resolves(self, codec, registry, blob_store, clock):
        odd_id = "abc.def"
        _stored_entry(registry, blob_store, clock.now + 60, link_id=odd_id)

        resolution = _resolver(codec, registry, blob_store, clock).resolve(odd_id)

        assert resolution.status is ResolutionStatus.RESOLVED


class TestSignedUrlLifetime:
    def test_one_second_left_is_clamped_up(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now + 1)

        _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert blob_store.signed_ttls() == [MIN_SIGNED_URL_TTL]

    def test_thirty_days_left_is_clamped_down(self, codec, registry, blob_store, clock):
        entry = _stored_entry(registry, blob_store, clock.now + 30 * 24 * 3600)

        _resolver(codec, registry, blob_store, clock).resolve(entry.id)

        assert blob_store.signed_ttls() == [MAX_SIGNED_URL_TTL]
