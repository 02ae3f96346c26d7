"""
Property-based tests for identifier classification, signed URL lifetimes
and janitor sweeps.
"""

from hypothesis import given
from hypothesis import strategies as st

from mediarelay.domain.blob_storage.blob_store import (
    MAX_SIGNED_URL_TTL,
    MIN_SIGNED_URL_TTL,
    clamp_signed_url_ttl,
)
from mediarelay.domain.links.identifier_codec import SLUG_ALPHABET, IdentifierCodec, generate_slug
from mediarelay.domain.links.services import LinkJanitor
from mediarelay.domain.links.value_objects import SlugReference, TokenReference
from mediarelay.infrastructure.memory_link_registry import MemoryLinkRegistry
from tests.fixtures.mock_repositories import FakeBlobStore
from tests.property.strategies import NOW, registry_contents, token_payloads

codec = IdentifierCodec("property-secret")
other_codec = IdentifierCodec("another-secret")


@given(st.integers(min_value=1, max_value=64))
def test_slugs_use_alphabet_and_length(length):
    slug = generate_slug(length)

    assert len(slug) == length
    assert set(slug) <= set(SLUG_ALPHABET)


@given(st.text(max_size=200))
def test_classify_never_raises(raw_id):
    reference = codec.classify(raw_id)

    assert isinstance(reference, (SlugReference, TokenReference))


@given(token_payloads())
def test_issued_token_reads_back(payload):
    token = codec.issue_token(payload)

    assert codec.read_token(token) == payload
    assert codec.classify(token) == TokenReference(payload)


@given(token_payloads())
def test_foreign_token_is_a_slug(payload):
    token = other_codec.issue_token(payload)

    assert codec.classify(token) == SlugReference(token)


@given(token_payloads(), st.integers(min_value=0, max_value=200))
def test_truncated_token_is_a_slug(payload, cut):
    token = codec.issue_token(payload)
    truncated = token[: max(0, len(token) - 1 - cut)]

    assert isinstance(codec.classify(truncated), SlugReference)


@given(st.integers(min_value=-(10 ** 9), max_value=10 ** 9))
def test_clamp_stays_in_range(ttl):
    clamped = clamp_signed_url_ttl(ttl)

    assert MIN_SIGNED_URL_TTL <= clamped <= MAX_SIGNED_URL_TTL
    if MIN_SIGNED_URL_TTL <= ttl <= MAX_SIGNED_URL_TTL:
        assert clamped == ttl


@given(registry_contents(), st.integers(min_value=1, max_value=40))
def test_sweep_removes_only_expired_entries(entries, limit):
    registry = MemoryLinkRegistry()
    blob_store = FakeBlobStore()
    for entry in entries:
        registry.insert(entry)
        blob_store.put(entry.bucket, entry.object_key, b"x", "image/png", upsert=True)

    report = LinkJanitor(registry, blob_store, batch_limit=limit).sweep(now=NOW)

    expired = [e for e in entries if e.expires_at <= NOW]
    assert report.examined == min(limit, len(expired))
    assert report.entries_removed == report.examined
    assert report.errors == []
    for entry in entries:
        if entry.expires_at > NOW:
            assert registry.get(entry.id) == entry
    assert len(registry) == len(entries) - report.examined
