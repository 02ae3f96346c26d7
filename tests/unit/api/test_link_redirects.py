"""
Unit Tests for GET /r/<id>, /healthz and the fallback 404 page.
"""

import time
from unittest.mock import MagicMock
from urllib.parse import parse_qs, unquote, urlparse

import pytest

from app_factory import create_app
from mediarelay.domain.links.entities import LinkEntry
from mediarelay.domain.links.identifier_codec import IdentifierCodec
from mediarelay.domain.links.value_objects import TokenPayload
from tests.fixtures.mock_repositories import FakeBlobStore, FakeClock

KEY = "u/1700000000000-ab12cd34-clip.mp4"


@pytest.fixture
def fake_store():
    store = FakeBlobStore()
    store.put("media", KEY, b"data", "video/mp4")
    return store


@pytest.fixture
def relay_client(relay_config, registry, fake_store):
    return create_app(relay_config, blob_store=fake_store, link_registry=registry).test_client()


def _location(response):
    return urlparse(response.headers["Location"])


class TestResolveRedirects:
    def test_live_slug_redirects_to_viewer(self, relay_client, registry):
        registry.insert(LinkEntry.create("Ab3dE6gH", "media", KEY, int(time.time()) + 3600))

        response = relay_client.get("/r/Ab3dE6gH")

        assert response.status_code == 302
        location = _location(response)
        assert location.path == "/receiver.html"
        signed = parse_qs(location.query)["file"][0]
        assert signed.startswith(f"https://blobs.test/media/{KEY}?ttl=")

    def test_signed_url_is_fully_encoded(self, relay_client, registry):
        registry.insert(LinkEntry.create("Ab3dE6gH", "media", KEY, int(time.time()) + 3600))

        location = relay_client.get("/r/Ab3dE6gH").headers["Location"]

        query = location.split("?", 1)[1]
        assert query.startswith("file=https%3A%2F%2Fblobs.test%2F")
        assert unquote(query[len("file="):]).startswith("https://blobs.test/")

    def test_unknown_slug(self, relay_client):
        response = relay_client.get("/r/zzzzzzzz")

        assert response.status_code == 302
        location = _location(response)
        assert location.path == "/expired.html"
        assert parse_qs(location.query) == {"reason": ["notfound"], "ttl": ["72"]}

    def test_expired_slug(self, relay_client, registry, fake_store):
        registry.insert(LinkEntry.create("Ab3dE6gH", "media", KEY, 1000))

        response = relay_client.get("/r/Ab3dE6gH")

        assert parse_qs(_location(response).query)["reason"] == ["expired"]
        assert registry.get("Ab3dE6gH") is None
        assert not fake_store.exists("media", KEY)

    def test_legacy_token(self, relay_client, secret):
        token = IdentifierCodec(secret).issue_token(TokenPayload("media", KEY, int(time.time()) + 600))

        response = relay_client.get(f"/r/{token}")

        assert _location(response).path == "/receiver.html"

    def test_expired_legacy_token(self, relay_client, secret):
        token = IdentifierCodec(secret).issue_token(TokenPayload("media", KEY, 1000))

        response = relay_client.get(f"/r/{token}")

        assert parse_qs(_location(response).query)["reason"] == ["expired"]

    def test_configured_pages(self, relay_env, monkeypatch, registry, fake_store):
        monkeypatch.setenv("VIEWER_PATH", "/view")
        monkeypatch.setenv("EXPIRED_PATH", "/gone")
        monkeypatch.setenv("LINK_TTL_HOURS", "24")
        client = create_app(blob_store=fake_store, link_registry=registry).test_client()

        response = client.get("/r/zzzzzzzz")

        location = _location(response)
        assert location.path == "/gone"
        assert parse_qs(location.query)["ttl"] == ["24"]


class TestStorageOutage:
    def test_gcs_deadline_still_redirects(self, relay_config, registry):
        from google.api_core.exceptions import RetryError

        from mediarelay.infrastructure.gcs_blob_store import GCSBlobStore

        gcs_client = MagicMock()
        gcs_client.bucket.return_value.blob.return_value.exists.side_effect = RetryError("deadline", None)
        client = create_app(
            relay_config, blob_store=GCSBlobStore(gcs_client), link_registry=registry
        ).test_client()
        registry.insert(LinkEntry.create("Ab3dE6gH", "media", KEY, int(time.time()) + 3600))

        response = client.get("/r/Ab3dE6gH")

        assert response.status_code == 302
        assert parse_qs(_location(response).query)["reason"] == ["notfound"]


class TestResolverClock:
    def test_expiry_uses_resolver_clock(self, relay_config, registry, fake_store, secret):
        from mediarelay.domain.links.services import LinkResolver

        clock = FakeClock(now=5000)
        app = create_app(relay_config, blob_store=fake_store, link_registry=registry)
        app.container.override(
            LinkResolver, LinkResolver(IdentifierCodec(secret), registry, fake_store, clock=clock)
        )
        registry.insert(LinkEntry.create("Ab3dE6gH", "media", KEY, 5001))
        client = app.test_client()

        assert _location(client.get("/r/Ab3dE6gH")).path == "/receiver.html"
        clock.advance(1)
        assert parse_qs(_location(client.get("/r/Ab3dE6gH")).query)["reason"] == ["expired"]


class TestSystemRoutes:
    def test_healthz(self, client):
        response = client.get("/healthz")

        assert response.status_code == 200
        body = response.get_json()
        assert body["ok"] is True
        assert body["time"].endswith("Z")

    def test_unmatched_route_serves_expired_page(self, client):
        response = client.get("/no/such/page")

        assert response.status_code == 404
        assert b"no longer available" in response.data

    @pytest.mark.parametrize("method,path", [
        ("post", "/nope"),
        ("delete", "/no/such/page"),
        ("put", "/receiver.html"),
        ("post", "/r/Ab3dE6gH"),
        ("get", "/upload"),
    ])
    def test_unmatched_method_serves_expired_page(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 404
        assert b"no longer available" in response.data

    def test_static_pages_are_served(self, client):
        assert client.get("/receiver.html").status_code == 200
        assert client.get("/expired.html").status_code == 200

    def test_cors_header(self, client):
        response = client.get("/healthz", headers={"Origin": "https://sender.example"})

        assert response.headers["Access-Control-Allow-Origin"] == "*"
