"""
Shared pytest fixtures and configuration for the mediarelay test suite.

This module provides:
- Environment defaults so importing the app never needs Redis or GCS
- Hypothesis configuration for property-based testing
- Shared fixtures for the codec, registries, blob stores and Flask app
"""

import os
import tempfile

# Must run before celery_app (imported by task modules) builds the app
os.environ.setdefault("LINK_SECRET", "test-link-secret")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("LOCAL_STORAGE_DIR", tempfile.mkdtemp(prefix="mediarelay-tests-"))
os.environ.setdefault("REGISTRY_BACKEND", "memory")

import pytest
from hypothesis import HealthCheck, Phase, settings

from mediarelay.config.settings import RelayConfig
from mediarelay.domain.links.identifier_codec import IdentifierCodec
from mediarelay.infrastructure.memory_link_registry import MemoryLinkRegistry
from tests.fixtures.mock_repositories import FakeBlobStore, FakeClock

# Register Hypothesis profiles
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)
settings.register_profile(
    "ci",
    max_examples=300,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

TEST_SECRET = "test-link-secret"
TEST_BUCKET = "media"


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
def secret() -> str:
    return TEST_SECRET


@pytest.fixture
def codec() -> IdentifierCodec:
    return IdentifierCodec(TEST_SECRET)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> MemoryLinkRegistry:
    return MemoryLinkRegistry()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def relay_env(tmp_path, monkeypatch):
    """Environment for an app with local storage and the memory registry."""
    env = {
        "LINK_SECRET": TEST_SECRET,
        "STORAGE_BACKEND": "local",
        "LOCAL_STORAGE_DIR": str(tmp_path / "blobs"),
        "STORAGE_BUCKET": TEST_BUCKET,
        "REGISTRY_BACKEND": "memory",
        "PUBLIC_BASE_URL": "https://relay.example",
        "LINK_TTL_HOURS": "72",
        "MAX_UPLOAD_MB": "26",
    }
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    return env


@pytest.fixture
def relay_config(relay_env) -> RelayConfig:
    return RelayConfig()


@pytest.fixture
def app(relay_config):
    from app_factory import create_app

    flask_app = create_app(relay_config)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Markers
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    - tests/unit/* -> @pytest.mark.unit
    - tests/integration/* -> @pytest.mark.integration
    - tests/e2e/* -> @pytest.mark.e2e
    - tests/property/* -> @pytest.mark.property
    """
    for item in items:
        test_path = str(item.fspath).replace("\\", "/")

        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)
        elif "/property/" in test_path:
            item.add_marker(pytest.mark.property)
