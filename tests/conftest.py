"""
Global pytest configuration and fixtures for the ghbatch test suite.

This file provides:
1. Environment isolation for configuration tests
2. An in-memory object store seeded with a small repository
3. A mock for the aiohttp-based GitHub client
4. Automatic unit/integration markers based on test location
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from fixtures.object_store import BRANCH, SEED_FILES, InMemoryObjectStore

GITHUB_ENV_VARS = (
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "GITHUB_BRANCH",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "GITHUB_UPLOAD_URL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove GitHub variables so tests control the environment."""
    for name in GITHUB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch


@pytest.fixture
def store() -> InMemoryObjectStore:
    """Object store holding ``main`` with a few seeded files."""
    fake = InMemoryObjectStore()
    fake.seed(BRANCH, dict(SEED_FILES))
    fake.calls.clear()
    return fake


@pytest.fixture
def empty_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def mock_client() -> MagicMock:
    """Mock GitHubClient whose HTTP verbs are AsyncMocks."""
    client = MagicMock()
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.patch = AsyncMock()
    client.delete = AsyncMock()
    return client


def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Commit protocol tests against the in-memory store")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath).replace(os.sep, "/")
        if "tests/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in path:
            item.add_marker(pytest.mark.integration)
