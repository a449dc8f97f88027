"""Test configuration and fixtures."""

import os
import sys
import tempfile

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Keep log files and the default JSON store out of the working tree
_TEST_ROOT = tempfile.mkdtemp(prefix="feedverse-tests-")
os.environ.setdefault("LOGS_DIR", os.path.join(_TEST_ROOT, "logs"))
os.environ.setdefault("FEEDS_PATH", os.path.join(_TEST_ROOT, "feeds.json"))
os.environ.setdefault("FEED_STORE", "json")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from feedverse.services.feed_registry import FeedRegistry  # noqa: E402
from feedverse.services.feed_store import InMemoryFeedStore  # noqa: E402
from tests._feed_helpers import FakeAlbumParser  # noqa: E402


@pytest.fixture
def feed_store():
    return InMemoryFeedStore()


@pytest.fixture
def registry(feed_store):
    return FeedRegistry(feed_store)


@pytest.fixture
def fake_parser():
    """Empty parser; tests fill ``fake_parser.results``."""
    return FakeAlbumParser({})


@pytest.fixture
def client(registry, fake_parser):
    """Test client wired to the in-memory registry and the fake parser."""
    from feedverse.core.deps import get_album_parser, get_feed_registry
    from feedverse.main import app

    app.dependency_overrides[get_feed_registry] = lambda: registry
    app.dependency_overrides[get_album_parser] = lambda: fake_parser

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
