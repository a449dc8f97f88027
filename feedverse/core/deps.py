"""FastAPI dependencies for the feed registry and the album feed parser."""

from functools import lru_cache

from feedverse.services.feed_parser import AlbumFeedParser, PodcastFeedParser
from feedverse.services.feed_registry import FeedRegistry
from feedverse.services.feed_store import build_feed_store


@lru_cache
def get_feed_registry() -> FeedRegistry:
    """Process-wide registry; every request shares its cache and lock."""
    return FeedRegistry(build_feed_store())


@lru_cache
def get_album_parser() -> AlbumFeedParser:
    return PodcastFeedParser()
