"""Resolve loose album identifiers (feed id, title, slug) to a registered feed."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import unquote

from feedverse.core.logging import get_logger
from feedverse.models.album import AlbumData
from feedverse.models.feed import Feed, FeedKind, FeedStatus
from feedverse.services.feed_parser import AlbumFeedParser
from feedverse.services.feed_registry import FeedRegistry
from feedverse.utils.error_logger import log_feed_error
from feedverse.utils.slug_utils import base_title, compat_slug, slugify

logger = get_logger(__name__)

MATCH_ID = "id"
MATCH_TITLE = "title"
MATCH_SLUG = "slug"
MATCH_COMPAT = "compat"
MATCH_BASE_TITLE = "base_title"


@dataclass
class ResolvedAlbum:
    feed: Feed
    match: str
    album: AlbumData | None = None


def match_album_title(title: str, external_id: str) -> str | None:
    """Return the first title rule that accepts ``external_id``, or None.

    Rules, in order: case-insensitive equality, slug equality, legacy
    "compat" slug, slug of the base title before a dash.
    """
    if not title:
        return None
    wanted = external_id.lower()
    if title.lower() == wanted:
        return MATCH_TITLE
    if slugify(title) == wanted:
        return MATCH_SLUG
    if compat_slug(title) == wanted:
        return MATCH_COMPAT
    if slugify(base_title(title)) == wanted:
        return MATCH_BASE_TITLE
    return None


class AlbumResolver:
    """First-match resolution over album feeds in registry order.

    Any album is reachable by its feed id; only active albums are scanned
    by title.

    Candidates are parsed one at a time so the winner does not depend on
    network timing and feed origins see at most one request per candidate.
    """

    def __init__(self, registry: FeedRegistry, parser: AlbumFeedParser):
        self.registry = registry
        self.parser = parser

    async def resolve(self, external_id: str) -> ResolvedAlbum | None:
        external_id = unquote(external_id or "").strip()
        if not external_id:
            return None

        albums = self.registry.get_all(kind=FeedKind.ALBUM)
        by_id = {feed.id: feed for feed in albums}
        direct = by_id.get(external_id)
        if direct is not None:
            logger.debug("Resolved %r by feed id", external_id)
            return ResolvedAlbum(feed=direct, match=MATCH_ID)

        # Only active albums take part in the title scan
        candidates = [feed for feed in albums if feed.status == FeedStatus.ACTIVE]
        failures = 0
        for feed in candidates:
            try:
                album = await self.parser.parse_album_feed(feed.original_url)
            except Exception as e:
                failures += 1
                log_feed_error(
                    "album_resolver",
                    feed.original_url,
                    e,
                    feed_id=feed.id,
                    operation="resolve_scan",
                )
                continue
            if album is None:
                continue

            match = match_album_title(album.title, external_id)
            if match:
                logger.info(
                    "Resolved %r to feed %s via %s match",
                    external_id,
                    feed.id,
                    match,
                    extra={
                        "component": "album_resolver",
                        "operation": "resolve",
                        "item_id": feed.id,
                        "context_data": {"external_id": external_id, "match": match},
                    },
                )
                return ResolvedAlbum(feed=feed, match=match, album=album)

        logger.info(
            "No album found for %r",
            external_id,
            extra={
                "component": "album_resolver",
                "operation": "resolve",
                "context_data": {
                    "external_id": external_id,
                    "candidates": len(candidates),
                    "parse_failures": failures,
                },
            },
        )
        return None

    async def load_album(self, resolved: ResolvedAlbum) -> AlbumData | None:
        """Album data for a resolution, parsing only if the scan did not already."""
        if resolved.album is None:
            resolved.album = await self.parser.parse_album_feed(resolved.feed.original_url)
        return resolved.album
