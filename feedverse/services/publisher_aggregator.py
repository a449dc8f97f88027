"""Group albums into publisher records by their declared publisher feedGuid."""

from __future__ import annotations

from collections.abc import Iterable

from feedverse.core.logging import get_logger
from feedverse.models.album import AlbumData
from feedverse.models.feed import FeedKind, FeedStatus
from feedverse.models.publisher import LatestAlbum, Publisher
from feedverse.services.feed_parser import AlbumFeedParser
from feedverse.services.feed_registry import FeedRegistry
from feedverse.utils.error_logger import log_feed_error
from feedverse.utils.slug_utils import slugify

logger = get_logger(__name__)


def aggregate_publishers(albums: Iterable[AlbumData]) -> list[Publisher]:
    """Build publisher records in one pass over ``albums``.

    ``latestAlbum`` is the last album seen for a publisher in input order,
    not the most recent release date. The result is sorted by album count,
    largest first; ties keep first-seen order.
    """
    publishers: dict[str, Publisher] = {}

    for album in albums:
        ref = album.publisher
        if ref is None:
            continue

        latest = LatestAlbum(
            title=album.title,
            cover_art=album.cover_art,
            release_date=album.release_date,
        )
        publisher = publishers.get(ref.feed_guid)
        if publisher is None:
            publisher = Publisher(
                feed_guid=ref.feed_guid,
                feed_url=ref.feed_url,
                medium=ref.medium,
                name=album.artist,
                first_album_cover=album.cover_art,
            )
            publishers[ref.feed_guid] = publisher

        publisher.album_count += 1
        publisher.albums.append(album.title)
        publisher.latest_album = latest

    return sorted(publishers.values(), key=lambda p: p.album_count, reverse=True)


def find_publisher(publishers: Iterable[Publisher], key: str) -> Publisher | None:
    """Look a publisher up by feedGuid, or by the slug of its name."""
    wanted = key.strip().lower()
    for publisher in publishers:
        if publisher.feed_guid.lower() == wanted:
            return publisher
        if publisher.name and slugify(publisher.name) == wanted:
            return publisher
    return None


async def collect_registry_albums(
    registry: FeedRegistry, parser: AlbumFeedParser
) -> list[AlbumData]:
    """Parse every active album feed, in registry order, skipping failures."""
    albums: list[AlbumData] = []
    for feed in registry.get_all(status=FeedStatus.ACTIVE, kind=FeedKind.ALBUM):
        try:
            album = await parser.parse_album_feed(feed.original_url)
        except Exception as e:
            log_feed_error(
                "publisher_aggregator",
                feed.original_url,
                e,
                feed_id=feed.id,
                operation="collect_albums",
            )
            continue
        if album is not None:
            albums.append(album)

    logger.debug("Collected %d albums for publisher aggregation", len(albums))
    return albums
