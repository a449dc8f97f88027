"""Podcasting-2.0 album feed parser.

``feedparser`` handles the RSS channel and items; the ``podcast:`` namespace
tags it does not model (podroll, publisher remote items, funding, guid) are
read with BeautifulSoup. ``html.parser`` lower-cases tag and attribute names,
so ``podcast:remoteItem feedGuid=...`` is looked up as
``podcast:remoteitem`` / ``feedguid``.
"""

from __future__ import annotations

from typing import Protocol

import feedparser
from bs4 import BeautifulSoup, Tag

from feedverse.core.logging import get_logger
from feedverse.models.album import AlbumData, Funding, PodrollItem, PublisherRef, Track
from feedverse.services.http import HttpService, get_http_service

logger = get_logger(__name__)


class FeedParseError(Exception):
    """The document at a feed URL could not be read as an RSS feed."""


class AlbumFeedParser(Protocol):
    """Anything that turns a feed URL into album data.

    ``None`` means the URL was fetched but holds no album; failures raise.
    """

    async def parse_album_feed(self, url: str) -> AlbumData | None: ...


def _text(tag: Tag | None) -> str | None:
    if tag is None:
        return None
    value = tag.get_text(strip=True)
    return value or None


def _find_all(scope: Tag, *names: str) -> list[Tag]:
    found: list[Tag] = []
    for name in names:
        found.extend(scope.find_all(name))
    return found


def _parse_podroll(channel: Tag) -> list[PodrollItem]:
    podroll: list[PodrollItem] = []
    for block in _find_all(channel, "podcast:podroll", "podroll"):
        for remote in _find_all(block, "podcast:remoteitem", "remoteitem"):
            feed_url = remote.get("feedurl")
            if not feed_url:
                continue
            feed_guid = remote.get("feedguid")
            podroll.append(
                PodrollItem(
                    url=feed_url.strip(),
                    title=remote.get("title")
                    or (f"Feed {feed_guid[:8]}..." if feed_guid else None),
                    description=remote.get("description"),
                    feed_guid=feed_guid,
                )
            )
        # Legacy layout: <podroll url="..." title="...">
        direct_url = block.get("url")
        if direct_url:
            podroll.append(
                PodrollItem(
                    url=direct_url.strip(),
                    title=block.get("title") or _text(block),
                    description=block.get("description"),
                )
            )
    return podroll


def _publisher_from(remote: Tag | None) -> PublisherRef | None:
    if remote is None or remote.get("medium") != "publisher":
        return None
    feed_guid = remote.get("feedguid")
    feed_url = remote.get("feedurl")
    if not feed_guid or not feed_url:
        return None
    return PublisherRef(feed_guid=feed_guid, feed_url=feed_url, medium="publisher")


def _parse_publisher(channel: Tag) -> PublisherRef | None:
    block = channel.find("podcast:publisher")
    if block is not None:
        return _publisher_from(block.find("podcast:remoteitem"))

    for remote in channel.find_all("podcast:remoteitem"):
        if remote.get("medium") == "publisher":
            return _publisher_from(remote)
    return None


def _parse_funding(channel: Tag) -> list[Funding]:
    funding = []
    for tag in _find_all(channel, "podcast:funding", "funding"):
        url = tag.get("url")
        if url:
            funding.append(Funding(url=url, message=_text(tag)))
    return funding


def _parse_tracks(parsed: feedparser.FeedParserDict, fallback_image: str | None) -> list[Track]:
    tracks = []
    for index, entry in enumerate(parsed.entries, start=1):
        enclosure = next(iter(entry.get("enclosures") or []), None)
        episode = entry.get("itunes_episode")
        image = entry.get("image", {}).get("href") if entry.get("image") else None
        tracks.append(
            Track(
                title=entry.get("title") or f"Track {index}",
                duration=entry.get("itunes_duration"),
                url=enclosure.get("href") if enclosure else None,
                track_number=int(episode) if str(episode or "").isdigit() else index,
                image=image or fallback_image,
            )
        )
    return tracks


def parse_album_xml(xml: str, feed_url: str | None = None) -> AlbumData | None:
    """Build ``AlbumData`` from a feed document.

    Returns None for a well-formed feed with neither a title nor items.

    Raises:
        FeedParseError: when the document is not an RSS/Atom feed at all.
    """
    parsed = feedparser.parse(xml)
    if parsed.bozo and not parsed.get("version") and not parsed.entries:
        raise FeedParseError(f"Not a valid feed: {parsed.get('bozo_exception')}")

    channel_info = parsed.feed
    title = channel_info.get("title")
    if not title and not parsed.entries:
        return None

    soup = BeautifulSoup(xml, "html.parser")
    channel = soup.find("channel") or soup

    image = channel_info.get("image", {}).get("href") if channel_info.get("image") else None
    release_date = channel_info.get("published") or channel_info.get("updated")
    if not release_date and parsed.entries:
        release_date = parsed.entries[0].get("published")

    return AlbumData(
        title=title or "Unknown",
        artist=channel_info.get("author") or channel_info.get("itunes_author") or "",
        description=channel_info.get("subtitle") or channel_info.get("summary"),
        cover_art=image,
        release_date=release_date,
        feed_guid=_text(channel.find("podcast:guid")),
        feed_url=feed_url,
        tracks=_parse_tracks(parsed, image),
        podroll=_parse_podroll(channel),
        funding=_parse_funding(channel),
        publisher=_parse_publisher(channel),
    )


class PodcastFeedParser:
    """Default ``AlbumFeedParser``: fetch over HTTP, then ``parse_album_xml``."""

    def __init__(self, http_service: HttpService | None = None):
        self.http_service = http_service or get_http_service()

    async def parse_album_feed(self, url: str) -> AlbumData | None:
        xml = await self.http_service.fetch_text(url)
        album = parse_album_xml(xml, feed_url=url)
        if album is None:
            logger.warning(
                "Feed has no album data",
                extra={
                    "component": "feed_parser",
                    "operation": "parse_album_feed",
                    "context_data": {"url": url},
                },
            )
        else:
            logger.debug(
                "Parsed album %r: %d tracks, %d podroll entries",
                album.title,
                len(album.tracks),
                len(album.podroll),
            )
        return album
