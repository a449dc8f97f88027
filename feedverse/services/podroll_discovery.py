"""Podroll discovery: breadth-first crawl of podroll recommendations."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from feedverse.core.logging import get_logger
from feedverse.core.settings import get_settings
from feedverse.models.album import AlbumData
from feedverse.models.discovery import (
    DiscoveredFeedRecord,
    DiscoveryOptions,
    DiscoveryResult,
    DiscoveryStats,
    SeedDiscoveryResult,
)
from feedverse.models.feed import FeedKind, FeedSource
from feedverse.services.feed_parser import AlbumFeedParser
from feedverse.services.feed_registry import FeedRegistry
from feedverse.utils.error_logger import log_feed_error
from feedverse.utils.url_utils import is_http_url, normalize_feed_url

logger = get_logger(__name__)

PARSE_FAILED_ERROR = "Failed to parse feed"


class InvalidFeedUrlError(ValueError):
    """The seed URL of a crawl is not an http(s) URL."""


@dataclass(frozen=True)
class _QueueItem:
    url: str
    depth: int
    discovered_from: str


def _source_for_depth(depth: int) -> FeedSource:
    return FeedSource.PODROLL if depth == 1 else FeedSource.RECURSIVE


def _error_message(error: Exception) -> str:
    return str(error) or type(error).__name__


class PodrollDiscovery:
    """Crawl podroll links from a seed feed and optionally register new feeds.

    The crawl is one sequential task: each URL is parsed and fully handled
    before the next is dequeued. Parser timeouts are the only bound on a
    single step.
    """

    def __init__(
        self,
        registry: FeedRegistry,
        parser: AlbumFeedParser,
        *,
        excluded_urls: list[str] | None = None,
    ):
        self.registry = registry
        self.parser = parser
        if excluded_urls is None:
            excluded_urls = get_settings().podroll_excluded_urls
        self.excluded_urls = {normalize_feed_url(url) for url in excluded_urls}

    async def discover(
        self, seed_url: str, options: DiscoveryOptions | None = None
    ) -> DiscoveryResult:
        """Run one crawl from ``seed_url``.

        Raises:
            InvalidFeedUrlError: when the seed is not an http(s) URL. Nothing
                after the seed check raises; per-feed failures become records.
        """
        options = options or DiscoveryOptions()
        seed_url = (seed_url or "").strip()
        if not is_http_url(seed_url):
            raise InvalidFeedUrlError(f"Invalid seed URL: {seed_url!r}")

        # alreadyExists is judged against this snapshot for the whole crawl,
        # including feeds that auto-add commits afterwards
        existing_urls = self.registry.normalized_urls()

        logger.info(
            "Starting podroll discovery",
            extra={
                "component": "podroll_discovery",
                "operation": "start",
                "context_data": {
                    "seed_url": seed_url,
                    "recursive": options.recursive,
                    "max_depth": options.max_depth,
                    "auto_add": options.auto_add,
                },
            },
        )

        discovered = await self._crawl(seed_url, options, existing_urls)
        added = self._commit_new_feeds(discovered, options) if options.auto_add else []

        stats = DiscoveryStats(
            total=len(discovered),
            new=sum(1 for record in discovered if record.is_new),
            existing=sum(1 for record in discovered if record.already_exists),
            errors=sum(1 for record in discovered if record.error),
            added=len(added),
        )
        logger.info(
            "Podroll discovery finished: %d feeds, %d new, %d errors, %d added",
            stats.total,
            stats.new,
            stats.errors,
            stats.added,
            extra={
                "component": "podroll_discovery",
                "operation": "complete",
                "context_data": {"seed_url": seed_url, **stats.model_dump()},
            },
        )
        return DiscoveryResult(discovered=discovered, stats=stats, added=added)

    async def discover_all(
        self, options: DiscoveryOptions | None = None
    ) -> list[SeedDiscoveryResult]:
        """Crawl from every registered feed in turn.

        A seed whose crawl fails is reported with ``stats.errors == 1`` and an
        ``error`` message; the remaining seeds still run.
        """
        feeds = self.registry.get_all()
        logger.info(
            "Starting bulk podroll discovery for %d feeds",
            len(feeds),
            extra={"component": "podroll_discovery", "operation": "discover_all"},
        )

        results: list[SeedDiscoveryResult] = []
        for feed in feeds:
            try:
                result = await self.discover(feed.original_url, options)
            except Exception as e:
                log_feed_error(
                    "podroll_discovery",
                    feed.original_url,
                    e,
                    feed_id=feed.id,
                    operation="discover_all",
                )
                results.append(
                    SeedDiscoveryResult(
                        feed_url=feed.original_url,
                        feed_title=feed.title,
                        stats=DiscoveryStats(errors=1),
                        error=_error_message(e),
                    )
                )
                continue
            results.append(
                SeedDiscoveryResult(
                    feed_url=feed.original_url,
                    feed_title=feed.title,
                    discovered=result.discovered,
                    stats=result.stats,
                    added=result.added,
                )
            )
        return results

    async def _crawl(
        self,
        seed_url: str,
        options: DiscoveryOptions,
        existing_urls: set[str],
    ) -> list[DiscoveredFeedRecord]:
        discovered: list[DiscoveredFeedRecord] = []
        visited: set[str] = set()
        queue: deque[_QueueItem] = deque([_QueueItem(seed_url, 0, seed_url)])

        while queue:
            item = queue.popleft()
            normalized = normalize_feed_url(item.url)
            if normalized in visited:
                continue
            visited.add(normalized)

            logger.debug("Discovering feed %s (depth %d)", item.url, item.depth)
            album, error = await self._parse(item)
            record = self._build_record(item, album, error, normalized in existing_urls)
            discovered.append(record)

            if album is None or not options.recursive or item.depth >= options.max_depth:
                continue

            # Everything found below the seed is attributed to the seed, not the full path
            child_from = seed_url if item.depth == 0 else item.discovered_from
            for entry in album.podroll:
                child = normalize_feed_url(entry.url)
                if not entry.url or child in visited or child in self.excluded_urls:
                    continue
                queue.append(_QueueItem(entry.url, item.depth + 1, child_from))

        return discovered

    async def _parse(self, item: _QueueItem) -> tuple[AlbumData | None, str | None]:
        try:
            album = await self.parser.parse_album_feed(item.url)
        except Exception as e:
            log_feed_error(
                "podroll_discovery",
                item.url,
                e,
                depth=item.depth,
                operation="parse_feed",
            )
            return None, _error_message(e)
        if album is None:
            return None, PARSE_FAILED_ERROR
        return album, None

    @staticmethod
    def _build_record(
        item: _QueueItem,
        album: AlbumData | None,
        error: str | None,
        already_exists: bool,
    ) -> DiscoveredFeedRecord:
        if album is None:
            return DiscoveredFeedRecord(
                url=item.url,
                has_album=False,
                already_exists=already_exists,
                source=_source_for_depth(item.depth),
                discovered_from=item.discovered_from,
                error=error,
            )
        return DiscoveredFeedRecord(
            url=item.url,
            title=album.title or "Unknown",
            artist=album.artist or "Unknown",
            has_album=True,
            track_count=len(album.tracks),
            podroll_count=len(album.podroll),
            already_exists=already_exists,
            source=_source_for_depth(item.depth),
            discovered_from=item.discovered_from,
        )

    def _commit_new_feeds(
        self, discovered: list[DiscoveredFeedRecord], options: DiscoveryOptions
    ) -> list[str]:
        added: list[str] = []
        for record in discovered:
            if not record.is_new:
                continue
            result = self.registry.add(
                record.url,
                FeedKind.ALBUM,
                f"{record.title} by {record.artist}",
                priority=options.priority,
                source=record.source,
                discovered_from=record.discovered_from,
            )
            if result.success:
                added.append(record.url)
                logger.info("Added discovered feed %s by %s", record.title, record.artist)
            else:
                logger.warning(
                    "Failed to add discovered feed %s: %s",
                    record.url,
                    result.error,
                    extra={"component": "podroll_discovery", "operation": "auto_add"},
                )
        return added


async def discover_podroll_feeds(
    seed_url: str,
    registry: FeedRegistry,
    parser: AlbumFeedParser,
    options: DiscoveryOptions | None = None,
) -> DiscoveryResult:
    """Convenience wrapper around ``PodrollDiscovery.discover``."""
    return await PodrollDiscovery(registry, parser).discover(seed_url, options)
