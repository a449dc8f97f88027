"""Deduplicated registry of known feeds.

The whole collection is loaded lazily from a ``FeedStore``, cached, and
written back in full after every mutation. One re-entrant lock serializes
load, mutate and save, so concurrent callers (an admin request racing a
crawl's auto-add) interleave per call instead of overwriting each other's
collection. A sequence of calls is still not atomic as a group.
"""

from __future__ import annotations

import threading
from collections import Counter

from feedverse.core.logging import get_logger
from feedverse.models.feed import (
    PRIORITY_ORDER,
    Feed,
    FeedKind,
    FeedPriority,
    FeedSource,
    FeedStatus,
    FeedUpdate,
    RegistryResult,
    utc_now,
)
from feedverse.services.feed_store import FeedStore, FeedStoreError
from feedverse.utils.error_logger import log_error
from feedverse.utils.url_utils import derive_feed_id, hostname_of, is_http_url, normalize_feed_url

logger = get_logger(__name__)

FEED_EXISTS_ERROR = "Feed already exists"
FEED_NOT_FOUND_ERROR = "Feed not found"
INVALID_URL_ERROR = "Invalid URL format"


class FeedRegistry:
    def __init__(self, store: FeedStore):
        self.store = store
        self._lock = threading.RLock()
        self._feeds: list[Feed] | None = None

    # Loading and persistence

    def _current(self) -> list[Feed]:
        if self._feeds is None:
            self._feeds = self.store.load()
            logger.info(
                "Loaded %d feeds",
                len(self._feeds),
                extra={"component": "feed_registry", "operation": "load"},
            )
        return self._feeds

    def _commit(self, feeds: list[Feed], operation: str, feed_id: str) -> str | None:
        """Persist the full collection; the cache only moves forward on success."""
        try:
            self.store.save(feeds)
        except FeedStoreError as e:
            log_error("feed_registry", e, operation=operation, item_id=feed_id)
            return str(e)
        self._feeds = feeds
        return None

    def reload(self) -> None:
        """Drop the cached collection so the next call reads the store again."""
        with self._lock:
            self._feeds = None

    # Queries

    def get_all(
        self,
        *,
        status: FeedStatus | None = None,
        kind: FeedKind | None = None,
        priority: FeedPriority | None = None,
    ) -> list[Feed]:
        """Feeds in registry order, optionally filtered."""
        with self._lock:
            feeds = self._current()
            return [
                feed.model_copy()
                for feed in feeds
                if (status is None or feed.status == status)
                and (kind is None or feed.kind == kind)
                and (priority is None or feed.priority == priority)
            ]

    def get(self, feed_id: str) -> Feed | None:
        with self._lock:
            for feed in self._current():
                if feed.id == feed_id:
                    return feed.model_copy()
        return None

    def find_by_url(self, url: str) -> Feed | None:
        target = normalize_feed_url(url)
        with self._lock:
            for feed in self._current():
                if normalize_feed_url(feed.original_url) == target:
                    return feed.model_copy()
        return None

    def normalized_urls(self) -> set[str]:
        """Normalized URLs of every registered feed, active or not."""
        with self._lock:
            return {normalize_feed_url(feed.original_url) for feed in self._current()}

    def active_feeds(self) -> list[Feed]:
        """Active feeds in load order: core, extended, low, then oldest first."""
        feeds = self.get_all(status=FeedStatus.ACTIVE)
        return sorted(feeds, key=lambda feed: (PRIORITY_ORDER[feed.priority], feed.added_at))

    def album_feed_urls(self) -> list[str]:
        return [f.original_url for f in self.active_feeds() if f.kind == FeedKind.ALBUM]

    def publisher_feed_urls(self) -> list[str]:
        return [f.original_url for f in self.active_feeds() if f.kind == FeedKind.PUBLISHER]

    def feed_urls_by_priority(self, priority: FeedPriority) -> list[str]:
        return [f.original_url for f in self.active_feeds() if f.priority == priority]

    def feed_url_mappings(self) -> list[tuple[str, str]]:
        """``(url, type)`` pairs for every active feed."""
        return [(f.original_url, f.kind.value) for f in self.active_feeds()]

    def stats(self) -> dict:
        feeds = self.get_all()
        by_type = Counter(feed.kind.value for feed in feeds)
        by_priority = Counter(feed.priority.value for feed in feeds)
        return {
            "total": len(feeds),
            "byType": {kind.value: by_type.get(kind.value, 0) for kind in FeedKind},
            "byPriority": {p.value: by_priority.get(p.value, 0) for p in FeedPriority},
        }

    # Mutations

    def add(
        self,
        url: str,
        kind: FeedKind = FeedKind.ALBUM,
        title: str | None = None,
        *,
        priority: FeedPriority = FeedPriority.CORE,
        source: FeedSource = FeedSource.MANUAL,
        discovered_from: str | None = None,
        feed_id: str | None = None,
    ) -> RegistryResult:
        """Register a feed unless one with the same normalized URL exists."""
        url = (url or "").strip()
        if not is_http_url(url):
            return RegistryResult.failed(INVALID_URL_ERROR)

        normalized = normalize_feed_url(url)
        now = utc_now()
        feed = Feed(
            id=feed_id or derive_feed_id(normalized),
            original_url=url,
            kind=kind,
            title=title or f"Feed from {hostname_of(url)}",
            priority=priority,
            status=FeedStatus.ACTIVE,
            added_at=now,
            last_updated=now,
            source=source,
            discovered_from=discovered_from,
        )

        with self._lock:
            try:
                current = self._current()
            except FeedStoreError as e:
                log_error("feed_registry", e, operation="add", item_id=feed.id)
                return RegistryResult.failed(str(e))

            if any(normalize_feed_url(f.original_url) == normalized for f in current):
                return RegistryResult.failed(FEED_EXISTS_ERROR)

            error = self._commit([*current, feed], "add", feed.id)
            if error:
                return RegistryResult.failed(error)

        logger.info(
            "Added feed %s",
            feed.id,
            extra={
                "component": "feed_registry",
                "operation": "add",
                "item_id": feed.id,
                "context_data": {"url": url, "source": source.value, "priority": priority.value},
            },
        )
        return RegistryResult.ok(feed.model_copy())

    def update(self, feed_id: str, changes: FeedUpdate) -> RegistryResult:
        """Merge the non-null fields of ``changes`` and bump ``lastUpdated``."""
        with self._lock:
            try:
                current = self._current()
            except FeedStoreError as e:
                log_error("feed_registry", e, operation="update", item_id=feed_id)
                return RegistryResult.failed(str(e))

            index = next((i for i, f in enumerate(current) if f.id == feed_id), None)
            if index is None:
                return RegistryResult.failed(FEED_NOT_FOUND_ERROR)

            updated = current[index].model_copy(
                update={**changes.model_dump(exclude_none=True), "last_updated": utc_now()}
            )
            feeds = list(current)
            feeds[index] = updated
            error = self._commit(feeds, "update", feed_id)
            if error:
                return RegistryResult.failed(error)

        logger.info(
            "Updated feed %s",
            feed_id,
            extra={"component": "feed_registry", "operation": "update", "item_id": feed_id},
        )
        return RegistryResult.ok(updated.model_copy())

    def remove(self, feed_id: str) -> RegistryResult:
        with self._lock:
            try:
                current = self._current()
            except FeedStoreError as e:
                log_error("feed_registry", e, operation="remove", item_id=feed_id)
                return RegistryResult.failed(str(e))

            feeds = [f for f in current if f.id != feed_id]
            if len(feeds) == len(current):
                return RegistryResult.failed(FEED_NOT_FOUND_ERROR)

            error = self._commit(feeds, "remove", feed_id)
            if error:
                return RegistryResult.failed(error)

        logger.info(
            "Removed feed %s",
            feed_id,
            extra={"component": "feed_registry", "operation": "remove", "item_id": feed_id},
        )
        return RegistryResult.ok()
