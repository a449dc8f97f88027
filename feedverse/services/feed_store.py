"""Durable storage for the feed registry collection.

Every store reads and writes the whole ordered collection at once; there is no
append log. ``FeedRegistry`` serializes calls into a store.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from feedverse.core.logging import get_logger
from feedverse.core.settings import Settings, get_settings
from feedverse.models.feed import Feed, FeedsDocument, utc_now
from feedverse.models.schema import FeedRow

logger = get_logger(__name__)


class FeedStoreError(Exception):
    """Reading or writing the feed collection failed."""


class FeedStore(Protocol):
    def load(self) -> list[Feed]: ...

    def save(self, feeds: list[Feed]) -> None: ...


class InMemoryFeedStore:
    """Volatile store, mostly for tests and dry runs."""

    def __init__(self, feeds: list[Feed] | None = None):
        self._feeds = [feed.model_copy() for feed in feeds or []]
        self.save_count = 0

    def load(self) -> list[Feed]:
        return [feed.model_copy() for feed in self._feeds]

    def save(self, feeds: list[Feed]) -> None:
        self._feeds = [feed.model_copy() for feed in feeds]
        self.save_count += 1


class JsonFeedStore:
    """``{"feeds": [...], "lastUpdated": ..., "version": 1}`` in a single JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def load(self) -> list[Feed]:
        if not self.path.exists():
            logger.info("Feed store %s does not exist yet, starting empty", self.path)
            return []
        try:
            document = FeedsDocument.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise FeedStoreError(f"Failed to load feeds from {self.path}: {e}") from e
        return document.feeds

    def save(self, feeds: list[Feed]) -> None:
        document = FeedsDocument(feeds=feeds, last_updated=utc_now())
        payload = document.model_dump_json(by_alias=True, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write next to the target and rename so readers never see a torn file
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".feeds-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise FeedStoreError(f"Failed to write feeds to {self.path}: {e}") from e


class SqlFeedStore:
    """Feeds table; ``save`` replaces all rows inside one transaction."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def load(self) -> list[Feed]:
        session = self.session_factory()
        try:
            rows = session.query(FeedRow).order_by(FeedRow.position).all()
            return [row.to_feed() for row in rows]
        except SQLAlchemyError as e:
            raise FeedStoreError(f"Failed to load feeds: {e}") from e
        finally:
            session.close()

    def save(self, feeds: list[Feed]) -> None:
        session = self.session_factory()
        try:
            session.query(FeedRow).delete()
            session.add_all(FeedRow.from_feed(feed, position) for position, feed in enumerate(feeds))
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise FeedStoreError(f"Failed to write feeds: {e}") from e
        finally:
            session.close()


def build_feed_store(settings: Settings | None = None) -> FeedStore:
    """Pick the store backend named by ``settings.feed_store``."""
    settings = settings or get_settings()
    if settings.feed_store == "sql":
        from feedverse.core.db import get_session_factory

        return SqlFeedStore(get_session_factory())
    return JsonFeedStore(settings.feeds_path)
