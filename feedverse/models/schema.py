from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from feedverse.core.db import Base
from feedverse.models.feed import (
    Feed,
    FeedKind,
    FeedPriority,
    FeedSource,
    FeedStatus,
    utc_now,
)


def _as_utc(value: datetime | None) -> datetime:
    # SQLite hands timezone-aware columns back naive
    if value is None:
        return utc_now()
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class FeedRow(Base):
    __tablename__ = "feeds"

    # Insertion order of the registry collection
    position = Column(Integer, primary_key=True, autoincrement=False)

    id = Column(String(255), nullable=False, unique=True)
    original_url = Column(Text, nullable=False, unique=True)
    type = Column(String(20), nullable=False, default=FeedKind.ALBUM.value)
    title = Column(String(500), nullable=False, default="")
    priority = Column(String(20), nullable=False, default=FeedPriority.CORE.value, index=True)
    status = Column(String(20), nullable=False, default=FeedStatus.ACTIVE.value, index=True)
    source = Column(String(20), nullable=True, default=FeedSource.MANUAL.value)
    discovered_from = Column(Text, nullable=True)

    added_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    last_updated = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (Index("idx_feeds_type_status", "type", "status"),)

    def to_feed(self) -> Feed:
        return Feed(
            id=self.id,
            original_url=self.original_url,
            kind=FeedKind(self.type),
            title=self.title or "",
            priority=FeedPriority(self.priority),
            status=FeedStatus(self.status),
            source=FeedSource(self.source or FeedSource.MANUAL.value),
            discovered_from=self.discovered_from,
            added_at=_as_utc(self.added_at),
            last_updated=_as_utc(self.last_updated),
        )

    @classmethod
    def from_feed(cls, feed: Feed, position: int) -> "FeedRow":
        return cls(
            position=position,
            id=feed.id,
            original_url=feed.original_url,
            type=feed.kind.value,
            title=feed.title,
            priority=feed.priority.value,
            status=feed.status.value,
            source=feed.source.value,
            discovered_from=feed.discovered_from,
            added_at=feed.added_at,
            last_updated=feed.last_updated,
        )
