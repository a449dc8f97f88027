"""Pydantic models for podroll discovery."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from feedverse.models.feed import CamelModel, FeedPriority, FeedSource


class DiscoveryOptions(CamelModel):
    """Tuning for a single crawl."""

    recursive: bool = True
    max_depth: int = Field(2, ge=0, le=10)
    auto_add: bool = False
    priority: FeedPriority = FeedPriority.EXTENDED


class DiscoveredFeedRecord(CamelModel):
    """Report row for one distinct feed visited during a crawl."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = "Unknown"
    artist: str = "Unknown"
    has_album: bool = False
    track_count: int = 0
    podroll_count: int = 0
    already_exists: bool = False
    source: FeedSource
    discovered_from: str
    error: str | None = None

    @property
    def is_new(self) -> bool:
        return self.error is None and self.has_album and not self.already_exists


class DiscoveryStats(CamelModel):
    total: int = 0
    new: int = 0
    existing: int = 0
    errors: int = 0
    added: int = 0


class DiscoveryResult(CamelModel):
    discovered: list[DiscoveredFeedRecord] = Field(default_factory=list)
    stats: DiscoveryStats = Field(default_factory=DiscoveryStats)
    added: list[str] = Field(default_factory=list)


class SeedDiscoveryResult(DiscoveryResult):
    """One seed's crawl inside a bulk run; ``error`` is set when the crawl itself failed."""

    feed_url: str
    feed_title: str
    error: str | None = None
