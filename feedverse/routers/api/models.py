"""Request and response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from feedverse.models.album import AlbumData
from feedverse.models.discovery import DiscoveryStats
from feedverse.models.feed import CamelModel, Feed, FeedPriority, FeedStatus
from feedverse.models.publisher import Publisher


class DiscoverPodrollRequest(CamelModel):
    """``url`` is optional here so a missing URL maps to 400, not 422."""

    url: str | None = None
    recursive: bool = True
    depth: int = Field(2, ge=0, le=10)
    auto_add: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://wavlake.com/feed/music/abc123",
                "recursive": True,
                "depth": 2,
                "autoAdd": False,
            }
        }
    )


class RegistryStatsResponse(CamelModel):
    total: int
    by_type: dict[str, int]
    by_priority: dict[str, int]


class RegistryOverviewResponse(CamelModel):
    feeds: list[Feed]
    stats: RegistryStatsResponse


class AddFeedRequest(CamelModel):
    url: str | None = None
    type: str = "album"
    title: str | None = Field(None, max_length=500)
    discover_podroll: bool = True


class AddFeedResponse(CamelModel):
    success: bool = True
    feed: Feed
    message: str
    podroll_discovery: DiscoveryStats | None = None


class FeedListResponse(CamelModel):
    success: bool = True
    feeds: list[Feed]
    count: int


class UpdateFeedRequest(CamelModel):
    title: str | None = Field(None, max_length=500)
    priority: FeedPriority | None = None
    status: FeedStatus | None = None


class FeedResponse(CamelModel):
    success: bool = True
    feed: Feed


class AlbumResponse(CamelModel):
    album: AlbumData
    feed: Feed
    match: str
    timestamp: datetime


class PublishersResponse(CamelModel):
    publishers: list[Publisher]
    total_publishers: int
    last_updated: datetime
