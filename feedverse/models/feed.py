"""Registry models: feeds, their classification enums and mutation results."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class FeedKind(str, Enum):
    ALBUM = "album"
    PUBLISHER = "publisher"


class FeedPriority(str, Enum):
    CORE = "core"
    EXTENDED = "extended"
    LOW = "low"


class FeedStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class FeedSource(str, Enum):
    MANUAL = "manual"
    PODROLL = "podroll"
    RECURSIVE = "recursive"


# Consumers load core feeds first, then extended, then low
PRIORITY_ORDER = {FeedPriority.CORE: 0, FeedPriority.EXTENDED: 1, FeedPriority.LOW: 2}


def utc_now() -> datetime:
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )


class Feed(CamelModel):
    """A registered feed."""

    id: str
    original_url: str
    kind: FeedKind = Field(FeedKind.ALBUM, alias="type")
    title: str = ""
    priority: FeedPriority = FeedPriority.CORE
    status: FeedStatus = FeedStatus.ACTIVE
    added_at: datetime = Field(default_factory=utc_now)
    last_updated: datetime = Field(default_factory=utc_now)
    source: FeedSource = FeedSource.MANUAL
    discovered_from: str | None = None

    @field_validator("added_at", "last_updated")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v.replace(tzinfo=UTC) if v.tzinfo is None else v


class FeedUpdate(CamelModel):
    """Partial update applied by ``FeedRegistry.update``; ``None`` fields are left alone."""

    title: str | None = Field(None, max_length=500)
    priority: FeedPriority | None = None
    status: FeedStatus | None = None


class FeedsDocument(CamelModel):
    """On-disk layout of the JSON feed store."""

    feeds: list[Feed] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utc_now)
    version: int = 1


class RegistryResult(CamelModel):
    """Outcome of a registry mutation."""

    success: bool
    error: str | None = None
    feed: Feed | None = None

    @classmethod
    def ok(cls, feed: Feed | None = None) -> RegistryResult:
        return cls(success=True, feed=feed)

    @classmethod
    def failed(cls, error: str) -> RegistryResult:
        return cls(success=False, error=error)
