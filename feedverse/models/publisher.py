from __future__ import annotations

from pydantic import Field

from feedverse.models.feed import CamelModel


class LatestAlbum(CamelModel):
    title: str
    cover_art: str | None = None
    release_date: str | None = None


class Publisher(CamelModel):
    """Albums grouped under one declared publisher ``feedGuid``."""

    feed_guid: str
    feed_url: str
    medium: str
    name: str = ""
    album_count: int = 0
    albums: list[str] = Field(default_factory=list)
    first_album_cover: str | None = None
    latest_album: LatestAlbum | None = None
