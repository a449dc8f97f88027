"""Album data produced by the feed parser."""

from __future__ import annotations

from pydantic import Field

from feedverse.models.feed import CamelModel


class Track(CamelModel):
    title: str
    duration: str | None = None
    url: str | None = None
    track_number: int | None = None
    image: str | None = None


class PodrollItem(CamelModel):
    """One recommended feed from a ``podcast:podroll`` block."""

    url: str
    title: str | None = None
    description: str | None = None
    feed_guid: str | None = None


class PublisherRef(CamelModel):
    """``podcast:remoteItem`` with ``medium="publisher"``."""

    feed_guid: str
    feed_url: str
    medium: str = "publisher"


class Funding(CamelModel):
    url: str
    message: str | None = None


class AlbumData(CamelModel):
    """Structured album view of a Podcasting-2.0 music feed."""

    title: str
    artist: str = ""
    description: str | None = None
    cover_art: str | None = None
    release_date: str | None = None
    feed_guid: str | None = None
    feed_url: str | None = None
    tracks: list[Track] = Field(default_factory=list)
    podroll: list[PodrollItem] = Field(default_factory=list)
    funding: list[Funding] = Field(default_factory=list)
    publisher: PublisherRef | None = None
