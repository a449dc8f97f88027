"""Album and publisher lookup endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from feedverse.core.deps import get_album_parser, get_feed_registry
from feedverse.core.logging import get_logger
from feedverse.models.feed import utc_now
from feedverse.models.publisher import Publisher
from feedverse.routers.api.models import AlbumResponse, PublishersResponse
from feedverse.services.album_resolver import AlbumResolver
from feedverse.services.feed_parser import AlbumFeedParser
from feedverse.services.feed_registry import FeedRegistry
from feedverse.services.feed_store import FeedStoreError
from feedverse.services.publisher_aggregator import (
    aggregate_publishers,
    collect_registry_albums,
    find_publisher,
)

logger = get_logger(__name__)

router = APIRouter(tags=["albums"])

ALBUM_CACHE_CONTROL = "public, max-age=3600, stale-while-revalidate=86400"
REGISTRY_READ_ERROR = "Failed to fetch feeds"


def _registry_unavailable(exc: FeedStoreError, operation: str) -> HTTPException:
    logger.exception(
        "Failed to read registry",
        extra={"component": "albums_api", "operation": operation},
    )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=REGISTRY_READ_ERROR
    )


@router.get("/album/{external_id}", response_model=AlbumResponse)
async def get_album(
    external_id: str,
    response: Response,
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
    parser: Annotated[AlbumFeedParser, Depends(get_album_parser)],
) -> AlbumResponse:
    """Resolve an album by feed id, title or slug."""
    resolver = AlbumResolver(registry, parser)
    try:
        resolved = await resolver.resolve(external_id)
    except FeedStoreError as exc:
        raise _registry_unavailable(exc, "get_album") from exc
    if resolved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Album not found")

    try:
        album = await resolver.load_album(resolved)
    except Exception as exc:
        logger.exception(
            "Failed to load album data",
            extra={
                "component": "albums_api",
                "operation": "get_album",
                "item_id": resolved.feed.id,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch album"
        ) from exc
    if album is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Album not found")

    response.headers["Cache-Control"] = ALBUM_CACHE_CONTROL
    return AlbumResponse(album=album, feed=resolved.feed, match=resolved.match, timestamp=utc_now())


async def _publishers(
    registry: FeedRegistry, parser: AlbumFeedParser, operation: str
) -> list[Publisher]:
    try:
        albums = await collect_registry_albums(registry, parser)
    except FeedStoreError as exc:
        raise _registry_unavailable(exc, operation) from exc
    return aggregate_publishers(albums)


@router.get("/publishers", response_model=PublishersResponse)
async def list_publishers(
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
    parser: Annotated[AlbumFeedParser, Depends(get_album_parser)],
) -> PublishersResponse:
    """Publishers declared by registered albums, most albums first."""
    publishers = await _publishers(registry, parser, "list_publishers")
    return PublishersResponse(
        publishers=publishers,
        total_publishers=len(publishers),
        last_updated=utc_now(),
    )


@router.get("/publisher/{key}", response_model=Publisher)
async def get_publisher(
    key: str,
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
    parser: Annotated[AlbumFeedParser, Depends(get_album_parser)],
) -> Publisher:
    """One publisher, by feedGuid or name slug."""
    publisher = find_publisher(await _publishers(registry, parser, "get_publisher"), key)
    if publisher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Publisher not found")
    return publisher
