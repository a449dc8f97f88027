"""Feed registry admin endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from feedverse.core.deps import get_album_parser, get_feed_registry
from feedverse.core.logging import get_logger
from feedverse.core.settings import get_settings
from feedverse.models.discovery import DiscoveryOptions
from feedverse.models.feed import FeedKind, FeedPriority, FeedSource, FeedUpdate
from feedverse.routers.api.models import (
    AddFeedRequest,
    AddFeedResponse,
    FeedListResponse,
    FeedResponse,
    UpdateFeedRequest,
)
from feedverse.services.feed_parser import AlbumFeedParser
from feedverse.services.feed_registry import FEED_NOT_FOUND_ERROR, FeedRegistry
from feedverse.services.feed_store import FeedStoreError
from feedverse.services.podroll_discovery import PodrollDiscovery
from feedverse.utils.url_utils import is_http_url

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/feeds", tags=["feeds"])


def _raise_for_failure(error: str | None) -> None:
    code = status.HTTP_404_NOT_FOUND if error == FEED_NOT_FOUND_ERROR else status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=error or "Registry update failed")


@router.get("", response_model=FeedListResponse)
async def list_feeds(
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
) -> FeedListResponse:
    """List every registered feed in registry order."""
    try:
        feeds = registry.get_all()
    except FeedStoreError as exc:
        logger.exception("Failed to read registry", extra={"component": "feeds_api"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch feeds"
        ) from exc
    return FeedListResponse(feeds=feeds, count=len(feeds))


@router.post("", response_model=AddFeedResponse)
async def add_feed(
    payload: AddFeedRequest,
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
    parser: Annotated[AlbumFeedParser, Depends(get_album_parser)],
) -> AddFeedResponse:
    """Register a feed by hand, then crawl its podroll for album feeds."""
    if not payload.url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required")
    if not is_http_url(payload.url):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid URL format")
    try:
        kind = FeedKind(payload.type)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Type must be "album" or "publisher"',
        ) from exc

    result = registry.add(
        payload.url,
        kind,
        payload.title,
        priority=FeedPriority.CORE,
        source=FeedSource.MANUAL,
    )
    if not result.success or result.feed is None:
        _raise_for_failure(result.error)

    response = AddFeedResponse(feed=result.feed, message="Feed added successfully")
    if payload.discover_podroll and kind == FeedKind.ALBUM:
        settings = get_settings()
        options = DiscoveryOptions(
            recursive=True,
            max_depth=settings.discovery_max_depth,
            auto_add=True,
            priority=FeedPriority(settings.discovery_default_priority),
        )
        try:
            discovery = await PodrollDiscovery(registry, parser).discover(payload.url, options)
        except Exception:
            # The feed itself is registered; a failed crawl does not undo that
            logger.exception(
                "Podroll discovery failed after manual add",
                extra={
                    "component": "feeds_api",
                    "operation": "add_feed_discovery",
                    "item_id": result.feed.id,
                },
            )
        else:
            response.podroll_discovery = discovery.stats
            response.message += f". Discovered {discovery.stats.added} additional podroll feeds."

    return response


@router.patch("/{feed_id}", response_model=FeedResponse)
async def update_feed(
    feed_id: str,
    payload: UpdateFeedRequest,
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
) -> FeedResponse:
    """Change a feed's title, priority or status."""
    result = registry.update(feed_id, FeedUpdate(**payload.model_dump()))
    if not result.success or result.feed is None:
        _raise_for_failure(result.error)
    return FeedResponse(feed=result.feed)


@router.delete("/{feed_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feed(
    feed_id: str,
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
) -> None:
    result = registry.remove(feed_id)
    if not result.success:
        _raise_for_failure(result.error)
