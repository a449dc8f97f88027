"""Podroll discovery endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from feedverse.core.deps import get_album_parser, get_feed_registry
from feedverse.core.logging import get_logger
from feedverse.models.discovery import DiscoveryOptions, DiscoveryResult
from feedverse.routers.api.models import (
    DiscoverPodrollRequest,
    RegistryOverviewResponse,
    RegistryStatsResponse,
)
from feedverse.services.feed_parser import AlbumFeedParser
from feedverse.services.feed_registry import FeedRegistry
from feedverse.services.feed_store import FeedStoreError
from feedverse.services.podroll_discovery import InvalidFeedUrlError, PodrollDiscovery

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/discover-podroll", tags=["discovery"])


@router.post("", response_model=DiscoveryResult, summary="Crawl a feed's podroll")
async def discover_podroll(
    payload: DiscoverPodrollRequest,
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
    parser: Annotated[AlbumFeedParser, Depends(get_album_parser)],
) -> DiscoveryResult:
    if not payload.url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required")

    options = DiscoveryOptions(
        recursive=payload.recursive,
        max_depth=payload.depth,
        auto_add=payload.auto_add,
    )
    try:
        return await PodrollDiscovery(registry, parser).discover(payload.url, options)
    except InvalidFeedUrlError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(
            "Podroll discovery failed",
            extra={
                "component": "discovery_api",
                "operation": "discover_podroll",
                "context_data": {"url": payload.url},
            },
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to discover podroll feeds",
        ) from exc


@router.get("", response_model=RegistryOverviewResponse, summary="Registry overview")
async def get_discovery_status(
    registry: Annotated[FeedRegistry, Depends(get_feed_registry)],
) -> RegistryOverviewResponse:
    try:
        feeds = registry.get_all()
        stats = RegistryStatsResponse.model_validate(registry.stats())
    except FeedStoreError as exc:
        logger.exception("Failed to read registry", extra={"component": "discovery_api"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch feeds"
        ) from exc
    return RegistryOverviewResponse(feeds=feeds, stats=stats)
