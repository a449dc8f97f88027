"""API routers organized by responsibility.

- feeds: registry administration (list, add, update, remove)
- discovery: podroll crawling and registry overview
- albums: album resolution and publisher views
"""

from fastapi import APIRouter

from feedverse.routers.api import albums, discovery, feeds

router = APIRouter(responses={404: {"description": "Not found"}})

router.include_router(feeds.router)
router.include_router(discovery.router)
router.include_router(albums.router)
