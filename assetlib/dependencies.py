"""
FastAPI dependency injection functions.
Provides common dependencies used across endpoints.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from assetlib.config import Settings, get_settings
from assetlib.db.session import get_db
from assetlib.services.cache import CacheBackend, MemoryCache
from assetlib.services.icon_resolver import IconResolver


@lru_cache
def get_icon_cache() -> CacheBackend:
    """Process-wide cache for inferred icon URLs."""
    return MemoryCache()


def get_icon_resolver(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> IconResolver:
    """
    Icon resolver sharing the application's HTTP client.
    The client is opened and closed by the application lifespan.
    """
    return IconResolver(
        cache=get_icon_cache(),
        client=request.app.state.http_client,
        ttl=settings.ICON_CACHE_TTL,
    )


# Type aliases for cleaner endpoint signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
IconResolverDep = Annotated[IconResolver, Depends(get_icon_resolver)]
