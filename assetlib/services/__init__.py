"""
Business logic services for the asset library API.
Services handle core operations separate from API endpoints.
"""

from assetlib.services.asset_service import AssetService, is_compatible_with
from assetlib.services.cache import CacheBackend, MemoryCache
from assetlib.services.icon_resolver import IconResolver
from assetlib.services.user_service import UserService

__all__ = [
    "AssetService",
    "CacheBackend",
    "IconResolver",
    "MemoryCache",
    "UserService",
    "is_compatible_with",
]
