"""
SQLAlchemy ORM models for the asset library API.
"""

from assetlib.models.asset import (
    Asset,
    AssetReview,
    AssetVersion,
    Category,
    CategoryType,
    SupportLevel,
    LICENSES,
)
from assetlib.models.asset_preview import AssetPreview, PreviewType
from assetlib.models.user import User

__all__ = [
    "Asset",
    "AssetPreview",
    "AssetReview",
    "AssetVersion",
    "Category",
    "CategoryType",
    "LICENSES",
    "PreviewType",
    "SupportLevel",
    "User",
]
