"""
Pydantic schemas for request/response validation.
"""

from assetlib.schemas.asset import (
    AssetArchivedUpdate,
    AssetCreate,
    AssetListResponse,
    AssetPreviewCreate,
    AssetPreviewResponse,
    AssetPublishedUpdate,
    AssetResponse,
    AssetReviewCreate,
    AssetReviewListResponse,
    AssetReviewResponse,
    AssetSearchParams,
    AssetUpdate,
    AssetVersionCreate,
    AssetVersionResponse,
)
from assetlib.schemas.error import ErrorResponse
from assetlib.schemas.taxonomy import CategoryResponse, ConfigureResponse, LicenseResponse

__all__ = [
    # Asset schemas
    "AssetArchivedUpdate",
    "AssetCreate",
    "AssetListResponse",
    "AssetPreviewCreate",
    "AssetPreviewResponse",
    "AssetPublishedUpdate",
    "AssetResponse",
    "AssetReviewCreate",
    "AssetReviewListResponse",
    "AssetReviewResponse",
    "AssetSearchParams",
    "AssetUpdate",
    "AssetVersionCreate",
    "AssetVersionResponse",
    # Taxonomy schemas
    "CategoryResponse",
    "ConfigureResponse",
    "LicenseResponse",
    # Error schemas
    "ErrorResponse",
]
