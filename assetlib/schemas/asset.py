"""
Pydantic schemas for asset request/response validation.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from assetlib.models.asset import (
    ASSETS_PER_PAGE,
    CATEGORY_MAX,
    LICENSES,
    MAX_TAGS,
    SupportLevel,
    normalize_tags,
)
from assetlib.models.asset_preview import TYPE_MAX, PreviewType

# Printable URL characters; control characters are rejected by HTTP clients
_URL_CHAR = r"[^\s\x00-\x1f\x7f]"
_URL_SEGMENT = r"[^/\s\x00-\x1f\x7f]"

URL_PATTERN = rf"^https?://{_URL_CHAR}+$"

# Repository URLs must name an owner and a repository on their host
BROWSE_URL_PATTERN = rf"^https?://{_URL_SEGMENT}+/{_URL_SEGMENT}+/{_URL_SEGMENT}+/?{_URL_CHAR}*$"

# `*` (any version), a major wildcard, or a minor version wildcard
GODOT_VERSION_PATTERN = r"^(\*|[34]\.x\.x|\d+\.\d+\.x)$"


def _validate_tags(v: str | None) -> str | None:
    if v is not None and len(normalize_tags(v)) > MAX_TAGS:
        raise ValueError(f"An asset may have at most {MAX_TAGS} tags")
    return v


def _validate_license(v: str | None) -> str | None:
    if v is not None and v not in LICENSES:
        raise ValueError(f"Unknown license identifier: '{v}'")
    return v


def _validate_support_level(v: int | None) -> int | None:
    # The official level is granted by maintainers, not requested
    if v is not None and v not in (SupportLevel.TESTING, SupportLevel.COMMUNITY):
        raise ValueError("Support level must be 0 (testing) or 1 (community)")
    return v


# ===================
# Request Schemas
# ===================

class AssetVersionCreate(BaseModel):
    """A released version submitted with an asset."""

    version_string: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Asset version, also used as the repository tag",
        examples=["1.2.0"],
    )
    godot_version: str = Field(
        ...,
        pattern=GODOT_VERSION_PATTERN,
        description="Compatible Godot version",
        examples=["4.2.x", "4.x.x", "*"],
    )
    download_url: str | None = Field(
        default=None,
        max_length=500,
        pattern=URL_PATTERN,
        description="Explicit download URL (inferred from the repository if empty)",
    )


class AssetPreviewCreate(BaseModel):
    """An image or video preview."""

    type_id: int = Field(
        default=PreviewType.IMAGE,
        ge=0,
        lt=TYPE_MAX,
        description="0 for an image, 1 for a video",
    )
    link: str = Field(..., max_length=500, pattern=URL_PATTERN)
    thumbnail: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    caption: str | None = Field(default=None, max_length=255)


class AssetCreate(BaseModel):
    """Schema for submitting a new asset (POST /assets)."""

    title: str = Field(..., min_length=1, max_length=50)
    blurb: str | None = Field(
        default=None,
        max_length=60,
        description="Short description shown in lists",
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=65535,
        description="Full description in Markdown",
    )
    tags: str = Field(
        default="",
        description=f"Comma-separated tags (at most {MAX_TAGS})",
        examples=["2d,platformer,physics"],
    )
    category_id: int = Field(..., ge=0, lt=CATEGORY_MAX)
    cost: str = Field(
        default="MIT",
        description="License as an SPDX identifier",
    )
    support_level_id: int = Field(default=SupportLevel.COMMUNITY)
    browse_url: str = Field(
        ...,
        max_length=500,
        pattern=BROWSE_URL_PATTERN,
        description="Repository URL",
        examples=["https://github.com/godotengine/godot-demo-projects"],
    )
    issues_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    changelog_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    donate_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    icon_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    versions: list[AssetVersionCreate] = Field(..., min_length=1)
    previews: list[AssetPreviewCreate] = Field(default=[])

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: str) -> str:
        return _validate_tags(v)

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v: str) -> str:
        return _validate_license(v)

    @field_validator("support_level_id")
    @classmethod
    def validate_support_level(cls, v: int) -> int:
        return _validate_support_level(v)


class AssetUpdate(BaseModel):
    """Schema for editing an asset (PATCH /assets/{id})."""

    title: str | None = Field(default=None, min_length=1, max_length=50)
    blurb: str | None = Field(default=None, max_length=60)
    description: str | None = Field(default=None, min_length=1, max_length=65535)
    tags: str | None = None
    category_id: int | None = Field(default=None, ge=0, lt=CATEGORY_MAX)
    cost: str | None = None
    support_level_id: int | None = None
    browse_url: str | None = Field(default=None, max_length=500, pattern=BROWSE_URL_PATTERN)
    issues_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    changelog_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    donate_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    icon_url: str | None = Field(default=None, max_length=500, pattern=URL_PATTERN)
    previews: list[AssetPreviewCreate] | None = Field(
        default=None,
        description="Replaces every existing preview when present",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: str | None) -> str | None:
        return _validate_tags(v)

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, v: str | None) -> str | None:
        return _validate_license(v)

    @field_validator("support_level_id")
    @classmethod
    def validate_support_level(cls, v: int | None) -> int | None:
        return _validate_support_level(v)


class AssetPublishedUpdate(BaseModel):
    """Schema for PUT /assets/{id}/published."""

    is_published: bool


class AssetArchivedUpdate(BaseModel):
    """Schema for PUT /assets/{id}/archived."""

    is_archived: bool


class AssetReviewCreate(BaseModel):
    """Schema for POST /assets/{id}/reviews."""

    is_positive: bool
    comment: str | None = Field(default=None, max_length=2000)


# ===================
# Response Schemas
# ===================

class AssetPreviewResponse(BaseModel):
    """Preview as serialized in asset responses (type name, no ids)."""

    preview_id: int
    type: str
    link: str
    thumbnail: str | None = None
    caption: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AssetVersionResponse(BaseModel):
    version_id: int
    version_string: str
    godot_version: str
    download_url: str
    created_at: datetime


class AssetResponse(BaseModel):
    """
    Serialized asset. Internal fields (support level id, creation date,
    rendered HTML, publication flag) are left out; derived fields are
    included.
    """

    asset_id: int
    title: str
    blurb: str | None = None
    description: str
    author: str
    author_id: int
    category: str
    category_id: int
    tags: list[str]
    cost: str
    license_name: str
    support_level: str
    browse_url: str
    issues_url: str
    changelog_url: str | None = None
    donate_url: str | None = None
    icon_url: str
    download_hash: str
    download_url: str
    godot_version: str
    version_string: str
    score: int
    score_color: str
    is_archived: bool
    modify_date: datetime
    previews: list[AssetPreviewResponse] = []
    versions: list[AssetVersionResponse] = []


class AssetListResponse(BaseModel):
    """Paginated list of assets."""

    items: list[AssetResponse]
    total: int
    page: int
    size: int
    pages: int


class AssetReviewResponse(BaseModel):
    review_id: int
    author: str
    is_positive: bool
    comment: str | None = None
    created_at: datetime


class AssetReviewListResponse(BaseModel):
    items: list[AssetReviewResponse]
    total: int
    score: int


# ===================
# Query Parameters
# ===================

class AssetSearchParams(BaseModel):
    """
    Validated listing parameters (GET /assets).
    `AssetService.filter_search` trusts these values as they are.
    """

    type: Literal["addon", "project", "any"] | None = Field(
        default=None,
        description="Category type filter",
    )
    category: int | None = Field(default=None, ge=0, lt=CATEGORY_MAX)
    user: str | None = Field(
        default=None,
        max_length=50,
        description="Author username",
    )
    filter: str | None = Field(
        default=None,
        max_length=500,
        description="Search string",
    )
    sort: Literal["cost", "name", "rating", "updated"] | None = Field(
        default=None,
        description="Sort key (defaults to last modification date)",
    )
    reverse: bool = Field(default=False, description="Reverse the sort order")
    godot_version: str | None = Field(
        default=None,
        pattern=r"^\d+\.\d+$",
        description="Only return assets compatible with this Godot version",
        examples=["4.2"],
    )
    page: int = Field(default=1, ge=1, description="Page number")
    size: int = Field(
        default=ASSETS_PER_PAGE,
        ge=1,
        le=500,
        description="Page size",
    )
