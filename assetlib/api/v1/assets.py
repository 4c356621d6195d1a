"""
Asset endpoints.

Listing and reading are open to everyone; submitting requires an identity,
and editing, releasing, publishing, archiving and deleting are reserved to
the asset's author.
"""

import asyncio
from typing import Any, Literal

from fastapi import APIRouter, Query, status

from assetlib.auth.dependencies import CurrentUser, OptionalUser
from assetlib.auth.permissions import can_view_asset, check_asset_author
from assetlib.core.exceptions import AssetNotFoundException
from assetlib.dependencies import AppSettings, DbSession, IconResolverDep
from assetlib.models.asset import CATEGORY_MAX, Asset, AssetReview
from assetlib.models.user import User
from assetlib.schemas.asset import (
    AssetArchivedUpdate,
    AssetCreate,
    AssetListResponse,
    AssetPublishedUpdate,
    AssetResponse,
    AssetReviewCreate,
    AssetReviewListResponse,
    AssetReviewResponse,
    AssetSearchParams,
    AssetUpdate,
    AssetVersionCreate,
)
from assetlib.schemas.error import ErrorResponse
from assetlib.services.asset_service import AssetService

router = APIRouter()

_NOT_FOUND = {404: {"model": ErrorResponse}}
_AUTHOR_ONLY = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def _asset_to_response(asset: Asset, icon_url: str) -> dict[str, Any]:
    """Convert Asset model to response dict."""
    return {
        "asset_id": asset.asset_id,
        "title": asset.title,
        "blurb": asset.blurb,
        "description": asset.description,
        "author": asset.author.name,
        "author_id": asset.author_id,
        "category": asset.category,
        "category_id": asset.category_id,
        "tags": asset.tags,
        "cost": asset.cost,
        "license_name": asset.license_name,
        "support_level": asset.support_level,
        "browse_url": asset.browse_url,
        "issues_url": asset.issues_url,
        "changelog_url": asset.changelog_url,
        "donate_url": asset.donate_url,
        "icon_url": icon_url,
        "download_hash": asset.download_hash,
        "download_url": asset.download_url,
        "godot_version": asset.godot_version,
        "version_string": asset.version_string,
        "score": asset.score,
        "score_color": asset.score_color,
        "is_archived": asset.is_archived,
        "modify_date": asset.modify_date,
        "previews": [
            {
                "preview_id": preview.preview_id,
                "type": preview.type,
                "link": preview.link,
                "thumbnail": preview.thumbnail,
                "caption": preview.caption,
            }
            for preview in asset.previews
        ],
        "versions": [
            {
                "version_id": version.version_id,
                "version_string": version.version_string,
                "godot_version": version.godot_version,
                "download_url": version.download_url_for(asset.browse_url),
                "created_at": version.created_at,
            }
            for version in asset.versions
        ],
    }


def _review_to_response(review: AssetReview) -> dict[str, Any]:
    return {
        "review_id": review.review_id,
        "author": review.author.name,
        "is_positive": review.is_positive,
        "comment": review.comment,
        "created_at": review.created_at,
    }


async def _get_visible_asset(service: AssetService, asset_id: int, user: User | None) -> Asset:
    """Unpublished assets are reported as missing to everyone but their author."""
    asset = await service.get_by_id(asset_id)
    if not can_view_asset(asset, user):
        raise AssetNotFoundException(asset_id)
    return asset


@router.get("", response_model=AssetListResponse, responses={400: {"model": ErrorResponse}})
async def list_assets(
    db: DbSession,
    user: OptionalUser,
    icons: IconResolverDep,
    settings: AppSettings,
    type: Literal["addon", "project", "any"] | None = Query(default=None, description="Category type filter"),
    category: int | None = Query(default=None, ge=0, lt=CATEGORY_MAX, description="Category ID filter"),
    author: str | None = Query(default=None, alias="user", max_length=50, description="Author username"),
    filter: str | None = Query(default=None, max_length=500, description="Search string"),
    sort: Literal["cost", "name", "rating", "updated"] | None = Query(default=None, description="Sort key"),
    reverse: bool = Query(default=False, description="Reverse the sort order"),
    godot_version: str | None = Query(
        default=None,
        pattern=r"^\d+\.\d+$",
        description="Only list assets compatible with this Godot version (e.g. 4.2)",
    ),
    page: int = Query(default=1, ge=1, description="Page number"),
    size: int | None = Query(default=None, ge=1, le=500, description="Page size"),
):
    """
    Search and list assets with pagination.

    Supports filtering by:
    - Category type (addon, project) and category
    - Author username
    - Search string (e.g. `physics license:MIT score>=5`)
    - Compatible Godot version

    Unpublished assets are only listed when `user` names the caller.
    """
    size = size or settings.ASSETS_PER_PAGE
    params = AssetSearchParams(
        type=type,
        category=category,
        user=author,
        filter=filter,
        sort=sort,
        reverse=reverse,
        godot_version=godot_version,
        page=page,
        size=size,
    )

    listing_own_assets = user is not None and author == user.name
    service = AssetService(db)
    assets = await service.filter_search(params, published_only=not listing_own_assets)

    # Paginated after the Godot version filter, which runs in memory
    total = len(assets)
    page_assets = assets[(page - 1) * size:page * size]
    icon_urls = await asyncio.gather(*(icons.resolve(asset) for asset in page_assets))

    items = [_asset_to_response(asset, icon_url) for asset, icon_url in zip(page_assets, icon_urls)]
    pages = (total + size - 1) // size if total > 0 else 1

    return {
        "items": items,
        "total": total,
        "page": page,
        "size": size,
        "pages": pages,
    }


@router.post(
    "",
    response_model=AssetResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
)
async def create_asset(
    data: AssetCreate,
    db: DbSession,
    user: CurrentUser,
    icons: IconResolverDep,
):
    """Submit a new asset with at least one version."""
    service = AssetService(db)
    asset = await service.create(data, author=user)
    return _asset_to_response(asset, await icons.resolve(asset))


@router.get("/{asset_id}", response_model=AssetResponse, responses=_NOT_FOUND)
async def get_asset(
    asset_id: int,
    db: DbSession,
    user: OptionalUser,
    icons: IconResolverDep,
):
    """Get specific asset."""
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    return _asset_to_response(asset, await icons.resolve(asset))


@router.patch("/{asset_id}", response_model=AssetResponse, responses=_AUTHOR_ONLY)
async def update_asset(
    asset_id: int,
    data: AssetUpdate,
    db: DbSession,
    user: CurrentUser,
    icons: IconResolverDep,
):
    """
    Edit an asset.
    Only the fields present in the body are changed; `previews` replaces
    every existing preview.
    """
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    check_asset_author(asset, user, action="edit")

    asset = await service.update(asset, data)
    return _asset_to_response(asset, await icons.resolve(asset))


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT, responses=_AUTHOR_ONLY)
async def delete_asset(
    asset_id: int,
    db: DbSession,
    user: CurrentUser,
):
    """Delete an asset with its versions, previews and reviews."""
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    check_asset_author(asset, user, action="delete")

    await service.delete(asset)


@router.post(
    "/{asset_id}/versions",
    response_model=AssetResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_AUTHOR_ONLY,
)
async def add_asset_version(
    asset_id: int,
    data: AssetVersionCreate,
    db: DbSession,
    user: CurrentUser,
    icons: IconResolverDep,
):
    """Release a new version of an asset."""
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    check_asset_author(asset, user, action="release a version of")

    asset = await service.add_version(asset, data)
    return _asset_to_response(asset, await icons.resolve(asset))


@router.put("/{asset_id}/published", response_model=AssetResponse, responses=_AUTHOR_ONLY)
async def set_asset_published(
    asset_id: int,
    data: AssetPublishedUpdate,
    db: DbSession,
    user: CurrentUser,
    icons: IconResolverDep,
):
    """Publish or unpublish an asset."""
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    check_asset_author(asset, user, action="publish")

    asset = await service.set_published(asset, data.is_published)
    return _asset_to_response(asset, await icons.resolve(asset))


@router.put("/{asset_id}/archived", response_model=AssetResponse, responses=_AUTHOR_ONLY)
async def set_asset_archived(
    asset_id: int,
    data: AssetArchivedUpdate,
    db: DbSession,
    user: CurrentUser,
    icons: IconResolverDep,
):
    """Archive or unarchive an asset. Archived assets can't be reviewed."""
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    check_asset_author(asset, user, action="archive")

    asset = await service.set_archived(asset, data.is_archived)
    return _asset_to_response(asset, await icons.resolve(asset))


@router.get("/{asset_id}/reviews", response_model=AssetReviewListResponse, responses=_NOT_FOUND)
async def list_asset_reviews(
    asset_id: int,
    db: DbSession,
    user: OptionalUser,
):
    """List an asset's reviews, newest first."""
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    reviews = await service.list_reviews(asset)

    return {
        "items": [_review_to_response(review) for review in reviews],
        "total": len(reviews),
        "score": asset.score,
    }


@router.post(
    "/{asset_id}/reviews",
    response_model=AssetReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_AUTHOR_ONLY, 400: {"model": ErrorResponse}},
)
async def create_asset_review(
    asset_id: int,
    data: AssetReviewCreate,
    db: DbSession,
    user: CurrentUser,
):
    """
    Review an asset.
    Authors can't review their own assets, and each user reviews an asset
    at most once.
    """
    service = AssetService(db)
    asset = await _get_visible_asset(service, asset_id, user)
    review = await service.add_review(asset, user, data)
    return _review_to_response(review)
