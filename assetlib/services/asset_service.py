"""
Asset service - Business logic for asset operations.
Handles submission, edition, reviews, and the listing filters.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from assetlib.core.exceptions import (
    AssetNotFoundException,
    ForbiddenException,
    ValidationException,
)
from assetlib.core.search_string import SearchStringParser
from assetlib.models.asset import (
    PROJECT_CATEGORIES,
    SEARCH_STRING_COLUMNS,
    SEARCH_STRING_DISABLED_KEYWORDS,
    Asset,
    AssetReview,
    AssetVersion,
)
from assetlib.models.asset_preview import AssetPreview
from assetlib.models.user import User
from assetlib.schemas.asset import (
    AssetCreate,
    AssetReviewCreate,
    AssetSearchParams,
    AssetUpdate,
    AssetVersionCreate,
)
from assetlib.services.user_service import UserService

logger = logging.getLogger(__name__)

# User IDs are always positive, so no asset matches this author
UNKNOWN_AUTHOR_ID = -1

# Sort key -> (column, descending unless reversed)
SORT_COLUMNS = {
    "cost": (Asset.cost, False),
    "name": (Asset.title, False),
    "rating": (Asset.score, True),  # best ratings first
    "updated": (Asset.modify_date, True),  # most recent first
}
DEFAULT_SORT = "updated"

search_string_parser = SearchStringParser(SEARCH_STRING_COLUMNS, SEARCH_STRING_DISABLED_KEYWORDS)


def is_compatible_with(godot_version: str, requested: str) -> bool:
    """
    Whether an asset declaring `godot_version` can be used with the
    requested Godot minor version (e.g. "4.2").

    `*` is compatible with everything (typically non-code assets), `3.x.x`
    and `4.x.x` with every minor version of that major version.
    """
    requested_major = requested.split(".", 1)[0]
    return (
        godot_version == "*"
        or (godot_version == "3.x.x" and requested_major == "3")
        or (godot_version == "4.x.x" and requested_major == "4")
        or godot_version == f"{requested}.x"
    )


class AssetService:
    """Service class for asset operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _select():
        # Reload rows and relationships even when the objects are already
        # in the session, so nothing is lazy-loaded outside the event loop
        return select(Asset).execution_options(populate_existing=True)

    async def get_by_id(self, asset_id: int) -> Asset:
        """
        Get asset by ID.

        Raises:
            AssetNotFoundException: If asset not found
        """
        result = await self.db.execute(self._select().where(Asset.asset_id == asset_id))
        asset = result.scalar_one_or_none()

        if not asset:
            raise AssetNotFoundException(asset_id)

        return asset

    async def filter_search(
        self,
        params: AssetSearchParams,
        published_only: bool = True,
    ) -> list[Asset]:
        """
        Filter and sort assets according to listing parameters.
        The parameters aren't validated here.

        Args:
            params: Validated listing parameters
            published_only: Leave out unpublished assets

        Returns:
            Matching assets, ordered

        Raises:
            InvalidSearchStringException: If `params.filter` can't be translated
        """
        query = self._select()

        if published_only:
            query = query.where(Asset.is_published.is_(True))

        project_categories = [int(category) for category in PROJECT_CATEGORIES]
        if params.type == "addon":
            query = query.where(Asset.category_id.not_in(project_categories))
        elif params.type == "project":
            query = query.where(Asset.category_id.in_(project_categories))

        if params.category is not None:
            query = query.where(Asset.category_id == params.category)

        if params.user is not None:
            # An unknown username must match nothing rather than everything
            author_id = await self._resolve_author_id(params.user)
            query = query.where(Asset.author_id == author_id)

        if params.filter:
            query = search_string_parser.parse(params.filter).apply(query)

        column, descending = SORT_COLUMNS.get(params.sort or DEFAULT_SORT, SORT_COLUMNS[DEFAULT_SORT])
        if params.reverse:
            descending = not descending
        query = query.order_by(column.desc() if descending else column.asc())

        result = await self.db.execute(query)
        assets = list(result.scalars().all())

        # The Godot version is derived from the latest version record,
        # so it can only be filtered once the rows are loaded
        if params.godot_version:
            assets = [
                asset for asset in assets
                if is_compatible_with(asset.godot_version, params.godot_version)
            ]

        return assets

    async def _resolve_author_id(self, username: str) -> int:
        user = await UserService(self.db).get_by_name(username)
        return user.id if user else UNKNOWN_AUTHOR_ID

    async def create(self, data: AssetCreate, author: User) -> Asset:
        """
        Create an asset from a submission.

        Args:
            data: Submitted fields
            author: Submitting user

        Returns:
            Created Asset model
        """
        asset = Asset(
            title=data.title,
            blurb=data.blurb,
            description=data.description,
            category_id=data.category_id,
            cost=data.cost,
            support_level_id=data.support_level_id,
            browse_url=data.browse_url,
            issues_url=data.issues_url,
            changelog_url=data.changelog_url,
            donate_url=data.donate_url,
            icon_url=data.icon_url,
            author=author,
            versions=[self._build_version(version) for version in data.versions],
            previews=[AssetPreview(**preview.model_dump()) for preview in data.previews],
        )
        asset.set_tags_from_delimited_string(data.tags)

        self.db.add(asset)
        await self.db.flush()

        logger.info("Asset %s submitted by %s", asset, author.name)
        return await self.get_by_id(asset.asset_id)

    async def update(self, asset: Asset, data: AssetUpdate) -> Asset:
        """
        Apply an edit to an asset. Fields left out of `data` are unchanged;
        previews are replaced as a whole when given.
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        tags = changes.pop("tags", None)
        previews = changes.pop("previews", None)

        for field, value in changes.items():
            setattr(asset, field, value)
        if tags is not None:
            asset.set_tags_from_delimited_string(tags)
        if previews is not None:
            asset.previews = [AssetPreview(**preview) for preview in previews]

        asset.modify_date = datetime.now(timezone.utc)
        await self.db.flush()

        logger.info("Asset %s updated (%s)", asset, ", ".join(sorted(data.model_fields_set)))
        return await self.get_by_id(asset.asset_id)

    async def add_version(self, asset: Asset, data: AssetVersionCreate) -> Asset:
        """Release a new version; it becomes the asset's latest version."""
        asset.versions.append(self._build_version(data))
        asset.modify_date = datetime.now(timezone.utc)
        await self.db.flush()

        logger.info("Asset %s released version %s", asset, data.version_string)
        return await self.get_by_id(asset.asset_id)

    async def set_published(self, asset: Asset, is_published: bool) -> Asset:
        asset.is_published = is_published
        await self.db.flush()
        logger.info("Asset %s %s", asset, "published" if is_published else "unpublished")
        return await self.get_by_id(asset.asset_id)

    async def set_archived(self, asset: Asset, is_archived: bool) -> Asset:
        asset.is_archived = is_archived
        await self.db.flush()
        logger.info("Asset %s %s", asset, "archived" if is_archived else "unarchived")
        return await self.get_by_id(asset.asset_id)

    async def delete(self, asset: Asset) -> None:
        """Delete an asset with its versions, previews and reviews."""
        description = str(asset)
        await self.db.delete(asset)
        await self.db.flush()
        logger.info("Asset %s deleted", description)

    async def add_review(self, asset: Asset, user: User, data: AssetReviewCreate) -> AssetReview:
        """
        Review an asset and update its score.

        Raises:
            ForbiddenException: If the asset is archived or authored by `user`
            ValidationException: If `user` already reviewed the asset
        """
        if asset.is_archived:
            raise ForbiddenException("Archived assets can't receive new reviews")
        if asset.author_id == user.id:
            raise ForbiddenException("Authors can't review their own assets")
        if any(review.author_id == user.id for review in asset.reviews):
            raise ValidationException("This asset has already been reviewed by you")

        review = AssetReview(
            asset_id=asset.asset_id,
            author=user,
            is_positive=data.is_positive,
            comment=data.comment,
        )
        self.db.add(review)
        await self.db.flush()

        asset.score = await self._compute_score(asset.asset_id)
        await self.db.flush()

        logger.info(
            "Asset %s reviewed %s by %s",
            asset,
            "positively" if data.is_positive else "negatively",
            user.name,
        )
        return review

    async def list_reviews(self, asset: Asset) -> list[AssetReview]:
        """Reviews of an asset, newest first."""
        asset = await self.get_by_id(asset.asset_id)
        return list(asset.reviews)

    async def _compute_score(self, asset_id: int) -> int:
        polarity = case((AssetReview.is_positive, 1), else_=-1)
        result = await self.db.execute(
            select(func.sum(polarity)).where(AssetReview.asset_id == asset_id)
        )
        return result.scalar() or 0

    @staticmethod
    def _build_version(data: AssetVersionCreate) -> AssetVersion:
        return AssetVersion(
            version_string=data.version_string,
            godot_version=data.godot_version,
            download_url=data.download_url,
        )
