"""
Asset-level permission checking.

Published assets are public. Unpublished assets, and every change to an
asset, are reserved to its author.
"""

from assetlib.core.exceptions import ForbiddenException
from assetlib.models.asset import Asset
from assetlib.models.user import User


def can_view_asset(asset: Asset, user: User | None) -> bool:
    """Check if an asset is visible to `user` (None for anonymous requests)."""
    if asset.is_published:
        return True
    return user is not None and asset.author_id == user.id


def can_modify_asset(asset: Asset, user: User) -> bool:
    return asset.author_id == user.id


def check_asset_author(asset: Asset, user: User, action: str = "modify") -> None:
    """
    Require `user` to be the asset's author.

    Raises:
        ForbiddenException: If access is denied
    """
    if not can_modify_asset(asset, user):
        raise ForbiddenException(
            message=f"Only the author of an asset can {action} it",
            details={
                "asset_id": asset.asset_id,
                "required": "authorship",
                "action": action,
            },
        )
