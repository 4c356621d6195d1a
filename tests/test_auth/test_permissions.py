"""
Tests for permission system.
"""

import pytest

from assetlib.auth.permissions import can_modify_asset, can_view_asset, check_asset_author
from assetlib.core.exceptions import ForbiddenException
from assetlib.models.asset import Asset
from assetlib.models.user import User

AUTHOR = User(id=1, name="alice")
OTHER = User(id=2, name="bob")


def _asset(is_published: bool = True) -> Asset:
    return Asset(asset_id=10, title="Platformer Kit", author_id=AUTHOR.id, is_published=is_published)


class TestVisibility:
    """Tests for asset visibility."""

    def test_published_assets_are_public(self):
        asset = _asset()
        assert can_view_asset(asset, None)
        assert can_view_asset(asset, OTHER)
        assert can_view_asset(asset, AUTHOR)

    def test_unpublished_assets_are_visible_to_their_author_only(self):
        asset = _asset(is_published=False)
        assert not can_view_asset(asset, None)
        assert not can_view_asset(asset, OTHER)
        assert can_view_asset(asset, AUTHOR)


class TestAuthorship:
    """Tests for author-only actions."""

    def test_author_can_modify(self):
        assert can_modify_asset(_asset(), AUTHOR)
        check_asset_author(_asset(), AUTHOR)

    def test_other_users_cannot_modify(self):
        assert not can_modify_asset(_asset(), OTHER)

        with pytest.raises(ForbiddenException) as exc_info:
            check_asset_author(_asset(), OTHER, action="delete")

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"asset_id": 10, "required": "authorship", "action": "delete"}
