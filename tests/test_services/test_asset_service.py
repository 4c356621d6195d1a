"""
Tests for the asset service: listing filters and asset lifecycle.
"""

from datetime import datetime, timezone

import pytest

from assetlib.core.exceptions import (
    AssetNotFoundException,
    ForbiddenException,
    InvalidSearchStringException,
    ValidationException,
)
from assetlib.models.asset import Category
from assetlib.schemas.asset import (
    AssetPreviewCreate,
    AssetReviewCreate,
    AssetSearchParams,
    AssetUpdate,
    AssetVersionCreate,
)
from assetlib.services.asset_service import AssetService, is_compatible_with


def _titles(assets) -> list[str]:
    return [asset.title for asset in assets]


class TestGodotVersionCompatibility:
    @pytest.mark.parametrize(
        "godot_version, compatible",
        [
            ("*", True),
            ("3.x.x", False),
            ("4.x.x", True),
            ("4.2.x", True),
            ("4.3.x", False),
        ],
    )
    def test_requested_4_2(self, godot_version, compatible):
        assert is_compatible_with(godot_version, "4.2") is compatible

    def test_major_version_wildcards(self):
        assert is_compatible_with("3.x.x", "3.5")
        assert not is_compatible_with("4.x.x", "3.5")
        assert not is_compatible_with("3.x.x", "30.1")

    def test_asset_without_version(self):
        assert not is_compatible_with("", "4.2")


@pytest.mark.asyncio
class TestFilterSearch:
    """Tests for `AssetService.filter_search`."""

    async def test_projects_sorted_by_name(self, db_session, make_asset):
        await make_asset(title="Zombie Demo", category_id=Category.DEMOS)
        await make_asset(title="Army Template", category_id=Category.TEMPLATES)
        await make_asset(title="Hidden Project", category_id=Category.PROJECTS)
        await make_asset(title="Blob Project", category_id=Category.PROJECTS)
        await make_asset(title="Addon", category_id=Category.TOOLS_2D)

        hidden = (await AssetService(db_session).filter_search(
            AssetSearchParams(filter="title:'Hidden Project'"),
        ))[0]
        hidden.is_published = False
        await db_session.flush()

        assets = await AssetService(db_session).filter_search(
            AssetSearchParams(type="project", sort="name"),
            published_only=True,
        )

        assert _titles(assets) == ["Army Template", "Blob Project", "Zombie Demo"]

    async def test_addons(self, db_session, make_asset):
        await make_asset(title="Demo", category_id=Category.DEMOS)
        await make_asset(title="Shader", category_id=Category.SHADERS)
        await make_asset(title="Script", category_id=Category.SCRIPTS)

        assets = await AssetService(db_session).filter_search(AssetSearchParams(type="addon", sort="name"))

        assert _titles(assets) == ["Script", "Shader"]

    async def test_any_type_is_a_no_op(self, db_session, make_asset):
        await make_asset(title="Demo", category_id=Category.DEMOS)
        await make_asset(title="Shader", category_id=Category.SHADERS)

        assets = await AssetService(db_session).filter_search(AssetSearchParams(type="any"))

        assert len(assets) == 2

    async def test_category(self, db_session, make_asset):
        await make_asset(title="Shader", category_id=Category.SHADERS)
        await make_asset(title="Material", category_id=Category.MATERIALS)

        assets = await AssetService(db_session).filter_search(
            AssetSearchParams(category=Category.MATERIALS),
        )

        assert _titles(assets) == ["Material"]

    async def test_unknown_user_matches_nothing(self, db_session, make_asset):
        await make_asset(title="Platformer Kit")

        assets = await AssetService(db_session).filter_search(AssetSearchParams(user="nonexistent_user"))

        assert assets == []

    async def test_user(self, db_session, make_asset, reviewer):
        await make_asset(title="By Alice")
        await make_asset(title="By Bob", owner=reviewer)

        assets = await AssetService(db_session).filter_search(AssetSearchParams(user="bob"))

        assert _titles(assets) == ["By Bob"]

    async def test_unpublished_assets(self, db_session, make_asset):
        asset = await make_asset(title="Draft")
        asset.is_published = False
        await db_session.flush()
        service = AssetService(db_session)

        assert await service.filter_search(AssetSearchParams()) == []
        assert _titles(await service.filter_search(AssetSearchParams(), published_only=False)) == ["Draft"]

    async def test_search_string(self, db_session, make_asset):
        await make_asset(title="Water Shader", tags="shader,water")
        await make_asset(title="Platformer Kit", tags="2d")

        assets = await AssetService(db_session).filter_search(AssetSearchParams(filter="tags:water"))

        assert _titles(assets) == ["Water Shader"]

    async def test_invalid_search_string(self, db_session):
        with pytest.raises(InvalidSearchStringException):
            await AssetService(db_session).filter_search(AssetSearchParams(filter="order_by:title"))

    @pytest.mark.parametrize(
        "sort, reverse, expected",
        [
            (None, False, ["Newest", "Middle", "Oldest"]),
            ("updated", False, ["Newest", "Middle", "Oldest"]),
            ("updated", True, ["Oldest", "Middle", "Newest"]),
            ("name", False, ["Middle", "Newest", "Oldest"]),
            ("name", True, ["Oldest", "Newest", "Middle"]),
            ("rating", False, ["Oldest", "Newest", "Middle"]),
            ("rating", True, ["Middle", "Newest", "Oldest"]),
            ("cost", False, ["Newest", "Oldest", "Middle"]),
            ("cost", True, ["Middle", "Oldest", "Newest"]),
        ],
    )
    async def test_sort(self, db_session, make_asset, sort, reverse, expected):
        for title, day, score, cost in [
            ("Oldest", 1, 20, "CC0-1.0"),
            ("Middle", 2, -3, "MIT"),
            ("Newest", 3, 5, "Apache-2.0"),
        ]:
            asset = await make_asset(title=title, cost=cost)
            asset.score = score
            asset.modify_date = datetime(2024, 1, day, tzinfo=timezone.utc)
        await db_session.flush()

        assets = await AssetService(db_session).filter_search(AssetSearchParams(sort=sort, reverse=reverse))

        assert _titles(assets) == expected

    async def test_godot_version(self, db_session, make_asset):
        for godot_version in ("*", "3.x.x", "4.x.x", "4.2.x", "4.3.x"):
            await make_asset(
                title=godot_version,
                versions=[{"version_string": "1.0", "godot_version": godot_version}],
            )

        assets = await AssetService(db_session).filter_search(
            AssetSearchParams(godot_version="4.2", sort="name"),
        )

        assert _titles(assets) == ["*", "4.2.x", "4.x.x"]

    async def test_godot_version_uses_latest_version(self, db_session, make_asset):
        asset = await make_asset(
            title="Ported",
            versions=[{"version_string": "1.0", "godot_version": "3.x.x"}],
        )
        service = AssetService(db_session)
        await service.add_version(asset, AssetVersionCreate(version_string="2.0", godot_version="4.2.x"))

        assert _titles(await service.filter_search(AssetSearchParams(godot_version="4.2"))) == ["Ported"]
        assert await service.filter_search(AssetSearchParams(godot_version="3.5")) == []


@pytest.mark.asyncio
class TestLifecycle:
    """Tests for submission and edition."""

    async def test_create(self, db_session, make_asset, author):
        asset = await make_asset()

        assert asset.asset_id is not None
        assert asset.author_id == author.id
        assert asset.author.name == "alice"
        assert asset.tags == ["2d", "platformer", "physics"]
        assert asset.browse_url == "https://github.com/alice/platformer-kit"
        assert "<strong>complete</strong>" in asset.html_description
        assert asset.is_published is True
        assert asset.is_archived is False
        assert asset.score == 0
        assert asset.version_string == "1.0.0"
        assert asset.download_url == "https://github.com/alice/platformer-kit/archive/1.0.0.zip"
        assert [preview.type for preview in asset.previews] == ["image"]
        assert asset.modify_date is not None

    async def test_get_by_id_not_found(self, db_session):
        with pytest.raises(AssetNotFoundException):
            await AssetService(db_session).get_by_id(404)

    async def test_update(self, db_session, make_asset):
        asset = await make_asset()

        updated = await AssetService(db_session).update(
            asset,
            AssetUpdate(
                title="Platformer Kit Deluxe",
                description="*New* description",
                tags="Metroidvania, 2D",
                previews=[AssetPreviewCreate(type_id=1, link="https://example.com/trailer")],
            ),
        )

        assert updated.title == "Platformer Kit Deluxe"
        assert updated.blurb == "Everything a 2D platformer needs"
        assert "<em>New</em>" in updated.html_description
        assert updated.tags == ["metroidvania", "2d"]
        assert [preview.type for preview in updated.previews] == ["video"]

    async def test_add_version(self, db_session, make_asset):
        asset = await make_asset()

        asset = await AssetService(db_session).add_version(
            asset,
            AssetVersionCreate(version_string="1.1.0", godot_version="4.3.x"),
        )

        assert [version.version_string for version in asset.versions] == ["1.0.0", "1.1.0"]
        assert asset.version_string == "1.1.0"
        assert asset.godot_version == "4.3.x"

    async def test_publish_and_archive(self, db_session, make_asset):
        service = AssetService(db_session)
        asset = await make_asset()

        asset = await service.set_published(asset, False)
        assert asset.is_published is False

        asset = await service.set_archived(asset, True)
        assert asset.is_archived is True

    async def test_delete(self, db_session, make_asset, reviewer):
        service = AssetService(db_session)
        asset = await make_asset()
        asset_id = asset.asset_id
        await service.add_review(asset, reviewer, AssetReviewCreate(is_positive=True))

        await service.delete(asset)

        with pytest.raises(AssetNotFoundException):
            await service.get_by_id(asset_id)


@pytest.mark.asyncio
class TestReviews:
    async def test_score_is_sum_of_polarities(self, db_session, make_asset, reviewer):
        from assetlib.services.user_service import UserService

        service = AssetService(db_session)
        asset = await make_asset()
        carol = await UserService(db_session).get_or_create("carol")
        dave = await UserService(db_session).get_or_create("dave")

        await service.add_review(asset, reviewer, AssetReviewCreate(is_positive=True, comment="Great"))
        await service.add_review(asset, carol, AssetReviewCreate(is_positive=True))
        await service.add_review(asset, dave, AssetReviewCreate(is_positive=False))

        asset = await service.get_by_id(asset.asset_id)
        assert asset.score == 1
        assert len(await service.list_reviews(asset)) == 3

    async def test_author_cannot_review(self, db_session, make_asset, author):
        asset = await make_asset()

        with pytest.raises(ForbiddenException):
            await AssetService(db_session).add_review(asset, author, AssetReviewCreate(is_positive=True))

    async def test_single_review_per_user(self, db_session, make_asset, reviewer):
        service = AssetService(db_session)
        asset = await make_asset()
        await service.add_review(asset, reviewer, AssetReviewCreate(is_positive=True))
        asset = await service.get_by_id(asset.asset_id)

        with pytest.raises(ValidationException):
            await service.add_review(asset, reviewer, AssetReviewCreate(is_positive=False))

    async def test_archived_assets_cannot_be_reviewed(self, db_session, make_asset, reviewer):
        service = AssetService(db_session)
        asset = await service.set_archived(await make_asset(), True)

        with pytest.raises(ForbiddenException):
            await service.add_review(asset, reviewer, AssetReviewCreate(is_positive=True))
