"""
Tests for search string translation, run against a SQLite database.
"""

import pytest
import pytest_asyncio
from sqlalchemy import select

from assetlib.core.exceptions import InvalidSearchStringException
from assetlib.core.search_string import tokenize
from assetlib.models.asset import Asset, Category, SupportLevel
from assetlib.services.asset_service import search_string_parser


@pytest_asyncio.fixture
async def catalog(db_session, make_asset):
    """Three assets with distinct titles, licenses, tags and scores."""
    platformer = await make_asset(
        title="Platformer Kit",
        blurb="Everything a 2D platformer needs",
        tags="2d,platformer,physics",
        cost="MIT",
    )
    shader = await make_asset(
        title="Water Shader",
        blurb="Realistic water",
        tags="shader,3d,water",
        cost="Apache-2.0",
        category_id=Category.SHADERS,
    )
    demo = await make_asset(
        title="Rigid Body Demo",
        blurb="Physics playground",
        tags="3d,demo",
        cost="CC0-1.0",
        category_id=Category.DEMOS,
        support_level_id=SupportLevel.TESTING,
    )
    platformer.score = 12
    shader.score = 3
    demo.score = -2
    await db_session.flush()
    return [platformer, shader, demo]


async def _titles(db_session, search: str) -> set[str]:
    query = search_string_parser.parse(search).apply(select(Asset))
    result = await db_session.execute(query)
    return {asset.title for asset in result.scalars().all()}


class TestTokenize:
    def test_tokens(self):
        tokens = tokenize('(score>=5 or "rigid body") tags:2d,3d')
        assert [(t.kind, t.value) for t in tokens] == [
            ("lparen", "("),
            ("word", "score"),
            ("operator", ">="),
            ("word", "5"),
            ("word", "or"),
            ("quoted", "rigid body"),
            ("rparen", ")"),
            ("word", "tags"),
            ("operator", ":"),
            ("word", "2d"),
            ("comma", ","),
            ("word", "3d"),
        ]

    def test_escaped_quotes(self):
        assert tokenize(r'"say \"hi\""')[0].value == 'say "hi"'

    def test_unterminated_quote(self):
        with pytest.raises(InvalidSearchStringException):
            tokenize('"unterminated')


@pytest.mark.asyncio
class TestSearch:
    """Bare terms search the title, blurb and tags."""

    @pytest.mark.parametrize(
        "search, expected",
        [
            ("shader", {"Water Shader"}),
            ("PHYSICS", {"Platformer Kit", "Rigid Body Demo"}),
            ('"rigid body"', {"Rigid Body Demo"}),
            ("water realistic", {"Water Shader"}),
            ("nothing-matches", set()),
            ("%", set()),
            ("", {"Platformer Kit", "Water Shader", "Rigid Body Demo"}),
        ],
    )
    async def test_search(self, db_session, catalog, search, expected):
        assert await _titles(db_session, search) == expected


@pytest.mark.asyncio
class TestColumnQueries:
    @pytest.mark.parametrize(
        "search, expected",
        [
            ("license:MIT", {"Platformer Kit"}),
            ("license=Apache-2.0", {"Water Shader"}),
            ("license:MIT,CC0-1.0", {"Platformer Kit", "Rigid Body Demo"}),
            ("score>=5", {"Platformer Kit"}),
            ("score>3", {"Platformer Kit"}),
            ("score<=3", {"Water Shader", "Rigid Body Demo"}),
            ("score<0", {"Rigid Body Demo"}),
            ("support_level_id:0", {"Rigid Body Demo"}),
            ("tags:3d", {"Water Shader", "Rigid Body Demo"}),
            ("tags:3D", {"Water Shader", "Rigid Body Demo"}),
            ("tags:d", set()),
            ("tags:demo,water", {"Water Shader", "Rigid Body Demo"}),
            ("created_at>=2000-01-01", {"Platformer Kit", "Water Shader", "Rigid Body Demo"}),
            ("created_at<2000-01-01", set()),
            ("updated_at:2000-01-01", set()),
            ("TITLE:'Water Shader'", {"Water Shader"}),
        ],
    )
    async def test_query(self, db_session, catalog, search, expected):
        assert await _titles(db_session, search) == expected


@pytest.mark.asyncio
class TestBooleanOperators:
    @pytest.mark.parametrize(
        "search, expected",
        [
            ("tags:3d and not tags:demo", {"Water Shader"}),
            ("tags:3d shader", {"Water Shader"}),
            ("license:MIT or license:Apache-2.0", {"Platformer Kit", "Water Shader"}),
            ("(score>10 or license:CC0-1.0) physics", {"Platformer Kit", "Rigid Body Demo"}),
            ("not (tags:3d or score>10)", set()),
            ("NOT shader", {"Platformer Kit", "Rigid Body Demo"}),
        ],
    )
    async def test_operators(self, db_session, catalog, search, expected):
        assert await _titles(db_session, search) == expected


@pytest.mark.asyncio
async def test_limit(db_session, catalog):
    query = search_string_parser.parse("limit:1 tags:3d")
    assert query.limit == 1

    assert len(await _titles(db_session, "limit:2")) == 2


class TestErrors:
    @pytest.mark.parametrize(
        "search, message",
        [
            ("select:title", "'select' keyword is not allowed"),
            ("fields:title", "'select' keyword is not allowed"),
            ("order_by:title", "'order_by' keyword is not allowed"),
            ("sort:title", "'order_by' keyword is not allowed"),
            ("offset:5", "'offset' keyword is not allowed"),
            ("from:5", "'offset' keyword is not allowed"),
            ("limit:-1", "Invalid limit"),
            ("limit:many", "Invalid limit"),
            ("limit:99999999999999999999", "Invalid limit"),
            ("author:alice", "Unknown column 'author'"),
            ("score>high", "Expected a number"),
            ("score>99999999999999999999", "Number out of range"),
            ("score<-99999999999999999999", "Number out of range"),
            ("tags>2d", "Tags can only be compared"),
            ("license>MIT,GPL", "Lists of values"),
            ("created_at:yesterday", "Expected a date"),
            ("(shader", "Missing closing parenthesis"),
            ("shader)", r"Unexpected '\)'"),
            ("license:", "Missing value"),
            ("physics or", "Unexpected end"),
        ],
    )
    def test_invalid_search_strings(self, search, message):
        with pytest.raises(InvalidSearchStringException, match=message) as exc_info:
            search_string_parser.parse(search)

        assert exc_info.value.status_code == 400
        assert exc_info.value.error == "invalid_search_string"
        assert exc_info.value.details == {"filter": search}


@pytest.mark.asyncio
async def test_64_bit_bounds_are_accepted(db_session, catalog):
    assert await _titles(db_session, f"score<={2**63 - 1} score>={-(2**63)}") == {
        "Platformer Kit",
        "Water Shader",
        "Rigid Body Demo",
    }
