"""
Asset, AssetVersion and AssetReview SQLAlchemy models.

The asset owns the catalog taxonomies (categories, support levels and
licenses) and the attributes derived from its stored columns.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import markdown
from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assetlib.core.exceptions import InvalidCodeError
from assetlib.core.search_string import ColumnKind, SearchColumn
from assetlib.db.base import Base

if TYPE_CHECKING:
    from assetlib.models.asset_preview import AssetPreview
    from assetlib.models.user import User


# The number of assets per page to display by default.
ASSETS_PER_PAGE = 40

# The maximum number of tags an asset may have.
MAX_TAGS = 15


class SupportLevel(enum.IntEnum):
    """Editorial trust tier of an asset."""
    TESTING = 0      # Voluntarily set by authors of unstable submissions
    COMMUNITY = 1    # Default for new submissions
    OFFICIAL = 2     # Submitted on behalf of the Godot project


SUPPORT_LEVEL_MAX = 3


class Category(enum.IntEnum):
    """Asset categories."""
    TOOLS_2D = 0
    TOOLS_3D = 1
    SHADERS = 2
    MATERIALS = 3
    TOOLS = 4
    SCRIPTS = 5
    MISC = 6
    TEMPLATES = 7
    PROJECTS = 8
    DEMOS = 9


CATEGORY_MAX = 10


class CategoryType(enum.IntEnum):
    """
    Category grouping used for UI placement.
    Add-ons show up in the editor's AssetLib tab, projects in the
    Project Manager's Templates tab.
    """
    ADDONS = 0
    PROJECTS = 1


PROJECT_CATEGORIES = (Category.TEMPLATES, Category.PROJECTS, Category.DEMOS)

# SPDX identifiers mapped to human-readable names, kept in alphabetical order.
LICENSES = {
    "AGPL-3.0-only": "AGPLv3 only",
    "AGPL-3.0-or-later": "AGPLv3 or later",
    "Apache-2.0": "Apache 2",
    "BSD-2-Clause": "BSD 2-Clause",
    "BSD-3-Clause": "BSD 3-Clause",
    "BSL-1.0": "Boost Software License",
    "CC0-1.0": "CC0 1.0 Universal",
    "CC-BY-3.0": "CC BY 3.0 Unported",
    "CC-BY-4.0": "CC BY 4.0 International",
    "CC-BY-SA-3.0": "CC BY-SA 3.0 Unported",
    "CC-BY-SA-4.0": "CC BY-SA 4.0 International",
    "LGPL-2.1-only": "LGPLv2.1 only",
    "LGPL-2.1-or-later": "LGPLv2.1 or later",
    "LGPL-3.0-only": "LGPLv3 only",
    "LGPL-3.0-or-later": "LGPLv3 or later",
    "GPL-2.0-only": "GPLv2 only",
    "GPL-2.0-or-later": "GPLv2 or later",
    "GPL-3.0-only": "GPLv3 only",
    "GPL-3.0-or-later": "GPLv3 or later",
    "MIT": "MIT",
    "MPL-2.0": "MPLv2",
    "Unlicense": "The Unlicense License",
}

CACHEKEY_REPO_ICON = "ASSET_ICON_REPO"

_SUPPORT_LEVEL_NAMES = {
    SupportLevel.TESTING: "Testing",
    SupportLevel.COMMUNITY: "Community",
    SupportLevel.OFFICIAL: "Official",
}

_CATEGORY_NAMES = {
    Category.TOOLS_2D: "2D Tools",
    Category.TOOLS_3D: "3D Tools",
    Category.SHADERS: "Shaders",
    Category.MATERIALS: "Materials",
    Category.TOOLS: "Tools",
    Category.SCRIPTS: "Scripts",
    Category.MISC: "Misc",
    Category.TEMPLATES: "Templates",
    Category.PROJECTS: "Projects",
    Category.DEMOS: "Demos",
}

# Fork Awesome icon classes
_CATEGORY_ICONS = {
    Category.TOOLS_2D: "fa-picture-o",
    Category.TOOLS_3D: "fa-cube",
    Category.SHADERS: "fa-book",
    Category.MATERIALS: "fa-archive",
    Category.TOOLS: "fa-cogs",
    Category.SCRIPTS: "fa-file-text",
    Category.MISC: "fa-gamepad",
    Category.TEMPLATES: "fa-folder-open",
    Category.PROJECTS: "fa-folder-open",
    Category.DEMOS: "fa-folder-open",
}

# (minimum score, Tailwind classes), highest threshold first
_SCORE_COLORS = (
    (15, "text-blue-500 dark:text-blue-400"),
    (10, "text-blue-600 dark:text-blue-300"),
    (5, "text-blue-700 dark:text-blue-200"),
    (-1, "text-gray-700 dark:text-gray-500"),
)
_SCORE_COLOR_LOWEST = "text-red-700 dark:text-red-400"


def _force_https(url: str) -> str:
    if url.startswith("http://"):
        return "https://" + url[len("http://"):]
    return url


def normalize_tags(tags: str | None) -> list[str]:
    """
    Split a comma-separated tag string. Whitespace is removed, tags are
    lowercased, and empty or repeated entries are dropped.
    """
    cleaned = "".join((tags or "").split()).lower()
    normalized = []
    for tag in cleaned.split(","):
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


def render_markdown(text: str) -> str:
    """Render Markdown source to HTML."""
    return markdown.markdown(text, extensions=["extra", "sane_lists"])


class Asset(Base):
    """
    An asset published by a user (its "author").

    `modify_date` replaces the conventional `updated_at` column and
    `asset_id` the conventional `id` for compatibility with the existing
    asset library API.
    """
    __tablename__ = "assets"
    __mapper_args__ = {"eager_defaults": True}

    asset_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    blurb: Mapped[str | None] = mapped_column(String(255), nullable=True)
    _description: Mapped[str] = mapped_column("description", Text, nullable=False, default="")
    html_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    _tags: Mapped[str] = mapped_column(
        "tags",
        Text,
        nullable=False,
        default="",
        comment="Comma-separated, lowercase tag list",
    )
    category_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    cost: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="MIT",
        comment="License as an SPDX identifier",
    )
    support_level_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=SupportLevel.COMMUNITY,
    )
    _browse_url: Mapped[str] = mapped_column("browse_url", String(500), nullable=False)
    _issues_url: Mapped[str | None] = mapped_column("issues_url", String(500), nullable=True)
    changelog_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    donate_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    _icon_url: Mapped[str | None] = mapped_column("icon_url", String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    modify_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        index=True,
    )
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Sum of review polarities (+1 positive, -1 negative)",
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # ===================
    # Relationships
    # ===================
    author: Mapped["User"] = relationship("User", lazy="selectin")
    versions: Mapped[list["AssetVersion"]] = relationship(
        "AssetVersion",
        back_populates="asset",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AssetVersion.version_id",
    )
    previews: Mapped[list["AssetPreview"]] = relationship(
        "AssetPreview",
        back_populates="asset",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AssetPreview.preview_id",
    )
    reviews: Mapped[list["AssetReview"]] = relationship(
        "AssetReview",
        back_populates="asset",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: (AssetReview.created_at.desc(), AssetReview.review_id.desc()),
    )

    # ===================
    # Taxonomy lookups
    # ===================
    @staticmethod
    def get_support_level_name(support_level: int) -> str:
        """Return the given support level's name."""
        if support_level in _SUPPORT_LEVEL_NAMES:
            return _SUPPORT_LEVEL_NAMES[support_level]
        raise InvalidCodeError("support level", support_level)

    @staticmethod
    def get_category_name(category: int) -> str:
        """Return the given category's name."""
        if category in _CATEGORY_NAMES:
            return _CATEGORY_NAMES[category]
        raise InvalidCodeError("category", category)

    @staticmethod
    def get_category_icon(category: int) -> str:
        """Return the given category's Fork Awesome icon class."""
        if category in _CATEGORY_ICONS:
            return _CATEGORY_ICONS[category]
        raise InvalidCodeError("category", category)

    @staticmethod
    def get_category_type(category: int) -> CategoryType:
        """Return the given category's type (add-ons or projects)."""
        if category in PROJECT_CATEGORIES:
            return CategoryType.PROJECTS
        if 0 <= category < CATEGORY_MAX:
            return CategoryType.ADDONS
        raise InvalidCodeError("category", category)

    @property
    def category(self) -> str:
        return self.get_category_name(self.category_id)

    @property
    def category_icon(self) -> str:
        return self.get_category_icon(self.category_id)

    @property
    def category_type(self) -> CategoryType:
        return self.get_category_type(self.category_id)

    @property
    def support_level(self) -> str:
        return self.get_support_level_name(self.support_level_id)

    @property
    def license_name(self) -> str:
        # Unknown identifiers are shown as-is
        return LICENSES.get(self.cost, self.cost)

    # ===================
    # Tags
    # ===================
    @property
    def tags(self) -> list[str]:
        if self._tags:
            return self._tags.split(",")
        return []

    def set_tags_from_delimited_string(self, tags: str | None) -> None:
        """Set tags from a comma-separated string (see `normalize_tags`)."""
        self._tags = ",".join(normalize_tags(tags))

    def set_tags_from_list(self, tags: list[str]) -> None:
        """
        Set tags from an already split list.
        Entries are joined verbatim, without the normalization applied by
        `set_tags_from_delimited_string`.
        """
        self._tags = ",".join(tags)

    # ===================
    # URLs
    # ===================
    @property
    def browse_url(self) -> str:
        return self._browse_url

    @browse_url.setter
    def browse_url(self, browse_url: str) -> None:
        # Either the `.git` suffix or the trailing slashes are removed, not both
        https_url = _force_https(browse_url)
        if https_url.endswith(".git"):
            self._browse_url = https_url[: -len(".git")]
        else:
            self._browse_url = https_url.rstrip("/")

    @property
    def icon_url(self) -> str:
        """
        The icon URL set by the author. Inferring one from the repository
        is done by `IconResolver`, which needs network access.
        """
        return self._icon_url or ""

    @icon_url.setter
    def icon_url(self, icon_url: str | None) -> None:
        if icon_url:
            self._icon_url = _force_https(icon_url)

    @property
    def issues_url(self) -> str:
        # GitHub, GitLab and Bitbucket all use an `/issues` suffix
        return self._issues_url or f"{self.browse_url}/issues"

    @issues_url.setter
    def issues_url(self, issues_url: str | None) -> None:
        if issues_url:
            self._issues_url = _force_https(issues_url)

    # ===================
    # Description
    # ===================
    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, description: str | None) -> None:
        # Rendered once on write instead of on every display
        if description:
            self._description = description
            self.html_description = render_markdown(description)

    # ===================
    # Latest version
    # ===================
    @property
    def latest_version(self) -> "AssetVersion | None":
        if self.versions:
            return self.versions[-1]
        return None

    @property
    def download_url(self) -> str:
        version = self.latest_version
        return version.download_url_for(self.browse_url) if version else ""

    @property
    def download_hash(self) -> str:
        # Accepted but not verified by the editor; archive hashes aren't stable
        return ""

    @property
    def godot_version(self) -> str:
        version = self.latest_version
        return version.godot_version if version else ""

    @property
    def version_string(self) -> str:
        version = self.latest_version
        return version.version_string if version else ""

    # ===================
    # Score
    # ===================
    @property
    def score_color(self) -> str:
        """
        Tailwind CSS classes used to color the score in templates.
        Higher scores get warmer colors to attract attention.
        """
        for threshold, classes in _SCORE_COLORS:
            if self.score >= threshold:
                return classes
        return _SCORE_COLOR_LOWEST

    def __str__(self) -> str:
        return f'"{self.title}" (#{self.asset_id})'

    def __repr__(self) -> str:
        return f"<Asset(asset_id={self.asset_id}, title={self.title}, category_id={self.category_id})>"


class AssetVersion(Base):
    """A released version of an asset."""
    __tablename__ = "asset_versions"
    __mapper_args__ = {"eager_defaults": True}

    version_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    asset_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("assets.asset_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version_string: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Asset version (e.g. 1.2.0)",
    )
    godot_version: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Compatible Godot version (*, 3.x.x, 4.x.x or 4.2.x)",
    )
    _download_url: Mapped[str | None] = mapped_column("download_url", String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    asset: Mapped["Asset"] = relationship("Asset", back_populates="versions")

    @property
    def download_url(self) -> str | None:
        return self._download_url

    @download_url.setter
    def download_url(self, download_url: str | None) -> None:
        if download_url:
            self._download_url = _force_https(download_url)

    def download_url_for(self, browse_url: str) -> str:
        """
        Return the explicit download URL, or the archive URL the repository
        host serves for this version's tag.
        """
        if self._download_url:
            return self._download_url

        parts = urlsplit(browse_url)
        repository = parts.path.rstrip("/").rsplit("/", 1)[-1]
        if parts.netloc == "github.com":
            return f"{browse_url}/archive/{self.version_string}.zip"
        if parts.netloc == "gitlab.com":
            return f"{browse_url}/-/archive/{self.version_string}/{repository}-{self.version_string}.zip"
        if parts.netloc == "bitbucket.org":
            return f"{browse_url}/get/{self.version_string}.zip"
        return ""

    def __repr__(self) -> str:
        return f"<AssetVersion(asset_id={self.asset_id}, version={self.version_string})>"


class AssetReview(Base):
    """A user's review of an asset."""
    __tablename__ = "asset_reviews"
    __mapper_args__ = {"eager_defaults": True}

    review_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    asset_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("assets.asset_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    is_positive: Mapped[bool] = mapped_column(Boolean, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    asset: Mapped["Asset"] = relationship("Asset", back_populates="reviews")
    author: Mapped["User"] = relationship("User", lazy="selectin")

    @property
    def polarity(self) -> int:
        return 1 if self.is_positive else -1

    def __repr__(self) -> str:
        return f"<AssetReview(asset_id={self.asset_id}, positive={self.is_positive})>"


# Columns available to the `filter` search string
SEARCH_STRING_COLUMNS = {
    "title": SearchColumn(Asset.title, searchable=True),
    "blurb": SearchColumn(Asset.blurb, searchable=True),
    "license": SearchColumn(Asset.cost),
    "support_level_id": SearchColumn(Asset.support_level_id, kind=ColumnKind.INTEGER),
    "tags": SearchColumn(Asset._tags, kind=ColumnKind.TAGS, searchable=True),
    "created_at": SearchColumn(Asset.created_at, kind=ColumnKind.DATE),
    "updated_at": SearchColumn(Asset.modify_date, kind=ColumnKind.DATE),
    "score": SearchColumn(Asset.score, kind=ColumnKind.INTEGER),
}

# Selecting fields and sorting by unknown columns produce invalid SQL,
# offsetting without a limit produces unpaginated results
SEARCH_STRING_DISABLED_KEYWORDS = ("select", "order_by", "offset")
