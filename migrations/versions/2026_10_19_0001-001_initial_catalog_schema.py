"""Initial catalog schema

Creates:
- users (asset authors and reviewers)
- assets, with the comma-separated tag list and the derived score
- asset_versions, asset_previews and asset_reviews, deleted with their asset

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False, comment="Public username"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_name", "users", ["name"], unique=True)

    op.create_table(
        "assets",
        sa.Column("asset_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("blurb", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("html_description", sa.Text(), nullable=False),
        sa.Column("tags", sa.Text(), nullable=False, comment="Comma-separated, lowercase tag list"),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("cost", sa.String(50), nullable=False, comment="License as an SPDX identifier"),
        sa.Column("support_level_id", sa.Integer(), nullable=False),
        sa.Column("browse_url", sa.String(500), nullable=False),
        sa.Column("issues_url", sa.String(500), nullable=True),
        sa.Column("changelog_url", sa.String(500), nullable=True),
        sa.Column("donate_url", sa.String(500), nullable=True),
        sa.Column("icon_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("modify_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column(
            "score",
            sa.Integer(),
            nullable=False,
            comment="Sum of review polarities (+1 positive, -1 negative)",
        ),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], name="fk_assets_author_id_users"),
        sa.PrimaryKeyConstraint("asset_id", name="pk_assets"),
    )
    op.create_index("ix_assets_title", "assets", ["title"])
    op.create_index("ix_assets_category_id", "assets", ["category_id"])
    op.create_index("ix_assets_modify_date", "assets", ["modify_date"])
    op.create_index("ix_assets_author_id", "assets", ["author_id"])

    op.create_table(
        "asset_versions",
        sa.Column("version_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("asset_id", sa.Integer(), nullable=False),
        sa.Column("version_string", sa.String(50), nullable=False, comment="Asset version (e.g. 1.2.0)"),
        sa.Column(
            "godot_version",
            sa.String(20),
            nullable=False,
            comment="Compatible Godot version (*, 3.x.x, 4.x.x or 4.2.x)",
        ),
        sa.Column("download_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["asset_id"],
            ["assets.asset_id"],
            name="fk_asset_versions_asset_id_assets",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("version_id", name="pk_asset_versions"),
    )
    op.create_index("ix_asset_versions_asset_id", "asset_versions", ["asset_id"])

    op.create_table(
        "asset_previews",
        sa.Column("preview_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("asset_id", sa.Integer(), nullable=False),
        sa.Column("type_id", sa.Integer(), nullable=False),
        sa.Column("link", sa.String(500), nullable=False),
        sa.Column("thumbnail", sa.String(500), nullable=True),
        sa.Column("caption", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(
            ["asset_id"],
            ["assets.asset_id"],
            name="fk_asset_previews_asset_id_assets",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("preview_id", name="pk_asset_previews"),
    )
    op.create_index("ix_asset_previews_asset_id", "asset_previews", ["asset_id"])

    op.create_table(
        "asset_reviews",
        sa.Column("review_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("asset_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("is_positive", sa.Boolean(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["asset_id"],
            ["assets.asset_id"],
            name="fk_asset_reviews_asset_id_assets",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], name="fk_asset_reviews_author_id_users"),
        sa.PrimaryKeyConstraint("review_id", name="pk_asset_reviews"),
    )
    op.create_index("ix_asset_reviews_asset_id", "asset_reviews", ["asset_id"])
    op.create_index("ix_asset_reviews_author_id", "asset_reviews", ["author_id"])


def downgrade() -> None:
    op.drop_table("asset_reviews")
    op.drop_table("asset_previews")
    op.drop_table("asset_versions")
    op.drop_table("assets")
    op.drop_table("users")
