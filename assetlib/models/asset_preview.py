"""
AssetPreview SQLAlchemy model.
Previews are images or videos shown on an asset's page; they live and die
with their asset.
"""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from assetlib.core.exceptions import InvalidCodeError
from assetlib.db.base import Base

if TYPE_CHECKING:
    from assetlib.models.asset import Asset


class PreviewType(enum.IntEnum):
    IMAGE = 0
    VIDEO = 1


TYPE_MAX = 2

_TYPE_NAMES = {
    PreviewType.IMAGE: "image",
    PreviewType.VIDEO: "video",
}


class AssetPreview(Base):
    """An image or video preview attached to an asset. Not timestamped."""
    __tablename__ = "asset_previews"

    preview_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    asset_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("assets.asset_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type_id: Mapped[int] = mapped_column(Integer, nullable=False, default=PreviewType.IMAGE)
    link: Mapped[str] = mapped_column(String(500), nullable=False)
    thumbnail: Mapped[str | None] = mapped_column(String(500), nullable=True)
    caption: Mapped[str | None] = mapped_column(String(255), nullable=True)

    asset: Mapped["Asset"] = relationship("Asset", back_populates="previews")

    @staticmethod
    def get_type_name(type_id: int) -> str:
        """Return the given preview type's name."""
        if type_id in _TYPE_NAMES:
            return _TYPE_NAMES[type_id]
        raise InvalidCodeError("asset preview type", type_id)

    @property
    def type(self) -> str:
        return self.get_type_name(self.type_id)

    def __repr__(self) -> str:
        return f"<AssetPreview(asset_id={self.asset_id}, type_id={self.type_id})>"
