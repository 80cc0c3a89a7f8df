"""Catalog models: assets, tags, types and the asset/tag association."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from asset_catalog.engine.models.base import Base, TimestampMixin

NAME_MAX = 100
TAG_NAME_MAX = 50
TYPE_NAME_MAX = 50
AUTHOR_MAX = 50
MATERIAL_MAX = 50
PASTE_LINK_MAX = 150
OWNER_REF_MAX = 50


class AssetType(Base):
    """Asset type (e.g. effect, show). Read-only to the catalog core."""

    __tablename__ = "types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(TYPE_NAME_MAX), nullable=False)

    def __repr__(self) -> str:
        return f"<AssetType id={self.id} name={self.name!r}>"


class Tag(Base):
    """Tag with a unique name."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tag id={self.id} name={self.name!r}>"


class Asset(Base, TimestampMixin):
    """Community-submitted asset.

    ``material``, ``paste_link`` are frozen once ``approved`` is set.
    """

    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(NAME_MAX), nullable=False, index=True)
    type_id: Mapped[int] = mapped_column(ForeignKey("types.id"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author: Mapped[str] = mapped_column(String(AUTHOR_MAX), nullable=False)
    material: Mapped[str] = mapped_column(String(MATERIAL_MAX), nullable=False)
    paste_link: Mapped[str] = mapped_column(String(PASTE_LINK_MAX), nullable=False)
    raw_data: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner_ref: Mapped[str] = mapped_column(String(OWNER_REF_MAX), nullable=False)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    approved_by: Mapped[str | None] = mapped_column(
        String(OWNER_REF_MAX), nullable=True, default=None
    )

    def __repr__(self) -> str:
        return f"<Asset id={self.id} name={self.name!r} approved={self.approved}>"


class AssetTag(Base):
    """Many-to-many link between assets and tags."""

    __tablename__ = "asset_tags"

    asset_id: Mapped[int] = mapped_column(
        ForeignKey("assets.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[int] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    def __repr__(self) -> str:
        return f"<AssetTag asset={self.asset_id} tag={self.tag_id}>"
