"""
Stored File Model.

Metadata for an uploaded blob. The bytes live in blob storage under
``storage_key``. Sharing is an append-only set kept in ``file_shares``.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.session import Base
from .mixins import UUIDPrimaryKeyMixin, utc_now

if TYPE_CHECKING:
    from .doctor import Doctor
    from .user import User

DEFAULT_CATEGORY = "Uncategorized"

file_shares = Table(
    "file_shares",
    Base.metadata,
    Column("file_id", String(36), ForeignKey("files.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("shared_at", DateTime(timezone=True), nullable=False, default=utc_now),
)


class StoredFile(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "files"

    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(1000), nullable=False, unique=True)
    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    file_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default=DEFAULT_CATEGORY)
    tags: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)

    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    doctor_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("doctors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    owner: Mapped[User] = relationship(lazy="selectin")
    doctor: Mapped[Doctor | None] = relationship(lazy="selectin")
    shared_with: Mapped[list[User]] = relationship(secondary=file_shares, lazy="selectin")

    __table_args__ = (Index("ix_files_owner_category", "owner_id", "category"),)

    def __repr__(self) -> str:
        return f"<StoredFile(id={self.id}, file_name='{self.file_name}')>"
