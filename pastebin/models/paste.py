"""
Pastebin Backend - Paste SQLAlchemy Model
==========================================

What:  ORM model representing the `pastes` table.
Who:   Used by PasteStore for CRUD operations and by Alembic for schema management.

Table Design:
    - id: short generated string (see services/identifiers.py), primary key,
      also the cache key and the URL path segment
    - timestamp: creation time, UTC with timezone
    - content: TEXT, never indexed
    - email: creator identity, checked on delete
    - title / language: optional, stored as given

    Index on timestamp DESC serves the archive query
    (SELECT id, title, email ... ORDER BY timestamp DESC).
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pastebin.database import Base

MAX_TITLE_LENGTH = 255
MAX_LANGUAGE_LENGTH = 64


class Paste(Base):
    """
    A stored text snippet.

    Lifecycle:
        1. Inserted by PasteService.create (id and timestamp generated then)
        2. Read any number of times; no column is ever updated
        3. Deleted only by its owner
    """

    __tablename__ = "pastes"

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment="Short generated identifier, also used as cache key and URL path",
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this paste was created (UTC)",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Paste body",
    )

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        index=True,
        comment="Identity of the creator; only this identity may delete the paste",
    )

    title: Mapped[str] = mapped_column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
        default="",
        comment="Optional display label",
    )

    # Stored verbatim; nothing interprets it
    language: Mapped[str] = mapped_column(
        String(MAX_LANGUAGE_LENGTH),
        nullable=False,
        default="",
        comment="Optional language hint",
    )

    __table_args__ = (
        Index("idx_pastes_timestamp", timestamp.desc()),
    )

    def __repr__(self) -> str:
        return f"<Paste(id='{self.id}', email='{self.email}', timestamp='{self.timestamp}')>"
