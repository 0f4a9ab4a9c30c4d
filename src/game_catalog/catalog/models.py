"""
SQLAlchemy table definitions for the catalog.

Tags and platforms are JSON columns (serialized text on backends
without a native array type).
"""

from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from game_catalog.database import Base

UNIQUE_CONSTRAINT = "uq_games_title_developer"


class GameRow(Base):
    """One persisted game."""

    __tablename__ = "games"
    __table_args__ = (
        UniqueConstraint("title_key", "developer_key", name=UNIQUE_CONSTRAINT),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    genre: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    platforms: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    playtime_estimate: Mapped[float | None] = mapped_column(Float, nullable=True)
    developer: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    publisher: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    game_mode: Mapped[str] = mapped_column(String(20), nullable=False, default="single-player")
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    review_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    cover_image: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Lower-cased copies backing the uniqueness guard and title and genre lookups
    title_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    developer_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    genre_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<GameRow id={self.id} title={self.title!r}>"
