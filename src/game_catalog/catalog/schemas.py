"""
Canonical game schemas.

Every game is normalized into these shapes regardless of whether it
was submitted by a client or sourced from the external provider.

Units:
    playtime_estimate: hours
    review_rating: 0 to 5 inclusive
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_RATING = 5.0


class GameMode(str, Enum):
    """How a game is played."""

    SINGLE_PLAYER = "single-player"
    MULTIPLAYER = "multiplayer"
    BOTH = "both"


_TEXT_FIELDS = ("description", "genre", "developer", "publisher", "cover_image")
_LIST_FIELDS = ("tags", "platforms")


class GameFields(BaseModel):
    """Attributes shared by every game shape."""

    title: str = Field(..., max_length=255, description="Display title")
    description: str = Field(default="", description="Long description")
    genre: str = Field(default="", description="Comma-separated genres")
    tags: list[str] = Field(default_factory=list)
    platforms: list[str] = Field(default_factory=list)
    playtime_estimate: float | None = Field(
        default=None, ge=0, description="Average playtime in hours"
    )
    developer: str = Field(default="")
    publisher: str = Field(default="")
    game_mode: GameMode = Field(default=GameMode.SINGLE_PLAYER)
    release_date: date | None = Field(default=None)
    review_rating: float | None = Field(default=None, ge=0, le=MAX_RATING)
    cover_image: str = Field(default="", description="Cover image URL")

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_missing_text(cls, v: Any) -> Any:
        """Treat explicit nulls as empty strings."""
        return "" if v is None else v

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def coerce_missing_list(cls, v: Any) -> Any:
        """Treat explicit nulls as empty sequences."""
        return [] if v is None else v


class GameCreate(GameFields):
    """A game as submitted for insertion: no id, no timestamps."""

    model_config = ConfigDict(extra="forbid")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Titles are required and cannot be blank."""
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class GameUpdate(BaseModel):
    """
    Partial update: only fields explicitly present are applied.

    Use ``model_dump(exclude_unset=True)`` to get the supplied fields.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    genre: str | None = None
    tags: list[str] | None = None
    platforms: list[str] | None = None
    playtime_estimate: float | None = Field(default=None, ge=0)
    developer: str | None = None
    publisher: str | None = None
    game_mode: GameMode | None = None
    release_date: date | None = None
    review_rating: float | None = Field(default=None, ge=0, le=MAX_RATING)
    cover_image: str | None = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_missing_text(cls, v: Any) -> Any:
        """A null text field clears it to an empty string."""
        return "" if v is None else v

    @field_validator(*_LIST_FIELDS, mode="before")
    @classmethod
    def coerce_missing_list(cls, v: Any) -> Any:
        """A null tag or platform list clears it to an empty sequence."""
        return [] if v is None else v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        """A supplied title cannot be null or blank."""
        if v is None or not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()

    @field_validator("game_mode")
    @classmethod
    def validate_game_mode(cls, v: GameMode | None) -> GameMode:
        """A supplied game mode cannot be null."""
        if v is None:
            raise ValueError("game_mode must not be null")
        return v

    def supplied_fields(self) -> dict[str, Any]:
        """Return only the fields the caller actually set."""
        return self.model_dump(exclude_unset=True)


class GameRecord(GameFields):
    """A game as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Local id, or provider id for transient records")
    created_at: datetime
    updated_at: datetime


class SearchFilters(BaseModel):
    """Filter set for a catalog search. Every filter is optional."""

    query: str | None = None
    genres: frozenset[str] = Field(default_factory=frozenset)
    min_rating: float | None = None
    game_mode: GameMode | None = None

    @field_validator("query", mode="before")
    @classmethod
    def normalize_query(cls, v: Any) -> Any:
        """Blank queries count as no query."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("genres", mode="before")
    @classmethod
    def normalize_genres(cls, v: Any) -> Any:
        """Drop blank genre filters."""
        if v is None:
            return frozenset()
        return frozenset(g.strip() for g in v if isinstance(g, str) and g.strip())

    @property
    def has_query(self) -> bool:
        """Check if a text query was supplied."""
        return self.query is not None
