"""
Data contracts for RAWG API responses.

These Pydantic models define the expected structure of data from the
RAWG ``/games`` endpoints. Only the fields the catalog maps are modeled;
everything else in the payload is ignored.
"""

from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProviderId = Annotated[int, Field(gt=0, description="RAWG game id")]


class NamedRef(BaseModel):
    """A named entity reference (genre, developer, publisher, platform)."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    name: str
    slug: str = ""


class RAWGTag(NamedRef):
    """A user tag. RAWG tags carry a language code."""

    language: str = Field(default="eng")


class RAWGPlatformEntry(BaseModel):
    """Platform wrapper as returned in game listings."""

    model_config = ConfigDict(extra="ignore")

    platform: NamedRef


class RAWGGame(BaseModel):
    """
    A game as returned by RAWG search and listing endpoints.

    ``description_raw`` is only present on the detail endpoint;
    ``playtime`` is the average playtime in hours.
    """

    model_config = ConfigDict(extra="ignore")

    id: ProviderId
    name: str
    slug: str = ""
    description_raw: str = Field(default="")
    released: date | None = Field(default=None)
    tba: bool = Field(default=False)
    background_image: str | None = Field(default=None)
    rating: float = Field(default=0.0, ge=0)
    rating_top: int = Field(default=5)
    playtime: int = Field(default=0, ge=0)
    genres: list[NamedRef] = Field(default_factory=list)
    tags: list[RAWGTag] = Field(default_factory=list)
    platforms: list[RAWGPlatformEntry] = Field(default_factory=list)
    developers: list[NamedRef] = Field(default_factory=list)
    publishers: list[NamedRef] = Field(default_factory=list)

    @field_validator("genres", "tags", "platforms", "developers", "publishers", mode="before")
    @classmethod
    def coerce_null_lists(cls, v: Any) -> Any:
        """RAWG sends null instead of an empty list for some games."""
        return [] if v is None else v

    @field_validator("released", mode="before")
    @classmethod
    def coerce_released(cls, v: Any) -> Any:
        """Unparseable or empty release dates become unknown."""
        if v in (None, ""):
            return None
        if isinstance(v, str):
            try:
                return date.fromisoformat(v)
            except ValueError:
                return None
        return v

    @field_validator("description_raw", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def genre_names(self) -> list[str]:
        """Extract genre names as simple list."""
        return [g.name for g in self.genres]

    @property
    def tag_names(self) -> list[str]:
        """English tag names, in provider order."""
        return [t.name for t in self.tags if t.language == "eng"]

    @property
    def platform_names(self) -> list[str]:
        """Extract platform names as simple list."""
        return [p.platform.name for p in self.platforms]

    @property
    def developer_names(self) -> list[str]:
        return [d.name for d in self.developers]

    @property
    def publisher_names(self) -> list[str]:
        return [p.name for p in self.publishers]


class RAWGGameList(BaseModel):
    """
    Paginated envelope of the ``/games`` endpoint.

    Results stay as raw mappings so one malformed game does not
    invalidate the whole page.
    """

    model_config = ConfigDict(extra="ignore")

    count: int = Field(default=0, ge=0)
    next: str | None = None
    previous: str | None = None
    results: list[dict[str, Any]] = Field(default_factory=list)
