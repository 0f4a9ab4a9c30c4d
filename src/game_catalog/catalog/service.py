"""
Catalog service: request-level semantics on top of the store.

Parses the raw parameters a routing layer receives (comma-separated
genres, ``limit=all``, sort names) and delegates to the store, the
search orchestrator and the backfill writer.
"""

from collections.abc import Mapping
from typing import Any

from game_catalog.backfill.schemas import BackfillReport
from game_catalog.backfill.writer import BackfillWriter
from game_catalog.catalog.errors import NotFoundError, ValidationError
from game_catalog.catalog.schemas import (
    GameMode,
    GameRecord,
    SearchFilters,
)
from game_catalog.catalog.store import DEFAULT_LIST_LIMIT, CatalogStore
from game_catalog.logger import get_logger
from game_catalog.provider.rawg import RAWGProvider
from game_catalog.search.orchestrator import SearchOrchestrator, SearchResult

UNBOUNDED_LIMIT = "all"
DEFAULT_FEED_LIMIT = 150


def parse_genres(value: str | None) -> frozenset[str]:
    """Split a comma-separated genre parameter, dropping blanks."""
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


def parse_rating(value: str | float | None) -> float | None:
    """Parse the minimum rating parameter; blank means no filter."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"review_rating must be numeric, got {value!r}",
            field="review_rating",
            original_error=e,
        ) from e


def parse_game_mode(value: str | None) -> GameMode | None:
    """Parse the game mode parameter; blank means no filter."""
    if not value:
        return None
    try:
        return GameMode(value.strip().lower())
    except ValueError as e:
        allowed = ", ".join(mode.value for mode in GameMode)
        raise ValidationError(
            f"game_mode must be one of {allowed}, got {value!r}",
            field="game_mode",
            original_error=e,
        ) from e


def parse_list_limit(value: str | int | None, default: int = DEFAULT_LIST_LIMIT) -> int | None:
    """
    Resolve a listing limit parameter.

    ``"all"`` means unbounded (None), an absent value means ``default``,
    and a positive integer is used as-is. Anything else is treated as
    unbounded.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, str) and value.strip().lower() == UNBOUNDED_LIMIT:
        return None
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return None
    return limit if limit > 0 else None


class CatalogService:
    """
    Entry point for every catalog operation a client can request.

    Example:
        >>> service = CatalogService(store, orchestrator, writer, provider)
        >>> await service.search_games(query="portal", genre="Puzzle,Action")
        >>> await service.get_all_games(limit="all")
    """

    def __init__(
        self,
        store: CatalogStore,
        orchestrator: SearchOrchestrator,
        writer: BackfillWriter,
        provider: RAWGProvider,
        *,
        default_list_limit: int = DEFAULT_LIST_LIMIT,
        default_feed_limit: int = DEFAULT_FEED_LIMIT,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._writer = writer
        self._provider = provider
        self._default_list_limit = default_list_limit
        self._default_feed_limit = default_feed_limit
        self._logger = get_logger(__name__, component="catalog_service")

    async def search_games(
        self,
        query: str | None = None,
        genre: str | None = None,
        review_rating: str | float | None = None,
        game_mode: str | None = None,
    ) -> SearchResult:
        """Search locally, escalating to the provider on a miss with a query."""
        filters = SearchFilters(
            query=query,
            genres=parse_genres(genre),
            min_rating=parse_rating(review_rating),
            game_mode=parse_game_mode(game_mode),
        )
        return await self._orchestrator.search(filters)

    async def get_all_games(self, limit: str | int | None = None) -> list[GameRecord]:
        """List games; ``limit="all"`` lifts the default cap."""
        resolved = parse_list_limit(limit, self._default_list_limit)
        if resolved is None and limit is not None:
            self._logger.debug("Listing without a cap", limit=limit)
        return await self._store.get_all(resolved)

    async def get_feed(self, sort: str | None = None, limit: int | None = None) -> list[GameRecord]:
        """Home feed: ``sort="random"`` samples, anything else is trending."""
        limit = limit if limit and limit > 0 else self._default_feed_limit
        if (sort or "").strip().lower() == "random":
            return await self._store.get_random_sample(limit)
        return await self._store.get_trending(limit)

    async def get_game(self, game_id: int) -> GameRecord:
        """
        Fetch one game.

        Raises:
            NotFoundError: If the game does not exist
        """
        game = await self._store.get_by_id(game_id)
        if game is None:
            raise NotFoundError(f"Game {game_id} not found", game_id=game_id)
        return game

    async def create_game(self, body: Mapping[str, Any]) -> int:
        """Create a game from a request body; tags and platforms default to empty."""
        return await self._store.insert(dict(body))

    async def edit_game(self, game_id: int, body: Mapping[str, Any]) -> None:
        """Apply the fields present in the request body, leaving the rest unchanged."""
        await self._store.update(game_id, body)

    async def remove_game(self, game_id: int) -> None:
        await self._store.delete(game_id)

    async def refresh_popular(self, count: int) -> BackfillReport:
        """
        Replace the catalog with the provider's currently popular games.

        Provider failures propagate: nothing is cleared unless the fetch
        succeeded.
        """
        games = await self._provider.get_popular(count)
        removed = await self._store.clear()
        report = await self._writer.persist_batch(games, max_count=count)

        self._logger.info(
            "Catalog refreshed from provider",
            removed=removed,
            fetched=len(games),
            inserted=report.inserted,
            failed=report.failed,
        )
        return report
