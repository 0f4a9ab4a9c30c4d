"""
RAWG video game database provider.

Searches games by free text and lists popular games. Results are
returned as validated RAWGGame contracts; map them into the catalog
shape with ``normalize_game``.
"""

import time
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from game_catalog.config import RAWGConfig, get_settings
from game_catalog.provider.base import (
    BaseProvider,
    ProviderFormatError,
    ProviderUnavailableError,
)
from game_catalog.provider.contracts import RAWGGame, RAWGGameList
from game_catalog.provider.rate_limiter import RateLimiter, RateLimiterConfig

# RAWG rejects larger pages
MAX_PAGE_SIZE = 40


class RAWGProvider(BaseProvider):
    """
    Client for the RAWG ``/games`` endpoints.

    Example:
        >>> async with RAWGProvider() as provider:
        ...     games = await provider.search_by_text("portal", limit=5)
        ...     print([g.name for g in games])
    """

    def __init__(
        self,
        *,
        config: RAWGConfig | None = None,
        rate_limiter: RateLimiter | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the RAWG provider.

        Args:
            config: RAWG configuration (uses settings if None)
            rate_limiter: Custom rate limiter (creates default if None)
            **kwargs: Arguments passed to BaseProvider
        """
        self._config = config or get_settings().rawg
        kwargs.setdefault("timeout", float(self._config.timeout_seconds))
        super().__init__(**kwargs)
        self._rate_limiter = rate_limiter or RateLimiter(
            RateLimiterConfig(requests_per_minute=self._config.requests_per_minute)
        )

    @property
    def source_name(self) -> str:
        return "rawg"

    @property
    def games_url(self) -> str:
        return f"{self._config.base_url.rstrip('/')}/games"

    def _parse_response(self, raw_data: Any) -> RAWGGameList:
        """
        Validate the paginated envelope.

        Raises:
            ProviderFormatError: If the envelope doesn't match the schema
        """
        try:
            return RAWGGameList.model_validate(raw_data)
        except PydanticValidationError as e:
            raise ProviderFormatError(
                f"Response validation failed: {e}",
                source=self.source_name,
                endpoint=self.games_url,
                original_error=e,
            ) from e

    def _parse_games(self, page: RAWGGameList) -> list[RAWGGame]:
        """Validate each result, skipping the ones that are malformed."""
        games: list[RAWGGame] = []
        for item in page.results:
            try:
                games.append(RAWGGame.model_validate(item))
            except PydanticValidationError as e:
                self._logger.warning(
                    "Skipping malformed game",
                    provider_id=item.get("id"),
                    error_count=e.error_count(),
                )
        return games

    async def _fetch_page(self, params: dict[str, Any]) -> RAWGGameList:
        if not self._config.has_api_key:
            raise ProviderUnavailableError(
                "RAWG API key is not configured",
                source=self.source_name,
                endpoint=self.games_url,
            )

        await self._rate_limiter.acquire()
        raw_data = await self._get_json(
            self.games_url,
            params={"key": self._config.api_key.get_secret_value(), **params},
        )
        return self._parse_response(raw_data)

    async def search_by_text(self, query: str, limit: int | None = None) -> list[RAWGGame]:
        """
        Search games by free text.

        Args:
            query: Search text
            limit: Maximum results (defaults to the configured page size)

        Raises:
            ProviderUnavailableError: On network, timeout or HTTP failure
            ProviderFormatError: On an unparsable payload
        """
        page_size = min(limit or self._config.search_page_size, MAX_PAGE_SIZE)
        start_time = time.perf_counter()

        self._logger.info("Searching provider", query=query, page_size=page_size)

        page = await self._fetch_page({"search": query, "page_size": page_size})
        games = self._parse_games(page)[:page_size]

        self._logger.info(
            "Provider search complete",
            query=query,
            results=len(games),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return games

    async def get_popular(self, limit: int) -> list[RAWGGame]:
        """
        List popular games, most recently added to user libraries first.

        Pages through results until ``limit`` games are collected or the
        provider has no more pages.
        """
        games: list[RAWGGame] = []
        page_number = 1
        # RAWG offsets pages by page_size, so it must not change between pages
        page_size = min(limit, MAX_PAGE_SIZE)
        start_time = time.perf_counter()

        self._logger.info("Fetching popular games", limit=limit)

        while len(games) < limit:
            page = await self._fetch_page(
                {
                    "ordering": "-added",
                    "page": page_number,
                    "page_size": page_size,
                }
            )
            games.extend(self._parse_games(page))

            if not page.next or not page.results:
                break
            page_number += 1

        self._logger.info(
            "Popular games fetched",
            results=len(games[:limit]),
            pages=page_number,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return games[:limit]
