"""
Search orchestrator with provider escalation.

Resolves a search against the local catalog first. When nothing matches
and a text query was given, escalates to the external provider, returns
the normalized provider results straight away, and hands a bounded
prefix of them to the backfill dispatcher without waiting for it.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from game_catalog.backfill.dispatcher import BackfillDispatcher
from game_catalog.catalog.schemas import GameRecord, SearchFilters
from game_catalog.catalog.store import CatalogStore, utcnow
from game_catalog.logger import get_logger
from game_catalog.provider.base import (
    ProviderError,
    ProviderFormatError,
    ProviderUnavailableError,
)
from game_catalog.provider.contracts import RAWGGame
from game_catalog.provider.normalize import normalize_game


class SearchProvider(Protocol):
    """What the orchestrator needs from an external provider."""

    async def search_by_text(self, query: str, limit: int | None = None) -> list[RAWGGame]: ...


class SearchOutcome(str, Enum):
    """How a search request was resolved."""

    LOCAL = "local"  # local results returned
    EMPTY = "empty"  # nothing found, or no query to escalate
    ESCALATED = "escalated"  # provider results returned, backfill dispatched
    DEGRADED = "degraded"  # provider failed, empty results returned


@dataclass
class SearchResult:
    """Result of one search request."""

    games: list[GameRecord]
    outcome: SearchOutcome
    backfill: asyncio.Task | None = None
    backfill_count: int = 0
    duration_ms: float = 0.0
    provider_error: str | None = None

    @property
    def escalated(self) -> bool:
        return self.outcome in (SearchOutcome.ESCALATED, SearchOutcome.DEGRADED)


class SearchOrchestrator:
    """
    Coordinates local lookup, provider escalation and backfill.

    Example:
        >>> orchestrator = SearchOrchestrator(store, provider, dispatcher)
        >>> result = await orchestrator.search(SearchFilters(query="portal"))
        >>> result.outcome, [g.title for g in result.games]
    """

    def __init__(
        self,
        store: CatalogStore,
        provider: SearchProvider,
        dispatcher: BackfillDispatcher,
        *,
        provider_limit: int = 20,
        backfill_limit: int = 10,
        provider_timeout: float = 15.0,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            store: Local catalog store
            provider: External provider used on a local miss
            dispatcher: Detached backfill scheduler
            provider_limit: Maximum provider results requested
            backfill_limit: Maximum provider results handed to backfill
            provider_timeout: Upper bound in seconds for the provider call
        """
        self._store = store
        self._provider = provider
        self._dispatcher = dispatcher
        self._provider_limit = provider_limit
        self._backfill_limit = backfill_limit
        self._provider_timeout = provider_timeout
        self._logger = get_logger(__name__, component="search_orchestrator")

    async def search(self, filters: SearchFilters) -> SearchResult:
        """Run one search request through the lookup/escalation state machine."""
        start_time = time.perf_counter()

        local = await self._store.search(filters)
        if local:
            return self._respond(local, SearchOutcome.LOCAL, start_time)

        if not filters.has_query:
            return self._respond([], SearchOutcome.EMPTY, start_time)

        return await self._escalate(filters, start_time)

    async def _escalate(self, filters: SearchFilters, start_time: float) -> SearchResult:
        query = filters.query or ""
        self._logger.info("No local results, escalating to provider", query=query)

        try:
            provider_games = await asyncio.wait_for(
                self._provider.search_by_text(query, self._provider_limit),
                timeout=self._provider_timeout,
            )
        except asyncio.TimeoutError as e:
            error: ProviderError = ProviderUnavailableError(
                f"Provider did not answer within {self._provider_timeout}s",
                original_error=e,
            )
            return self._degrade(query, error, start_time)
        except (ProviderUnavailableError, ProviderFormatError) as e:
            return self._degrade(query, e, start_time)

        if not provider_games:
            self._logger.info("Provider returned no games", query=query)
            return self._respond([], SearchOutcome.EMPTY, start_time)

        games = self._to_transient_records(provider_games)

        prefix = provider_games[: self._backfill_limit]
        backfill = await self._dispatcher.dispatch(prefix)

        self._logger.info(
            "Returning provider results",
            query=query,
            results=len(games),
            backfill_count=len(prefix),
        )
        result = self._respond(games, SearchOutcome.ESCALATED, start_time)
        result.backfill = backfill
        result.backfill_count = len(prefix)
        return result

    def _to_transient_records(self, provider_games: list[RAWGGame]) -> list[GameRecord]:
        """
        Normalize provider games into response records.

        The provider id stands in for ``id`` and both timestamps are the
        current time; none of this is persisted.
        """
        now: datetime = utcnow()
        records: list[GameRecord] = []
        for game in provider_games:
            try:
                normalized = normalize_game(game)
            except ProviderFormatError as e:
                self._logger.warning(
                    "Dropping provider game from response",
                    provider_id=game.id,
                    error=str(e),
                )
                continue
            records.append(
                GameRecord(
                    id=game.id,
                    created_at=now,
                    updated_at=now,
                    **normalized.model_dump(),
                )
            )
        return records

    def _degrade(self, query: str, error: ProviderError, start_time: float) -> SearchResult:
        self._logger.warning(
            "Provider escalation failed, returning empty results",
            query=query,
            error=str(error),
            error_type=error.__class__.__name__,
            status_code=error.status_code,
        )
        result = self._respond([], SearchOutcome.DEGRADED, start_time)
        result.provider_error = str(error)
        return result

    def _respond(
        self, games: list[GameRecord], outcome: SearchOutcome, start_time: float
    ) -> SearchResult:
        duration_ms = (time.perf_counter() - start_time) * 1000
        self._logger.debug(
            "Search resolved",
            outcome=outcome.value,
            results=len(games),
            duration_ms=round(duration_ms, 2),
        )
        return SearchResult(games=games, outcome=outcome, duration_ms=duration_ms)
