"""
Backfill writer for externally sourced games.

Normalizes provider games and inserts them into the catalog store,
skipping titles that already exist and tolerating per-item failures.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from game_catalog.backfill.schemas import BackfillItemResult, BackfillReport, BackfillStatus
from game_catalog.catalog.errors import BackfillError, DuplicateGameError
from game_catalog.catalog.store import CatalogStore
from game_catalog.logger import get_logger
from game_catalog.provider.contracts import RAWGGame
from game_catalog.provider.normalize import normalize_game

ProviderGameInput = RAWGGame | Mapping[str, Any]


class BackfillWriter:
    """
    Persists provider games into the catalog.

    De-duplication happens in two places: a case-insensitive title
    pre-check here, and the store's (title, developer) uniqueness
    constraint, which is what actually holds when two writers race.

    Example:
        >>> writer = BackfillWriter(store, max_count=10)
        >>> report = await writer.persist_batch(provider_games)
        >>> report.inserted, report.skipped, report.failed
    """

    def __init__(self, store: CatalogStore, *, max_count: int = 10) -> None:
        """
        Initialize the backfill writer.

        Args:
            store: Catalog store to insert into
            max_count: Default cap on games persisted per batch
        """
        self._store = store
        self._max_count = max_count
        self._logger = get_logger(__name__, component="backfill_writer")

    @property
    def max_count(self) -> int:
        return self._max_count

    async def persist_batch(
        self,
        games: Sequence[ProviderGameInput],
        max_count: int | None = None,
    ) -> BackfillReport:
        """
        Persist up to ``max_count`` provider games.

        One item's failure never aborts the batch; failures are collected
        into the report and logged.

        Args:
            games: Provider games, validated or as raw mappings
            max_count: Cap for this batch (writer default if None)

        Returns:
            BackfillReport: Per-item outcomes and counts
        """
        cap = self._max_count if max_count is None else max_count
        batch = list(games)[: max(cap, 0)]
        report = BackfillReport(total_received=len(games), total_requested=len(batch))

        self._logger.info(
            "Starting backfill",
            batch_id=str(report.batch_id),
            received=len(games),
            requested=len(batch),
        )

        for game in batch:
            report.add(await self._persist_one(game))

        report.complete()

        self._logger.info(
            "Backfill complete",
            batch_id=str(report.batch_id),
            inserted=report.inserted,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    async def _persist_one(self, game: ProviderGameInput) -> BackfillItemResult:
        provider_id, title = _identify(game)

        try:
            if not isinstance(game, RAWGGame):
                game = RAWGGame.model_validate(game)
            record = normalize_game(game)

            if await self._store.title_exists(record.title):
                self._logger.debug(
                    "Title already stored, skipping",
                    provider_id=provider_id,
                    title=record.title,
                )
                return BackfillItemResult(
                    provider_id=provider_id,
                    title=record.title,
                    status=BackfillStatus.SKIPPED,
                    reason="title already exists",
                )

            game_id = await self._store.insert(record)
            return BackfillItemResult(
                provider_id=provider_id,
                title=record.title,
                status=BackfillStatus.INSERTED,
                game_id=game_id,
            )

        except DuplicateGameError:
            # Another writer inserted the same game between check and insert
            return BackfillItemResult(
                provider_id=provider_id,
                title=title,
                status=BackfillStatus.SKIPPED,
                reason="uniqueness constraint",
            )

        except Exception as e:  # noqa: BLE001
            error = BackfillError(
                f"Could not backfill game: {e.__class__.__name__}",
                provider_id=provider_id,
                title=title,
                original_error=e,
            )
            self._logger.warning(
                "Backfill item failed",
                provider_id=error.provider_id,
                title=error.title,
                error=str(e),
                exc_info=error.original_error,
            )
            return BackfillItemResult(
                provider_id=error.provider_id,
                title=error.title,
                status=BackfillStatus.FAILED,
                reason=f"{e.__class__.__name__}: {e}",
            )


def _identify(game: ProviderGameInput) -> tuple[int | None, str | None]:
    """Best-effort provider id and title, for reporting malformed items."""
    if isinstance(game, RAWGGame):
        return game.id, game.name
    provider_id = game.get("id") if isinstance(game, Mapping) else None
    title = game.get("name") if isinstance(game, Mapping) else None
    return (
        provider_id if isinstance(provider_id, int) else None,
        title if isinstance(title, str) else None,
    )
