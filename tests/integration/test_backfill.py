"""Integration tests for the backfill writer and dispatcher."""

import asyncio
from collections.abc import Sequence

import pytest

from game_catalog.backfill.dispatcher import BackfillDispatcher
from game_catalog.backfill.schemas import BackfillReport, BackfillStatus
from game_catalog.backfill.writer import BackfillWriter, ProviderGameInput
from game_catalog.catalog.schemas import GameMode
from game_catalog.catalog.store import CatalogStore
from tests.factories import rawg_game, rawg_payload


class CrashingWriter(BackfillWriter):
    """Writer whose whole batch blows up."""

    async def persist_batch(
        self, games: Sequence[ProviderGameInput], max_count: int | None = None
    ) -> BackfillReport:
        raise RuntimeError("connection pool exhausted")


class TestBackfillWriter:
    """Tests for BackfillWriter.persist_batch."""

    @pytest.mark.asyncio
    async def test_inserts_normalized_games(self, store: CatalogStore, writer: BackfillWriter) -> None:
        report = await writer.persist_batch(
            [
                rawg_game(1, "Hades"),
                rawg_game(
                    2,
                    "Overcooked",
                    tags=[{"name": "Local Co-Op", "language": "eng"}],
                ),
            ]
        )

        assert report.inserted == 2
        assert report.completed_at is not None
        games = {g.title: g for g in await store.get_all(None)}
        assert games["Overcooked"].game_mode == GameMode.MULTIPLAYER
        assert games["Hades"].platforms == ["PC"]
        assert games["Hades"].playtime_estimate == 10.0

    @pytest.mark.asyncio
    async def test_truncates_to_max_count(self, store: CatalogStore) -> None:
        writer = BackfillWriter(store, max_count=10)
        games = [rawg_game(i, f"Game {i}") for i in range(1, 16)]

        report = await writer.persist_batch(games)

        assert report.total_received == 15
        assert report.total_requested == 10
        assert report.inserted == 10
        assert await store.count() == 10
        # The prefix is kept, not an arbitrary subset
        assert {g.title for g in await store.get_all(None)} == {f"Game {i}" for i in range(1, 11)}

    @pytest.mark.asyncio
    async def test_explicit_cap_overrides_default(self, writer: BackfillWriter) -> None:
        games = [rawg_game(i, f"Game {i}") for i in range(1, 6)]

        report = await writer.persist_batch(games, max_count=2)

        assert report.inserted == 2

    @pytest.mark.asyncio
    async def test_skips_existing_titles(self, store: CatalogStore, writer: BackfillWriter) -> None:
        await store.insert({"title": "hades", "developer": "Someone Else"})

        report = await writer.persist_batch([rawg_game(1, "Hades"), rawg_game(2, "Celeste")])

        assert report.items[0].status == BackfillStatus.SKIPPED
        assert report.skipped == 1
        assert report.inserted == 1
        assert await store.count() == 2

    @pytest.mark.asyncio
    async def test_overlapping_runs_do_not_duplicate(
        self, store: CatalogStore, writer: BackfillWriter
    ) -> None:
        games = [rawg_game(i, f"Game {i}") for i in range(1, 4)]

        first = await writer.persist_batch(games)
        second = await writer.persist_batch(games)

        assert first.inserted == 3
        assert second.skipped == 3
        assert await store.count() == 3

    @pytest.mark.asyncio
    async def test_concurrent_batches_do_not_duplicate(self, store: CatalogStore) -> None:
        """Test that racing batches are settled by the uniqueness guard."""
        games = [rawg_game(i, f"Game {i}", developers=[{"name": "Studio"}]) for i in range(1, 6)]
        writers = [BackfillWriter(store) for _ in range(3)]

        reports = await asyncio.gather(*(w.persist_batch(games) for w in writers))

        assert await store.count() == 5
        assert sum(r.inserted for r in reports) == 5
        assert sum(r.failed for r in reports) == 0

    @pytest.mark.asyncio
    async def test_malformed_item_does_not_block_others(
        self, store: CatalogStore, writer: BackfillWriter
    ) -> None:
        report = await writer.persist_batch(
            [
                rawg_payload(1, "Hades"),
                {"id": 2, "rating": "not a number"},
                rawg_payload(3, "   "),
                rawg_payload(4, "Celeste"),
            ]
        )

        assert report.inserted == 2
        assert report.failed == 2
        assert [f.provider_id for f in report.failures] == [2, 3]
        assert all(f.reason for f in report.failures)
        assert {g.title for g in await store.get_all(None)} == {"Hades", "Celeste"}

    @pytest.mark.asyncio
    async def test_empty_batch(self, writer: BackfillWriter) -> None:
        report = await writer.persist_batch([])

        assert report.total_requested == 0
        assert report.success_rate is None


class TestBackfillDispatcher:
    """Tests for detached backfill scheduling."""

    @pytest.mark.asyncio
    async def test_dispatch_runs_in_background(
        self, store: CatalogStore, dispatcher: BackfillDispatcher
    ) -> None:
        task = await dispatcher.dispatch([rawg_game(1, "Hades")])

        assert task is not None
        assert dispatcher.pending == 1

        await dispatcher.drain()

        assert dispatcher.pending == 0
        assert dispatcher.reports[-1].inserted == 1
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_empty_dispatch_is_noop(self, dispatcher: BackfillDispatcher) -> None:
        assert await dispatcher.dispatch([]) is None
        assert dispatcher.pending == 0

    @pytest.mark.asyncio
    async def test_synchronous_mode(self, store: CatalogStore, writer: BackfillWriter) -> None:
        dispatcher = BackfillDispatcher(writer, synchronous=True)

        task = await dispatcher.dispatch([rawg_game(1, "Hades")])

        assert task is None
        assert await store.count() == 1
        assert dispatcher.reports[-1].inserted == 1

    @pytest.mark.asyncio
    async def test_crash_is_observed(self, store: CatalogStore) -> None:
        """Test that a crashed batch is recorded instead of escaping."""
        outcomes: list[tuple[BackfillReport | None, BaseException | None]] = []
        dispatcher = BackfillDispatcher(
            CrashingWriter(store),
            on_complete=lambda report, error: outcomes.append((report, error)),
        )

        await dispatcher.dispatch([rawg_game(1, "Hades")])
        await dispatcher.drain()

        assert len(dispatcher.errors) == 1
        assert isinstance(dispatcher.errors[0], RuntimeError)
        assert outcomes == [(None, dispatcher.errors[0])]

    @pytest.mark.asyncio
    async def test_crash_in_synchronous_mode(self, store: CatalogStore) -> None:
        dispatcher = BackfillDispatcher(CrashingWriter(store), synchronous=True)

        await dispatcher.dispatch([rawg_game(1, "Hades")])

        assert len(dispatcher.errors) == 1

    @pytest.mark.asyncio
    async def test_history_is_bounded(self, writer: BackfillWriter) -> None:
        dispatcher = BackfillDispatcher(writer, synchronous=True, history_size=2)

        for i in range(1, 4):
            await dispatcher.dispatch([rawg_game(i, f"Game {i}")])

        assert len(dispatcher.reports) == 2
