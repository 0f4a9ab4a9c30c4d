"""
Detached execution of backfill batches.

The search path hands provider results to the dispatcher and returns
immediately. Each batch runs as its own asyncio task; a done-callback
observes the outcome so failures are logged instead of surfacing as
"Task exception was never retrieved".
"""

import asyncio
from collections.abc import Callable, Sequence

from game_catalog.backfill.schemas import BackfillReport
from game_catalog.backfill.writer import BackfillWriter, ProviderGameInput
from game_catalog.logger import get_logger

CompletionCallback = Callable[[BackfillReport | None, BaseException | None], None]


class BackfillDispatcher:
    """
    Fire-and-forget scheduler for backfill batches.

    Keeps a strong reference to every in-flight task until it settles.
    ``drain()`` waits for all of them, for tests and shutdown. With
    ``synchronous=True`` each batch is awaited inside ``dispatch`` instead.

    Example:
        >>> dispatcher = BackfillDispatcher(writer, max_count=10)
        >>> await dispatcher.dispatch(provider_games)
        >>> await dispatcher.drain()
        >>> dispatcher.reports[-1].inserted
    """

    def __init__(
        self,
        writer: BackfillWriter,
        *,
        max_count: int | None = None,
        synchronous: bool = False,
        on_complete: CompletionCallback | None = None,
        history_size: int = 100,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            writer: Writer that persists each batch
            max_count: Cap passed to the writer (writer default if None)
            synchronous: Await each batch inside dispatch()
            on_complete: Called with (report, error) when a batch settles
            history_size: Number of recent reports and errors to keep
        """
        self._writer = writer
        self._max_count = max_count
        self._synchronous = synchronous
        self._on_complete = on_complete
        self._history_size = history_size
        self._tasks: set[asyncio.Task[BackfillReport]] = set()
        self._reports: list[BackfillReport] = []
        self._errors: list[BaseException] = []
        self._logger = get_logger(__name__, component="backfill_dispatcher")

    @property
    def synchronous(self) -> bool:
        return self._synchronous

    @property
    def pending(self) -> int:
        """Number of batches still running."""
        return len(self._tasks)

    @property
    def reports(self) -> list[BackfillReport]:
        """Reports of recently settled batches, oldest first."""
        return list(self._reports)

    @property
    def errors(self) -> list[BaseException]:
        """Batches that crashed outright (not per-item failures)."""
        return list(self._errors)

    async def dispatch(
        self, games: Sequence[ProviderGameInput]
    ) -> asyncio.Task[BackfillReport] | None:
        """
        Schedule a batch.

        Returns the running task, or None in synchronous mode where the
        batch has already completed when this returns.
        """
        if not games:
            return None

        if self._synchronous:
            try:
                report = await self._writer.persist_batch(games, self._max_count)
            except Exception as e:  # noqa: BLE001
                self._record(None, e)
            else:
                self._record(report, None)
            return None

        task = asyncio.create_task(
            self._writer.persist_batch(games, self._max_count),
            name=f"backfill:{len(games)}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._observe)

        self._logger.debug("Backfill dispatched", games=len(games), pending=len(self._tasks))
        return task

    def _observe(self, task: asyncio.Task[BackfillReport]) -> None:
        self._tasks.discard(task)

        if task.cancelled():
            self._logger.warning("Backfill cancelled", task=task.get_name())
            return

        error = task.exception()
        if error is not None:
            self._record(None, error)
        else:
            self._record(task.result(), None)

    def _record(self, report: BackfillReport | None, error: BaseException | None) -> None:
        if error is not None:
            self._errors = [*self._errors, error][-self._history_size :]
            self._logger.error(
                "Backfill batch crashed",
                error=str(error),
                error_type=error.__class__.__name__,
                exc_info=error,
            )
        elif report is not None:
            self._reports = [*self._reports, report][-self._history_size :]
            self._logger.info(
                "Backfill batch settled",
                batch_id=str(report.batch_id),
                inserted=report.inserted,
                skipped=report.skipped,
                failed=report.failed,
            )

        if self._on_complete is not None:
            try:
                self._on_complete(report, error)
            except Exception as e:  # noqa: BLE001
                self._logger.error("Backfill completion callback failed", error=str(e))

    async def drain(self) -> None:
        """Wait until every dispatched batch has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            # Done-callbacks run on the next loop iteration
            await asyncio.sleep(0)
