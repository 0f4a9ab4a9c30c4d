"""
Application wiring.

Builds every component once per process around a single database
handle and HTTP client, and tears them down in reverse order.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from game_catalog.backfill.dispatcher import BackfillDispatcher
from game_catalog.backfill.writer import BackfillWriter
from game_catalog.catalog.service import CatalogService
from game_catalog.catalog.store import CatalogStore
from game_catalog.config import Settings, get_settings
from game_catalog.database import Database
from game_catalog.logger import get_logger
from game_catalog.provider.rawg import RAWGProvider
from game_catalog.search.orchestrator import SearchOrchestrator

logger = get_logger(__name__, component="app")


@dataclass
class CatalogApp:
    """Every long-lived component of a running catalog."""

    settings: Settings
    database: Database
    store: CatalogStore
    provider: RAWGProvider
    writer: BackfillWriter
    dispatcher: BackfillDispatcher
    orchestrator: SearchOrchestrator
    service: CatalogService


def build_catalog(
    settings: Settings,
    *,
    database: Database | None = None,
    provider: RAWGProvider | None = None,
    synchronous_backfill: bool = False,
) -> CatalogApp:
    """Construct the component graph without opening any connection."""
    database = database or Database.from_config(settings.database)
    provider = provider or RAWGProvider(config=settings.rawg, retry_config=settings.retry)

    store = CatalogStore(database)
    writer = BackfillWriter(store, max_count=settings.catalog.backfill_max_count)
    dispatcher = BackfillDispatcher(
        writer,
        max_count=settings.catalog.backfill_max_count,
        synchronous=synchronous_backfill,
    )
    orchestrator = SearchOrchestrator(
        store,
        provider,
        dispatcher,
        provider_limit=settings.rawg.search_page_size,
        backfill_limit=settings.catalog.backfill_max_count,
        provider_timeout=settings.catalog.escalation_timeout_seconds,
    )
    service = CatalogService(
        store,
        orchestrator,
        writer,
        provider,
        default_list_limit=settings.catalog.default_list_limit,
        default_feed_limit=settings.catalog.default_feed_limit,
    )
    return CatalogApp(
        settings=settings,
        database=database,
        store=store,
        provider=provider,
        writer=writer,
        dispatcher=dispatcher,
        orchestrator=orchestrator,
        service=service,
    )


@asynccontextmanager
async def create_catalog(
    settings: Settings | None = None,
    *,
    create_schema: bool = True,
    synchronous_backfill: bool = False,
) -> AsyncIterator[CatalogApp]:
    """
    Run a catalog for the lifetime of the context.

    On exit, pending backfills are drained before the HTTP client and
    the connection pool are closed.

    Example:
        >>> async with create_catalog() as catalog:
        ...     result = await catalog.service.search_games(query="portal")
    """
    settings = settings or get_settings()
    catalog = build_catalog(settings, synchronous_backfill=synchronous_backfill)

    if create_schema:
        await catalog.database.create_schema()

    logger.info(
        "Catalog started",
        environment=settings.environment,
        provider_configured=settings.rawg.has_api_key,
    )
    try:
        yield catalog
    finally:
        await catalog.dispatcher.drain()
        await catalog.provider.close()
        await catalog.database.dispose()
        logger.info("Catalog stopped")
