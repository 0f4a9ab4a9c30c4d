"""Shared fixtures for catalog tests."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from game_catalog.backfill.dispatcher import BackfillDispatcher
from game_catalog.backfill.writer import BackfillWriter
from game_catalog.catalog.store import CatalogStore
from game_catalog.database import Database


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    """Fresh SQLite catalog database in a temporary file."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def store(database: Database) -> CatalogStore:
    return CatalogStore(database)


@pytest.fixture
def writer(store: CatalogStore) -> BackfillWriter:
    return BackfillWriter(store, max_count=10)


@pytest_asyncio.fixture
async def dispatcher(writer: BackfillWriter) -> AsyncIterator[BackfillDispatcher]:
    """Asynchronous dispatcher, drained on teardown."""
    dispatcher = BackfillDispatcher(writer, max_count=10)
    yield dispatcher
    await dispatcher.drain()
