"""
Game catalog: canonical schemas, relational store and error taxonomy.
"""

from game_catalog.catalog.errors import (
    BackfillError,
    CatalogError,
    DuplicateGameError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from game_catalog.catalog.schemas import (
    GameCreate,
    GameMode,
    GameRecord,
    GameUpdate,
    SearchFilters,
)
from game_catalog.catalog.store import DEFAULT_LIST_LIMIT, CatalogStore

__all__ = [
    # Errors
    "BackfillError",
    "CatalogError",
    "DuplicateGameError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    # Schemas
    "GameCreate",
    "GameMode",
    "GameRecord",
    "GameUpdate",
    "SearchFilters",
    # Store
    "CatalogStore",
    "DEFAULT_LIST_LIMIT",
]
