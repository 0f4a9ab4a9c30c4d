"""
Game Catalog Service.

Serves game metadata from a relational store and backfills
missing titles from the RAWG video game database.
"""

from game_catalog.config import Settings, get_settings
from game_catalog.logger import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
