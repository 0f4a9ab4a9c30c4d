"""
External game-information providers.

Providers translate external records into the catalog's canonical
shape and expose search-by-text and popularity listings.
"""

from game_catalog.provider.base import (
    BaseProvider,
    ProviderError,
    ProviderFormatError,
    ProviderUnavailableError,
    RateLimitError,
)
from game_catalog.provider.contracts import (
    NamedRef,
    ProviderId,
    RAWGGame,
    RAWGGameList,
    RAWGPlatformEntry,
    RAWGTag,
)
from game_catalog.provider.normalize import derive_game_mode, normalize_game
from game_catalog.provider.rawg import RAWGProvider

__all__ = [
    # Base classes and errors
    "BaseProvider",
    "ProviderError",
    "ProviderFormatError",
    "ProviderUnavailableError",
    "RateLimitError",
    # Contracts
    "NamedRef",
    "ProviderId",
    "RAWGGame",
    "RAWGGameList",
    "RAWGPlatformEntry",
    "RAWGTag",
    # Providers
    "RAWGProvider",
    "derive_game_mode",
    "normalize_game",
]
