"""
Catalog search with escalation to the external provider.
"""

from game_catalog.search.orchestrator import (
    SearchOrchestrator,
    SearchOutcome,
    SearchProvider,
    SearchResult,
)

__all__ = [
    "SearchOrchestrator",
    "SearchOutcome",
    "SearchProvider",
    "SearchResult",
]
