"""
Asynchronous backfill of provider games into the catalog.
"""

from game_catalog.backfill.dispatcher import BackfillDispatcher, CompletionCallback
from game_catalog.backfill.schemas import BackfillItemResult, BackfillReport, BackfillStatus
from game_catalog.backfill.writer import BackfillWriter, ProviderGameInput

__all__ = [
    "BackfillDispatcher",
    "BackfillItemResult",
    "BackfillReport",
    "BackfillStatus",
    "BackfillWriter",
    "CompletionCallback",
    "ProviderGameInput",
]
