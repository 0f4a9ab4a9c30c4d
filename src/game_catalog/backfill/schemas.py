"""
Backfill report schemas.

A report records what happened to every provider game handed to the
backfill writer, so asynchronous outcomes stay observable.
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class BackfillStatus(str, Enum):
    """Outcome for one provider game."""

    INSERTED = "inserted"
    SKIPPED = "skipped"
    FAILED = "failed"


class BackfillItemResult(BaseModel):
    """Outcome of persisting a single provider game."""

    provider_id: int | None = Field(default=None, description="Provider identifier")
    title: str | None = Field(default=None)
    status: BackfillStatus
    game_id: int | None = Field(default=None, description="Local id when inserted")
    reason: str | None = Field(default=None, description="Why it was skipped or failed")


class BackfillReport(BaseModel):
    """
    Summary of one backfill batch.

    Tracks per-item outcomes and batch-level statistics.
    """

    batch_id: UUID = Field(default_factory=uuid4)
    source: str = Field(default="rawg")
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None
    total_received: int = 0
    total_requested: int = 0
    items: list[BackfillItemResult] = Field(default_factory=list)

    @property
    def inserted(self) -> int:
        return sum(1 for item in self.items if item.status == BackfillStatus.INSERTED)

    @property
    def skipped(self) -> int:
        return sum(1 for item in self.items if item.status == BackfillStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if item.status == BackfillStatus.FAILED)

    @property
    def failures(self) -> list[BackfillItemResult]:
        """Items that could not be persisted."""
        return [item for item in self.items if item.status == BackfillStatus.FAILED]

    @property
    def success_rate(self) -> float | None:
        """Inserted or skipped items as a percentage of those attempted."""
        if self.total_requested == 0:
            return None
        return ((self.inserted + self.skipped) / self.total_requested) * 100

    def add(self, item: BackfillItemResult) -> None:
        self.items.append(item)

    def complete(self) -> None:
        """Mark batch as complete."""
        self.completed_at = datetime.now(timezone.utc)
