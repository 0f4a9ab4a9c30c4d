"""
Error taxonomy for catalog operations.

Synchronous mutation failures (validation, not-found, storage) propagate
to the caller. BackfillError is only ever collected and logged.
"""

from datetime import datetime, timezone


class CatalogError(Exception):
    """Base exception for catalog errors."""

    def __init__(
        self,
        message: str,
        *,
        game_id: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.game_id = game_id
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)


class ValidationError(CatalogError):
    """Raised when a mutation is given malformed input. Nothing is written."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        game_id: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, game_id=game_id, original_error=original_error)
        self.field = field


class DuplicateGameError(ValidationError):
    """Raised when the title+developer uniqueness guard rejects an insert."""

    pass


class NotFoundError(CatalogError):
    """Raised when a referenced game id does not exist."""

    pass


class StorageError(CatalogError):
    """Raised when the underlying store fails."""

    pass


class BackfillError(CatalogError):
    """A single item failed during asynchronous backfill."""

    def __init__(
        self,
        message: str,
        *,
        provider_id: int | None = None,
        title: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error=original_error)
        self.provider_id = provider_id
        self.title = title
