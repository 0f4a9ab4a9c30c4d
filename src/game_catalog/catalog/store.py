"""
Catalog store backed by a relational database.

Owns persisted game records and exposes filtered search, point
lookups, listing feeds, insert, partial update and delete.
Correctness under concurrent writers relies on the database: each
mutation is a single-row atomic statement and duplicate rows are
rejected by the (title, developer) uniqueness constraint.
"""

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import Select, case, delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from game_catalog.catalog.errors import (
    DuplicateGameError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from game_catalog.catalog.models import UNIQUE_CONSTRAINT, GameRow
from game_catalog.catalog.schemas import (
    GameCreate,
    GameMode,
    GameRecord,
    GameUpdate,
    SearchFilters,
)
from game_catalog.database import Database
from game_catalog.logger import get_logger

DEFAULT_LIST_LIMIT = 200


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_key(value: str) -> str:
    """Case-insensitive comparison key for titles and developers."""
    return value.strip().lower()


def _set_column(column: str) -> Callable[[GameRow, Any], None]:
    def apply(row: GameRow, value: Any) -> None:
        setattr(row, column, value)

    return apply


def _set_sequence(column: str) -> Callable[[GameRow, Any], None]:
    def apply(row: GameRow, value: Any) -> None:
        setattr(row, column, [str(item) for item in value])

    return apply


def _set_title(row: GameRow, value: str) -> None:
    row.title = value
    row.title_key = normalize_key(value)


def _set_developer(row: GameRow, value: str) -> None:
    row.developer = value
    row.developer_key = normalize_key(value)


def _set_genre(row: GameRow, value: str) -> None:
    row.genre = value
    row.genre_key = value.lower()


def _set_game_mode(row: GameRow, value: GameMode | str) -> None:
    row.game_mode = GameMode(value).value


# Every field a partial update may touch, and how it lands on the row
FIELD_WRITERS: dict[str, Callable[[GameRow, Any], None]] = {
    "title": _set_title,
    "description": _set_column("description"),
    "genre": _set_genre,
    "tags": _set_sequence("tags"),
    "platforms": _set_sequence("platforms"),
    "playtime_estimate": _set_column("playtime_estimate"),
    "developer": _set_developer,
    "publisher": _set_column("publisher"),
    "game_mode": _set_game_mode,
    "release_date": _set_column("release_date"),
    "review_rating": _set_column("review_rating"),
    "cover_image": _set_column("cover_image"),
}


def _is_uniqueness_violation(error: IntegrityError) -> bool:
    """Check whether the (title, developer) guard rejected the write."""
    message = str(error.orig).lower()
    # SQLite reports the columns, other backends the constraint name
    return UNIQUE_CONSTRAINT in message or (
        "unique" in message and "title_key" in message and "developer_key" in message
    )


def _first_error_field(error: PydanticValidationError) -> str | None:
    errors = error.errors()
    if errors and errors[0].get("loc"):
        return str(errors[0]["loc"][0])
    return None


class CatalogStore:
    """
    Async repository for game records.

    Example:
        >>> store = CatalogStore(database)
        >>> game_id = await store.insert(GameCreate(title="Portal 2"))
        >>> await store.get_by_id(game_id)
    """

    def __init__(self, database: Database) -> None:
        self._db = database
        self._logger = get_logger(__name__, component="catalog_store")

    @contextmanager
    def _translate_errors(self, operation: str, **context: Any) -> Iterator[None]:
        """Map database exceptions onto the catalog error taxonomy."""
        try:
            yield
        except IntegrityError as e:
            if not _is_uniqueness_violation(e):
                self._logger.warning(
                    "Constraint rejected write",
                    operation=operation,
                    error=str(e.orig),
                    **context,
                )
                raise ValidationError(
                    f"Write rejected by a constraint during {operation}",
                    game_id=context.get("game_id"),
                    original_error=e,
                ) from e

            self._logger.warning(
                "Uniqueness guard rejected write",
                operation=operation,
                **context,
            )
            raise DuplicateGameError(
                "A game with this title and developer already exists",
                game_id=context.get("game_id"),
                original_error=e,
            ) from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Storage failure",
                operation=operation,
                error=str(e),
                **context,
            )
            raise StorageError(
                f"Storage failure during {operation}",
                game_id=context.get("game_id"),
                original_error=e,
            ) from e

    async def _fetch(self, stmt: Select[tuple[GameRow]], operation: str) -> list[GameRecord]:
        with self._translate_errors(operation):
            async with self._db.session() as session:
                rows = (await session.scalars(stmt)).all()
                return [GameRecord.model_validate(row) for row in rows]

    # Reads

    async def search(self, filters: SearchFilters | None = None) -> list[GameRecord]:
        """
        Search games with optional filters.

        Title match is a case-insensitive substring; genres match as
        case-insensitive substrings OR-ed together; the rating filter is
        an inclusive lower bound; the mode filter is exact.

        With a text query, exact title matches rank first, then prefix
        matches, then the rest. Within a tier (or without a query) games
        are ordered by rating, then most recently updated.
        """
        filters = filters or SearchFilters()
        stmt = select(GameRow)
        query_key = normalize_key(filters.query) if filters.query else None

        if query_key:
            stmt = stmt.where(GameRow.title_key.contains(query_key, autoescape=True))

        if filters.genres:
            stmt = stmt.where(
                or_(
                    *(
                        GameRow.genre_key.contains(genre.lower(), autoescape=True)
                        for genre in sorted(filters.genres)
                    )
                )
            )

        if filters.min_rating is not None:
            stmt = stmt.where(GameRow.review_rating >= filters.min_rating)

        if filters.game_mode is not None:
            stmt = stmt.where(GameRow.game_mode == filters.game_mode.value)

        ordering = [
            GameRow.review_rating.desc().nulls_last(),
            GameRow.updated_at.desc(),
            GameRow.id.desc(),
        ]
        if query_key:
            relevance = case(
                (GameRow.title_key == query_key, 1),
                (GameRow.title_key.startswith(query_key, autoescape=True), 2),
                else_=3,
            )
            ordering.insert(0, relevance)

        games = await self._fetch(stmt.order_by(*ordering), "search")
        self._logger.debug(
            "Search complete",
            query=filters.query,
            genres=sorted(filters.genres),
            min_rating=filters.min_rating,
            game_mode=filters.game_mode.value if filters.game_mode else None,
            results=len(games),
        )
        return games

    async def get_by_id(self, game_id: int) -> GameRecord | None:
        """Fetch a single game, or None if it does not exist."""
        with self._translate_errors("get_by_id", game_id=game_id):
            async with self._db.session() as session:
                row = await session.get(GameRow, game_id)
                return GameRecord.model_validate(row) if row is not None else None

    async def get_all(self, limit: int | None = DEFAULT_LIST_LIMIT) -> list[GameRecord]:
        """
        List games in storage order.

        Args:
            limit: Maximum rows to return; None means unbounded
        """
        stmt = select(GameRow)
        if limit is not None:
            if limit <= 0:
                raise ValidationError("limit must be a positive integer", field="limit")
            stmt = stmt.limit(limit)
        return await self._fetch(stmt, "get_all")

    async def get_trending(self, limit: int) -> list[GameRecord]:
        """Recently refreshed games: newest update, then newest insert, then rating."""
        stmt = (
            select(GameRow)
            .order_by(
                GameRow.updated_at.desc(),
                GameRow.created_at.desc(),
                GameRow.review_rating.desc().nulls_last(),
            )
            .limit(limit)
        )
        return await self._fetch(stmt, "get_trending")

    async def get_random_sample(self, limit: int) -> list[GameRecord]:
        """Uniform sample without replacement; order is not meaningful."""
        stmt = select(GameRow).order_by(func.random()).limit(limit)
        return await self._fetch(stmt, "get_random_sample")

    async def title_exists(self, title: str) -> bool:
        """Check for an existing game with the same case-insensitive title."""
        stmt = select(GameRow.id).where(GameRow.title_key == normalize_key(title)).limit(1)
        with self._translate_errors("title_exists"):
            async with self._db.session() as session:
                return (await session.scalar(stmt)) is not None

    async def count(self) -> int:
        """Number of stored games."""
        with self._translate_errors("count"):
            async with self._db.session() as session:
                return int(await session.scalar(select(func.count(GameRow.id))) or 0)

    # Writes

    async def insert(self, game: GameCreate | Mapping[str, Any]) -> int:
        """
        Insert a new game. The id and both timestamps are assigned here.

        Returns:
            int: The newly assigned local id

        Raises:
            ValidationError: If required fields are missing or malformed
            DuplicateGameError: If the title+developer pair already exists
            StorageError: If the database write fails
        """
        if not isinstance(game, GameCreate):
            try:
                game = GameCreate.model_validate(game)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid game: {e}",
                    field=_first_error_field(e),
                    original_error=e,
                ) from e

        now = utcnow()
        row = GameRow(created_at=now, updated_at=now)
        for name, value in game.model_dump().items():
            FIELD_WRITERS[name](row, value)

        with self._translate_errors("insert", title=game.title):
            async with self._db.session() as session, session.begin():
                session.add(row)
                await session.flush()
                game_id = row.id

        self._logger.info("Inserted game", game_id=game_id, title=game.title)
        return game_id

    async def update(self, game_id: int, changes: GameUpdate | Mapping[str, Any]) -> None:
        """
        Apply a partial update. Fields not supplied are left unchanged.

        Raises:
            ValidationError: On unknown fields, bad values or an empty update
            NotFoundError: If the game does not exist
            DuplicateGameError: If the change collides with another game
            StorageError: If the database write fails
        """
        if not isinstance(changes, GameUpdate):
            unknown = sorted(set(changes) - set(FIELD_WRITERS))
            if unknown:
                raise ValidationError(
                    f"Unknown fields: {', '.join(unknown)}",
                    field=unknown[0],
                    game_id=game_id,
                )
            try:
                changes = GameUpdate.model_validate(changes)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid update: {e}",
                    field=_first_error_field(e),
                    game_id=game_id,
                    original_error=e,
                ) from e

        fields = changes.supplied_fields()
        if not fields:
            raise ValidationError("No fields to update", game_id=game_id)

        with self._translate_errors("update", game_id=game_id):
            async with self._db.session() as session, session.begin():
                row = await session.get(GameRow, game_id, with_for_update=True)
                if row is None:
                    raise NotFoundError(f"Game {game_id} not found", game_id=game_id)

                for name, value in fields.items():
                    FIELD_WRITERS[name](row, value)

                # Strictly increasing even when the clock has not advanced
                now = utcnow()
                if now <= row.updated_at:
                    now = row.updated_at + timedelta(microseconds=1)
                row.updated_at = now

        self._logger.info("Updated game", game_id=game_id, fields=sorted(fields))

    async def delete(self, game_id: int) -> None:
        """Delete a game. Deleting a missing id is not an error."""
        with self._translate_errors("delete", game_id=game_id):
            async with self._db.session() as session, session.begin():
                result = await session.execute(delete(GameRow).where(GameRow.id == game_id))

        self._logger.info("Deleted game", game_id=game_id, existed=bool(result.rowcount))

    async def clear(self) -> int:
        """Delete every game. Returns the number of rows removed."""
        with self._translate_errors("clear"):
            async with self._db.session() as session, session.begin():
                result = await session.execute(delete(GameRow))

        removed = int(result.rowcount or 0)
        self._logger.warning("Cleared catalog", removed=removed)
        return removed
