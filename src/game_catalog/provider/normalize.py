"""
Mapping from RAWG games into the canonical catalog shape.

Pure functions: no I/O, and the same input always yields the same output.
"""

from pydantic import ValidationError as PydanticValidationError

from game_catalog.catalog.schemas import MAX_RATING, GameCreate, GameMode
from game_catalog.provider.base import ProviderFormatError
from game_catalog.provider.contracts import RAWGGame

SINGLEPLAYER_TAGS = frozenset({"singleplayer", "single-player", "single player"})
MULTIPLAYER_TAGS = frozenset(
    {
        "multiplayer",
        "online multiplayer",
        "local multiplayer",
        "massively multiplayer",
        "co-op",
        "online co-op",
        "local co-op",
        "pvp",
        "online pvp",
        "mmo",
    }
)

SOURCE_NAME = "rawg"


def derive_game_mode(tag_names: list[str], genre_names: list[str] | None = None) -> GameMode:
    """
    Infer the game mode from tags (and genres, for "Massively Multiplayer").

    Both single and multiplayer markers -> BOTH; multiplayer only ->
    MULTIPLAYER; anything else -> SINGLE_PLAYER.
    """
    labels = {name.strip().lower() for name in [*tag_names, *(genre_names or [])]}
    single = bool(labels & SINGLEPLAYER_TAGS)
    multi = bool(labels & MULTIPLAYER_TAGS)

    if single and multi:
        return GameMode.BOTH
    if multi:
        return GameMode.MULTIPLAYER
    return GameMode.SINGLE_PLAYER


def normalize_game(game: RAWGGame) -> GameCreate:
    """
    Map a RAWG game into a GameCreate.

    Raises:
        ProviderFormatError: If the game cannot form a valid catalog record
    """
    try:
        return GameCreate(
            title=game.name,
            description=game.description_raw,
            genre=", ".join(game.genre_names),
            tags=game.tag_names,
            platforms=game.platform_names,
            playtime_estimate=float(game.playtime) if game.playtime else None,
            developer=", ".join(game.developer_names),
            publisher=", ".join(game.publisher_names),
            game_mode=derive_game_mode(game.tag_names, game.genre_names),
            release_date=game.released,
            review_rating=min(max(game.rating, 0.0), MAX_RATING),
            cover_image=game.background_image or "",
        )
    except PydanticValidationError as e:
        raise ProviderFormatError(
            f"Game {game.id} cannot be normalized: {e}",
            source=SOURCE_NAME,
            original_error=e,
        ) from e
