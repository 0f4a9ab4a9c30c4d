"""Tests for RAWG to catalog normalization."""

from datetime import date

import pytest

from game_catalog.catalog.schemas import GameMode
from game_catalog.provider.base import ProviderFormatError
from game_catalog.provider.contracts import RAWGGame
from game_catalog.provider.normalize import derive_game_mode, normalize_game


class TestDeriveGameMode:
    """Tests for game mode inference."""

    def test_single_player_only(self) -> None:
        assert derive_game_mode(["Singleplayer", "Atmospheric"]) == GameMode.SINGLE_PLAYER

    def test_multiplayer_only(self) -> None:
        assert derive_game_mode(["Online Co-Op"]) == GameMode.MULTIPLAYER

    def test_both(self) -> None:
        assert derive_game_mode(["Singleplayer", "Multiplayer"]) == GameMode.BOTH

    def test_no_markers_defaults_to_single_player(self) -> None:
        assert derive_game_mode([]) == GameMode.SINGLE_PLAYER

    def test_massively_multiplayer_genre(self) -> None:
        assert derive_game_mode([], ["Massively Multiplayer"]) == GameMode.MULTIPLAYER


class TestNormalizeGame:
    """Tests for normalize_game."""

    def test_full_mapping(self) -> None:
        game = RAWGGame.model_validate(
            {
                "id": 4200,
                "name": "Portal 2",
                "description_raw": "Test subjects wanted.",
                "released": "2011-04-18",
                "background_image": "https://media.rawg.io/portal2.jpg",
                "rating": 4.61,
                "playtime": 11,
                "genres": [{"name": "Shooter"}, {"name": "Puzzle"}],
                "tags": [{"name": "Singleplayer"}, {"name": "Co-op"}],
                "platforms": [{"platform": {"name": "PC"}}],
                "developers": [{"name": "Valve Software"}],
                "publishers": [{"name": "Valve"}, {"name": "Electronic Arts"}],
            }
        )

        record = normalize_game(game)

        assert record.title == "Portal 2"
        assert record.description == "Test subjects wanted."
        assert record.genre == "Shooter, Puzzle"
        assert record.tags == ["Singleplayer", "Co-op"]
        assert record.platforms == ["PC"]
        assert record.playtime_estimate == 11.0
        assert record.developer == "Valve Software"
        assert record.publisher == "Valve, Electronic Arts"
        assert record.game_mode == GameMode.BOTH
        assert record.release_date == date(2011, 4, 18)
        assert record.review_rating == pytest.approx(4.61)
        assert record.cover_image == "https://media.rawg.io/portal2.jpg"

    def test_deterministic(self) -> None:
        game = RAWGGame(id=1, name="Braid", rating=4.1, playtime=6)

        assert normalize_game(game) == normalize_game(game)

    def test_unknown_values(self) -> None:
        """Test that missing provider values map to empty or unknown."""
        record = normalize_game(RAWGGame(id=1, name="Braid"))

        assert record.playtime_estimate is None
        assert record.cover_image == ""
        assert record.genre == ""
        assert record.release_date is None

    def test_rating_clamped(self) -> None:
        record = normalize_game(RAWGGame(id=1, name="Braid", rating=5.4))

        assert record.review_rating == 5.0

    def test_blank_name_is_format_error(self) -> None:
        with pytest.raises(ProviderFormatError) as exc_info:
            normalize_game(RAWGGame(id=9, name="   "))

        assert exc_info.value.source == "rawg"
