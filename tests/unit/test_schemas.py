"""Tests for canonical game schemas."""

from datetime import date

import pytest

from game_catalog.catalog.schemas import (
    GameCreate,
    GameMode,
    GameUpdate,
    SearchFilters,
)


class TestGameCreate:
    """Tests for the insert shape."""

    def test_minimal_valid_game(self) -> None:
        """Test creation with only a title."""
        game = GameCreate(title="Celeste")

        assert game.title == "Celeste"
        assert game.tags == []
        assert game.platforms == []
        assert game.game_mode == GameMode.SINGLE_PLAYER
        assert game.review_rating is None
        assert game.release_date is None

    def test_title_is_stripped(self) -> None:
        assert GameCreate(title="  Hades  ").title == "Hades"

    def test_blank_title_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameCreate(title="   ")

    def test_missing_title_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameCreate.model_validate({"genre": "Action"})

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameCreate.model_validate({"title": "Hades", "price": 24.99})

    def test_nulls_become_empty(self) -> None:
        """Test that explicit nulls in text and list fields become empty values."""
        game = GameCreate.model_validate(
            {"title": "Hades", "tags": None, "platforms": None, "developer": None}
        )

        assert game.tags == []
        assert game.platforms == []
        assert game.developer == ""

    def test_rating_bounds(self) -> None:
        assert GameCreate(title="A", review_rating=5.0).review_rating == 5.0
        assert GameCreate(title="A", review_rating=0).review_rating == 0

        with pytest.raises(ValueError):
            GameCreate(title="A", review_rating=5.1)

        with pytest.raises(ValueError):
            GameCreate(title="A", review_rating=-1)

    def test_parses_release_date_and_mode(self) -> None:
        game = GameCreate.model_validate(
            {"title": "Hades", "release_date": "2020-09-17", "game_mode": "both"}
        )

        assert game.release_date == date(2020, 9, 17)
        assert game.game_mode == GameMode.BOTH

    def test_invalid_mode_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameCreate.model_validate({"title": "Hades", "game_mode": "co-op"})


class TestGameUpdate:
    """Tests for the partial update shape."""

    def test_only_supplied_fields(self) -> None:
        update = GameUpdate.model_validate({"genre": "Roguelike", "review_rating": None})

        assert update.supplied_fields() == {"genre": "Roguelike", "review_rating": None}

    def test_empty_update(self) -> None:
        assert GameUpdate().supplied_fields() == {}

    def test_null_title_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameUpdate.model_validate({"title": None})

    def test_null_text_and_lists_become_empty(self) -> None:
        update = GameUpdate.model_validate({"developer": None, "tags": None, "platforms": None})

        assert update.supplied_fields() == {"developer": "", "tags": [], "platforms": []}

    def test_null_mode_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameUpdate.model_validate({"game_mode": None})

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameUpdate.model_validate({"id": 7})


class TestSearchFilters:
    """Tests for search filters."""

    def test_blank_query_is_no_query(self) -> None:
        filters = SearchFilters(query="   ")

        assert filters.query is None
        assert not filters.has_query

    def test_query_is_stripped(self) -> None:
        filters = SearchFilters(query=" portal ")

        assert filters.query == "portal"
        assert filters.has_query

    def test_blank_genres_dropped(self) -> None:
        filters = SearchFilters(genres=["Action", " ", "Puzzle "])

        assert filters.genres == frozenset({"Action", "Puzzle"})
