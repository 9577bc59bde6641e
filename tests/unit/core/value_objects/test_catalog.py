"""
Tests unitaires pour les enumerations du catalogue et les identifiants.
"""

import pytest

from moviebox.core.errors import InvalidArgumentError
from moviebox.core.value_objects import (
    Language,
    MovieGenre,
    ReviewTargetType,
    ensure_valid_id,
    is_valid_id,
    new_id,
    normalize_enum,
    normalize_enum_list,
)


class TestNormalizeEnum:
    """Rapprochement insensible a la casse des valeurs libres."""

    @pytest.mark.parametrize("raw", ["drama", "DRAMA", "  Drama "])
    def test_matches_regardless_of_case(self, raw: str) -> None:
        assert normalize_enum(raw, MovieGenre) is MovieGenre.DRAMA

    def test_matches_hyphenated_value(self) -> None:
        assert normalize_enum("sci-fi", MovieGenre) is MovieGenre.SCIENCE_FICTION

    def test_unknown_value_lists_allowed_values(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Must be one of"):
            normalize_enum("Cartoon", MovieGenre)

    def test_review_target_types(self) -> None:
        assert normalize_enum("tvshow", ReviewTargetType) is ReviewTargetType.TV_SHOW

    def test_comma_separated_list(self) -> None:
        result = normalize_enum_list("english, french,", Language)
        assert result == [Language.ENGLISH, Language.FRENCH]


class TestIdentifiers:
    """Format des identifiants du stockage."""

    def test_new_id_is_valid(self) -> None:
        identifier = new_id()
        assert len(identifier) == 32
        assert is_valid_id(identifier)

    def test_new_ids_are_unique(self) -> None:
        assert new_id() != new_id()

    @pytest.mark.parametrize("value", ["", "abc", "Z" * 32, None, 42, new_id().upper()])
    def test_rejects_malformed_values(self, value) -> None:
        assert not is_valid_id(value)

    def test_ensure_valid_id_names_entity(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Invalid season ID: nope"):
            ensure_valid_id("nope", "season")

    def test_ensure_valid_id_returns_value(self) -> None:
        identifier = new_id()
        assert ensure_valid_id(identifier, "movie") == identifier
