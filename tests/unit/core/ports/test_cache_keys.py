"""
Tests unitaires pour le constructeur de cles de cache.

Les motifs d'invalidation doivent couvrir exactement les cles produites.
"""

from fnmatch import fnmatchcase

from moviebox.core.ports.cache import CacheKey, EntityKind


class TestCacheKey:
    """Format des cles et motifs."""

    def test_entity_key(self) -> None:
        assert CacheKey.entity(EntityKind.SEASON, "abc") == "season:abc"

    def test_related_key(self) -> None:
        assert CacheKey.related(EntityKind.USER, "abc", "followers") == "user:abc:followers"

    def test_listing_key_keeps_empty_parts(self) -> None:
        key = CacheKey.listing(EntityKind.USER, 1, 10, "created_at", None)
        assert key == "users:list:1:10:created_at:"

    def test_entity_pattern_covers_entity_and_sub_resources(self) -> None:
        pattern = CacheKey.entity_pattern(EntityKind.USER, "abc")
        assert fnmatchcase(CacheKey.entity(EntityKind.USER, "abc"), pattern)
        assert fnmatchcase(CacheKey.related(EntityKind.USER, "abc", "following"), pattern)
        assert not fnmatchcase(CacheKey.entity(EntityKind.USER, "xyz"), pattern)

    def test_listings_pattern_does_not_match_entities(self) -> None:
        pattern = CacheKey.listings_pattern(EntityKind.USER)
        assert fnmatchcase(CacheKey.listing(EntityKind.USER, 1, 10), pattern)
        assert not fnmatchcase(CacheKey.entity(EntityKind.USER, "abc"), pattern)

    def test_kind_pattern_matches_every_entity_of_kind(self) -> None:
        pattern = CacheKey.kind_pattern(EntityKind.PERSON)
        assert fnmatchcase(CacheKey.related(EntityKind.PERSON, "abc", "filmography"), pattern)
        assert not fnmatchcase(CacheKey.listing(EntityKind.PERSON, 1), pattern)
