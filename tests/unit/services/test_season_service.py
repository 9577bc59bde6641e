"""
Tests du service Season sur une base SQLite reelle.

Ces tests verifient:
- La creation en cascade (ensemble des saisons, popularite de la serie +10)
- L'unicite du numero de saison dans une serie
- L'annulation complete d'une creation interrompue
- La suppression en cascade des episodes
- L'integration des notes et l'invalidation du cache
- Les creations concurrentes dans une meme serie
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from moviebox.core.entities.media import Episode, Season, TvShow
from moviebox.core.errors import (
    ConflictError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
)
from moviebox.core.value_objects import new_id
from moviebox.infrastructure.persistence.repositories import SQLModelTvShowRepository
from moviebox.services import SeasonService


class TestCreateSeason:
    """Tests pour la creation d'une saison."""

    @pytest.mark.asyncio
    async def test_create_links_season_to_show(
        self, season_service, tv_show_service, tv_show: TvShow
    ) -> None:
        """La saison est ajoutee a la serie et la popularite augmente de 10."""
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        show = await tv_show_service.get(tv_show.id)
        assert show.seasons == [season.id]
        assert show.popularity == 10
        assert season.popularity == 0
        assert season.episodes == []

    @pytest.mark.asyncio
    async def test_duplicate_number_raises_conflict(
        self, season_service, tv_show_service, tv_show: TvShow
    ) -> None:
        """Deux saisons de meme numero : une seule entree dans la serie."""
        await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        with pytest.raises(ConflictError, match=f"Season 1 already exists for TV show {tv_show.id}"):
            await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        show = await tv_show_service.get(tv_show.id)
        assert len(show.seasons) == 1
        assert show.popularity == 10

    @pytest.mark.asyncio
    async def test_parallel_creations_with_distinct_numbers(
        self, season_service, tv_show_service, tv_show: TvShow
    ) -> None:
        first, second = await asyncio.gather(
            season_service.create(Season(tv_show_id=tv_show.id, season_number=1)),
            season_service.create(Season(tv_show_id=tv_show.id, season_number=2)),
        )

        show = await tv_show_service.get(tv_show.id)
        assert sorted(show.seasons) == sorted([first.id, second.id])
        assert show.popularity == 20

    @pytest.mark.asyncio
    async def test_parallel_creations_with_same_number(
        self, season_service, tv_show_service, tv_show: TvShow
    ) -> None:
        """Une seule creation aboutit, l'autre est en conflit."""
        results = await asyncio.gather(
            season_service.create(Season(tv_show_id=tv_show.id, season_number=1)),
            season_service.create(Season(tv_show_id=tv_show.id, season_number=1)),
            return_exceptions=True,
        )

        created = [result for result in results if isinstance(result, Season)]
        assert len(created) == 1
        assert sum(isinstance(result, ConflictError) for result in results) == 1
        show = await tv_show_service.get(tv_show.id)
        assert show.seasons == [created[0].id]
        assert show.popularity == 10

    @pytest.mark.asyncio
    async def test_missing_show_raises_not_found(self, season_service) -> None:
        with pytest.raises(NotFoundError, match="TvShow with ID"):
            await season_service.create(Season(tv_show_id=new_id(), season_number=1))

    @pytest.mark.asyncio
    async def test_malformed_show_id_raises_invalid_argument(self, season_service) -> None:
        with pytest.raises(InvalidArgumentError, match="Invalid TV show ID: 42"):
            await season_service.create(Season(tv_show_id="42", season_number=1))

    @pytest.mark.asyncio
    async def test_negative_number_is_rejected(self, season_service, tv_show: TvShow) -> None:
        with pytest.raises(InvalidArgumentError):
            await season_service.create(Season(tv_show_id=tv_show.id, season_number=-1))

    @pytest.mark.asyncio
    async def test_failure_mid_cascade_leaves_no_season(
        self, season_service, uow_factory, tv_show: TvShow
    ) -> None:
        """Un echec apres l'insertion annule toute la creation."""
        failing = AsyncMock(side_effect=RuntimeError("connection lost"))
        with patch.object(SQLModelTvShowRepository, "increment_popularity", failing):
            with pytest.raises(InternalError, match="Failed to create season"):
                await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        async with uow_factory() as uow:
            assert await uow.seasons.find_by_number(tv_show.id, 1) is None
            show = await uow.tv_shows.get_by_id(tv_show.id)
        assert show.seasons == []
        assert show.popularity == 0


class TestDeleteSeason:
    """Tests pour la suppression en cascade."""

    @pytest.mark.asyncio
    async def test_delete_removes_episodes_and_show_reference(
        self, season_service, episode_service, tv_show_service, uow_factory, tv_show: TvShow
    ) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))
        for number in (1, 2):
            await episode_service.create(Episode(season_id=season.id, episode_number=number))

        await season_service.delete(season.id)

        show = await tv_show_service.get(tv_show.id)
        assert show.seasons == []
        async with uow_factory() as uow:
            assert await uow.seasons.get_by_id(season.id) is None
            assert await uow.episodes.count_by_seasons([season.id]) == 0

    @pytest.mark.asyncio
    async def test_delete_missing_season_raises_not_found(self, season_service) -> None:
        with pytest.raises(NotFoundError):
            await season_service.delete(new_id())

    @pytest.mark.asyncio
    async def test_failure_keeps_season_and_episodes(
        self, season_service, episode_service, uow_factory, tv_show: TvShow
    ) -> None:
        """Un echec du retrait dans la serie annule aussi la suppression des episodes."""
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))
        await episode_service.create(Episode(season_id=season.id, episode_number=1))

        failing = AsyncMock(side_effect=RuntimeError("connection lost"))
        with patch.object(SQLModelTvShowRepository, "remove_season", failing):
            with pytest.raises(InternalError, match="Failed to delete season"):
                await season_service.delete(season.id)

        async with uow_factory() as uow:
            assert await uow.seasons.get_by_id(season.id) is not None
            assert await uow.episodes.count_by_seasons([season.id]) == 1

    @pytest.mark.asyncio
    async def test_delete_requires_episode_remover(self, uow_factory, cache) -> None:
        service = SeasonService(uow_factory, cache)
        with pytest.raises(RuntimeError, match="episode remover"):
            await service.delete(new_id())


class TestSeasonReads:
    """Lectures, notes et listes."""

    @pytest.mark.asyncio
    async def test_get_is_served_from_cache_until_invalidated(
        self, season_service, cache, tv_show: TvShow
    ) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        await season_service.get(season.id)
        assert await cache.get(f"season:{season.id}") is not None

        await season_service.rate(season.id, 4)
        assert await cache.get(f"season:{season.id}") is None

    @pytest.mark.asyncio
    async def test_rate_k_times_same_value(self, season_service, tv_show: TvShow) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        for _ in range(3):
            rated = await season_service.rate(season.id, 4.5)

        assert rated.average_rating == pytest.approx(4.5)
        assert rated.rating_count == 3

    @pytest.mark.asyncio
    async def test_rate_same_fraction_k_times(self, season_service, tv_show: TvShow) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        for _ in range(3):
            rated = await season_service.rate(season.id, 0.1)

        assert rated.average_rating == 0.1
        assert rated.rating_count == 3

    @pytest.mark.asyncio
    async def test_rate_out_of_range_is_rejected(self, season_service, tv_show: TvShow) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))
        with pytest.raises(InvalidArgumentError):
            await season_service.rate(season.id, 6)

    @pytest.mark.asyncio
    async def test_get_episodes_sorted_by_number(
        self, season_service, episode_service, tv_show: TvShow
    ) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))
        for number in (2, 1):
            await episode_service.create(Episode(season_id=season.id, episode_number=number))

        episodes = await season_service.get_episodes(season.id)

        assert [e.episode_number for e in episodes] == [1, 2]

    @pytest.mark.asyncio
    async def test_update_keeps_number_immutable(self, season_service, tv_show: TvShow) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))

        updated = await season_service.update(season.id, {"title": "Pilot season"})
        assert updated.title == "Pilot season"

        with pytest.raises(InvalidArgumentError, match="season_number"):
            await season_service.update(season.id, {"season_number": 2})

    @pytest.mark.asyncio
    async def test_membership_primitives_are_idempotent(
        self, season_service, tv_show: TvShow
    ) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))
        episode_id = new_id()

        assert await season_service.add_episode(season.id, episode_id) is True
        assert await season_service.add_episode(season.id, episode_id) is False
        assert await season_service.remove_episode(season.id, episode_id) is True
        assert await season_service.remove_episode(season.id, episode_id) is False

    @pytest.mark.asyncio
    async def test_recommendations_come_from_similar_shows(
        self, season_service, tv_show_service, tv_show: TvShow
    ) -> None:
        other = await tv_show_service.create(TvShow(title="The Wire", genres=["Crime"]))
        unrelated = await tv_show_service.create(TvShow(title="Friends", genres=["Comedy"]))
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))
        similar = await season_service.create(Season(tv_show_id=other.id, season_number=1))
        await season_service.create(Season(tv_show_id=unrelated.id, season_number=1))

        recommended = await season_service.get_recommendations(season.id)

        assert [s.id for s in recommended] == [similar.id]
