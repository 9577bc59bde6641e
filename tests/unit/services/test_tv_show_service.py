"""
Tests du service TvShow sur une base SQLite reelle.

Ces tests verifient:
- La cascade de suppression (episodes -> saisons -> serie)
- Le casting et l'equipe limites aux personnes existantes (tout ou rien)
- Les notes, les saisons paginees et les listes
"""

from unittest.mock import AsyncMock, patch

import pytest

from moviebox.core.entities.media import CastMember, CrewMember, Episode, Person, Season, TvShow
from moviebox.core.errors import InternalError, InvalidArgumentError, NotFoundError
from moviebox.core.value_objects import new_id
from moviebox.infrastructure.persistence.repositories import SQLModelSeasonRepository


class TestCreateTvShow:
    """Tests pour la creation d'une serie."""

    @pytest.mark.asyncio
    async def test_new_show_starts_empty(self, tv_show: TvShow) -> None:
        assert tv_show.seasons == []
        assert tv_show.popularity == 0
        assert tv_show.rating_count == 0
        assert tv_show.genres == ["Drama", "Crime"]

    @pytest.mark.asyncio
    async def test_title_is_required(self, tv_show_service) -> None:
        with pytest.raises(InvalidArgumentError, match="Title is required"):
            await tv_show_service.create(TvShow(title=" "))

    @pytest.mark.asyncio
    async def test_unknown_genre_is_rejected(self, tv_show_service) -> None:
        with pytest.raises(InvalidArgumentError):
            await tv_show_service.create(TvShow(title="X", genres=["Telenovela"]))

    @pytest.mark.asyncio
    async def test_cast_must_reference_existing_people(self, tv_show_service) -> None:
        with pytest.raises(NotFoundError, match="Person with ID"):
            await tv_show_service.create(
                TvShow(title="X", cast=[CastMember(person_id=new_id(), character="Walter")])
            )


class TestDeleteTvShow:
    """Tests pour la cascade de suppression."""

    @pytest.mark.asyncio
    async def test_delete_removes_all_seasons_and_episodes(
        self, tv_show_service, season_service, episode_service, uow_factory, tv_show: TvShow
    ) -> None:
        """N saisons et M episodes : plus aucune ligne apres suppression."""
        season_ids = []
        for season_number in (1, 2):
            season = await season_service.create(
                Season(tv_show_id=tv_show.id, season_number=season_number)
            )
            season_ids.append(season.id)
            for episode_number in (1, 2, 3):
                await episode_service.create(
                    Episode(season_id=season.id, episode_number=episode_number)
                )

        await tv_show_service.delete(tv_show.id)

        async with uow_factory() as uow:
            assert await uow.tv_shows.get_by_id(tv_show.id) is None
            assert await uow.seasons.list_ids_by_tv_show(tv_show.id) == []
            assert await uow.episodes.count_by_seasons(season_ids) == 0
        with pytest.raises(NotFoundError):
            await tv_show_service.get(tv_show.id)

    @pytest.mark.asyncio
    async def test_delete_failure_rolls_back_everything(
        self, tv_show_service, season_service, episode_service, uow_factory, tv_show: TvShow
    ) -> None:
        season = await season_service.create(Season(tv_show_id=tv_show.id, season_number=1))
        await episode_service.create(Episode(season_id=season.id, episode_number=1))

        failing = AsyncMock(side_effect=RuntimeError("connection lost"))
        with patch.object(SQLModelSeasonRepository, "delete_by_tv_show", failing):
            with pytest.raises(InternalError, match="Failed to delete TV show"):
                await tv_show_service.delete(tv_show.id)

        async with uow_factory() as uow:
            assert await uow.tv_shows.exists(tv_show.id)
            assert await uow.episodes.count_by_seasons([season.id]) == 1

    @pytest.mark.asyncio
    async def test_delete_missing_show(self, tv_show_service) -> None:
        with pytest.raises(NotFoundError):
            await tv_show_service.delete(new_id())


class TestCastAndCrew:
    """Tests pour le casting et l'equipe."""

    @pytest.mark.asyncio
    async def test_add_cast_with_existing_person(
        self, tv_show_service, tv_show: TvShow, person: Person
    ) -> None:
        updated = await tv_show_service.add_cast(
            tv_show.id, [CastMember(person_id=person.id, character="Walter White", order=1)]
        )

        assert updated.cast == [CastMember(person_id=person.id, character="Walter White", order=1)]

    @pytest.mark.asyncio
    async def test_add_cast_is_all_or_nothing(
        self, tv_show_service, tv_show: TvShow, person: Person
    ) -> None:
        """Une seule personne introuvable annule tout le lot."""
        with pytest.raises(NotFoundError):
            await tv_show_service.add_cast(
                tv_show.id,
                [CastMember(person_id=person.id), CastMember(person_id=new_id())],
            )

        assert (await tv_show_service.get(tv_show.id)).cast == []

    @pytest.mark.asyncio
    async def test_add_then_remove_crew(
        self, tv_show_service, tv_show: TvShow, person: Person
    ) -> None:
        await tv_show_service.add_crew(
            tv_show.id, [CrewMember(person_id=person.id, role="Director", department="Directing")]
        )

        updated = await tv_show_service.remove_crew(tv_show.id, person.id)

        assert updated.crew == []

    @pytest.mark.asyncio
    async def test_remove_cast_of_absent_person_is_noop(
        self, tv_show_service, tv_show: TvShow
    ) -> None:
        updated = await tv_show_service.remove_cast(tv_show.id, new_id())
        assert updated.cast == []


class TestTvShowReads:
    """Notes, saisons et listes."""

    @pytest.mark.asyncio
    async def test_rate_same_value_k_times(self, tv_show_service, tv_show: TvShow) -> None:
        for _ in range(5):
            rated = await tv_show_service.rate(tv_show.id, 4)

        assert rated.average_rating == pytest.approx(4.0)
        assert rated.rating_count == 5

    @pytest.mark.asyncio
    async def test_get_seasons_sorted_by_number(
        self, tv_show_service, season_service, tv_show: TvShow
    ) -> None:
        for number in (2, 1, 3):
            await season_service.create(Season(tv_show_id=tv_show.id, season_number=number))

        page = await tv_show_service.get_seasons(tv_show.id)

        assert [s.season_number for s in page.items] == [1, 2, 3]
        assert page.total_items == 3

    @pytest.mark.asyncio
    async def test_list_filters_by_genre(self, tv_show_service, tv_show: TvShow) -> None:
        await tv_show_service.create(TvShow(title="Friends", genres=["Comedy"]))

        page = await tv_show_service.list_tv_shows(genre="crime")

        assert [show.id for show in page.items] == [tv_show.id]

    @pytest.mark.asyncio
    async def test_trending_excludes_inactive_shows(
        self, tv_show_service, season_service, tv_show: TvShow
    ) -> None:
        hidden = await tv_show_service.create(TvShow(title="Hidden", is_active=False))
        await season_service.create(Season(tv_show_id=hidden.id, season_number=1))

        trending = await tv_show_service.get_trending()

        assert [show.id for show in trending] == [tv_show.id]

    @pytest.mark.asyncio
    async def test_recommendations_share_a_genre(self, tv_show_service, tv_show: TvShow) -> None:
        similar = await tv_show_service.create(TvShow(title="The Wire", genres=["Crime"]))
        await tv_show_service.create(TvShow(title="Friends", genres=["Comedy"]))

        recommended = await tv_show_service.get_recommendations(tv_show.id)

        assert [show.id for show in recommended] == [similar.id]
