"""
Scenario de bout en bout sur le catalogue des series.

Enchaine creation de serie, de saison et d'episode puis suppression en
cascade, en verifiant a chaque etape les listes de references et la
popularite propagee vers les parents.
"""

import pytest

from moviebox.core.entities.media import Episode, Season, TvShow
from moviebox.core.errors import NotFoundError


@pytest.mark.asyncio
async def test_season_episode_lifecycle(
    tv_show_service, season_service, episode_service, uow_factory
) -> None:
    """Serie -> saison -> episode, puis suppression de la saison."""
    show = await tv_show_service.create(TvShow(title="The Wire", genres=["Crime"]))

    season = await season_service.create(Season(tv_show_id=show.id, season_number=1))
    reloaded = await tv_show_service.get(show.id)
    assert reloaded.seasons == [season.id]
    assert reloaded.popularity == 10

    episode = await episode_service.create(Episode(season_id=season.id, episode_number=1))
    reloaded_season = await season_service.get(season.id)
    assert reloaded_season.episodes == [episode.id]
    assert reloaded_season.popularity == 5
    assert (await tv_show_service.get(show.id)).popularity == 15

    await season_service.delete(season.id)

    assert (await tv_show_service.get(show.id)).seasons == []
    with pytest.raises(NotFoundError):
        await episode_service.get(episode.id)
    async with uow_factory() as uow:
        assert await uow.episodes.count_by_seasons([season.id]) == 0


@pytest.mark.asyncio
async def test_rating_flows_are_independent(
    tv_show_service, season_service, episode_service
) -> None:
    """Noter un episode ne modifie ni la saison ni la serie."""
    show = await tv_show_service.create(TvShow(title="Lost"))
    season = await season_service.create(Season(tv_show_id=show.id, season_number=1))
    episode = await episode_service.create(Episode(season_id=season.id, episode_number=1))

    rated = await episode_service.rate(episode.id, 5)

    assert rated.average_rating == 5.0
    assert (await season_service.get(season.id)).rating_count == 0
    assert (await tv_show_service.get(show.id)).rating_count == 0
