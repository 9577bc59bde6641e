"""
Routes du catalogue : series, saisons et episodes.

Routes minces : validation du corps par pydantic, puis delegation aux
services. Les erreurs metier sont traduites par le gestionnaire commun.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from ...core.entities.media import CastMember, CrewMember, Episode, Season, TvShow
from ...services import EpisodeService, SeasonService, TvShowService
from ..deps import get_episode_service, get_season_service, get_tv_show_service

router = APIRouter()


class CastMemberIn(BaseModel):
    person_id: str
    character: str = ""
    order: int = 0


class CrewMemberIn(BaseModel):
    person_id: str
    role: str = ""
    department: str = ""


class TvShowIn(BaseModel):
    title: str
    overview: Optional[str] = None
    release_date: Optional[date] = None
    end_date: Optional[date] = None
    genres: list[str] = Field(default_factory=list)
    country: Optional[str] = None
    cast: list[CastMemberIn] = Field(default_factory=list)
    crew: list[CrewMemberIn] = Field(default_factory=list)


class SeasonIn(BaseModel):
    tv_show_id: str
    season_number: int
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None


class EpisodeIn(BaseModel):
    season_id: str
    episode_number: int
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None
    duration: Optional[int] = None


class RatingIn(BaseModel):
    # Bornes verifiees par le service (reponse 400 bad_request)
    rating: float


# --- Series ---------------------------------------------------------------


@router.post("/tv-shows", status_code=status.HTTP_201_CREATED)
async def create_tv_show(body: TvShowIn, service: TvShowService = Depends(get_tv_show_service)):
    tv_show = TvShow(
        title=body.title,
        overview=body.overview,
        release_date=body.release_date,
        end_date=body.end_date,
        genres=body.genres,
        country=body.country,
        cast=[CastMember(**m.model_dump()) for m in body.cast],
        crew=[CrewMember(**m.model_dump()) for m in body.crew],
    )
    return await service.create(tv_show)


@router.get("/tv-shows/{tv_show_id}")
async def get_tv_show(tv_show_id: str, service: TvShowService = Depends(get_tv_show_service)):
    return await service.get(tv_show_id)


@router.delete("/tv-shows/{tv_show_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tv_show(tv_show_id: str, service: TvShowService = Depends(get_tv_show_service)):
    await service.delete(tv_show_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/tv-shows/{tv_show_id}/rate")
async def rate_tv_show(
    tv_show_id: str, body: RatingIn, service: TvShowService = Depends(get_tv_show_service)
):
    return await service.rate(tv_show_id, body.rating)


@router.get("/tv-shows/{tv_show_id}/seasons")
async def get_tv_show_seasons(
    tv_show_id: str, service: TvShowService = Depends(get_tv_show_service)
):
    return await service.get_seasons(tv_show_id)


@router.post("/tv-shows/{tv_show_id}/cast")
async def add_tv_show_cast(
    tv_show_id: str,
    members: list[CastMemberIn],
    service: TvShowService = Depends(get_tv_show_service),
):
    return await service.add_cast(tv_show_id, [CastMember(**m.model_dump()) for m in members])


@router.post("/tv-shows/{tv_show_id}/crew")
async def add_tv_show_crew(
    tv_show_id: str,
    members: list[CrewMemberIn],
    service: TvShowService = Depends(get_tv_show_service),
):
    return await service.add_crew(tv_show_id, [CrewMember(**m.model_dump()) for m in members])


# --- Saisons --------------------------------------------------------------


@router.post("/seasons", status_code=status.HTTP_201_CREATED)
async def create_season(body: SeasonIn, service: SeasonService = Depends(get_season_service)):
    return await service.create(Season(**body.model_dump()))


@router.get("/seasons/{season_id}")
async def get_season(season_id: str, service: SeasonService = Depends(get_season_service)):
    return await service.get(season_id)


@router.delete("/seasons/{season_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_season(season_id: str, service: SeasonService = Depends(get_season_service)):
    await service.delete(season_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/seasons/{season_id}/rate")
async def rate_season(
    season_id: str, body: RatingIn, service: SeasonService = Depends(get_season_service)
):
    return await service.rate(season_id, body.rating)


@router.get("/seasons/{season_id}/episodes")
async def get_season_episodes(
    season_id: str, service: SeasonService = Depends(get_season_service)
):
    return await service.get_episodes(season_id)


# --- Episodes -------------------------------------------------------------


@router.post("/episodes", status_code=status.HTTP_201_CREATED)
async def create_episode(body: EpisodeIn, service: EpisodeService = Depends(get_episode_service)):
    return await service.create(Episode(**body.model_dump()))


@router.get("/episodes/{episode_id}")
async def get_episode(episode_id: str, service: EpisodeService = Depends(get_episode_service)):
    return await service.get(episode_id)


@router.delete("/episodes/{episode_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_episode(episode_id: str, service: EpisodeService = Depends(get_episode_service)):
    await service.delete(episode_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/episodes/{episode_id}/rate")
async def rate_episode(
    episode_id: str, body: RatingIn, service: EpisodeService = Depends(get_episode_service)
):
    return await service.rate(episode_id, body.rating)
