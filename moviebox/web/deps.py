"""
Dependances partagees de l'application web.

Donnent acces aux services du Container installe par le lifespan.
"""

from fastapi import Request

from ..services import EpisodeService, SeasonService, TvShowService, UserService


def get_tv_show_service(request: Request) -> TvShowService:
    return request.app.state.container.tv_show_service()


def get_season_service(request: Request) -> SeasonService:
    return request.app.state.container.season_service()


def get_episode_service(request: Request) -> EpisodeService:
    return request.app.state.container.episode_service()


def get_user_service(request: Request) -> UserService:
    return request.app.state.container.user_service()
