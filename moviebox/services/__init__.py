"""
Services d'agregats du catalogue.

Chaque service possede un agregat et orchestre ses cascades dans des
unites de travail ; les lectures passent par le cache.
"""

from moviebox.services.episode_service import EpisodeService
from moviebox.services.movie_service import MovieService
from moviebox.services.person_service import PersonService
from moviebox.services.review_service import ReviewService
from moviebox.services.season_service import SeasonService
from moviebox.services.tv_show_service import TvShowService
from moviebox.services.user_service import UserService

__all__ = [
    "EpisodeService",
    "MovieService",
    "PersonService",
    "ReviewService",
    "SeasonService",
    "TvShowService",
    "UserService",
]
