"""
Repositories SQLModel asynchrones.

Implementations concretes des ports repository, liees a la session
d'une unite de travail.
"""

from moviebox.infrastructure.persistence.repositories.episode_repository import (
    SQLModelEpisodeRepository,
)
from moviebox.infrastructure.persistence.repositories.movie_repository import (
    SQLModelMovieRepository,
)
from moviebox.infrastructure.persistence.repositories.notification_repository import (
    SQLModelNotificationRepository,
)
from moviebox.infrastructure.persistence.repositories.person_repository import (
    SQLModelPersonRepository,
)
from moviebox.infrastructure.persistence.repositories.review_repository import (
    SQLModelReviewRepository,
)
from moviebox.infrastructure.persistence.repositories.season_repository import (
    SQLModelSeasonRepository,
)
from moviebox.infrastructure.persistence.repositories.tv_show_repository import (
    SQLModelTvShowRepository,
)
from moviebox.infrastructure.persistence.repositories.user_repository import (
    SQLModelUserRepository,
)

__all__ = [
    "SQLModelEpisodeRepository",
    "SQLModelMovieRepository",
    "SQLModelNotificationRepository",
    "SQLModelPersonRepository",
    "SQLModelReviewRepository",
    "SQLModelSeasonRepository",
    "SQLModelTvShowRepository",
    "SQLModelUserRepository",
]
