"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports repository : Contrats de persistance des agrégats
- IMovieRepository, IPersonRepository, ITvShowRepository, ISeasonRepository,
  IEpisodeRepository, IUserRepository, IReviewRepository, INotificationRepository

Port unité de travail : Transaction de stockage
- IUnitOfWork, UnitOfWorkFactory

Port cache : Cache en lecture avec TTL et invalidation par motif
- ICacheGateway, CacheKey, EntityKind

Port notifications : Collaborateur d'envoi
- INotifier

Capacités croisées entre services
- PersonExistenceChecker, MovieExistenceChecker, EpisodeRemover
"""

from moviebox.core.ports.cache import CacheKey, EntityKind, ICacheGateway
from moviebox.core.ports.capabilities import (
    EpisodeRemover,
    MovieExistenceChecker,
    PersonExistenceChecker,
)
from moviebox.core.ports.notifications import INotifier
from moviebox.core.ports.repositories import (
    IEpisodeRepository,
    IMovieRepository,
    INotificationRepository,
    IPersonRepository,
    IReviewRepository,
    ISeasonRepository,
    ITvShowRepository,
    IUserRepository,
)
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory

__all__ = [
    # Cache
    "CacheKey",
    "EntityKind",
    "ICacheGateway",
    # Capacités
    "EpisodeRemover",
    "MovieExistenceChecker",
    "PersonExistenceChecker",
    # Notifications
    "INotifier",
    # Repositories
    "IEpisodeRepository",
    "IMovieRepository",
    "INotificationRepository",
    "IPersonRepository",
    "IReviewRepository",
    "ISeasonRepository",
    "ITvShowRepository",
    "IUserRepository",
    # Unité de travail
    "IUnitOfWork",
    "UnitOfWorkFactory",
]
