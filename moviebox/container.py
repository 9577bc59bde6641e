"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour les interfaces CLI et Web :
engine asynchrone, unites de travail, cache, collaborateur de notifications
et services d'agregats.
"""

from dependency_injector import containers, providers

from .adapters.cache import CatalogCache
from .config import Settings
from .infrastructure.persistence.database import create_database_engine, create_session_factory
from .infrastructure.persistence.notifications import StoredNotifier
from .infrastructure.persistence.unit_of_work import SQLModelUnitOfWork
from .services.episode_service import EpisodeService
from .services.movie_service import MovieService
from .services.person_service import PersonService
from .services.review_service import ReviewService
from .services.season_service import SeasonService
from .services.tv_show_service import TvShowService
from .services.user_service import UserService


def _link_services(person_service: PersonService, movie_service: MovieService) -> None:
    """Lie les capacites croisees Film <-> Personne apres construction."""
    person_service.bind_movie_checker(movie_service)


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.init_resources()  # Lie les services croises
        seasons = container.season_service()
        await seasons.create(Season(tv_show_id=..., season_number=1))
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - engine et fabrique de sessions partages
    engine = providers.Singleton(
        create_database_engine,
        database_url=config.provided.database_url,
        echo=config.provided.database_echo,
    )
    session_factory = providers.Singleton(create_session_factory, engine=engine)

    # Unite de travail - nouvelle instance (donc nouvelle session) a chaque appel
    unit_of_work = providers.Factory(SQLModelUnitOfWork, session_factory=session_factory)

    # Cache - Singleton partage par tous les services
    cache = providers.Singleton(
        CatalogCache,
        cache_dir=config.provided.cache_dir,
    )

    notifier = providers.Singleton(StoredNotifier, uow_factory=unit_of_work.provider)

    # Services d'agregats - Singletons, chaque operation ouvre sa propre unite
    episode_service = providers.Singleton(
        EpisodeService,
        uow_factory=unit_of_work.provider,
        cache=cache,
        cache_ttl=config.provided.cache_ttl_seconds,
    )
    season_service = providers.Singleton(
        SeasonService,
        uow_factory=unit_of_work.provider,
        cache=cache,
        cache_ttl=config.provided.cache_ttl_seconds,
        episode_remover=episode_service,
    )
    person_service = providers.Singleton(
        PersonService,
        uow_factory=unit_of_work.provider,
        cache=cache,
        cache_ttl=config.provided.cache_ttl_seconds,
    )
    tv_show_service = providers.Singleton(
        TvShowService,
        uow_factory=unit_of_work.provider,
        cache=cache,
        person_checker=person_service,
        cache_ttl=config.provided.cache_ttl_seconds,
    )
    movie_service = providers.Singleton(
        MovieService,
        uow_factory=unit_of_work.provider,
        cache=cache,
        person_checker=person_service,
        cache_ttl=config.provided.cache_ttl_seconds,
    )
    user_service = providers.Singleton(
        UserService,
        uow_factory=unit_of_work.provider,
        cache=cache,
        notifier=notifier,
        cache_ttl=config.provided.cache_ttl_seconds,
        max_attempts=config.provided.retry_max_attempts,
        max_wait=config.provided.retry_max_wait_seconds,
    )
    review_service = providers.Singleton(
        ReviewService,
        uow_factory=unit_of_work.provider,
        max_attempts=config.provided.retry_max_attempts,
        max_wait=config.provided.retry_max_wait_seconds,
    )

    # Liaison Film <-> Personne - initialisee par init_resources()
    service_links = providers.Resource(
        _link_services,
        person_service=person_service,
        movie_service=movie_service,
    )
