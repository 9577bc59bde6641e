"""
Fixtures pytest partagees pour les tests MovieBox.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec chemins temporaires
- Base SQLite reelle (aiosqlite) et cache diskcache dans tmp_path
- Services d'agregats cables comme dans le Container
"""

from functools import partial
from pathlib import Path
from typing import AsyncIterator, Iterator

import pytest

from moviebox.adapters.cache import CatalogCache
from moviebox.config import Settings
from moviebox.core.entities.media import Movie, Person, TvShow
from moviebox.core.entities.social import User
from moviebox.infrastructure.persistence import (
    SQLModelUnitOfWork,
    create_database_engine,
    create_session_factory,
    init_db,
)
from moviebox.infrastructure.persistence.notifications import StoredNotifier
from moviebox.services import (
    EpisodeService,
    MovieService,
    PersonService,
    ReviewService,
    SeasonService,
    TvShowService,
    UserService,
)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler base, cache et logs de chaque test.
    """
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/test.db",
        cache_dir=tmp_path / "cache",
        cache_ttl_seconds=600,
        retry_max_attempts=3,
        retry_max_wait_seconds=0,
        log_file=tmp_path / "logs" / "test.log",
    )


@pytest.fixture
async def engine(test_settings: Settings) -> AsyncIterator:
    """Engine asynchrone sur une base SQLite fraiche, tables creees."""
    engine = create_database_engine(test_settings.database_url)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def uow_factory(engine):
    """Fabrique d'unites de travail (une nouvelle session par appel)."""
    return partial(SQLModelUnitOfWork, create_session_factory(engine))


@pytest.fixture
def cache(test_settings: Settings) -> Iterator[CatalogCache]:
    """Cache disque dans un repertoire temporaire."""
    cache = CatalogCache(cache_dir=str(test_settings.cache_dir))
    yield cache
    cache.close()


@pytest.fixture
def episode_service(uow_factory, cache) -> EpisodeService:
    return EpisodeService(uow_factory, cache)


@pytest.fixture
def season_service(uow_factory, cache, episode_service) -> SeasonService:
    return SeasonService(uow_factory, cache, episode_remover=episode_service)


@pytest.fixture
def person_service(uow_factory, cache) -> PersonService:
    return PersonService(uow_factory, cache)


@pytest.fixture
def movie_service(uow_factory, cache, person_service) -> MovieService:
    """Service des films, lie au service des personnes (et inversement)."""
    service = MovieService(uow_factory, cache, person_checker=person_service)
    person_service.bind_movie_checker(service)
    return service


@pytest.fixture
def tv_show_service(uow_factory, cache, person_service) -> TvShowService:
    return TvShowService(uow_factory, cache, person_checker=person_service)


@pytest.fixture
def user_service(uow_factory, cache) -> UserService:
    return UserService(
        uow_factory, cache, notifier=StoredNotifier(uow_factory), max_attempts=3, max_wait=0
    )


@pytest.fixture
def review_service(uow_factory) -> ReviewService:
    return ReviewService(uow_factory, max_attempts=3, max_wait=0)


@pytest.fixture
async def tv_show(tv_show_service: TvShowService) -> TvShow:
    """Serie de depart, sans saison."""
    return await tv_show_service.create(TvShow(title="Breaking Bad", genres=["Drama", "Crime"]))


@pytest.fixture
async def person(person_service: PersonService) -> Person:
    return await person_service.create(Person(name="Bryan Cranston", roles=["Actor"]))


@pytest.fixture
async def movie(movie_service: MovieService) -> Movie:
    return await movie_service.create(
        Movie(title="Inception", genres=["Sci-Fi", "Action"], languages=["English"])
    )


@pytest.fixture
async def alice(user_service: UserService) -> User:
    return await user_service.create(User(username="alice", email="alice@example.com"))


@pytest.fixture
async def bob(user_service: UserService) -> User:
    return await user_service.create(User(username="bob", email="bob@example.com"))
