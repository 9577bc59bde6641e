"""
Unite de travail SQLModel.

Chaque unite ouvre sa propre AsyncSession : toutes les ecritures des
repositories exposes participent a une seule transaction, validee par
commit(). La session est toujours fermee a la sortie du bloc, avec rollback
si une exception a interrompu l'unite.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from moviebox.core.ports.unit_of_work import IUnitOfWork
from moviebox.infrastructure.persistence.repositories import (
    SQLModelEpisodeRepository,
    SQLModelMovieRepository,
    SQLModelNotificationRepository,
    SQLModelPersonRepository,
    SQLModelReviewRepository,
    SQLModelSeasonRepository,
    SQLModelTvShowRepository,
    SQLModelUserRepository,
)


class SQLModelUnitOfWork(IUnitOfWork):
    """
    Transaction SQLModel et repositories lies a sa session.

    Example:
        async with SQLModelUnitOfWork(session_factory) as uow:
            await uow.tv_shows.add_season(tv_show_id, season_id)
            await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "SQLModelUnitOfWork":
        session = self._session_factory()
        self._session = session
        self.movies = SQLModelMovieRepository(session)
        self.people = SQLModelPersonRepository(session)
        self.tv_shows = SQLModelTvShowRepository(session)
        self.seasons = SQLModelSeasonRepository(session)
        self.episodes = SQLModelEpisodeRepository(session)
        self.users = SQLModelUserRepository(session)
        self.reviews = SQLModelReviewRepository(session)
        self.notifications = SQLModelNotificationRepository(session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
