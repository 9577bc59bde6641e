"""
Port de l'unité de travail (transaction de stockage).

Une unité de travail ouvre une session de stockage, expose les repositories
liés à cette session et délimite une transaction : soit commit() rend toutes
les écritures visibles ensemble, soit aucune ne l'est. La session est
toujours libérée à la sortie du bloc `async with`, avec rollback si
l'unité n'a pas été validée.

Usage:
    async with uow_factory() as uow:
        await uow.seasons.add(season)
        await uow.tv_shows.add_season(season.tv_show_id, season.id)
        await uow.commit()
"""

from abc import ABC, abstractmethod
from typing import Callable

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


class IUnitOfWork(ABC):
    """Contrat d'une transaction de stockage et de ses repositories."""

    movies: IMovieRepository
    people: IPersonRepository
    tv_shows: ITvShowRepository
    seasons: ISeasonRepository
    episodes: IEpisodeRepository
    users: IUserRepository
    reviews: IReviewRepository
    notifications: INotificationRepository

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        """Ouvre la session et démarre la transaction."""
        ...

    @abstractmethod
    async def __aexit__(self, exc_type, exc, tb) -> None:
        """Annule la transaction non validée et libère la session."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Valide toutes les écritures de l'unité."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Annule toutes les écritures de l'unité."""
        ...


UnitOfWorkFactory = Callable[[], IUnitOfWork]
