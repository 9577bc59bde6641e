"""
Capacités étroites échangées entre services d'agrégats.

Les dépendances croisées (Saison <-> Épisode, Film <-> Personne) passent par
ces protocoles plutôt que par les services complets : chaque service ne voit
de l'autre que l'opération dont il a besoin, liée après construction.
"""

from typing import Optional, Protocol

from moviebox.core.ports.unit_of_work import IUnitOfWork


class PersonExistenceChecker(Protocol):
    """Vérifie qu'une personne existe avant d'y faire référence."""

    async def ensure_person_exists(
        self, person_id: str, uow: Optional[IUnitOfWork] = None
    ) -> None:
        """Lève InvalidArgumentError (format) ou NotFoundError (absente)."""
        ...


class MovieExistenceChecker(Protocol):
    """Vérifie qu'un film existe avant d'y faire référence."""

    async def ensure_movie_exists(
        self, movie_id: str, uow: Optional[IUnitOfWork] = None
    ) -> None:
        """Lève InvalidArgumentError (format) ou NotFoundError (absent)."""
        ...


class EpisodeRemover(Protocol):
    """Supprime en masse les épisodes d'une saison dans une transaction existante."""

    async def delete_all_for_season(
        self, season_id: str, uow: Optional[IUnitOfWork] = None
    ) -> int:
        """Retourne le nombre d'épisodes supprimés."""
        ...
