"""
Implementation SQLModel du repository Episode.

Implemente l'interface IEpisodeRepository. L'index unique
(season_id, episode_number) garantit un seul episode par numero et par saison.
"""

from typing import Optional

from sqlalchemy import delete, func
from sqlmodel import or_, select

from moviebox.core.entities.media import Episode
from moviebox.core.ports.repositories import IEpisodeRepository
from moviebox.core.value_objects.identifiers import new_id
from moviebox.core.value_objects.pagination import PageRequest
from moviebox.infrastructure.persistence.models import EpisodeModel
from moviebox.infrastructure.persistence.repositories.base import SQLModelRepository


class SQLModelEpisodeRepository(SQLModelRepository[EpisodeModel], IEpisodeRepository):
    """
    Repository SQLModel pour les episodes.

    Implemente IEpisodeRepository avec conversion bidirectionnelle
    entre l'entite Episode (domaine) et EpisodeModel (persistance).
    """

    model = EpisodeModel
    entity_name = "Episode"
    sortable_fields = frozenset(
        {
            "popularity",
            "episode_number",
            "title",
            "release_date",
            "duration",
            "average_rating",
            "created_at",
        }
    )
    protected_fields = frozenset(
        {"season_id", "episode_number", "popularity", "average_rating", "rating_count"}
    )

    def _to_entity(self, model: EpisodeModel) -> Episode:
        """
        Convertit un modele DB en entite domaine.

        Args :
            model : Le modele EpisodeModel depuis la DB

        Retourne :
            L'entite Episode correspondante
        """
        return Episode(
            id=model.id,
            season_id=model.season_id,
            episode_number=model.episode_number,
            title=model.title,
            overview=model.overview,
            release_date=model.release_date,
            duration=model.duration,
            popularity=model.popularity,
            average_rating=model.average_rating,
            rating_count=model.rating_count,
        )

    def _to_model(self, entity: Episode) -> EpisodeModel:
        """
        Convertit une entite domaine en modele DB.

        Args :
            entity : L'entite Episode du domaine

        Retourne :
            Le modele EpisodeModel pour la persistance
        """
        return EpisodeModel(
            id=entity.id or new_id(),
            season_id=entity.season_id,
            episode_number=entity.episode_number,
            title=entity.title,
            overview=entity.overview,
            release_date=entity.release_date,
            duration=entity.duration,
            popularity=entity.popularity,
            average_rating=entity.average_rating,
            rating_count=entity.rating_count,
        )

    async def get_by_id(self, episode_id: str) -> Optional[Episode]:
        """Recupere un episode par son ID interne."""
        model = await self._get_model(episode_id)
        if model:
            return self._to_entity(model)
        return None

    async def find_by_number(self, season_id: str, episode_number: int) -> Optional[Episode]:
        """Recupere l'episode portant ce numero dans la saison."""
        statement = select(EpisodeModel).where(
            EpisodeModel.season_id == season_id,
            EpisodeModel.episode_number == episode_number,
        )
        models = await self._all(statement)
        if models:
            return self._to_entity(models[0])
        return None

    async def add(self, episode: Episode) -> Episode:
        model = await self._insert(
            self._to_model(episode),
            f"Episode {episode.episode_number} already exists in season {episode.season_id}",
        )
        return self._to_entity(model)

    async def update(self, episode: Episode) -> Episode:
        model = await self._update_from(
            episode.id, self._to_model(episode), f"Episode {episode.id} could not be updated"
        )
        return self._to_entity(model)

    async def list_page(
        self,
        request: PageRequest,
        season_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Episode], int]:
        statement = select(EpisodeModel)
        if season_id:
            statement = statement.where(EpisodeModel.season_id == season_id)
        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(EpisodeModel.title.ilike(pattern), EpisodeModel.overview.ilike(pattern))
            )
        models, total = await self._paginate(statement, request)
        return [self._to_entity(model) for model in models], total

    async def list_by_season(self, season_id: str) -> list[Episode]:
        """Liste les episodes d'une saison, tries par numero."""
        statement = (
            select(EpisodeModel)
            .where(EpisodeModel.season_id == season_id)
            .order_by(EpisodeModel.episode_number)
        )
        return [self._to_entity(model) for model in await self._all(statement)]

    async def list_by_seasons(
        self, season_ids: list[str], exclude_id: str, limit: int
    ) -> list[Episode]:
        if not season_ids:
            return []
        statement = select(EpisodeModel).where(
            EpisodeModel.season_id.in_(season_ids),
            EpisodeModel.id != exclude_id,
        )
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def list_trending(self, limit: int) -> list[Episode]:
        statement = select(EpisodeModel)
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def count_by_seasons(self, season_ids: list[str]) -> int:
        if not season_ids:
            return 0
        statement = (
            select(func.count())
            .select_from(EpisodeModel)
            .where(EpisodeModel.season_id.in_(season_ids))
        )
        return (await self._session.exec(statement)).one()

    async def delete_by_seasons(self, season_ids: list[str]) -> int:
        if not season_ids:
            return 0
        return await self._run(delete(EpisodeModel).where(EpisodeModel.season_id.in_(season_ids)))

    async def increment_popularity(self, episode_id: str, delta: float) -> None:
        await self._increment(episode_id, "popularity", delta)

    async def apply_rating(self, episode_id: str, rating: float) -> Optional[Episode]:
        model = await self._integrate_rating(episode_id, rating)
        if model:
            return self._to_entity(model)
        return None
