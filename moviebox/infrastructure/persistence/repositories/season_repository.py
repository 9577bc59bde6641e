"""
Implementation SQLModel du repository Season.

L'unicite du numero de saison dans une serie est garantie par l'index
unique (tv_show_id, season_number) : une insertion concurrente perdante
se traduit par une ConflictError.
"""

from typing import Optional

from sqlalchemy import delete
from sqlmodel import or_, select

from moviebox.core.entities.media import Season
from moviebox.core.ports.repositories import ISeasonRepository
from moviebox.core.value_objects.identifiers import new_id
from moviebox.core.value_objects.pagination import PageRequest
from moviebox.infrastructure.persistence.models import (
    SeasonModel,
    dump_json_list,
    load_json_list,
)
from moviebox.infrastructure.persistence.repositories.base import SQLModelRepository


class SQLModelSeasonRepository(SQLModelRepository[SeasonModel], ISeasonRepository):
    """Repository SQLModel pour les saisons."""

    model = SeasonModel
    entity_name = "Season"
    sortable_fields = frozenset(
        {"popularity", "season_number", "title", "release_date", "average_rating", "created_at"}
    )
    protected_fields = frozenset(
        {
            "tv_show_id",
            "season_number",
            "episodes_json",
            "popularity",
            "average_rating",
            "rating_count",
        }
    )

    def _to_entity(self, model: SeasonModel) -> Season:
        return Season(
            id=model.id,
            tv_show_id=model.tv_show_id,
            season_number=model.season_number,
            title=model.title,
            overview=model.overview,
            release_date=model.release_date,
            popularity=model.popularity,
            average_rating=model.average_rating,
            rating_count=model.rating_count,
            episodes=load_json_list(model.episodes_json),
        )

    def _to_model(self, entity: Season) -> SeasonModel:
        return SeasonModel(
            id=entity.id or new_id(),
            tv_show_id=entity.tv_show_id,
            season_number=entity.season_number,
            title=entity.title,
            overview=entity.overview,
            release_date=entity.release_date,
            popularity=entity.popularity,
            average_rating=entity.average_rating,
            rating_count=entity.rating_count,
            episodes_json=dump_json_list(entity.episodes),
        )

    async def get_by_id(self, season_id: str) -> Optional[Season]:
        """Recupere une saison par son ID interne."""
        model = await self._get_model(season_id)
        if model:
            return self._to_entity(model)
        return None

    async def find_by_number(self, tv_show_id: str, season_number: int) -> Optional[Season]:
        statement = select(SeasonModel).where(
            SeasonModel.tv_show_id == tv_show_id,
            SeasonModel.season_number == season_number,
        )
        models = await self._all(statement)
        if models:
            return self._to_entity(models[0])
        return None

    async def add(self, season: Season) -> Season:
        model = await self._insert(
            self._to_model(season),
            f"Season {season.season_number} already exists for TV show {season.tv_show_id}",
        )
        return self._to_entity(model)

    async def update(self, season: Season) -> Season:
        model = await self._update_from(
            season.id, self._to_model(season), f"Season {season.id} could not be updated"
        )
        return self._to_entity(model)

    async def list_page(
        self,
        request: PageRequest,
        tv_show_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Season], int]:
        statement = select(SeasonModel)
        if tv_show_id:
            statement = statement.where(SeasonModel.tv_show_id == tv_show_id)
        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(SeasonModel.title.ilike(pattern), SeasonModel.overview.ilike(pattern))
            )
        models, total = await self._paginate(statement, request)
        return [self._to_entity(model) for model in models], total

    async def list_ids_by_tv_show(self, tv_show_id: str) -> list[str]:
        statement = select(SeasonModel.id).where(SeasonModel.tv_show_id == tv_show_id)
        return list((await self._session.exec(statement)).all())

    async def list_by_tv_shows(
        self, tv_show_ids: list[str], exclude_id: str, limit: int
    ) -> list[Season]:
        if not tv_show_ids:
            return []
        statement = select(SeasonModel).where(
            SeasonModel.tv_show_id.in_(tv_show_ids),
            SeasonModel.id != exclude_id,
        )
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def list_trending(self, limit: int) -> list[Season]:
        statement = select(SeasonModel)
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def delete_by_tv_show(self, tv_show_id: str) -> int:
        return await self._run(delete(SeasonModel).where(SeasonModel.tv_show_id == tv_show_id))

    async def add_episode(self, season_id: str, episode_id: str) -> bool:
        return await self._add_to_set(season_id, "episodes_json", episode_id)

    async def remove_episode(self, season_id: str, episode_id: str) -> bool:
        return await self._remove_from_set(season_id, "episodes_json", episode_id)

    async def increment_popularity(self, season_id: str, delta: float) -> None:
        await self._increment(season_id, "popularity", delta)

    async def apply_rating(self, season_id: str, rating: float) -> Optional[Season]:
        model = await self._integrate_rating(season_id, rating)
        if model:
            return self._to_entity(model)
        return None
