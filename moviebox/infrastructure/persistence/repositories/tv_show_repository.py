"""
Implementation SQLModel du repository TvShow.

La serie est la racine de l'agregat : elle reference ses saisons par ID
(seasons_json). La suppression en cascade est orchestree par le service,
ce repository ne supprime que la ligne de la serie.
"""

import json
from dataclasses import asdict
from typing import Optional

from sqlmodel import or_, select

from moviebox.core.entities.media import CastMember, CrewMember, TvShow
from moviebox.core.ports.repositories import ITvShowRepository
from moviebox.core.value_objects.identifiers import new_id
from moviebox.core.value_objects.pagination import PageRequest
from moviebox.infrastructure.persistence.models import (
    TvShowModel,
    dump_json_list,
    load_json_list,
)
from moviebox.infrastructure.persistence.repositories.base import (
    SQLModelRepository,
    json_member,
)


class SQLModelTvShowRepository(SQLModelRepository[TvShowModel], ITvShowRepository):
    """
    Repository SQLModel pour les series TV.

    Les compteurs (popularite, moyenne, nombre de notes) et l'ensemble des
    saisons ne sont modifies que par les operations dediees.
    """

    model = TvShowModel
    entity_name = "TvShow"
    sortable_fields = frozenset(
        {"popularity", "title", "release_date", "average_rating", "rating_count", "created_at"}
    )
    protected_fields = frozenset(
        {"seasons_json", "popularity", "average_rating", "rating_count"}
    )

    def _to_entity(self, model: TvShowModel) -> TvShow:
        """
        Convertit un modele DB en entite domaine.

        Args :
            model : Le modele TvShowModel depuis la DB

        Retourne :
            L'entite TvShow correspondante
        """
        return TvShow(
            id=model.id,
            title=model.title,
            overview=model.overview,
            release_date=model.release_date,
            end_date=model.end_date,
            genres=load_json_list(model.genres_json),
            country=model.country,
            is_active=model.is_active,
            popularity=model.popularity,
            average_rating=model.average_rating,
            rating_count=model.rating_count,
            seasons=load_json_list(model.seasons_json),
            cast=[CastMember(**entry) for entry in load_json_list(model.cast_json)],
            crew=[CrewMember(**entry) for entry in load_json_list(model.crew_json)],
        )

    def _to_model(self, entity: TvShow) -> TvShowModel:
        return TvShowModel(
            id=entity.id or new_id(),
            title=entity.title,
            overview=entity.overview,
            release_date=entity.release_date,
            end_date=entity.end_date,
            genres_json=dump_json_list(entity.genres),
            country=entity.country,
            is_active=entity.is_active,
            popularity=entity.popularity,
            average_rating=entity.average_rating,
            rating_count=entity.rating_count,
            seasons_json=dump_json_list(entity.seasons),
            cast_json=json.dumps([asdict(member) for member in entity.cast]),
            crew_json=json.dumps([asdict(member) for member in entity.crew]),
        )

    async def get_by_id(self, tv_show_id: str) -> Optional[TvShow]:
        """Recupere une serie par son ID interne."""
        model = await self._get_model(tv_show_id)
        if model:
            return self._to_entity(model)
        return None

    async def add(self, tv_show: TvShow) -> TvShow:
        model = await self._insert(
            self._to_model(tv_show), f"TvShow with ID {tv_show.id} already exists"
        )
        return self._to_entity(model)

    async def update(self, tv_show: TvShow) -> TvShow:
        model = await self._update_from(
            tv_show.id, self._to_model(tv_show), f"TvShow {tv_show.id} could not be updated"
        )
        return self._to_entity(model)

    async def list_page(
        self,
        request: PageRequest,
        genre: Optional[str] = None,
        search: Optional[str] = None,
        country: Optional[str] = None,
    ) -> tuple[list[TvShow], int]:
        statement = select(TvShowModel)
        if genre:
            statement = statement.where(json_member(TvShowModel.genres_json, genre))
        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(TvShowModel.title.ilike(pattern), TvShowModel.overview.ilike(pattern))
            )
        if country:
            statement = statement.where(TvShowModel.country.ilike(f"%{country}%"))
        models, total = await self._paginate(statement, request)
        return [self._to_entity(model) for model in models], total

    async def list_trending(self, limit: int) -> list[TvShow]:
        statement = select(TvShowModel).where(TvShowModel.is_active == True)  # noqa: E712
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def find_by_genres(
        self, genres: list[str], exclude_id: str, limit: int
    ) -> list[TvShow]:
        if not genres:
            return []
        statement = select(TvShowModel).where(
            TvShowModel.id != exclude_id,
            or_(*[json_member(TvShowModel.genres_json, g) for g in genres]),
        )
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def add_season(self, tv_show_id: str, season_id: str) -> bool:
        return await self._add_to_set(tv_show_id, "seasons_json", season_id)

    async def remove_season(self, tv_show_id: str, season_id: str) -> bool:
        return await self._remove_from_set(tv_show_id, "seasons_json", season_id)

    async def increment_popularity(self, tv_show_id: str, delta: float) -> None:
        await self._increment(tv_show_id, "popularity", delta)

    async def apply_rating(self, tv_show_id: str, rating: float) -> Optional[TvShow]:
        model = await self._integrate_rating(tv_show_id, rating)
        if model:
            return self._to_entity(model)
        return None
