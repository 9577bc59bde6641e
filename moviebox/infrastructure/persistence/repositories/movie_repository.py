"""
Implementation SQLModel du repository Movie.

Implemente l'interface IMovieRepository pour la persistance des films.
Les listes (genres, langues, realisateurs, casting...) sont stockees en JSON ;
les filtres d'appartenance utilisent une recherche de sous-chaine sur ces
colonnes.
"""

import json
from dataclasses import asdict
from datetime import date
from typing import Optional

from sqlmodel import or_, select

from moviebox.core.entities.media import CastMember, CrewMember, Movie
from moviebox.core.ports.repositories import IMovieRepository
from moviebox.core.value_objects.filters import MovieFilter
from moviebox.core.value_objects.identifiers import new_id
from moviebox.core.value_objects.pagination import PageRequest
from moviebox.infrastructure.persistence.models import (
    MovieModel,
    dump_json_list,
    load_json_list,
)
from moviebox.infrastructure.persistence.repositories.base import (
    SQLModelRepository,
    json_member,
)


class SQLModelMovieRepository(SQLModelRepository[MovieModel], IMovieRepository):
    """
    Repository SQLModel pour les films.

    Implemente IMovieRepository avec conversion bidirectionnelle
    entre l'entite Movie (domaine) et MovieModel (persistance).
    """

    model = MovieModel
    entity_name = "Movie"
    sortable_fields = frozenset(
        {
            "popularity",
            "title",
            "release_date",
            "vote_average",
            "vote_count",
            "rating_count",
            "duration",
            "budget",
            "revenue",
            "created_at",
        }
    )
    protected_fields = frozenset({"vote_average", "vote_count", "rating_count", "popularity"})

    def _to_entity(self, model: MovieModel) -> Movie:
        """
        Convertit un modele DB en entite domaine.

        Args :
            model : Le modele MovieModel depuis la DB

        Retourne :
            L'entite Movie correspondante
        """
        return Movie(
            id=model.id,
            title=model.title,
            overview=model.overview,
            release_date=model.release_date,
            genres=load_json_list(model.genres_json),
            status=model.status,
            content_rating=model.content_rating,
            languages=load_json_list(model.languages_json),
            country=model.country,
            production_company=model.production_company,
            directors=load_json_list(model.directors_json),
            writers=load_json_list(model.writers_json),
            duration=model.duration,
            budget=model.budget,
            revenue=model.revenue,
            vote_average=model.vote_average,
            vote_count=model.vote_count,
            rating_count=model.rating_count,
            popularity=model.popularity,
            is_active=model.is_active,
            is_adult=model.is_adult,
            cast=[CastMember(**entry) for entry in load_json_list(model.cast_json)],
            crew=[CrewMember(**entry) for entry in load_json_list(model.crew_json)],
        )

    def _to_model(self, entity: Movie) -> MovieModel:
        """
        Convertit une entite domaine en modele DB.

        Args :
            entity : L'entite Movie du domaine

        Retourne :
            Le modele MovieModel pour la persistance
        """
        return MovieModel(
            id=entity.id or new_id(),
            title=entity.title,
            overview=entity.overview,
            release_date=entity.release_date,
            genres_json=dump_json_list(entity.genres),
            status=entity.status,
            content_rating=entity.content_rating,
            languages_json=dump_json_list(entity.languages),
            country=entity.country,
            production_company=entity.production_company,
            directors_json=dump_json_list(entity.directors),
            writers_json=dump_json_list(entity.writers),
            duration=entity.duration,
            budget=entity.budget,
            revenue=entity.revenue,
            vote_average=entity.vote_average,
            vote_count=entity.vote_count,
            rating_count=entity.rating_count,
            popularity=entity.popularity,
            is_active=entity.is_active,
            is_adult=entity.is_adult,
            cast_json=json.dumps([asdict(member) for member in entity.cast]),
            crew_json=json.dumps([asdict(member) for member in entity.crew]),
        )

    async def get_by_id(self, movie_id: str) -> Optional[Movie]:
        """Recupere un film par son ID interne."""
        model = await self._get_model(movie_id)
        if model:
            return self._to_entity(model)
        return None

    async def add(self, movie: Movie) -> Movie:
        model = await self._insert(
            self._to_model(movie), f"Movie with ID {movie.id} already exists"
        )
        return self._to_entity(model)

    async def update(self, movie: Movie) -> Movie:
        model = await self._update_from(
            movie.id, self._to_model(movie), f"Movie {movie.id} could not be updated"
        )
        return self._to_entity(model)

    async def list_page(
        self, request: PageRequest, genre: Optional[str] = None
    ) -> tuple[list[Movie], int]:
        statement = select(MovieModel)
        if genre:
            statement = statement.where(json_member(MovieModel.genres_json, genre))
        models, total = await self._paginate(statement, request)
        return [self._to_entity(model) for model in models], total

    async def search(self, text: str) -> list[Movie]:
        """Recherche des films par titre ou resume (insensible a la casse)."""
        pattern = f"%{text}%"
        statement = (
            select(MovieModel)
            .where(or_(MovieModel.title.ilike(pattern), MovieModel.overview.ilike(pattern)))
            .order_by(*self._ordering("popularity", True))
        )
        return [self._to_entity(model) for model in await self._all(statement)]

    async def find_matching(self, criteria: MovieFilter) -> list[Movie]:
        """
        Traduit un MovieFilter en requete.

        Le critere `person` est d'abord restreint en SQL (sous-chaine dans les
        colonnes JSON), puis verifie precisement sur les personnages, roles,
        realisateurs et scenaristes.
        """
        statement = select(MovieModel)
        if criteria.release_date is not None:
            statement = statement.where(MovieModel.release_date == criteria.release_date)
        if criteria.genres:
            statement = statement.where(
                or_(*[json_member(MovieModel.genres_json, g) for g in criteria.genres])
            )
        if criteria.status:
            statement = statement.where(MovieModel.status == criteria.status)
        if criteria.content_rating:
            statement = statement.where(MovieModel.content_rating == criteria.content_rating)
        if criteria.languages:
            statement = statement.where(
                or_(*[json_member(MovieModel.languages_json, lang) for lang in criteria.languages])
            )
        for field_name, minimum in criteria.thresholds.items():
            statement = statement.where(getattr(MovieModel, field_name) >= minimum)
        if criteria.is_active is not None:
            statement = statement.where(MovieModel.is_active == criteria.is_active)
        if criteria.is_adult is not None:
            statement = statement.where(MovieModel.is_adult == criteria.is_adult)
        if criteria.country:
            statement = statement.where(MovieModel.country.ilike(f"%{criteria.country}%"))
        if criteria.production_company:
            statement = statement.where(
                MovieModel.production_company.ilike(f"%{criteria.production_company}%")
            )
        if criteria.director:
            statement = statement.where(MovieModel.directors_json.ilike(f"%{criteria.director}%"))
        if criteria.writer:
            statement = statement.where(MovieModel.writers_json.ilike(f"%{criteria.writer}%"))
        if criteria.person:
            pattern = f"%{criteria.person}%"
            statement = statement.where(
                or_(
                    MovieModel.cast_json.ilike(pattern),
                    MovieModel.crew_json.ilike(pattern),
                    MovieModel.directors_json.ilike(pattern),
                    MovieModel.writers_json.ilike(pattern),
                )
            )

        statement = statement.order_by(*self._ordering("popularity", True))
        movies = [self._to_entity(model) for model in await self._all(statement)]
        if criteria.person:
            movies = [m for m in movies if _mentions_person(m, criteria.person)]
        return movies

    async def list_sorted(
        self, sort_by: str, limit: int, descending: bool = True, active_only: bool = False
    ) -> list[Movie]:
        statement = select(MovieModel)
        if active_only:
            statement = statement.where(MovieModel.is_active == True)  # noqa: E712
        statement = statement.order_by(*self._ordering(sort_by, descending)).limit(limit)
        return [self._to_entity(model) for model in await self._all(statement)]

    async def list_released(self, limit: int, upcoming: bool = False) -> list[Movie]:
        today = date.today()
        statement = select(MovieModel).where(MovieModel.is_active == True)  # noqa: E712
        if upcoming:
            statement = statement.where(MovieModel.release_date > today)
        else:
            statement = statement.where(MovieModel.release_date <= today)
        statement = statement.order_by(*self._ordering("release_date", not upcoming)).limit(limit)
        return [self._to_entity(model) for model in await self._all(statement)]

    async def find_by_genres(
        self, genres: list[str], exclude_id: str, limit: int
    ) -> list[Movie]:
        if not genres:
            return []
        statement = select(MovieModel).where(
            MovieModel.id != exclude_id,
            or_(*[json_member(MovieModel.genres_json, g) for g in genres]),
        )
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def apply_vote(self, movie_id: str, rating: float) -> Optional[Movie]:
        model = await self._integrate_rating(
            movie_id, rating, average_field="vote_average", count_field="vote_count"
        )
        if model:
            return self._to_entity(model)
        return None


def _mentions_person(movie: Movie, text: str) -> bool:
    """Sous-chaine (insensible a la casse) dans personnages, roles, realisateurs, scenaristes."""
    needle = text.lower()
    haystacks = (
        [member.character for member in movie.cast]
        + [member.role for member in movie.crew]
        + movie.directors
        + movie.writers
    )
    return any(needle in (value or "").lower() for value in haystacks)
