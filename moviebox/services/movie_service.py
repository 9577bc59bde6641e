"""
Service de l'agregat Movie.

Entite a un seul niveau : pas d'enfants en cascade. Le casting et l'equipe
referencent des personnes verifiees a l'ajout ; la suppression d'un film ne
supprime jamais une personne, elle retire seulement le film des
filmographies. Implemente la capacite MovieExistenceChecker.
"""

from collections.abc import Mapping
from typing import Any, Optional

from loguru import logger

from moviebox.core.entities.media import CastMember, CrewMember, Movie
from moviebox.core.errors import InvalidArgumentError, NotFoundError
from moviebox.core.ports.cache import CacheKey, EntityKind, ICacheGateway
from moviebox.core.ports.capabilities import PersonExistenceChecker
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from moviebox.core.value_objects.catalog import (
    ContentRating,
    Language,
    MovieGenre,
    MovieStatus,
    normalize_enum,
    normalize_enum_list,
)
from moviebox.core.value_objects.filters import MOVIE_THRESHOLD_FIELDS, MovieFilter
from moviebox.core.value_objects.identifiers import ensure_valid_id, new_id
from moviebox.core.value_objects.pagination import Page, PageRequest
from moviebox.services.caching import cache_or_fetch, invalidate_quietly
from moviebox.services.transactions import transactional
from moviebox.services.validation import (
    apply_changes,
    ensure_text,
    ensure_valid_rating,
    parse_date,
)
from moviebox.utils.constants import DEFAULT_TRENDING_LIMIT

_UPDATABLE_FIELDS = (
    "title",
    "overview",
    "release_date",
    "genres",
    "status",
    "content_rating",
    "languages",
    "country",
    "production_company",
    "directors",
    "writers",
    "duration",
    "budget",
    "revenue",
    "is_active",
    "is_adult",
)

# Criteres textuels (sous-chaine insensible a la casse)
_TEXT_FILTERS = ("person", "country", "production_company", "director", "writer")


class MovieService:
    """Operations sur les films, leur casting, leur equipe et leurs listes."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        cache: ICacheGateway,
        person_checker: PersonExistenceChecker,
        cache_ttl: int = 600,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._person_checker = person_checker
        self._cache_ttl = cache_ttl

    async def ensure_movie_exists(
        self, movie_id: str, uow: Optional[IUnitOfWork] = None
    ) -> None:
        """
        Verifie qu'un film existe.

        Raises:
            InvalidArgumentError: ID mal forme
            NotFoundError: film absent
        """
        ensure_valid_id(movie_id, "movie")
        async with transactional(self._uow_factory, "check movie", uow) as unit:
            if not await unit.movies.exists(movie_id):
                raise NotFoundError("Movie", movie_id)

    async def create(self, movie: Movie) -> Movie:
        movie.title = ensure_text(movie.title, "Title")
        _normalize_movie(movie)
        _validate_member_ids(movie.cast, movie.crew)
        movie.id = new_id()
        movie.vote_average = 0.0
        movie.vote_count = 0

        async with transactional(self._uow_factory, "create movie") as uow:
            await self._ensure_people_exist(movie.cast, movie.crew, uow)
            created = await uow.movies.add(movie)

        logger.info("Film cree", movie_id=created.id, title=created.title)
        await invalidate_quietly(self._cache, patterns=[CacheKey.listings_pattern(EntityKind.MOVIE)])
        return created

    async def get(self, movie_id: str) -> Movie:
        ensure_valid_id(movie_id, "movie")

        async def fetch() -> Optional[Movie]:
            async with transactional(self._uow_factory, "get movie") as uow:
                return await uow.movies.get_by_id(movie_id)

        movie = await cache_or_fetch(
            self._cache, CacheKey.entity(EntityKind.MOVIE, movie_id), fetch, self._cache_ttl
        )
        if movie is None:
            raise NotFoundError("Movie", movie_id)
        return movie

    async def list_movies(
        self, request: Optional[PageRequest] = None, genre: Optional[str] = None
    ) -> Page[Movie]:
        request = request or PageRequest()
        if genre:
            genre = normalize_enum(genre, MovieGenre).value
        key = CacheKey.listing(
            EntityKind.MOVIE, request.page, request.limit, request.sort_by, request.sort_order.value, genre
        )

        async def fetch() -> Page[Movie]:
            async with transactional(self._uow_factory, "list movies") as uow:
                items, total = await uow.movies.list_page(request, genre)
            return Page.build(items, total, request)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def update(self, movie_id: str, changes: dict[str, Any]) -> Movie:
        ensure_valid_id(movie_id, "movie")
        async with transactional(self._uow_factory, "update movie") as uow:
            current = await self._load(uow, movie_id)
            candidate = apply_changes(current, changes, _UPDATABLE_FIELDS)
            _normalize_movie(candidate)
            updated = await uow.movies.update(candidate)

        await self._invalidate(movie_id)
        return updated

    async def delete(self, movie_id: str) -> None:
        """Supprime le film et le retire de toutes les filmographies (meme unite)."""
        ensure_valid_id(movie_id, "movie")
        async with transactional(self._uow_factory, "delete movie") as uow:
            if not await uow.movies.exists(movie_id):
                raise NotFoundError("Movie", movie_id)
            touched = await uow.people.remove_movie_everywhere(movie_id)
            await uow.movies.delete(movie_id)

        logger.info("Film supprime", movie_id=movie_id, filmographies_updated=touched)
        await invalidate_quietly(
            self._cache,
            patterns=(
                CacheKey.entity_pattern(EntityKind.MOVIE, movie_id),
                CacheKey.listings_pattern(EntityKind.MOVIE),
                # Les filmographies en cache peuvent contenir ce film
                CacheKey.kind_pattern(EntityKind.PERSON),
            ),
        )

    async def search(self, text: str) -> list[Movie]:
        """Recherche par titre ou resume."""
        text = ensure_text(text, "Search text")
        async with transactional(self._uow_factory, "search movies") as uow:
            return await uow.movies.search(text)

    async def filter(self, raw: Mapping[str, Any]) -> list[Movie]:
        """
        Filtre conjonctif a partir de parametres bruts.

        Parametres reconnus :
        - release_date : date exacte (AAAA-MM-JJ)
        - genres, languages : listes (ou chaines separees par des virgules)
          normalisees contre leur enumeration, au moins une valeur doit correspondre
        - status, content_rating : valeur d'enumeration
        - rating_count, duration, budget, revenue, vote_average, vote_count,
          popularity : seuils minimum (>=)
        - is_active, is_adult : booleens
        - person, country, production_company, director, writer : sous-chaines

        Raises:
            InvalidArgumentError: parametre inconnu, valeur d'enumeration,
                nombre ou date invalide
        """
        criteria = build_movie_filter(raw)
        async with transactional(self._uow_factory, "filter movies") as uow:
            return await uow.movies.find_matching(criteria)

    async def get_cast(self, movie_id: str) -> list[CastMember]:
        """Casting par ordre d'apparition au generique."""
        movie = await self.get(movie_id)
        return sorted(movie.cast, key=lambda member: member.order)

    async def get_crew(self, movie_id: str) -> list[CrewMember]:
        movie = await self.get(movie_id)
        return list(movie.crew)

    async def add_cast(self, movie_id: str, members: list[CastMember]) -> Movie:
        """Ajoute des membres au casting ; une personne introuvable annule tout le lot."""
        ensure_valid_id(movie_id, "movie")
        _validate_member_ids(members, [])
        async with transactional(self._uow_factory, "add movie cast") as uow:
            movie = await self._load(uow, movie_id)
            await self._ensure_people_exist(members, [], uow)
            movie.cast.extend(m for m in members if m not in movie.cast)
            updated = await uow.movies.update(movie)

        await self._invalidate(movie_id)
        return updated

    async def add_crew(self, movie_id: str, members: list[CrewMember]) -> Movie:
        ensure_valid_id(movie_id, "movie")
        _validate_member_ids([], members)
        async with transactional(self._uow_factory, "add movie crew") as uow:
            movie = await self._load(uow, movie_id)
            await self._ensure_people_exist([], members, uow)
            movie.crew.extend(m for m in members if m not in movie.crew)
            updated = await uow.movies.update(movie)

        await self._invalidate(movie_id)
        return updated

    async def remove_cast(self, movie_id: str, person_id: str) -> Movie:
        ensure_valid_id(movie_id, "movie")
        ensure_valid_id(person_id, "person")
        async with transactional(self._uow_factory, "remove movie cast") as uow:
            movie = await self._load(uow, movie_id)
            movie.cast = [m for m in movie.cast if m.person_id != person_id]
            updated = await uow.movies.update(movie)

        await self._invalidate(movie_id)
        return updated

    async def remove_crew(self, movie_id: str, person_id: str) -> Movie:
        ensure_valid_id(movie_id, "movie")
        ensure_valid_id(person_id, "person")
        async with transactional(self._uow_factory, "remove movie crew") as uow:
            movie = await self._load(uow, movie_id)
            movie.crew = [m for m in movie.crew if m.person_id != person_id]
            updated = await uow.movies.update(movie)

        await self._invalidate(movie_id)
        return updated

    async def rate(self, movie_id: str, rating: float) -> Movie:
        """Integre une note dans vote_average / vote_count."""
        ensure_valid_id(movie_id, "movie")
        rating = ensure_valid_rating(rating)
        async with transactional(self._uow_factory, "rate movie") as uow:
            movie = await uow.movies.apply_vote(movie_id, rating)
            if movie is None:
                raise NotFoundError("Movie", movie_id)

        await self._invalidate(movie_id)
        return movie

    async def get_trending(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Movie]:
        """Films actifs les plus populaires."""
        return await self._cached_listing(
            "trending", limit, lambda uow: uow.movies.list_sorted("popularity", limit, active_only=True)
        )

    async def get_popular(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Movie]:
        return await self._cached_listing(
            "popular", limit, lambda uow: uow.movies.list_sorted("popularity", limit)
        )

    async def get_top_rated(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Movie]:
        return await self._cached_listing(
            "top_rated", limit, lambda uow: uow.movies.list_sorted("vote_average", limit)
        )

    async def get_now_playing(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Movie]:
        """Films sortis, les plus recents d'abord."""
        return await self._cached_listing(
            "now_playing", limit, lambda uow: uow.movies.list_released(limit)
        )

    async def get_upcoming(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Movie]:
        """Films a venir, les plus proches d'abord."""
        return await self._cached_listing(
            "upcoming", limit, lambda uow: uow.movies.list_released(limit, upcoming=True)
        )

    async def get_recommendations(
        self, movie_id: str, limit: int = DEFAULT_TRENDING_LIMIT
    ) -> list[Movie]:
        """Films partageant au moins un genre, par popularite decroissante."""
        ensure_valid_id(movie_id, "movie")
        async with transactional(self._uow_factory, "recommend movies") as uow:
            movie = await self._load(uow, movie_id)
            return await uow.movies.find_by_genres(movie.genres, movie_id, limit)

    async def _cached_listing(self, name: str, limit: int, query) -> list[Movie]:
        async def fetch() -> list[Movie]:
            async with transactional(self._uow_factory, f"list {name.replace('_', ' ')} movies") as uow:
                return await query(uow)

        key = CacheKey.listing(EntityKind.MOVIE, name, limit)
        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def _load(self, uow: IUnitOfWork, movie_id: str) -> Movie:
        movie = await uow.movies.get_by_id(movie_id)
        if movie is None:
            raise NotFoundError("Movie", movie_id)
        return movie

    async def _ensure_people_exist(
        self, cast: list[CastMember], crew: list[CrewMember], uow: IUnitOfWork
    ) -> None:
        for person_id in dict.fromkeys(m.person_id for m in [*cast, *crew]):
            await self._person_checker.ensure_person_exists(person_id, uow)

    async def _invalidate(self, movie_id: str) -> None:
        await invalidate_quietly(
            self._cache,
            patterns=(
                CacheKey.entity_pattern(EntityKind.MOVIE, movie_id),
                CacheKey.listings_pattern(EntityKind.MOVIE),
            ),
        )


def build_movie_filter(raw: Mapping[str, Any]) -> MovieFilter:
    """
    Valide et normalise les parametres bruts d'un filtre de films.

    Les valeurs vides (None, "") sont ignorees.
    """
    params = {key: value for key, value in raw.items() if value not in (None, "")}
    known = {
        "release_date",
        "genres",
        "status",
        "content_rating",
        "languages",
        "is_active",
        "is_adult",
        *MOVIE_THRESHOLD_FIELDS,
        *_TEXT_FILTERS,
    }
    unknown = sorted(set(params) - known)
    if unknown:
        raise InvalidArgumentError(f"Unknown filter: {', '.join(unknown)}")

    thresholds = {
        name: _parse_number(params[name], name) for name in MOVIE_THRESHOLD_FIELDS if name in params
    }
    return MovieFilter(
        release_date=parse_date(params.get("release_date"), "release date"),
        genres=tuple(g.value for g in _enum_values(params.get("genres"), MovieGenre)),
        status=normalize_enum(params["status"], MovieStatus).value if "status" in params else None,
        content_rating=(
            normalize_enum(params["content_rating"], ContentRating).value
            if "content_rating" in params
            else None
        ),
        languages=tuple(lang.value for lang in _enum_values(params.get("languages"), Language)),
        thresholds=thresholds,
        is_active=_parse_bool(params["is_active"], "is_active") if "is_active" in params else None,
        is_adult=_parse_bool(params["is_adult"], "is_adult") if "is_adult" in params else None,
        **{name: str(params[name]) for name in _TEXT_FILTERS if name in params},
    )


def _enum_values(raw: Any, enum_cls):
    if raw is None:
        return []
    if isinstance(raw, str):
        return normalize_enum_list(raw, enum_cls)
    return [normalize_enum(str(value), enum_cls) for value in raw]


def _parse_number(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Invalid {label}: {value}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid {label}: {value}") from exc


def _parse_bool(value: Any, label: str) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise InvalidArgumentError(f"Invalid {label}: {value}")


def _normalize_movie(movie: Movie) -> None:
    """Normalise les champs enumeres et la date d'un film (en place)."""
    movie.genres = [normalize_enum(g, MovieGenre).value for g in movie.genres]
    movie.languages = [normalize_enum(lang, Language).value for lang in movie.languages]
    if movie.status:
        movie.status = normalize_enum(movie.status, MovieStatus).value
    if movie.content_rating:
        movie.content_rating = normalize_enum(movie.content_rating, ContentRating).value
    movie.release_date = parse_date(movie.release_date, "release date")


def _validate_member_ids(cast: list[CastMember], crew: list[CrewMember]) -> None:
    for member in [*cast, *crew]:
        ensure_valid_id(member.person_id, "person")
