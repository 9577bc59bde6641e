"""
Service de l'agregat TvShow (racine Serie -> Saison -> Episode).

La suppression d'une serie est la cascade la plus profonde : dans une seule
unite, les episodes de chaque saison, puis les saisons, puis la serie.
Le casting et l'equipe referencent des personnes existantes, verifiees par
la capacite PersonExistenceChecker avant toute modification.
"""

from typing import Any, Optional

from loguru import logger

from moviebox.core.entities.media import CastMember, CrewMember, Season, TvShow
from moviebox.core.errors import NotFoundError
from moviebox.core.ports.cache import CacheKey, EntityKind, ICacheGateway
from moviebox.core.ports.capabilities import PersonExistenceChecker
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from moviebox.core.value_objects.catalog import MovieGenre, normalize_enum
from moviebox.core.value_objects.identifiers import ensure_valid_id, new_id
from moviebox.core.value_objects.pagination import Page, PageRequest, SortOrder
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
    "end_date",
    "genres",
    "country",
    "is_active",
)


class TvShowService:
    """Operations sur les series TV, leur casting et leur cascade de suppression."""

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

    async def create(self, tv_show: TvShow) -> TvShow:
        """
        Cree une serie ; les personnes du casting et de l'equipe doivent exister.

        Une serie nait sans saison, avec popularite et notes a zero.
        """
        tv_show.title = ensure_text(tv_show.title, "Title")
        tv_show.genres = [normalize_enum(g, MovieGenre).value for g in tv_show.genres]
        tv_show.release_date = parse_date(tv_show.release_date, "release date")
        tv_show.end_date = parse_date(tv_show.end_date, "end date")
        _validate_member_ids(tv_show.cast, tv_show.crew)
        tv_show.id = new_id()
        tv_show.seasons = []
        tv_show.popularity = 0.0
        tv_show.average_rating = 0.0
        tv_show.rating_count = 0

        async with transactional(self._uow_factory, "create TV show") as uow:
            await self._ensure_people_exist(tv_show.cast, tv_show.crew, uow)
            created = await uow.tv_shows.add(tv_show)

        logger.info("Serie creee", tv_show_id=created.id, title=created.title)
        await invalidate_quietly(
            self._cache, patterns=[CacheKey.listings_pattern(EntityKind.TV_SHOW)]
        )
        return created

    async def get(self, tv_show_id: str) -> TvShow:
        ensure_valid_id(tv_show_id, "TV show")

        async def fetch() -> Optional[TvShow]:
            async with transactional(self._uow_factory, "get TV show") as uow:
                return await uow.tv_shows.get_by_id(tv_show_id)

        tv_show = await cache_or_fetch(
            self._cache, CacheKey.entity(EntityKind.TV_SHOW, tv_show_id), fetch, self._cache_ttl
        )
        if tv_show is None:
            raise NotFoundError("TvShow", tv_show_id)
        return tv_show

    async def list_tv_shows(
        self,
        request: Optional[PageRequest] = None,
        genre: Optional[str] = None,
        search: Optional[str] = None,
        country: Optional[str] = None,
    ) -> Page[TvShow]:
        request = request or PageRequest()
        if genre:
            genre = normalize_enum(genre, MovieGenre).value
        key = CacheKey.listing(
            EntityKind.TV_SHOW,
            request.page,
            request.limit,
            request.sort_by,
            request.sort_order.value,
            genre,
            search,
            country,
        )

        async def fetch() -> Page[TvShow]:
            async with transactional(self._uow_factory, "list TV shows") as uow:
                items, total = await uow.tv_shows.list_page(request, genre, search, country)
            return Page.build(items, total, request)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def update(self, tv_show_id: str, changes: dict[str, Any]) -> TvShow:
        """Met a jour les metadonnees (saisons, compteurs et casting exclus)."""
        ensure_valid_id(tv_show_id, "TV show")
        changes = dict(changes)
        if "genres" in changes:
            changes["genres"] = [normalize_enum(g, MovieGenre).value for g in changes["genres"]]
        for name in ("release_date", "end_date"):
            if name in changes:
                changes[name] = parse_date(changes[name], name.replace("_", " "))

        async with transactional(self._uow_factory, "update TV show") as uow:
            current = await uow.tv_shows.get_by_id(tv_show_id)
            if current is None:
                raise NotFoundError("TvShow", tv_show_id)
            updated = await uow.tv_shows.update(apply_changes(current, changes, _UPDATABLE_FIELDS))

        await self._invalidate(tv_show_id)
        return updated

    async def delete(self, tv_show_id: str) -> None:
        """
        Supprime la serie, ses saisons et leurs episodes dans une seule unite.

        Ordre : episodes -> saisons -> serie.
        """
        ensure_valid_id(tv_show_id, "TV show")
        async with transactional(self._uow_factory, "delete TV show") as uow:
            if not await uow.tv_shows.exists(tv_show_id):
                raise NotFoundError("TvShow", tv_show_id)
            season_ids = await uow.seasons.list_ids_by_tv_show(tv_show_id)
            deleted_episodes = await uow.episodes.delete_by_seasons(season_ids)
            deleted_seasons = await uow.seasons.delete_by_tv_show(tv_show_id)
            await uow.tv_shows.delete(tv_show_id)

        logger.info(
            "Serie supprimee",
            tv_show_id=tv_show_id,
            deleted_seasons=deleted_seasons,
            deleted_episodes=deleted_episodes,
        )
        await invalidate_quietly(
            self._cache,
            patterns=[CacheKey.entity_pattern(EntityKind.SEASON, sid) for sid in season_ids]
            + [
                CacheKey.entity_pattern(EntityKind.TV_SHOW, tv_show_id),
                CacheKey.listings_pattern(EntityKind.TV_SHOW),
                CacheKey.listings_pattern(EntityKind.SEASON),
                CacheKey.listings_pattern(EntityKind.EPISODE),
            ],
        )

    async def rate(self, tv_show_id: str, rating: float) -> TvShow:
        ensure_valid_id(tv_show_id, "TV show")
        rating = ensure_valid_rating(rating)
        async with transactional(self._uow_factory, "rate TV show") as uow:
            tv_show = await uow.tv_shows.apply_rating(tv_show_id, rating)
            if tv_show is None:
                raise NotFoundError("TvShow", tv_show_id)

        await self._invalidate(tv_show_id)
        return tv_show

    async def get_seasons(
        self, tv_show_id: str, request: Optional[PageRequest] = None
    ) -> Page[Season]:
        """Saisons de la serie, par numero croissant par defaut."""
        ensure_valid_id(tv_show_id, "TV show")
        request = request or PageRequest(sort_by="season_number", sort_order=SortOrder.ASC)
        key = CacheKey.related(
            EntityKind.TV_SHOW,
            tv_show_id,
            f"seasons:{request.page}:{request.limit}:{request.sort_by}:{request.sort_order.value}",
        )

        async def fetch() -> Page[Season]:
            async with transactional(self._uow_factory, "get TV show seasons") as uow:
                if not await uow.tv_shows.exists(tv_show_id):
                    raise NotFoundError("TvShow", tv_show_id)
                items, total = await uow.seasons.list_page(request, tv_show_id)
            return Page.build(items, total, request)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def add_cast(self, tv_show_id: str, members: list[CastMember]) -> TvShow:
        """
        Ajoute des membres au casting.

        Toutes les personnes sont verifiees avant la modification : une seule
        personne introuvable annule tout le lot.
        """
        ensure_valid_id(tv_show_id, "TV show")
        _validate_member_ids(members, [])
        async with transactional(self._uow_factory, "add TV show cast") as uow:
            tv_show = await self._load(uow, tv_show_id)
            await self._ensure_people_exist(members, [], uow)
            tv_show.cast.extend(m for m in members if m not in tv_show.cast)
            updated = await uow.tv_shows.update(tv_show)

        await self._invalidate(tv_show_id)
        return updated

    async def add_crew(self, tv_show_id: str, members: list[CrewMember]) -> TvShow:
        """Ajoute des membres a l'equipe (tout ou rien, comme add_cast)."""
        ensure_valid_id(tv_show_id, "TV show")
        _validate_member_ids([], members)
        async with transactional(self._uow_factory, "add TV show crew") as uow:
            tv_show = await self._load(uow, tv_show_id)
            await self._ensure_people_exist([], members, uow)
            tv_show.crew.extend(m for m in members if m not in tv_show.crew)
            updated = await uow.tv_shows.update(tv_show)

        await self._invalidate(tv_show_id)
        return updated

    async def remove_cast(self, tv_show_id: str, person_id: str) -> TvShow:
        """Retire toutes les entrees de casting de la personne (sans effet si absente)."""
        ensure_valid_id(tv_show_id, "TV show")
        ensure_valid_id(person_id, "person")
        async with transactional(self._uow_factory, "remove TV show cast") as uow:
            tv_show = await self._load(uow, tv_show_id)
            tv_show.cast = [m for m in tv_show.cast if m.person_id != person_id]
            updated = await uow.tv_shows.update(tv_show)

        await self._invalidate(tv_show_id)
        return updated

    async def remove_crew(self, tv_show_id: str, person_id: str) -> TvShow:
        ensure_valid_id(tv_show_id, "TV show")
        ensure_valid_id(person_id, "person")
        async with transactional(self._uow_factory, "remove TV show crew") as uow:
            tv_show = await self._load(uow, tv_show_id)
            tv_show.crew = [m for m in tv_show.crew if m.person_id != person_id]
            updated = await uow.tv_shows.update(tv_show)

        await self._invalidate(tv_show_id)
        return updated

    async def get_recommendations(
        self, tv_show_id: str, limit: int = DEFAULT_TRENDING_LIMIT
    ) -> list[TvShow]:
        """Series partageant au moins un genre, par popularite decroissante."""
        ensure_valid_id(tv_show_id, "TV show")
        async with transactional(self._uow_factory, "recommend TV shows") as uow:
            tv_show = await self._load(uow, tv_show_id)
            return await uow.tv_shows.find_by_genres(tv_show.genres, tv_show_id, limit)

    async def get_trending(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[TvShow]:
        key = CacheKey.listing(EntityKind.TV_SHOW, "trending", limit)

        async def fetch() -> list[TvShow]:
            async with transactional(self._uow_factory, "list trending TV shows") as uow:
                return await uow.tv_shows.list_trending(limit)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def _load(self, uow: IUnitOfWork, tv_show_id: str) -> TvShow:
        tv_show = await uow.tv_shows.get_by_id(tv_show_id)
        if tv_show is None:
            raise NotFoundError("TvShow", tv_show_id)
        return tv_show

    async def _ensure_people_exist(
        self, cast: list[CastMember], crew: list[CrewMember], uow: IUnitOfWork
    ) -> None:
        for person_id in dict.fromkeys(m.person_id for m in [*cast, *crew]):
            await self._person_checker.ensure_person_exists(person_id, uow)

    async def _invalidate(self, tv_show_id: str) -> None:
        await invalidate_quietly(
            self._cache,
            patterns=(
                CacheKey.entity_pattern(EntityKind.TV_SHOW, tv_show_id),
                CacheKey.listings_pattern(EntityKind.TV_SHOW),
            ),
        )


def _validate_member_ids(cast: list[CastMember], crew: list[CrewMember]) -> None:
    for member in [*cast, *crew]:
        ensure_valid_id(member.person_id, "person")
