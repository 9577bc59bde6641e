"""
Service de l'agregat Season.

Une saison appartient a une serie (immuable apres creation) et possede ses
episodes. Creation et suppression s'executent chacune dans une seule unite :
- creation : insertion, ajout a l'ensemble des saisons de la serie,
  popularite de la serie +10
- suppression : episodes de la saison (via la capacite EpisodeRemover),
  retrait de l'ensemble des saisons de la serie, suppression de la ligne
"""

from typing import Any, Optional

from loguru import logger

from moviebox.core.entities.media import Episode, Season
from moviebox.core.errors import ConflictError, NotFoundError
from moviebox.core.ports.cache import CacheKey, EntityKind, ICacheGateway
from moviebox.core.ports.capabilities import EpisodeRemover
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from moviebox.core.value_objects.identifiers import ensure_valid_id, new_id
from moviebox.core.value_objects.pagination import Page, PageRequest
from moviebox.services.caching import cache_or_fetch, invalidate_quietly
from moviebox.services.transactions import transactional
from moviebox.services.validation import (
    apply_changes,
    ensure_non_negative,
    ensure_valid_rating,
    parse_date,
)
from moviebox.utils.constants import DEFAULT_TRENDING_LIMIT, SEASON_CREATION_WEIGHT

_UPDATABLE_FIELDS = ("title", "overview", "release_date")


class SeasonService:
    """
    Operations sur les saisons et leurs effets sur la serie proprietaire.

    La suppression en cascade des episodes passe par un EpisodeRemover
    (le service des episodes), fourni a la construction ou lie ensuite
    avec bind_episode_remover().
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        cache: ICacheGateway,
        cache_ttl: int = 600,
        episode_remover: Optional[EpisodeRemover] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._episode_remover = episode_remover

    def bind_episode_remover(self, episode_remover: EpisodeRemover) -> None:
        """Lie la capacite de suppression des episodes."""
        self._episode_remover = episode_remover

    async def create(self, season: Season) -> Season:
        """
        Cree une saison dans une serie existante.

        Raises:
            InvalidArgumentError: ID de serie mal forme, numero invalide
            NotFoundError: serie absente
            ConflictError: numero deja utilise dans la serie
        """
        ensure_valid_id(season.tv_show_id, "TV show")
        ensure_non_negative(season.season_number, "season number")
        season.release_date = parse_date(season.release_date, "release date")
        season.id = new_id()

        async with transactional(self._uow_factory, "create season") as uow:
            if not await uow.tv_shows.exists(season.tv_show_id):
                raise NotFoundError("TvShow", season.tv_show_id)
            if await uow.seasons.find_by_number(season.tv_show_id, season.season_number):
                raise ConflictError(
                    f"Season {season.season_number} already exists for TV show {season.tv_show_id}"
                )

            created = await uow.seasons.add(season)
            await uow.tv_shows.add_season(season.tv_show_id, created.id)
            await uow.tv_shows.increment_popularity(season.tv_show_id, SEASON_CREATION_WEIGHT)

        logger.info("Saison creee", season_id=created.id, tv_show_id=created.tv_show_id)
        await invalidate_quietly(
            self._cache,
            patterns=(
                CacheKey.entity_pattern(EntityKind.TV_SHOW, created.tv_show_id),
                CacheKey.listings_pattern(EntityKind.SEASON),
                CacheKey.listings_pattern(EntityKind.TV_SHOW),
            ),
        )
        return created

    async def get(self, season_id: str) -> Season:
        ensure_valid_id(season_id, "season")

        async def fetch() -> Optional[Season]:
            async with transactional(self._uow_factory, "get season") as uow:
                return await uow.seasons.get_by_id(season_id)

        season = await cache_or_fetch(
            self._cache, CacheKey.entity(EntityKind.SEASON, season_id), fetch, self._cache_ttl
        )
        if season is None:
            raise NotFoundError("Season", season_id)
        return season

    async def list_seasons(
        self,
        request: Optional[PageRequest] = None,
        tv_show_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page[Season]:
        request = request or PageRequest()
        if tv_show_id is not None:
            ensure_valid_id(tv_show_id, "TV show")
        key = CacheKey.listing(
            EntityKind.SEASON,
            request.page,
            request.limit,
            request.sort_by,
            request.sort_order.value,
            tv_show_id,
            search,
        )

        async def fetch() -> Page[Season]:
            async with transactional(self._uow_factory, "list seasons") as uow:
                items, total = await uow.seasons.list_page(request, tv_show_id, search)
            return Page.build(items, total, request)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def update(self, season_id: str, changes: dict[str, Any]) -> Season:
        """Met a jour les metadonnees ; la serie et le numero sont immuables."""
        ensure_valid_id(season_id, "season")
        if "release_date" in changes:
            changes = {**changes, "release_date": parse_date(changes["release_date"], "release date")}

        async with transactional(self._uow_factory, "update season") as uow:
            current = await uow.seasons.get_by_id(season_id)
            if current is None:
                raise NotFoundError("Season", season_id)
            updated = await uow.seasons.update(apply_changes(current, changes, _UPDATABLE_FIELDS))

        await self._invalidate(updated)
        return updated

    async def delete(self, season_id: str) -> None:
        """
        Supprime une saison et tous ses episodes dans une seule unite.

        Un echec a n'importe quelle etape annule l'ensemble : aucun episode
        orphelin, aucune reference pendante dans la serie.
        """
        ensure_valid_id(season_id, "season")
        if self._episode_remover is None:
            raise RuntimeError("SeasonService requires an episode remover to delete seasons")

        async with transactional(self._uow_factory, "delete season") as uow:
            season = await uow.seasons.get_by_id(season_id)
            if season is None:
                raise NotFoundError("Season", season_id)
            deleted_episodes = await self._episode_remover.delete_all_for_season(season_id, uow)
            await uow.tv_shows.remove_season(season.tv_show_id, season_id)
            await uow.seasons.delete(season_id)

        logger.info(
            "Saison supprimee",
            season_id=season_id,
            tv_show_id=season.tv_show_id,
            deleted_episodes=deleted_episodes,
        )
        await invalidate_quietly(
            self._cache,
            keys=[CacheKey.entity(EntityKind.EPISODE, episode_id) for episode_id in season.episodes],
            patterns=(
                CacheKey.entity_pattern(EntityKind.SEASON, season_id),
                CacheKey.entity_pattern(EntityKind.TV_SHOW, season.tv_show_id),
                CacheKey.listings_pattern(EntityKind.EPISODE),
                CacheKey.listings_pattern(EntityKind.SEASON),
                CacheKey.listings_pattern(EntityKind.TV_SHOW),
            ),
        )

    async def rate(self, season_id: str, rating: float) -> Season:
        ensure_valid_id(season_id, "season")
        rating = ensure_valid_rating(rating)
        async with transactional(self._uow_factory, "rate season") as uow:
            season = await uow.seasons.apply_rating(season_id, rating)
            if season is None:
                raise NotFoundError("Season", season_id)

        await self._invalidate(season)
        return season

    async def get_episodes(self, season_id: str) -> list[Episode]:
        """Episodes de la saison, par numero."""
        ensure_valid_id(season_id, "season")

        async def fetch() -> list[Episode]:
            async with transactional(self._uow_factory, "get season episodes") as uow:
                if await uow.seasons.get_by_id(season_id) is None:
                    raise NotFoundError("Season", season_id)
                return await uow.episodes.list_by_season(season_id)

        key = CacheKey.related(EntityKind.SEASON, season_id, "episodes")
        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def add_episode(
        self, season_id: str, episode_id: str, uow: Optional[IUnitOfWork] = None
    ) -> bool:
        """Ajoute un episode a l'ensemble (sans effet s'il y est deja)."""
        ensure_valid_id(season_id, "season")
        ensure_valid_id(episode_id, "episode")
        async with transactional(self._uow_factory, "add episode to season", uow) as unit:
            if await unit.seasons.get_by_id(season_id) is None:
                raise NotFoundError("Season", season_id)
            added = await unit.seasons.add_episode(season_id, episode_id)
        if uow is None:
            await invalidate_quietly(
                self._cache, patterns=[CacheKey.entity_pattern(EntityKind.SEASON, season_id)]
            )
        return added

    async def remove_episode(
        self, season_id: str, episode_id: str, uow: Optional[IUnitOfWork] = None
    ) -> bool:
        """Retire un episode de l'ensemble (sans effet s'il est absent)."""
        ensure_valid_id(season_id, "season")
        ensure_valid_id(episode_id, "episode")
        async with transactional(self._uow_factory, "remove episode from season", uow) as unit:
            if await unit.seasons.get_by_id(season_id) is None:
                raise NotFoundError("Season", season_id)
            removed = await unit.seasons.remove_episode(season_id, episode_id)
        if uow is None:
            await invalidate_quietly(
                self._cache, patterns=[CacheKey.entity_pattern(EntityKind.SEASON, season_id)]
            )
        return removed

    async def increment_popularity(
        self, season_id: str, delta: float, uow: Optional[IUnitOfWork] = None
    ) -> None:
        ensure_valid_id(season_id, "season")
        async with transactional(self._uow_factory, "increment season popularity", uow) as unit:
            if await unit.seasons.get_by_id(season_id) is None:
                raise NotFoundError("Season", season_id)
            await unit.seasons.increment_popularity(season_id, delta)
        if uow is None:
            await invalidate_quietly(
                self._cache,
                patterns=(
                    CacheKey.entity_pattern(EntityKind.SEASON, season_id),
                    CacheKey.listings_pattern(EntityKind.SEASON),
                ),
            )

    async def get_trending(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Season]:
        key = CacheKey.listing(EntityKind.SEASON, "trending", limit)

        async def fetch() -> list[Season]:
            async with transactional(self._uow_factory, "list trending seasons") as uow:
                return await uow.seasons.list_trending(limit)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def get_recommendations(
        self, season_id: str, limit: int = DEFAULT_TRENDING_LIMIT
    ) -> list[Season]:
        """Saisons de series partageant au moins un genre avec la serie de la saison."""
        ensure_valid_id(season_id, "season")
        async with transactional(self._uow_factory, "recommend seasons") as uow:
            season = await uow.seasons.get_by_id(season_id)
            if season is None:
                raise NotFoundError("Season", season_id)
            tv_show = await uow.tv_shows.get_by_id(season.tv_show_id)
            if tv_show is None:
                return []
            similar = await uow.tv_shows.find_by_genres(tv_show.genres, tv_show.id, limit)
            return await uow.seasons.list_by_tv_shows(
                [show.id for show in similar], season_id, limit
            )

    async def _invalidate(self, season: Season) -> None:
        await invalidate_quietly(
            self._cache,
            patterns=(
                CacheKey.entity_pattern(EntityKind.SEASON, season.id),
                CacheKey.entity_pattern(EntityKind.TV_SHOW, season.tv_show_id),
                CacheKey.listings_pattern(EntityKind.SEASON),
            ),
        )
