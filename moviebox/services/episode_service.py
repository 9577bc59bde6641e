"""
Service de l'agregat Episode.

Un episode appartient a une saison (immuable apres creation). Sa creation
met a jour, dans une seule unite de travail :
- l'ensemble des episodes de la saison
- la popularite de la saison (+5)
- la popularite de la serie proprietaire (+5)

Chaque consultation d'un episode augmente sa popularite de 1.
"""

from typing import Any, Optional

from loguru import logger

from moviebox.core.entities.media import Episode
from moviebox.core.errors import ConflictError, NotFoundError
from moviebox.core.ports.cache import CacheKey, EntityKind, ICacheGateway
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
from moviebox.utils.constants import (
    DEFAULT_TRENDING_LIMIT,
    EPISODE_CREATION_WEIGHT,
    EPISODE_VIEW_POPULARITY,
    MAX_PAGE_SIZE,
)

_UPDATABLE_FIELDS = ("title", "overview", "release_date", "duration")


class EpisodeService:
    """
    Operations sur les episodes et leurs effets sur la saison et la serie.

    Implemente la capacite EpisodeRemover utilisee par la cascade de
    suppression des saisons.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        cache: ICacheGateway,
        cache_ttl: int = 600,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._cache_ttl = cache_ttl

    async def create(self, episode: Episode) -> Episode:
        """
        Cree un episode dans une saison existante.

        Raises:
            InvalidArgumentError: ID de saison mal forme, numero invalide
            NotFoundError: saison absente
            ConflictError: numero deja utilise dans la saison
        """
        ensure_valid_id(episode.season_id, "season")
        ensure_non_negative(episode.episode_number, "episode number")
        episode.release_date = parse_date(episode.release_date, "release date")
        episode.id = new_id()

        async with transactional(self._uow_factory, "create episode") as uow:
            season = await uow.seasons.get_by_id(episode.season_id)
            if season is None:
                raise NotFoundError("Season", episode.season_id)
            if await uow.episodes.find_by_number(season.id, episode.episode_number):
                raise ConflictError(
                    f"Episode {episode.episode_number} already exists in season {season.id}"
                )

            created = await uow.episodes.add(episode)
            await uow.seasons.add_episode(season.id, created.id)
            await uow.seasons.increment_popularity(season.id, EPISODE_CREATION_WEIGHT)
            await uow.tv_shows.increment_popularity(season.tv_show_id, EPISODE_CREATION_WEIGHT)

        logger.info(
            "Episode cree",
            episode_id=created.id,
            season_id=season.id,
            tv_show_id=season.tv_show_id,
        )
        await invalidate_quietly(
            self._cache,
            patterns=(
                CacheKey.entity_pattern(EntityKind.SEASON, season.id),
                CacheKey.entity_pattern(EntityKind.TV_SHOW, season.tv_show_id),
                CacheKey.listings_pattern(EntityKind.EPISODE),
                CacheKey.listings_pattern(EntityKind.SEASON),
                CacheKey.listings_pattern(EntityKind.TV_SHOW),
            ),
        )
        return created

    async def get(self, episode_id: str) -> Episode:
        """
        Consulte un episode : sa popularite augmente de 1 a chaque appel.

        La consultation n'est pas servie par le cache afin que chaque vue
        soit comptee.
        """
        ensure_valid_id(episode_id, "episode")
        async with transactional(self._uow_factory, "view episode") as uow:
            if not await uow.episodes.exists(episode_id):
                raise NotFoundError("Episode", episode_id)
            await uow.episodes.increment_popularity(episode_id, EPISODE_VIEW_POPULARITY)
            episode = await uow.episodes.get_by_id(episode_id)
        return episode

    async def list_episodes(
        self,
        request: Optional[PageRequest] = None,
        season_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page[Episode]:
        request = request or PageRequest()
        if season_id is not None:
            ensure_valid_id(season_id, "season")
        key = CacheKey.listing(
            EntityKind.EPISODE,
            request.page,
            request.limit,
            request.sort_by,
            request.sort_order.value,
            season_id,
            search,
        )

        async def fetch() -> Page[Episode]:
            async with transactional(self._uow_factory, "list episodes") as uow:
                items, total = await uow.episodes.list_page(request, season_id, search)
            return Page.build(items, total, request)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def find_by_season(self, season_id: str) -> list[Episode]:
        """Episodes d'une saison, par numero."""
        ensure_valid_id(season_id, "season")
        key = CacheKey.related(EntityKind.SEASON, season_id, "episodes")

        async def fetch() -> list[Episode]:
            async with transactional(self._uow_factory, "list season episodes") as uow:
                if await uow.seasons.get_by_id(season_id) is None:
                    raise NotFoundError("Season", season_id)
                return await uow.episodes.list_by_season(season_id)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def update(self, episode_id: str, changes: dict[str, Any]) -> Episode:
        """Met a jour les metadonnees (titre, resume, date, duree)."""
        ensure_valid_id(episode_id, "episode")
        if "release_date" in changes:
            changes = {**changes, "release_date": parse_date(changes["release_date"], "release date")}

        async with transactional(self._uow_factory, "update episode") as uow:
            current = await uow.episodes.get_by_id(episode_id)
            if current is None:
                raise NotFoundError("Episode", episode_id)
            updated = await uow.episodes.update(apply_changes(current, changes, _UPDATABLE_FIELDS))

        await self._invalidate(updated)
        return updated

    async def delete(self, episode_id: str) -> None:
        """
        Supprime un episode et le retire de l'ensemble de sa saison.

        Raises:
            NotFoundError: si l'episode n'existe pas
        """
        ensure_valid_id(episode_id, "episode")
        async with transactional(self._uow_factory, "delete episode") as uow:
            episode = await uow.episodes.get_by_id(episode_id)
            if episode is None:
                raise NotFoundError("Episode", episode_id)
            await uow.seasons.remove_episode(episode.season_id, episode_id)
            await uow.episodes.delete(episode_id)

        logger.info("Episode supprime", episode_id=episode_id, season_id=episode.season_id)
        await self._invalidate(episode)

    async def delete_all_for_season(
        self, season_id: str, uow: Optional[IUnitOfWork] = None
    ) -> int:
        """
        Supprime tous les episodes d'une saison.

        Participe a l'unite de l'appelant si elle est fournie ; dans ce cas
        l'appelant se charge aussi de l'invalidation du cache.

        Returns:
            Nombre d'episodes supprimes
        """
        ensure_valid_id(season_id, "season")
        async with transactional(self._uow_factory, "delete season episodes", uow) as unit:
            episodes = await unit.episodes.list_by_season(season_id)
            deleted = await unit.episodes.delete_by_seasons([season_id])
            for episode in episodes:
                await unit.seasons.remove_episode(season_id, episode.id)

        if uow is None:
            await invalidate_quietly(
                self._cache,
                keys=[CacheKey.entity(EntityKind.EPISODE, e.id) for e in episodes],
                patterns=(
                    CacheKey.entity_pattern(EntityKind.SEASON, season_id),
                    CacheKey.listings_pattern(EntityKind.EPISODE),
                ),
            )
        return deleted

    async def rate(self, episode_id: str, rating: float) -> Episode:
        """
        Integre une note dans la moyenne de l'episode.

        Raises:
            InvalidArgumentError: ID mal forme ou note hors de [0, 5]
            NotFoundError: episode absent
        """
        ensure_valid_id(episode_id, "episode")
        rating = ensure_valid_rating(rating)
        async with transactional(self._uow_factory, "rate episode") as uow:
            episode = await uow.episodes.apply_rating(episode_id, rating)
            if episode is None:
                raise NotFoundError("Episode", episode_id)

        await self._invalidate(episode)
        return episode

    async def increment_popularity(
        self, episode_id: str, delta: float, uow: Optional[IUnitOfWork] = None
    ) -> None:
        """Incrément additif de la popularite, dans l'unite ambiante si fournie."""
        ensure_valid_id(episode_id, "episode")
        async with transactional(self._uow_factory, "increment episode popularity", uow) as unit:
            if not await unit.episodes.exists(episode_id):
                raise NotFoundError("Episode", episode_id)
            await unit.episodes.increment_popularity(episode_id, delta)

        if uow is None:
            await invalidate_quietly(
                self._cache,
                keys=[CacheKey.entity(EntityKind.EPISODE, episode_id)],
                patterns=[CacheKey.listings_pattern(EntityKind.EPISODE)],
            )

    async def get_trending(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Episode]:
        key = CacheKey.listing(EntityKind.EPISODE, "trending", limit)

        async def fetch() -> list[Episode]:
            async with transactional(self._uow_factory, "list trending episodes") as uow:
                return await uow.episodes.list_trending(limit)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def get_recommendations(
        self, episode_id: str, limit: int = DEFAULT_TRENDING_LIMIT
    ) -> list[Episode]:
        """
        Episodes des saisons de series partageant un genre avec celle de l'episode.
        """
        ensure_valid_id(episode_id, "episode")
        async with transactional(self._uow_factory, "recommend episodes") as uow:
            episode = await uow.episodes.get_by_id(episode_id)
            if episode is None:
                raise NotFoundError("Episode", episode_id)
            season = await uow.seasons.get_by_id(episode.season_id)
            tv_show = await uow.tv_shows.get_by_id(season.tv_show_id) if season else None
            if tv_show is None:
                return []
            similar = await uow.tv_shows.find_by_genres(tv_show.genres, tv_show.id, limit)
            seasons = await uow.seasons.list_by_tv_shows(
                [show.id for show in similar], season.id, MAX_PAGE_SIZE
            )
            return await uow.episodes.list_by_seasons(
                [s.id for s in seasons], episode.id, limit
            )

    async def _invalidate(self, episode: Episode) -> None:
        await invalidate_quietly(
            self._cache,
            keys=[CacheKey.entity(EntityKind.EPISODE, episode.id)],
            patterns=(
                CacheKey.entity_pattern(EntityKind.SEASON, episode.season_id),
                CacheKey.listings_pattern(EntityKind.EPISODE),
            ),
        )
