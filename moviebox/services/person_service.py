"""
Service de l'agregat Person.

Une personne est partagee entre films et series, jamais possedee. Sa
filmographie est une liste explicite d'IDs de films (semantique d'ensemble),
independante du casting des films. Implemente la capacite
PersonExistenceChecker utilisee par les films et les series.
"""

from typing import Any, Optional

from loguru import logger

from moviebox.core.entities.media import Movie, Person
from moviebox.core.errors import ConflictError, NotFoundError
from moviebox.core.ports.cache import CacheKey, EntityKind, ICacheGateway
from moviebox.core.ports.capabilities import MovieExistenceChecker
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from moviebox.core.value_objects.identifiers import ensure_valid_id, new_id
from moviebox.core.value_objects.pagination import Page, PageRequest
from moviebox.services.caching import cache_or_fetch, invalidate_quietly
from moviebox.services.transactions import transactional
from moviebox.services.validation import apply_changes, ensure_text, parse_date
from moviebox.utils.constants import DEFAULT_TRENDING_LIMIT, RELATED_PEOPLE_LIMIT

_UPDATABLE_FIELDS = (
    "name",
    "biography",
    "birthday",
    "roles",
    "is_active",
    "profile_path",
    "related_people",
)


class PersonService:
    """
    Operations sur les personnes et leur filmographie.

    La verification d'existence des films passe par un MovieExistenceChecker
    lie apres construction (bind_movie_checker), le service des films
    dependant lui-meme de celui-ci.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        cache: ICacheGateway,
        cache_ttl: int = 600,
        movie_checker: Optional[MovieExistenceChecker] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._movie_checker = movie_checker

    def bind_movie_checker(self, movie_checker: MovieExistenceChecker) -> None:
        """Lie la capacite de verification des films."""
        self._movie_checker = movie_checker

    async def ensure_person_exists(
        self, person_id: str, uow: Optional[IUnitOfWork] = None
    ) -> None:
        """
        Verifie qu'une personne existe.

        Raises:
            InvalidArgumentError: ID mal forme
            NotFoundError: personne absente
        """
        ensure_valid_id(person_id, "person")
        async with transactional(self._uow_factory, "check person", uow) as unit:
            if not await unit.people.exists(person_id):
                raise NotFoundError("Person", person_id)

    async def create(self, person: Person) -> Person:
        person.name = ensure_text(person.name, "Name")
        person.birthday = parse_date(person.birthday, "birthday")
        for related_id in person.related_people:
            ensure_valid_id(related_id, "person")
        person.id = new_id()
        person.filmography = []

        async with transactional(self._uow_factory, "create person") as uow:
            created = await uow.people.add(person)

        logger.info("Personne creee", person_id=created.id, name=created.name)
        await invalidate_quietly(
            self._cache, patterns=[CacheKey.listings_pattern(EntityKind.PERSON)]
        )
        return created

    async def get(self, person_id: str) -> Person:
        ensure_valid_id(person_id, "person")

        async def fetch() -> Optional[Person]:
            async with transactional(self._uow_factory, "get person") as uow:
                return await uow.people.get_by_id(person_id)

        person = await cache_or_fetch(
            self._cache, CacheKey.entity(EntityKind.PERSON, person_id), fetch, self._cache_ttl
        )
        if person is None:
            raise NotFoundError("Person", person_id)
        return person

    async def list_people(
        self,
        request: Optional[PageRequest] = None,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page[Person]:
        request = request or PageRequest()
        key = CacheKey.listing(
            EntityKind.PERSON,
            request.page,
            request.limit,
            request.sort_by,
            request.sort_order.value,
            role,
            search,
        )

        async def fetch() -> Page[Person]:
            async with transactional(self._uow_factory, "list people") as uow:
                items, total = await uow.people.list_page(request, role, search)
            return Page.build(items, total, request)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def update(self, person_id: str, changes: dict[str, Any]) -> Person:
        """Met a jour le profil ; la filmographie a ses propres operations."""
        ensure_valid_id(person_id, "person")
        changes = dict(changes)
        if "birthday" in changes:
            changes["birthday"] = parse_date(changes["birthday"], "birthday")
        for related_id in changes.get("related_people", []):
            ensure_valid_id(related_id, "person")

        async with transactional(self._uow_factory, "update person") as uow:
            current = await uow.people.get_by_id(person_id)
            if current is None:
                raise NotFoundError("Person", person_id)
            updated = await uow.people.update(apply_changes(current, changes, _UPDATABLE_FIELDS))

        await self._invalidate(person_id)
        return updated

    async def delete(self, person_id: str) -> None:
        """Supprime la personne ; les castings qui la referencent restent inchanges."""
        ensure_valid_id(person_id, "person")
        async with transactional(self._uow_factory, "delete person") as uow:
            if not await uow.people.delete(person_id):
                raise NotFoundError("Person", person_id)

        logger.info("Personne supprimee", person_id=person_id)
        await self._invalidate(person_id)

    async def add_to_filmography(self, person_id: str, movie_id: str) -> Person:
        """
        Ajoute un film a la filmographie.

        Raises:
            InvalidArgumentError: ID mal forme
            NotFoundError: personne ou film absent
            ConflictError: film deja present
        """
        ensure_valid_id(person_id, "person")
        ensure_valid_id(movie_id, "movie")
        checker = self._require_movie_checker()

        async with transactional(self._uow_factory, "add to filmography") as uow:
            if not await uow.people.exists(person_id):
                raise NotFoundError("Person", person_id)
            await checker.ensure_movie_exists(movie_id, uow)
            if not await uow.people.add_to_filmography(person_id, movie_id):
                raise ConflictError(f"Movie {movie_id} is already in the filmography of person {person_id}")
            person = await uow.people.get_by_id(person_id)

        await self._invalidate(person_id)
        return person

    async def remove_from_filmography(self, person_id: str, movie_id: str) -> Person:
        """
        Retire un film de la filmographie (sans effet s'il n'y figure pas).

        Raises:
            InvalidArgumentError: ID mal forme
            NotFoundError: personne ou film absent
        """
        ensure_valid_id(person_id, "person")
        ensure_valid_id(movie_id, "movie")
        checker = self._require_movie_checker()

        async with transactional(self._uow_factory, "remove from filmography") as uow:
            if not await uow.people.exists(person_id):
                raise NotFoundError("Person", person_id)
            await checker.ensure_movie_exists(movie_id, uow)
            await uow.people.remove_from_filmography(person_id, movie_id)
            person = await uow.people.get_by_id(person_id)

        await self._invalidate(person_id)
        return person

    async def get_filmography(self, person_id: str) -> list[Movie]:
        """Films de la filmographie, dans l'ordre d'ajout (les films disparus sont ignores)."""
        ensure_valid_id(person_id, "person")

        async def fetch() -> list[Movie]:
            async with transactional(self._uow_factory, "get filmography") as uow:
                person = await uow.people.get_by_id(person_id)
                if person is None:
                    raise NotFoundError("Person", person_id)
                movies = [await uow.movies.get_by_id(movie_id) for movie_id in person.filmography]
            return [movie for movie in movies if movie is not None]

        key = CacheKey.related(EntityKind.PERSON, person_id, "filmography")
        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def get_related_people(self, person_id: str) -> list[Person]:
        """
        Personnes liees.

        Retourne la liste explicite si elle existe. Sinon, repli approximatif :
        les autres personnes partageant au moins un film de la filmographie,
        10 au plus, par popularite decroissante. Ce repli est une heuristique,
        pas une relation garantie.
        """
        ensure_valid_id(person_id, "person")
        async with transactional(self._uow_factory, "get related people") as uow:
            person = await uow.people.get_by_id(person_id)
            if person is None:
                raise NotFoundError("Person", person_id)
            if person.related_people:
                return await uow.people.get_many(person.related_people)
            return await uow.people.find_sharing_filmography(
                person_id, person.filmography, RELATED_PEOPLE_LIMIT
            )

    async def get_trending(self, limit: int = DEFAULT_TRENDING_LIMIT) -> list[Person]:
        key = CacheKey.listing(EntityKind.PERSON, "trending", limit)

        async def fetch() -> list[Person]:
            async with transactional(self._uow_factory, "list trending people") as uow:
                return await uow.people.list_trending(limit)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    def _require_movie_checker(self) -> MovieExistenceChecker:
        if self._movie_checker is None:
            raise RuntimeError("PersonService requires a movie checker for filmography changes")
        return self._movie_checker

    async def _invalidate(self, person_id: str) -> None:
        await invalidate_quietly(
            self._cache,
            patterns=(
                CacheKey.entity_pattern(EntityKind.PERSON, person_id),
                CacheKey.listings_pattern(EntityKind.PERSON),
            ),
        )
