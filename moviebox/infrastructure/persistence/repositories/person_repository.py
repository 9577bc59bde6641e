"""
Implementation SQLModel du repository Person.

La filmographie est une liste JSON d'IDs de films avec semantique d'ensemble.
"""

from typing import Optional

from sqlmodel import or_, select

from moviebox.core.entities.media import Person
from moviebox.core.ports.repositories import IPersonRepository
from moviebox.core.value_objects.identifiers import new_id
from moviebox.core.value_objects.pagination import PageRequest
from moviebox.infrastructure.persistence.models import (
    PersonModel,
    dump_json_list,
    load_json_list,
)
from moviebox.infrastructure.persistence.repositories.base import (
    SQLModelRepository,
    json_member,
)


class SQLModelPersonRepository(SQLModelRepository[PersonModel], IPersonRepository):
    """Repository SQLModel pour les personnes."""

    model = PersonModel
    entity_name = "Person"
    sortable_fields = frozenset({"popularity", "name", "birthday", "created_at"})
    protected_fields = frozenset({"filmography_json", "popularity"})

    def _to_entity(self, model: PersonModel) -> Person:
        return Person(
            id=model.id,
            name=model.name,
            biography=model.biography,
            birthday=model.birthday,
            roles=load_json_list(model.roles_json),
            popularity=model.popularity,
            is_active=model.is_active,
            profile_path=model.profile_path,
            filmography=load_json_list(model.filmography_json),
            related_people=load_json_list(model.related_people_json),
        )

    def _to_model(self, entity: Person) -> PersonModel:
        return PersonModel(
            id=entity.id or new_id(),
            name=entity.name,
            biography=entity.biography,
            birthday=entity.birthday,
            roles_json=dump_json_list(entity.roles),
            popularity=entity.popularity,
            is_active=entity.is_active,
            profile_path=entity.profile_path,
            filmography_json=dump_json_list(entity.filmography),
            related_people_json=dump_json_list(entity.related_people),
        )

    async def get_by_id(self, person_id: str) -> Optional[Person]:
        """Recupere une personne par son ID interne."""
        model = await self._get_model(person_id)
        if model:
            return self._to_entity(model)
        return None

    async def get_many(self, person_ids: list[str]) -> list[Person]:
        if not person_ids:
            return []
        statement = select(PersonModel).where(PersonModel.id.in_(person_ids))
        by_id = {model.id: self._to_entity(model) for model in await self._all(statement)}
        # Conserve l'ordre demande
        return [by_id[person_id] for person_id in person_ids if person_id in by_id]

    async def add(self, person: Person) -> Person:
        model = await self._insert(
            self._to_model(person), f"Person with ID {person.id} already exists"
        )
        return self._to_entity(model)

    async def update(self, person: Person) -> Person:
        model = await self._update_from(
            person.id, self._to_model(person), f"Person {person.id} could not be updated"
        )
        return self._to_entity(model)

    async def list_page(
        self,
        request: PageRequest,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Person], int]:
        statement = select(PersonModel)
        if role:
            statement = statement.where(json_member(PersonModel.roles_json, role))
        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(PersonModel.name.ilike(pattern), PersonModel.biography.ilike(pattern))
            )
        models, total = await self._paginate(statement, request)
        return [self._to_entity(model) for model in models], total

    async def list_trending(self, limit: int) -> list[Person]:
        statement = select(PersonModel).where(PersonModel.is_active == True)  # noqa: E712
        return [self._to_entity(model) for model in await self._top(statement, limit)]

    async def add_to_filmography(self, person_id: str, movie_id: str) -> bool:
        return await self._add_to_set(person_id, "filmography_json", movie_id)

    async def remove_from_filmography(self, person_id: str, movie_id: str) -> bool:
        return await self._remove_from_set(person_id, "filmography_json", movie_id)

    async def remove_movie_everywhere(self, movie_id: str) -> int:
        statement = select(PersonModel.id).where(
            json_member(PersonModel.filmography_json, movie_id)
        )
        person_ids = list((await self._session.exec(statement)).all())
        removed = 0
        for person_id in person_ids:
            if await self._remove_from_set(person_id, "filmography_json", movie_id):
                removed += 1
        return removed

    async def find_sharing_filmography(
        self, person_id: str, movie_ids: list[str], limit: int
    ) -> list[Person]:
        if not movie_ids:
            return []
        statement = select(PersonModel).where(
            PersonModel.id != person_id,
            or_(*[json_member(PersonModel.filmography_json, m) for m in movie_ids]),
        )
        return [self._to_entity(model) for model in await self._top(statement, limit)]
