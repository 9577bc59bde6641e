"""
Implementation SQLModel du repository User.

Les deux cotes d'une relation d'abonnement (following / followers) sont
stockes sur chaque utilisateur et maintenus par des ajouts conditionnels.
"""

from typing import Optional

from sqlmodel import or_, select

from moviebox.core.entities.social import User
from moviebox.core.ports.repositories import IUserRepository
from moviebox.core.value_objects.identifiers import new_id
from moviebox.core.value_objects.pagination import PageRequest
from moviebox.infrastructure.persistence.models import (
    UserModel,
    dump_json_list,
    load_json_list,
)
from moviebox.infrastructure.persistence.repositories.base import SQLModelRepository


class SQLModelUserRepository(SQLModelRepository[UserModel], IUserRepository):
    """Repository SQLModel pour les utilisateurs."""

    model = UserModel
    entity_name = "User"
    sortable_fields = frozenset({"created_at", "username", "email"})
    protected_fields = frozenset({"following_json", "followers_json"})

    def _to_entity(self, model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            full_name=model.full_name,
            bio=model.bio,
            role=model.role,
            is_active=model.is_active,
            following=load_json_list(model.following_json),
            followers=load_json_list(model.followers_json),
            created_at=model.created_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        return UserModel(
            id=entity.id or new_id(),
            username=entity.username,
            email=entity.email,
            full_name=entity.full_name,
            bio=entity.bio,
            role=entity.role,
            is_active=entity.is_active,
            following_json=dump_json_list(entity.following),
            followers_json=dump_json_list(entity.followers),
        )

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Recupere un utilisateur par son ID interne."""
        model = await self._get_model(user_id)
        if model:
            return self._to_entity(model)
        return None

    async def get_many(self, user_ids: list[str]) -> list[User]:
        if not user_ids:
            return []
        statement = select(UserModel).where(UserModel.id.in_(user_ids))
        by_id = {model.id: self._to_entity(model) for model in await self._all(statement)}
        return [by_id[user_id] for user_id in user_ids if user_id in by_id]

    async def find_conflicting(
        self,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> Optional[User]:
        clauses = []
        if username:
            clauses.append(UserModel.username == username)
        if email:
            clauses.append(UserModel.email == email)
        if not clauses:
            return None
        statement = select(UserModel).where(or_(*clauses))
        if exclude_id:
            statement = statement.where(UserModel.id != exclude_id)
        models = await self._all(statement.limit(1))
        if models:
            return self._to_entity(models[0])
        return None

    async def add(self, user: User) -> User:
        model = await self._insert(
            self._to_model(user), "User with this username or email already exists"
        )
        return self._to_entity(model)

    async def update(self, user: User) -> User:
        model = await self._update_from(
            user.id, self._to_model(user), "User with this username or email already exists"
        )
        return self._to_entity(model)

    async def list_page(
        self,
        request: PageRequest,
        role: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> tuple[list[User], int]:
        statement = select(UserModel)
        if role:
            statement = statement.where(UserModel.role == role)
        if username:
            statement = statement.where(UserModel.username.ilike(f"%{username}%"))
        if email:
            statement = statement.where(UserModel.email.ilike(f"%{email}%"))
        models, total = await self._paginate(statement, request)
        return [self._to_entity(model) for model in models], total

    async def add_following(self, user_id: str, target_id: str) -> bool:
        return await self._add_to_set(user_id, "following_json", target_id)

    async def add_follower(self, user_id: str, follower_id: str) -> bool:
        return await self._add_to_set(user_id, "followers_json", follower_id)

    async def remove_following(self, user_id: str, target_id: str) -> bool:
        return await self._remove_from_set(user_id, "following_json", target_id)

    async def remove_follower(self, user_id: str, follower_id: str) -> bool:
        return await self._remove_from_set(user_id, "followers_json", follower_id)
