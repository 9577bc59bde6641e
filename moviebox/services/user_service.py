"""
Service des utilisateurs et du graphe d'abonnements.

Chaque cote d'un abonnement (following de l'abonne, followers de la cible)
est maintenu par un ajout conditionnel : suivre deux fois n'a pas d'effet et
ne notifie qu'une seule fois. Lecture, creation, mise a jour et suppression
sont relancees sur erreur transitoire du stockage. La notification et l'invalidation du cache ont
lieu apres la validation de l'unite ; leur echec est journalise sans annuler
l'abonnement.
"""

from typing import Any, Optional

from loguru import logger

from moviebox.core.entities.social import Notification, User
from moviebox.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from moviebox.core.ports.cache import CacheKey, EntityKind, ICacheGateway
from moviebox.core.ports.notifications import INotifier
from moviebox.core.ports.unit_of_work import IUnitOfWork, UnitOfWorkFactory
from moviebox.core.value_objects.catalog import NotificationType, UserRole, normalize_enum
from moviebox.core.value_objects.identifiers import ensure_valid_id, new_id
from moviebox.core.value_objects.pagination import Page, PageRequest, SortOrder
from moviebox.infrastructure.persistence.retry import run_with_retry
from moviebox.services.caching import cache_or_fetch, invalidate_quietly
from moviebox.services.transactions import transactional
from moviebox.services.validation import apply_changes, ensure_text

_UPDATABLE_FIELDS = ("username", "email", "full_name", "bio", "role", "is_active")


class UserService:
    """Operations sur les utilisateurs, abonnements et notifications."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        cache: ICacheGateway,
        notifier: INotifier,
        cache_ttl: int = 600,
        max_attempts: int = 3,
        max_wait: float = 2.0,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache
        self._notifier = notifier
        self._cache_ttl = cache_ttl
        self._max_attempts = max_attempts
        self._max_wait = max_wait

    async def _retry(self, operation):
        return await run_with_retry(operation, self._max_attempts, self._max_wait)

    async def create(self, user: User) -> User:
        """
        Cree un utilisateur.

        Raises:
            InvalidArgumentError: username/email manquant, email ou role invalide
            ConflictError: username ou email deja pris
        """
        _normalize_user(user)
        user.id = new_id()
        user.following = []
        user.followers = []

        async def attempt() -> User:
            async with transactional(self._uow_factory, "create user") as uow:
                if await uow.users.find_conflicting(user.username, user.email):
                    raise ConflictError("User with this username or email already exists")
                return await uow.users.add(user)

        created = await self._retry(attempt)

        logger.info("Utilisateur cree", user_id=created.id, username=created.username)
        await self._invalidate(created.id)
        return created

    async def get(self, user_id: str) -> User:
        ensure_valid_id(user_id, "user")

        async def load() -> Optional[User]:
            async with transactional(self._uow_factory, "get user") as uow:
                return await uow.users.get_by_id(user_id)

        async def fetch() -> Optional[User]:
            return await self._retry(load)

        user = await cache_or_fetch(
            self._cache, CacheKey.entity(EntityKind.USER, user_id), fetch, self._cache_ttl
        )
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def list_users(
        self,
        request: Optional[PageRequest] = None,
        role: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Page[User]:
        request = request or PageRequest(sort_by="created_at", sort_order=SortOrder.DESC)
        if role:
            role = normalize_enum(role, UserRole).value
        key = CacheKey.listing(
            EntityKind.USER,
            request.page,
            request.limit,
            request.sort_by,
            request.sort_order.value,
            role,
            username,
            email,
        )

        async def fetch() -> Page[User]:
            async with transactional(self._uow_factory, "list users") as uow:
                items, total = await uow.users.list_page(request, role, username, email)
            return Page.build(items, total, request)

        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def update(self, user_id: str, changes: dict[str, Any]) -> User:
        """Met a jour le profil ; username et email restent uniques."""
        ensure_valid_id(user_id, "user")

        async def attempt() -> User:
            async with transactional(self._uow_factory, "update user") as uow:
                current = await uow.users.get_by_id(user_id)
                if current is None:
                    raise NotFoundError("User", user_id)
                candidate = apply_changes(current, changes, _UPDATABLE_FIELDS)
                _normalize_user(candidate)
                if await uow.users.find_conflicting(
                    candidate.username, candidate.email, user_id
                ):
                    raise ConflictError("User with this username or email already exists")
                return await uow.users.update(candidate)

        updated = await self._retry(attempt)
        await self._invalidate(user_id)
        return updated

    async def delete(self, user_id: str) -> None:
        """Supprime l'utilisateur et le retire des listes d'abonnements des autres."""
        ensure_valid_id(user_id, "user")

        async def attempt() -> User:
            async with transactional(self._uow_factory, "delete user") as uow:
                user = await self._load(uow, user_id)
                for target_id in user.following:
                    await uow.users.remove_follower(target_id, user_id)
                for follower_id in user.followers:
                    await uow.users.remove_following(follower_id, user_id)
                await uow.users.delete(user_id)
                return user

        user = await self._retry(attempt)
        logger.info("Utilisateur supprime", user_id=user_id)
        await self._invalidate(user_id, *user.following, *user.followers)

    async def follow(self, user_id: str, follow_id: str) -> User:
        """
        Abonne user_id a follow_id.

        Idempotent : un second appel n'ajoute rien et ne notifie pas.

        Raises:
            InvalidArgumentError: ID mal forme ou auto-abonnement
            NotFoundError: l'un des deux utilisateurs est absent
        """
        ensure_valid_id(user_id, "user")
        ensure_valid_id(follow_id, "user")
        if user_id == follow_id:
            raise InvalidArgumentError("Users cannot follow themselves")

        async with transactional(self._uow_factory, "follow user") as uow:
            follower = await self._load(uow, user_id)
            await self._load(uow, follow_id)
            added = await uow.users.add_following(user_id, follow_id)
            await uow.users.add_follower(follow_id, user_id)
            updated = await uow.users.get_by_id(user_id)

        if added:
            logger.info("Nouvel abonnement", user_id=user_id, follow_id=follow_id)
            await self._notify_new_follower(follower, follow_id)
        await self._invalidate(user_id, follow_id)
        return updated

    async def unfollow(self, user_id: str, unfollow_id: str) -> User:
        """Desabonnement symetrique ; retirer un abonnement absent n'a pas d'effet."""
        ensure_valid_id(user_id, "user")
        ensure_valid_id(unfollow_id, "user")

        async with transactional(self._uow_factory, "unfollow user") as uow:
            await self._load(uow, user_id)
            await self._load(uow, unfollow_id)
            await uow.users.remove_following(user_id, unfollow_id)
            await uow.users.remove_follower(unfollow_id, user_id)
            updated = await uow.users.get_by_id(user_id)

        await self._invalidate(user_id, unfollow_id)
        return updated

    async def get_followers(self, user_id: str) -> list[User]:
        return await self._adjacency(user_id, "followers")

    async def get_following(self, user_id: str) -> list[User]:
        return await self._adjacency(user_id, "following")

    async def get_notifications(self, user_id: str) -> list[Notification]:
        """Notifications recues, plus recentes d'abord (non mises en cache)."""
        ensure_valid_id(user_id, "user")
        async with transactional(self._uow_factory, "get notifications") as uow:
            await self._load(uow, user_id)
            return await uow.notifications.list_for_user(user_id)

    async def _adjacency(self, user_id: str, side: str) -> list[User]:
        ensure_valid_id(user_id, "user")

        async def fetch() -> list[User]:
            async with transactional(self._uow_factory, f"get {side}") as uow:
                user = await self._load(uow, user_id)
                return await uow.users.get_many(getattr(user, side))

        key = CacheKey.related(EntityKind.USER, user_id, side)
        return await cache_or_fetch(self._cache, key, fetch, self._cache_ttl)

    async def _notify_new_follower(self, follower: User, followed_id: str) -> None:
        notification = Notification(
            user_id=followed_id,
            sender_id=follower.id,
            type=NotificationType.NEW_FOLLOWER.value,
            message=f"{follower.username} started following you.",
        )
        try:
            await self._notifier.notify_user(notification)
        except Exception as exc:
            logger.warning(
                "Echec de la notification",
                user_id=followed_id,
                sender_id=follower.id,
                error=str(exc),
            )

    async def _load(self, uow: IUnitOfWork, user_id: str) -> User:
        user = await uow.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def _invalidate(self, *user_ids: str) -> None:
        await invalidate_quietly(
            self._cache,
            keys=[CacheKey.entity(EntityKind.USER, uid) for uid in user_ids],
            patterns=[CacheKey.entity_pattern(EntityKind.USER, uid) for uid in user_ids]
            + [CacheKey.listings_pattern(EntityKind.USER)],
        )


def _normalize_user(user: User) -> None:
    user.username = ensure_text(user.username, "Username")
    user.email = ensure_text(user.email, "Email").lower()
    if "@" not in user.email:
        raise InvalidArgumentError(f"Invalid email: {user.email}")
    user.role = normalize_enum(user.role or UserRole.USER.value, UserRole).value
