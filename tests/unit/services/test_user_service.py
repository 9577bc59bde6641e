"""
Tests du service User sur une base SQLite reelle.

Ces tests verifient:
- L'unicite du username et de l'email
- Les abonnements symetriques et idempotents
- La notification unique du nouvel abonne
- La tolerance aux pannes du collaborateur de notifications
- Les abonnements concurrents
- La relance sur erreur transitoire du stockage
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from moviebox.core.entities.social import User
from moviebox.core.errors import (
    ConflictError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
)
from moviebox.core.ports.notifications import INotifier
from moviebox.core.value_objects import new_id
from moviebox.infrastructure.persistence.repositories import SQLModelUserRepository
from moviebox.services import UserService


def _locked() -> OperationalError:
    return OperationalError("UPDATE users", {}, Exception("database is locked"))


class TestCreateUser:
    """Tests pour la creation d'utilisateurs."""

    @pytest.mark.asyncio
    async def test_create_normalizes_email_and_role(self, user_service) -> None:
        user = await user_service.create(
            User(username="carol", email="Carol@Example.com", role="ADMIN")
        )

        assert user.email == "carol@example.com"
        assert user.role == "admin"
        assert user.following == []
        assert user.followers == []

    @pytest.mark.asyncio
    async def test_duplicate_username_raises_conflict(self, user_service, alice: User) -> None:
        with pytest.raises(ConflictError, match="username or email already exists"):
            await user_service.create(User(username="alice", email="other@example.com"))

    @pytest.mark.asyncio
    async def test_duplicate_email_raises_conflict(self, user_service, alice: User) -> None:
        with pytest.raises(ConflictError):
            await user_service.create(User(username="alice2", email="ALICE@example.com"))

    @pytest.mark.asyncio
    async def test_invalid_email_is_rejected(self, user_service) -> None:
        with pytest.raises(InvalidArgumentError, match="Invalid email"):
            await user_service.create(User(username="dave", email="dave"))

    @pytest.mark.asyncio
    async def test_update_to_taken_username_raises_conflict(
        self, user_service, alice: User, bob: User
    ) -> None:
        with pytest.raises(ConflictError):
            await user_service.update(bob.id, {"username": "alice"})


class TestFollow:
    """Tests pour le graphe d'abonnements."""

    @pytest.mark.asyncio
    async def test_follow_updates_both_sides(self, user_service, alice: User, bob: User) -> None:
        updated = await user_service.follow(alice.id, bob.id)

        assert updated.following == [bob.id]
        assert (await user_service.get(bob.id)).followers == [alice.id]
        assert [u.id for u in await user_service.get_following(alice.id)] == [bob.id]
        assert [u.id for u in await user_service.get_followers(bob.id)] == [alice.id]

    @pytest.mark.asyncio
    async def test_follow_twice_notifies_once(self, user_service, alice: User, bob: User) -> None:
        """Suivre deux fois : une seule entree, une seule notification."""
        await user_service.follow(alice.id, bob.id)
        updated = await user_service.follow(alice.id, bob.id)

        assert updated.following == [bob.id]
        notifications = await user_service.get_notifications(bob.id)
        assert len(notifications) == 1
        assert notifications[0].type == "NewFollower"
        assert notifications[0].sender_id == alice.id
        assert notifications[0].message == "alice started following you."

    @pytest.mark.asyncio
    async def test_self_follow_is_rejected(self, user_service, alice: User) -> None:
        with pytest.raises(InvalidArgumentError, match="cannot follow themselves"):
            await user_service.follow(alice.id, alice.id)

        reloaded = await user_service.get(alice.id)
        assert reloaded.following == []
        assert reloaded.followers == []

    @pytest.mark.asyncio
    async def test_follow_missing_user(self, user_service, alice: User) -> None:
        with pytest.raises(NotFoundError, match="User with ID"):
            await user_service.follow(alice.id, new_id())

    @pytest.mark.asyncio
    async def test_unfollow_is_symmetric(self, user_service, alice: User, bob: User) -> None:
        await user_service.follow(alice.id, bob.id)

        updated = await user_service.unfollow(alice.id, bob.id)

        assert updated.following == []
        assert (await user_service.get(bob.id)).followers == []

    @pytest.mark.asyncio
    async def test_unfollow_without_follow_is_noop(
        self, user_service, alice: User, bob: User
    ) -> None:
        updated = await user_service.unfollow(alice.id, bob.id)
        assert updated.following == []

    @pytest.mark.asyncio
    async def test_notifier_failure_keeps_follow(self, uow_factory, cache) -> None:
        """Une panne de notification est journalisee sans annuler l'abonnement."""
        notifier = AsyncMock(spec=INotifier)
        notifier.notify_user.side_effect = RuntimeError("smtp down")
        service = UserService(uow_factory, cache, notifier=notifier)
        alice = await service.create(User(username="alice", email="alice@example.com"))
        bob = await service.create(User(username="bob", email="bob@example.com"))

        updated = await service.follow(alice.id, bob.id)

        assert updated.following == [bob.id]
        notifier.notify_user.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_removes_user_from_adjacency_lists(
        self, user_service, alice: User, bob: User
    ) -> None:
        await user_service.follow(alice.id, bob.id)
        await user_service.follow(bob.id, alice.id)

        await user_service.delete(alice.id)

        reloaded = await user_service.get(bob.id)
        assert reloaded.following == []
        assert reloaded.followers == []


class TestUserListing:
    """Tests pour la liste paginee des utilisateurs."""

    @pytest.mark.asyncio
    async def test_list_is_invalidated_by_create(
        self, user_service, alice: User, bob: User
    ) -> None:
        assert (await user_service.list_users()).total_items == 2

        await user_service.create(User(username="carol", email="carol@example.com"))

        assert (await user_service.list_users()).total_items == 3

    @pytest.mark.asyncio
    async def test_list_filters_by_username(self, user_service, alice: User, bob: User) -> None:
        page = await user_service.list_users(username="ali")
        assert [u.id for u in page.items] == [alice.id]


class TestConcurrentFollows:
    """Abonnements lances en parallele."""

    @pytest.mark.asyncio
    async def test_parallel_follows_keep_every_edge(
        self, user_service, alice: User, bob: User
    ) -> None:
        carol = await user_service.create(User(username="carol", email="carol@example.com"))

        await asyncio.gather(
            user_service.follow(alice.id, bob.id),
            user_service.follow(alice.id, carol.id),
        )

        reloaded = await user_service.get(alice.id)
        assert sorted(reloaded.following) == sorted([bob.id, carol.id])
        assert (await user_service.get(bob.id)).followers == [alice.id]
        assert (await user_service.get(carol.id)).followers == [alice.id]

    @pytest.mark.asyncio
    async def test_parallel_duplicate_follow_notifies_once(
        self, user_service, alice: User, bob: User
    ) -> None:
        await asyncio.gather(
            user_service.follow(alice.id, bob.id),
            user_service.follow(alice.id, bob.id),
        )

        assert (await user_service.get(alice.id)).following == [bob.id]
        assert (await user_service.get(bob.id)).followers == [alice.id]
        assert len(await user_service.get_notifications(bob.id)) == 1

    @pytest.mark.asyncio
    async def test_parallel_followers_of_same_user(
        self, user_service, alice: User, bob: User
    ) -> None:
        """Deux abonnes simultanes vers la meme cible."""
        carol = await user_service.create(User(username="carol", email="carol@example.com"))

        await asyncio.gather(
            user_service.follow(alice.id, carol.id),
            user_service.follow(bob.id, carol.id),
        )

        followers = (await user_service.get(carol.id)).followers
        assert sorted(followers) == sorted([alice.id, bob.id])
        assert len(await user_service.get_notifications(carol.id)) == 2


class TestUserRetry:
    """Relance sur erreur transitoire."""

    @pytest.mark.asyncio
    async def test_transient_failure_on_create_is_retried(self, user_service) -> None:
        original = SQLModelUserRepository.add
        calls = 0

        async def flaky_add(repository, user):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise _locked()
            return await original(repository, user)

        with patch.object(SQLModelUserRepository, "add", flaky_add):
            user = await user_service.create(User(username="dave", email="dave@example.com"))

        assert calls == 2
        assert (await user_service.get(user.id)).username == "dave"
        assert (await user_service.list_users()).total_items == 1

    @pytest.mark.asyncio
    async def test_transient_failure_on_update_is_retried(
        self, user_service, alice: User
    ) -> None:
        original = SQLModelUserRepository.update
        calls = 0

        async def flaky_update(repository, user):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise _locked()
            return await original(repository, user)

        with patch.object(SQLModelUserRepository, "update", flaky_update):
            updated = await user_service.update(alice.id, {"bio": "Cinephile"})

        assert calls == 2
        assert updated.bio == "Cinephile"

    @pytest.mark.asyncio
    async def test_transient_failure_on_delete_is_retried(
        self, user_service, alice: User
    ) -> None:
        original = SQLModelUserRepository.delete
        calls = 0

        async def flaky_delete(repository, user_id):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise _locked()
            return await original(repository, user_id)

        with patch.object(SQLModelUserRepository, "delete", flaky_delete):
            await user_service.delete(alice.id)

        assert calls == 2
        with pytest.raises(NotFoundError):
            await user_service.get(alice.id)

    @pytest.mark.asyncio
    async def test_exhausted_retries_surface_the_error(self, user_service) -> None:
        failing = AsyncMock(side_effect=_locked())
        with patch.object(SQLModelUserRepository, "add", failing):
            with pytest.raises(InternalError, match="Failed to create user"):
                await user_service.create(User(username="erin", email="erin@example.com"))

        assert failing.await_count == 3

    @pytest.mark.asyncio
    async def test_conflict_is_not_retried(self, user_service, alice: User) -> None:
        spy = AsyncMock(wraps=SQLModelUserRepository.find_conflicting)

        async def counting(repository, username, email, exclude_id=None):
            return await spy(repository, username, email, exclude_id)

        with patch.object(SQLModelUserRepository, "find_conflicting", counting):
            with pytest.raises(ConflictError):
                await user_service.create(User(username="alice", email="x@example.com"))

        assert spy.await_count == 1
