"""
Tests unitaires pour le helper transactional.

Ces tests verifient:
- Commit a la sortie normale d'un bloc proprietaire
- Rollback et liberation de l'unite sur toute exception
- Propagation des erreurs du catalogue telles quelles
- Enveloppe InternalError pour les autres exceptions
- Participation a une unite ambiante sans commit
"""

import pytest

from moviebox.core.errors import InternalError, NotFoundError
from moviebox.services.transactions import transactional


class FakeUnitOfWork:
    """Unite de travail en memoire qui enregistre son cycle de vie."""

    def __init__(self) -> None:
        self.events: list[str] = []

    async def __aenter__(self) -> "FakeUnitOfWork":
        self.events.append("begin")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.events.append("rollback")
        self.events.append("close")

    async def commit(self) -> None:
        self.events.append("commit")

    async def rollback(self) -> None:
        self.events.append("rollback")


@pytest.fixture
def unit() -> FakeUnitOfWork:
    return FakeUnitOfWork()


class TestTransactional:
    """Tests pour la delimitation des unites par les services."""

    @pytest.mark.asyncio
    async def test_commits_on_success(self, unit: FakeUnitOfWork) -> None:
        async with transactional(lambda: unit, "create season") as uow:
            assert uow is unit

        assert unit.events == ["begin", "commit", "close"]

    @pytest.mark.asyncio
    async def test_catalog_error_is_reraised_unchanged(self, unit: FakeUnitOfWork) -> None:
        """Une NotFoundError remonte telle quelle, sans commit."""
        with pytest.raises(NotFoundError):
            async with transactional(lambda: unit, "create season"):
                raise NotFoundError("TvShow", "1")

        assert unit.events == ["begin", "rollback", "close"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, unit: FakeUnitOfWork) -> None:
        """Toute autre exception devient InternalError en nommant l'operation."""
        with pytest.raises(InternalError) as exc_info:
            async with transactional(lambda: unit, "delete season"):
                raise RuntimeError("connection reset")

        error = exc_info.value
        assert error.message == "Failed to delete season: connection reset"
        assert isinstance(error.__cause__, RuntimeError)
        assert "commit" not in unit.events
        assert unit.events[-1] == "close"

    @pytest.mark.asyncio
    async def test_commit_failure_is_wrapped(self) -> None:
        class FailingCommit(FakeUnitOfWork):
            async def commit(self) -> None:
                raise RuntimeError("disk full")

        unit = FailingCommit()
        with pytest.raises(InternalError, match="Failed to rate season: disk full"):
            async with transactional(lambda: unit, "rate season"):
                pass
        assert unit.events == ["begin", "rollback", "close"]

    @pytest.mark.asyncio
    async def test_joins_ambient_unit_without_committing(self, unit: FakeUnitOfWork) -> None:
        """Avec une unite ambiante, le bloc ne valide ni ne ferme rien."""

        def factory() -> FakeUnitOfWork:
            raise AssertionError("no new unit expected")

        async with transactional(factory, "delete season episodes", unit) as uow:
            assert uow is unit

        assert unit.events == []

    @pytest.mark.asyncio
    async def test_ambient_unit_lets_errors_through(self, unit: FakeUnitOfWork) -> None:
        with pytest.raises(RuntimeError):
            async with transactional(lambda: unit, "delete season episodes", unit):
                raise RuntimeError("boom")
