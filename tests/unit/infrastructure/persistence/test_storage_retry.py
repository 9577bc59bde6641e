"""
Tests unitaires pour la relance des operations de stockage.

Ces tests verifient:
- La detection des erreurs transitoires (directes ou en cause d'une InternalError)
- La relance avec backoff jusqu'au succes
- La propagation de l'erreur d'origine apres epuisement des tentatives
- L'absence de relance pour les erreurs permanentes
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from moviebox.core.errors import InternalError, NotFoundError
from moviebox.infrastructure.persistence.retry import (
    is_transient_storage_error,
    run_with_retry,
    with_storage_retry,
)


def _locked() -> OperationalError:
    return OperationalError("UPDATE seasons", {}, Exception("database is locked"))


class TestIsTransientStorageError:
    """Tests pour la classification des erreurs."""

    def test_operational_error_is_transient(self) -> None:
        assert is_transient_storage_error(_locked())

    def test_wrapped_operational_error_is_transient(self) -> None:
        """Une InternalError causee par une erreur transitoire est relancable."""
        try:
            try:
                raise _locked()
            except OperationalError as exc:
                raise InternalError("create review", exc) from exc
        except InternalError as wrapped:
            assert is_transient_storage_error(wrapped)

    def test_integrity_error_is_permanent(self) -> None:
        assert not is_transient_storage_error(IntegrityError("INSERT", {}, Exception("UNIQUE")))

    def test_catalog_errors_are_permanent(self) -> None:
        assert not is_transient_storage_error(NotFoundError("Review", "1"))


class TestWithStorageRetry:
    """Tests pour le decorateur with_storage_retry."""

    @pytest.mark.asyncio
    async def test_retries_until_success(self) -> None:
        """with_storage_retry relance tant que l'erreur est transitoire."""
        call_count = 0

        @with_storage_retry(max_attempts=3, max_wait=0)
        async def flaky() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise _locked()
            return "success"

        assert await flaky() == "success"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_reraises_after_max_attempts(self) -> None:
        """L'erreur d'origine remonte apres epuisement des tentatives."""
        call_count = 0

        @with_storage_retry(max_attempts=2, max_wait=0)
        async def always_fails() -> None:
            nonlocal call_count
            call_count += 1
            raise _locked()

        with pytest.raises(OperationalError):
            await always_fails()
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self) -> None:
        call_count = 0

        @with_storage_retry(max_attempts=3, max_wait=0)
        async def missing() -> None:
            nonlocal call_count
            call_count += 1
            raise NotFoundError("Review", "1")

        with pytest.raises(NotFoundError):
            await missing()
        assert call_count == 1


class TestRunWithRetry:
    """Tests pour la fonction helper run_with_retry."""

    @pytest.mark.asyncio
    async def test_calls_factory_for_each_attempt(self) -> None:
        attempts = []

        async def operation() -> int:
            attempts.append(len(attempts) + 1)
            if len(attempts) == 1:
                raise InternalError("get review", _locked())
            return 42

        assert await run_with_retry(operation, max_attempts=3, max_wait=0) == 42
        assert attempts == [1, 2]
