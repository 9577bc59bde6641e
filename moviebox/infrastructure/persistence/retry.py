"""
Mecanisme de retry avec backoff exponentiel pour le stockage.

Relance les operations qui echouent sur une erreur transitoire (connexion
perdue, base verrouillee, timeout du pool) avec un delai croissant et du
jitter aleatoire. Les autres erreurs remontent immediatement ; apres
epuisement des tentatives, l'erreur d'origine est propagee.

Usage:
    # Avec le decorateur
    @with_storage_retry(max_attempts=3, max_wait=2)
    async def load_user():
        ...

    # Avec la fonction helper
    user = await run_with_retry(lambda: service.fetch(user_id))
"""

from typing import Awaitable, Callable, TypeVar

from loguru import logger
from sqlalchemy.exc import DBAPIError, DisconnectionError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

T = TypeVar("T")


def is_transient_storage_error(exc: BaseException) -> bool:
    """
    Indique si une exception (ou sa cause directe) est transitoire.

    Les services enveloppent les erreurs de stockage dans InternalError :
    la cause (__cause__) est donc examinee aussi.
    """
    for candidate in (exc, exc.__cause__):
        if candidate is None:
            continue
        if isinstance(candidate, (OperationalError, DisconnectionError, PoolTimeoutError)):
            return True
        if isinstance(candidate, DBAPIError) and candidate.connection_invalidated:
            return True
    return False


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    logger.debug(
        "Erreur transitoire de stockage, nouvelle tentative",
        attempt=retry_state.attempt_number,
        error=str(outcome.exception()) if outcome else None,
    )


def with_storage_retry(max_attempts: int = 3, max_wait: float = 2.0):
    """
    Decorateur pour relancer sur erreur transitoire avec backoff exponentiel.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 3)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 2)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception(is_transient_storage_error),
        wait=wait_random_exponential(multiplier=0.1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    max_wait: float = 2.0,
) -> T:
    """
    Execute une operation asynchrone avec retry sur erreur transitoire.

    Args:
        operation: Fabrique de coroutine (rappelee a chaque tentative)
        max_attempts: Nombre maximum de tentatives
        max_wait: Delai maximum entre les tentatives

    Returns:
        Le resultat de l'operation

    Raises:
        L'exception de la derniere tentative si toutes echouent
    """

    @with_storage_retry(max_attempts=max_attempts, max_wait=max_wait)
    async def _attempt() -> T:
        return await operation()

    return await _attempt()
