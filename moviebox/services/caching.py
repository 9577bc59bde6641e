"""
Lecture via le cache et invalidation tolerante aux pannes.

Le cache est consultatif : une panne du cache est journalisee mais ne fait
jamais echouer une lecture (repli sur le stockage) ni une mutation deja
validee.
"""

from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

from loguru import logger

from moviebox.core.ports.cache import ICacheGateway

T = TypeVar("T")


async def cache_or_fetch(
    cache: ICacheGateway,
    key: str,
    fetch: Callable[[], Awaitable[T]],
    ttl: int,
) -> T:
    """
    Retourne la valeur en cache, sinon la calcule, la stocke et la retourne.

    Les valeurs None ne sont pas mises en cache.

    Args:
        cache: Passerelle de cache
        key: Cle construite par CacheKey
        fetch: Fabrique de coroutine appelee en cas d'absence
        ttl: Duree de vie en secondes
    """
    cached: Optional[Any] = None
    try:
        cached = await cache.get(key)
    except Exception as exc:
        logger.warning("Lecture du cache impossible", key=key, error=str(exc))
    if cached is not None:
        return cached

    value = await fetch()
    if value is not None:
        try:
            await cache.set(key, value, ttl)
        except Exception as exc:
            logger.warning("Ecriture du cache impossible", key=key, error=str(exc))
    return value


async def invalidate_quietly(
    cache: ICacheGateway,
    keys: Iterable[str] = (),
    patterns: Iterable[str] = (),
) -> None:
    """
    Invalide des cles et des motifs ; les erreurs sont journalisees.

    Chaque motif est traite independamment : l'echec de l'un n'empeche pas
    l'invalidation des suivants.
    """
    keys = list(keys)
    if keys:
        try:
            await cache.invalidate(*keys)
        except Exception as exc:
            logger.warning("Invalidation du cache impossible", keys=keys, error=str(exc))

    for pattern in patterns:
        try:
            await cache.invalidate_by_pattern(pattern)
        except Exception as exc:
            logger.warning("Invalidation du cache impossible", pattern=pattern, error=str(exc))
