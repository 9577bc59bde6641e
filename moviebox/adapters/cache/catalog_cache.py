"""
Cache persistant du catalogue avec TTL par cle et invalidation par motif.

Le cache utilise diskcache pour la persistence sur disque, ce qui permet
de conserver les donnees entre les redemarrages de l'application.
Les operations bloquantes de diskcache sont deportees dans l'executor
par defaut pour ne pas bloquer la boucle d'evenements.
"""

import asyncio
from fnmatch import fnmatchcase
from functools import partial
from typing import Any, Optional

from diskcache import Cache

from moviebox.core.ports.cache import ICacheGateway


class CatalogCache(ICacheGateway):
    """
    Cache asynchrone avec TTL pour les lectures du catalogue.

    Example:
        cache = CatalogCache(cache_dir=".cache/moviebox")
        await cache.set("user:3f2a...", user, ttl=600)
        await cache.invalidate_by_pattern("users:*")
    """

    def __init__(self, cache_dir: str = ".cache/moviebox") -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(str(cache_dir))

    async def get(self, key: str) -> Optional[Any]:
        """
        Recupere une valeur du cache.

        Args:
            key: Cle unique identifiant la donnee

        Returns:
            La valeur stockee ou None si absente ou expiree
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Stocke une valeur dans le cache avec un TTL.

        Args:
            key: Cle unique identifiant la donnee
            value: Valeur a stocker (doit etre picklable)
            ttl: Duree de vie en secondes
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def invalidate(self, *keys: str) -> None:
        """Supprime des cles precises (les cles absentes sont ignorees)."""
        loop = asyncio.get_running_loop()
        for key in keys:
            await loop.run_in_executor(None, self._cache.delete, key)

    async def invalidate_by_pattern(self, pattern: str) -> int:
        """
        Supprime toutes les cles correspondant a un motif glob.

        Args:
            pattern: Motif fnmatch (ex: "users:*", "season:<id>*")

        Returns:
            Nombre de cles supprimees
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._delete_matching, pattern)

    def _delete_matching(self, pattern: str) -> int:
        # Liste figee avant suppression : iterkeys() lit la base en continu
        matching = [
            key for key in self._cache.iterkeys()
            if isinstance(key, str) and fnmatchcase(key, pattern)
        ]
        deleted = 0
        for key in matching:
            if self._cache.delete(key):
                deleted += 1
        return deleted

    async def clear(self) -> int:
        """Supprime toutes les entrees du cache (commande clear-cache). Retourne leur nombre."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
