"""
Port du cache en lecture et constructeur de clés typé.

Le cache est un reflet consultatif du stockage : il peut servir des données
périmées pendant la durée d'un TTL, et chaque mutation invalide explicitement
les clés concernées. Les clés sont construites par CacheKey, jamais à la main,
afin que l'invalidation par motif cible exactement les clés produites.

Format des clés:
- entité: "{kind}:{id}" (ex: "user:3f2a...")
- sous-ressource: "{kind}:{id}:{part}" (ex: "user:3f2a...:followers")
- liste: "{kind}s:list:{parts}" (ex: "users:list:1:10:createdAt")
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class EntityKind(str, Enum):
    """Espaces de noms des clés de cache."""

    MOVIE = "movie"
    PERSON = "person"
    TV_SHOW = "tv_show"
    SEASON = "season"
    EPISODE = "episode"
    USER = "user"


class CacheKey:
    """Constructeur des clés et motifs de cache par type d'entité."""

    @staticmethod
    def entity(kind: EntityKind, entity_id: str) -> str:
        """Clé d'une entité (ex: "season:<id>")."""
        return f"{kind.value}:{entity_id}"

    @staticmethod
    def related(kind: EntityKind, entity_id: str, part: str) -> str:
        """Clé d'une sous-ressource d'une entité (ex: "user:<id>:followers")."""
        return f"{kind.value}:{entity_id}:{part}"

    @staticmethod
    def listing(kind: EntityKind, *parts: Any) -> str:
        """Clé d'une liste (ex: "users:list:1:10")."""
        segments = [f"{kind.value}s", "list"]
        segments.extend("" if part is None else str(part) for part in parts)
        return ":".join(segments)

    @staticmethod
    def entity_pattern(kind: EntityKind, entity_id: str) -> str:
        """Motif couvrant l'entité et toutes ses sous-ressources."""
        return f"{kind.value}:{entity_id}*"

    @staticmethod
    def kind_pattern(kind: EntityKind) -> str:
        """Motif couvrant toutes les entités d'un type et leurs sous-ressources."""
        return f"{kind.value}:*"

    @staticmethod
    def listings_pattern(kind: EntityKind) -> str:
        """Motif couvrant toutes les listes d'un type (ex: "users:*")."""
        return f"{kind.value}s:*"


class ICacheGateway(ABC):
    """Contrat du cache clé/valeur avec TTL et invalidation par motif."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Valeur stockée ou None si absente ou expirée."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Stocke une valeur avec un TTL en secondes."""
        ...

    @abstractmethod
    async def invalidate(self, *keys: str) -> None:
        """Supprime des clés précises."""
        ...

    @abstractmethod
    async def invalidate_by_pattern(self, pattern: str) -> int:
        """Supprime les clés correspondant à un motif glob. Retourne le nombre supprimé."""
        ...
