"""
Objets valeur de pagination et de tri des listes.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from moviebox.core.errors import InvalidArgumentError
from moviebox.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


class SortOrder(str, Enum):
    """Sens de tri."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class PageRequest:
    """
    Parametres de pagination et de tri.

    Attributes:
        page: Numero de page (1-indexed)
        limit: Nombre d'elements par page
        sort_by: Champ de tri
        sort_order: Sens du tri
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str = "popularity"
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        if self.page < 1:
            raise InvalidArgumentError(f"Invalid page: {self.page}")
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise InvalidArgumentError(
                f"Invalid limit: {self.limit} (must be between 1 and {MAX_PAGE_SIZE})"
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    """Une page de resultats avec ses metadonnees."""

    items: list[T] = field(default_factory=list)
    total_items: int = 0
    items_per_page: int = DEFAULT_PAGE_SIZE
    current_page: int = 1

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.items_per_page) if self.items_per_page else 0

    @classmethod
    def build(cls, items: list[T], total: int, request: PageRequest) -> "Page[T]":
        return cls(
            items=items,
            total_items=total,
            items_per_page=request.limit,
            current_page=request.page,
        )
