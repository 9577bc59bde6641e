"""
Objets valeur immutables du domaine.

Exports:
- Identifiants: new_id, is_valid_id, ensure_valid_id
- Pagination: PageRequest, Page, SortOrder
- Enumerations: MovieGenre, MovieStatus, ContentRating, Language,
  ReviewTargetType, UserRole, NotificationType
"""

from moviebox.core.value_objects.catalog import (
    ContentRating,
    Language,
    MovieGenre,
    MovieStatus,
    NotificationType,
    ReviewTargetType,
    UserRole,
    normalize_enum,
    normalize_enum_list,
)
from moviebox.core.value_objects.identifiers import ensure_valid_id, is_valid_id, new_id
from moviebox.core.value_objects.pagination import Page, PageRequest, SortOrder

__all__ = [
    "ContentRating",
    "Language",
    "MovieGenre",
    "MovieStatus",
    "NotificationType",
    "ReviewTargetType",
    "UserRole",
    "normalize_enum",
    "normalize_enum_list",
    "ensure_valid_id",
    "is_valid_id",
    "new_id",
    "Page",
    "PageRequest",
    "SortOrder",
]
