"""
Enumerations du catalogue et normalisation des valeurs recues.

Les filtres recoivent des chaines libres (ex: "sci-fi", "ACTION") qui sont
rapprochees sans tenir compte de la casse d'une valeur d'enumeration.
"""

from enum import Enum
from typing import TypeVar

from moviebox.core.errors import InvalidArgumentError


class MovieGenre(str, Enum):
    """Genres de films et series."""

    ACTION = "Action"
    ADVENTURE = "Adventure"
    ANIMATION = "Animation"
    COMEDY = "Comedy"
    CRIME = "Crime"
    DOCUMENTARY = "Documentary"
    DRAMA = "Drama"
    FAMILY = "Family"
    FANTASY = "Fantasy"
    HISTORY = "History"
    HORROR = "Horror"
    MUSIC = "Music"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    SCIENCE_FICTION = "Sci-Fi"
    THRILLER = "Thriller"
    WAR = "War"
    WESTERN = "Western"


class MovieStatus(str, Enum):
    """Etat de production d'un film."""

    RUMORED = "Rumored"
    PLANNED = "Planned"
    IN_PRODUCTION = "In Production"
    POST_PRODUCTION = "Post Production"
    RELEASED = "Released"
    CANCELED = "Canceled"


class ContentRating(str, Enum):
    """Classification du public."""

    G = "G"
    PG = "PG"
    PG_13 = "PG-13"
    R = "R"
    NC_17 = "NC-17"
    NOT_RATED = "NR"


class Language(str, Enum):
    """Langues de diffusion."""

    ENGLISH = "English"
    FRENCH = "French"
    SPANISH = "Spanish"
    GERMAN = "German"
    ITALIAN = "Italian"
    JAPANESE = "Japanese"
    KOREAN = "Korean"
    CHINESE = "Chinese"
    HINDI = "Hindi"
    PERSIAN = "Persian"
    ARABIC = "Arabic"


class ReviewTargetType(str, Enum):
    """Type d'entite ciblee par une critique."""

    MOVIE = "Movie"
    TV_SHOW = "TvShow"
    SEASON = "Season"
    EPISODE = "Episode"


class UserRole(str, Enum):
    """Role d'un utilisateur."""

    USER = "user"
    ADMIN = "admin"


class NotificationType(str, Enum):
    """Type de notification envoyee a un utilisateur."""

    NEW_FOLLOWER = "NewFollower"
    NEW_EPISODE = "NewEpisode"
    SYSTEM = "System"


E = TypeVar("E", bound=Enum)


def normalize_enum(value: str, enum_cls: type[E]) -> E:
    """
    Rapproche une chaine libre d'une valeur d'enumeration (insensible a la casse).

    Args:
        value: Valeur recue du client
        enum_cls: Enumeration cible

    Returns:
        Le membre correspondant

    Raises:
        InvalidArgumentError: Si aucun membre ne correspond
    """
    candidate = value.strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == candidate:
            return member
    allowed = ", ".join(str(member.value) for member in enum_cls)
    raise InvalidArgumentError(f"Invalid value: {value}. Must be one of: {allowed}")


def normalize_enum_list(raw: str, enum_cls: type[E]) -> list[E]:
    """Normalise une liste separee par des virgules ("action, drama")."""
    return [normalize_enum(part, enum_cls) for part in raw.split(",") if part.strip()]
