"""
Validations communes aux services, executees avant tout acces au stockage.
"""

from dataclasses import fields, replace
from datetime import date
from typing import Any, Iterable, Optional, TypeVar

from moviebox.core.errors import InvalidArgumentError
from moviebox.utils.constants import RATING_MAX, RATING_MIN

E = TypeVar("E")


def ensure_valid_rating(rating: Any) -> float:
    """Verifie qu'une note est un nombre dans [0, 5] (bornes incluses)."""
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        raise InvalidArgumentError(f"Invalid rating: {rating}")
    if not RATING_MIN <= rating <= RATING_MAX:
        raise InvalidArgumentError(
            f"Rating must be between {RATING_MIN:g} and {RATING_MAX:g}, got {rating}"
        )
    return float(rating)


def ensure_non_negative(value: Any, label: str) -> int:
    """Verifie qu'un numero (saison, episode...) est un entier positif ou nul."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"Invalid {label}: {value}")
    return value


def ensure_text(value: Optional[str], label: str) -> str:
    """Verifie qu'un champ texte obligatoire est renseigne."""
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{label} is required")
    return str(value).strip()


def parse_date(value: Any, label: str = "date") -> Optional[date]:
    """Accepte une date, une chaine ISO (AAAA-MM-JJ) ou None."""
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid {label}: {value}") from exc


def apply_changes(entity: E, changes: dict[str, Any], allowed: Iterable[str]) -> E:
    """
    Retourne une copie de l'entite avec les champs modifies.

    Raises:
        InvalidArgumentError: si un champ est inconnu ou non modifiable
    """
    allowed = set(allowed)
    known = {f.name for f in fields(entity)}
    for name in changes:
        if name not in known or name not in allowed:
            raise InvalidArgumentError(f"Field cannot be updated: {name}")
    return replace(entity, **changes)
