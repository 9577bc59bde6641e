"""
Identifiants des entites du catalogue.

Les identifiants sont des chaines opaques de 32 caracteres hexadecimaux
(uuid4), attribues par l'application a l'insertion et immuables ensuite.
"""

import re
import uuid

from moviebox.core.errors import InvalidArgumentError

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


def new_id() -> str:
    """Genere un nouvel identifiant."""
    return uuid.uuid4().hex


def is_valid_id(value: object) -> bool:
    """Verifie qu'une valeur respecte le format d'identifiant du stockage."""
    return isinstance(value, str) and bool(_ID_PATTERN.match(value))


def ensure_valid_id(value: object, label: str) -> str:
    """
    Valide un identifiant recu du client.

    Args:
        value: Valeur a valider
        label: Nom de l'entite pour le message (ex: "season")

    Returns:
        L'identifiant valide

    Raises:
        InvalidArgumentError: Si le format est invalide
    """
    if not is_valid_id(value):
        raise InvalidArgumentError(f"Invalid {label} ID: {value}")
    return value  # type: ignore[return-value]
