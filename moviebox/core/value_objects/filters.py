"""
Criteres de filtrage deja normalises, transmis aux repositories.

Les services valident et normalisent les valeurs brutes (enumerations, dates)
avant de construire ces objets ; les repositories les traduisent en requetes.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


# Champs numeriques filtrables avec une semantique ">="
MOVIE_THRESHOLD_FIELDS = (
    "rating_count",
    "duration",
    "budget",
    "revenue",
    "vote_average",
    "vote_count",
    "popularity",
)


@dataclass(frozen=True)
class MovieFilter:
    """
    Predicat conjonctif sur les films.

    Attributes:
        release_date: Date de sortie exacte
        genres: Au moins un de ces genres
        status: Etat de production
        content_rating: Classification
        languages: Au moins une de ces langues
        thresholds: Seuils minimum (champ -> valeur) parmi MOVIE_THRESHOLD_FIELDS
        person: Texte recherche dans personnages, roles, realisateurs, scenaristes
        is_active: Visibilite
        is_adult: Contenu adulte
        country: Sous-chaine du pays (insensible a la casse)
        production_company: Sous-chaine de la societe de production
        director: Sous-chaine d'un realisateur
        writer: Sous-chaine d'un scenariste
    """

    release_date: Optional[date] = None
    genres: tuple[str, ...] = ()
    status: Optional[str] = None
    content_rating: Optional[str] = None
    languages: tuple[str, ...] = ()
    thresholds: dict[str, float] = field(default_factory=dict)
    person: Optional[str] = None
    is_active: Optional[bool] = None
    is_adult: Optional[bool] = None
    country: Optional[str] = None
    production_company: Optional[str] = None
    director: Optional[str] = None
    writer: Optional[str] = None


@dataclass(frozen=True)
class ReviewFilter:
    """Criteres d'egalite sur les critiques (tous optionnels)."""

    target_id: Optional[str] = None
    target_type: Optional[str] = None
    user_id: Optional[str] = None
    rating: Optional[float] = None
