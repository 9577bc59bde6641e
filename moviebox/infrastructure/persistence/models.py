"""
Modeles SQLModel pour la base de donnees MovieBox.

Ces modeles representent les tables de la base de donnees.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- movies: Films avec casting et equipe
- people: Personnes avec filmographie
- tv_shows: Series TV (racine de l'agregat)
- seasons: Saisons, numero unique par serie
- episodes: Episodes, numero unique par saison
- users: Utilisateurs et abonnements
- reviews: Critiques
- notifications: Notifications envoyees aux utilisateurs

Les champs JSON (*_json) stockent les listes de references (IDs) et les
entrees de casting/equipe de maniere serialisee, a la facon d'un document.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any, Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


def utcnow() -> datetime:
    """Horodatage UTC courant."""
    return datetime.now(timezone.utc)


def load_json_list(value: Optional[str]) -> list[Any]:
    """Deserialise une liste JSON (liste vide si absente)."""
    if value:
        return json.loads(value)
    return []


def dump_json_list(values: list[Any]) -> str:
    """Serialise une liste en JSON."""
    return json.dumps(list(values))


class MovieModel(SQLModel, table=True):
    """
    Modele representant un film.

    cast_json: [{"person_id": ..., "character": ..., "order": ...}]
    crew_json: [{"person_id": ..., "role": ..., "department": ...}]
    """

    __tablename__ = "movies"

    id: str = Field(primary_key=True, max_length=32)
    title: str = Field(index=True)
    overview: Optional[str] = None
    release_date: Optional[date] = Field(default=None, index=True)
    genres_json: str = Field(default="[]")  # JSON: ["Action", "Drama"]
    status: Optional[str] = None
    content_rating: Optional[str] = None
    languages_json: str = Field(default="[]")
    country: Optional[str] = None
    production_company: Optional[str] = None
    directors_json: str = Field(default="[]")
    writers_json: str = Field(default="[]")
    duration: Optional[int] = None  # minutes
    budget: Optional[float] = None
    revenue: Optional[float] = None
    vote_average: float = Field(default=0.0)
    vote_count: int = Field(default=0)
    rating_count: int = Field(default=0)
    popularity: float = Field(default=0.0, index=True)
    is_active: bool = Field(default=True, index=True)
    is_adult: bool = Field(default=False)
    cast_json: str = Field(default="[]")
    crew_json: str = Field(default="[]")
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)


class PersonModel(SQLModel, table=True):
    """Modele representant une personne (acteur, realisateur...)."""

    __tablename__ = "people"

    id: str = Field(primary_key=True, max_length=32)
    name: str = Field(index=True)
    biography: Optional[str] = None
    birthday: Optional[date] = None
    roles_json: str = Field(default="[]")  # JSON: ["Actor", "Director"]
    popularity: float = Field(default=0.0, index=True)
    is_active: bool = Field(default=True, index=True)
    profile_path: Optional[str] = None
    filmography_json: str = Field(default="[]")  # JSON: [movie_id, ...]
    related_people_json: str = Field(default="[]")  # JSON: [person_id, ...]
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)


class TvShowModel(SQLModel, table=True):
    """Modele representant une serie TV."""

    __tablename__ = "tv_shows"

    id: str = Field(primary_key=True, max_length=32)
    title: str = Field(index=True)
    overview: Optional[str] = None
    release_date: Optional[date] = None
    end_date: Optional[date] = None
    genres_json: str = Field(default="[]")
    country: Optional[str] = None
    is_active: bool = Field(default=True, index=True)
    popularity: float = Field(default=0.0, index=True)
    average_rating: float = Field(default=0.0)
    rating_count: int = Field(default=0)
    seasons_json: str = Field(default="[]")  # JSON: [season_id, ...]
    cast_json: str = Field(default="[]")
    crew_json: str = Field(default="[]")
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)


class SeasonModel(SQLModel, table=True):
    """
    Modele representant une saison.

    L'index unique (tv_show_id, season_number) ferme la fenetre de course
    entre la verification d'unicite et l'insertion.
    """

    __tablename__ = "seasons"
    __table_args__ = (
        UniqueConstraint("tv_show_id", "season_number", name="uq_seasons_tv_show_number"),
    )

    id: str = Field(primary_key=True, max_length=32)
    tv_show_id: str = Field(index=True, max_length=32)
    season_number: int
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None
    popularity: float = Field(default=0.0, index=True)
    average_rating: float = Field(default=0.0)
    rating_count: int = Field(default=0)
    episodes_json: str = Field(default="[]")  # JSON: [episode_id, ...]
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)


class EpisodeModel(SQLModel, table=True):
    """Modele representant un episode, numero unique par saison."""

    __tablename__ = "episodes"
    __table_args__ = (
        UniqueConstraint("season_id", "episode_number", name="uq_episodes_season_number"),
    )

    id: str = Field(primary_key=True, max_length=32)
    season_id: str = Field(index=True, max_length=32)
    episode_number: int
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None
    duration: Optional[int] = None  # minutes
    popularity: float = Field(default=0.0, index=True)
    average_rating: float = Field(default=0.0)
    rating_count: int = Field(default=0)
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)


class UserModel(SQLModel, table=True):
    """Modele representant un utilisateur et ses deux listes d'adjacence."""

    __tablename__ = "users"

    id: str = Field(primary_key=True, max_length=32)
    username: str = Field(index=True, unique=True)
    email: str = Field(index=True, unique=True)
    full_name: Optional[str] = None
    bio: Optional[str] = None
    role: str = Field(default="user", index=True)
    is_active: bool = Field(default=True)
    following_json: str = Field(default="[]")  # JSON: [user_id, ...]
    followers_json: str = Field(default="[]")  # JSON: [user_id, ...]
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)


class ReviewModel(SQLModel, table=True):
    """Modele representant une critique (cible polymorphe)."""

    __tablename__ = "reviews"

    id: str = Field(primary_key=True, max_length=32)
    target_id: str = Field(index=True, max_length=32)
    target_type: str = Field(index=True)
    user_id: str = Field(index=True, max_length=32)
    rating: float
    content: Optional[str] = None
    created_at: Optional[datetime] = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = Field(default_factory=utcnow)


class NotificationModel(SQLModel, table=True):
    """Modele representant une notification utilisateur."""

    __tablename__ = "notifications"

    id: str = Field(primary_key=True, max_length=32)
    user_id: str = Field(index=True, max_length=32)
    sender_id: Optional[str] = Field(default=None, max_length=32)
    type: str
    message: str
    is_read: bool = Field(default=False)
    created_at: Optional[datetime] = Field(default_factory=utcnow, index=True)
