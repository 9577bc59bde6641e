"""
Media catalog entities.

Entities representing movies, people and the TV show aggregate
(TvShow -> Season -> Episode) with their cross references.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass
class CastMember:
    """
    Cast entry of a movie or TV show.

    Attributes:
        person_id: Reference to an existing Person (validated when added)
        character: Character played
        order: Billing order
    """

    person_id: str
    character: str = ""
    order: int = 0


@dataclass
class CrewMember:
    """
    Crew entry of a movie or TV show.

    Attributes:
        person_id: Reference to an existing Person (validated when added)
        role: Job title (Director, Writer, ...)
        department: Department (Directing, Writing, ...)
    """

    person_id: str
    role: str = ""
    department: str = ""


@dataclass
class Movie:
    """
    Movie with its metadata and cast/crew references.

    Attributes:
        id: Internal identifier
        title: Display title
        overview: Plot summary
        release_date: Release date
        genres: Genre names (MovieGenre values)
        status: Production status (MovieStatus value)
        content_rating: Audience classification (ContentRating value)
        languages: Spoken languages (Language values)
        country: Production country
        production_company: Main production company
        directors: Director names
        writers: Writer names
        duration: Runtime in minutes
        budget: Budget in dollars
        revenue: Revenue in dollars
        vote_average: Mean of submitted ratings
        vote_count: Number of submitted ratings
        rating_count: Number of external ratings
        popularity: Popularity counter
        is_active: Visible in the catalog
        is_adult: Adult content flag
        cast: Cast entries
        crew: Crew entries
    """

    id: Optional[str] = None
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None
    genres: list[str] = field(default_factory=list)
    status: Optional[str] = None
    content_rating: Optional[str] = None
    languages: list[str] = field(default_factory=list)
    country: Optional[str] = None
    production_company: Optional[str] = None
    directors: list[str] = field(default_factory=list)
    writers: list[str] = field(default_factory=list)
    duration: Optional[int] = None
    budget: Optional[float] = None
    revenue: Optional[float] = None
    vote_average: float = 0.0
    vote_count: int = 0
    rating_count: int = 0
    popularity: float = 0.0
    is_active: bool = True
    is_adult: bool = False
    cast: list[CastMember] = field(default_factory=list)
    crew: list[CrewMember] = field(default_factory=list)


@dataclass
class Person:
    """
    Actor, director or any other contributor.

    A Person is shared between movies and shows: it is never owned by them.

    Attributes:
        id: Internal identifier
        name: Full name
        biography: Short biography
        birthday: Birth date
        roles: Roles held (Actor, Director, ...)
        popularity: Popularity counter
        is_active: Visible in the catalog
        profile_path: Profile picture path
        filmography: Movie ids (set semantics)
        related_people: Explicitly related person ids
    """

    id: Optional[str] = None
    name: str = ""
    biography: Optional[str] = None
    birthday: Optional[date] = None
    roles: list[str] = field(default_factory=list)
    popularity: float = 0.0
    is_active: bool = True
    profile_path: Optional[str] = None
    filmography: list[str] = field(default_factory=list)
    related_people: list[str] = field(default_factory=list)


@dataclass
class TvShow:
    """
    Root of the TV show aggregate.

    Attributes:
        id: Internal identifier
        title: Display title
        overview: Description
        release_date: First air date
        end_date: Last air date
        genres: Genre names
        country: Origin country
        is_active: Visible in the catalog
        popularity: Counter raised by views and season creation
        average_rating: Mean of submitted ratings
        rating_count: Number of submitted ratings
        seasons: Season ids (set semantics)
        cast: Cast entries
        crew: Crew entries
    """

    id: Optional[str] = None
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None
    end_date: Optional[date] = None
    genres: list[str] = field(default_factory=list)
    country: Optional[str] = None
    is_active: bool = True
    popularity: float = 0.0
    average_rating: float = 0.0
    rating_count: int = 0
    seasons: list[str] = field(default_factory=list)
    cast: list[CastMember] = field(default_factory=list)
    crew: list[CrewMember] = field(default_factory=list)


@dataclass
class Season:
    """
    Season of a TV show.

    Attributes:
        id: Internal identifier
        tv_show_id: Owning show (immutable after creation)
        season_number: Number, unique within the show
        title: Season title
        overview: Description
        release_date: Air date
        popularity: Counter raised by episode creation
        average_rating: Mean of submitted ratings
        rating_count: Number of submitted ratings
        episodes: Episode ids (set semantics)
    """

    id: Optional[str] = None
    tv_show_id: str = ""
    season_number: int = 0
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None
    popularity: float = 0.0
    average_rating: float = 0.0
    rating_count: int = 0
    episodes: list[str] = field(default_factory=list)


@dataclass
class Episode:
    """
    Individual episode of a season.

    Attributes:
        id: Internal identifier
        season_id: Owning season (immutable after creation)
        episode_number: Number, unique within the season
        title: Episode title
        overview: Description
        release_date: Original air date
        duration: Runtime in minutes
        popularity: Counter raised on each view
        average_rating: Mean of submitted ratings
        rating_count: Number of submitted ratings
    """

    id: Optional[str] = None
    season_id: str = ""
    episode_number: int = 0
    title: str = ""
    overview: Optional[str] = None
    release_date: Optional[date] = None
    duration: Optional[int] = None
    popularity: float = 0.0
    average_rating: float = 0.0
    rating_count: int = 0
