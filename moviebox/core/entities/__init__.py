"""
Business entities representing core domain concepts.

Entities are mutable objects with identity that persist over time.

Exports:
- Movie, Person, TvShow, Season, Episode: Catalog aggregates
- CastMember, CrewMember: Person references held by movies and shows
- User, Review, Notification: Social entities
"""

from moviebox.core.entities.media import (
    CastMember,
    CrewMember,
    Episode,
    Movie,
    Person,
    Season,
    TvShow,
)
from moviebox.core.entities.social import Notification, Review, User

__all__ = [
    "CastMember",
    "CrewMember",
    "Episode",
    "Movie",
    "Person",
    "Season",
    "TvShow",
    "Notification",
    "Review",
    "User",
]
