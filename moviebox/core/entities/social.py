"""
Social entities: users, their reviews and notifications.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """
    Catalog user with follow adjacency.

    Both sides of a follow edge are stored and maintained independently.

    Attributes:
        id: Internal identifier
        username: Unique login name
        email: Unique email address
        full_name: Display name
        bio: Short presentation
        role: UserRole value
        is_active: Account enabled
        following: Ids of users this user follows
        followers: Ids of users following this user
        created_at: Creation timestamp
    """

    id: Optional[str] = None
    username: str = ""
    email: str = ""
    full_name: Optional[str] = None
    bio: Optional[str] = None
    role: str = "user"
    is_active: bool = True
    following: list[str] = field(default_factory=list)
    followers: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None


@dataclass
class Review:
    """
    Rating and comment left by a user on a catalog entity.

    Attributes:
        id: Internal identifier
        target_id: Reviewed entity id
        target_type: ReviewTargetType value
        user_id: Author id
        rating: Rating between 0 and 5
        content: Optional comment
        created_at: Creation timestamp
    """

    id: Optional[str] = None
    target_id: str = ""
    target_type: str = ""
    user_id: str = ""
    rating: float = 0.0
    content: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Notification:
    """
    Message delivered to a user.

    Attributes:
        user_id: Recipient
        sender_id: Originating user
        type: NotificationType value
        message: Human readable text
        id: Internal identifier (set on persistence)
        is_read: Read flag
        created_at: Creation timestamp
    """

    user_id: str
    sender_id: Optional[str]
    type: str
    message: str
    id: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
