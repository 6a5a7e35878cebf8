import datetime
from enum import Enum

from sqlalchemy import Column, Index
from sqlmodel import SQLModel, Field

from models.common import utcnow
from models.types import UtcAwareDateTime


class NotificationType(str, Enum):
    request = "request"
    accepted = "accepted"
    declined = "declined"


class FriendNotification(SQLModel, table=True):
    """Append-only record of a friendship event addressed to one user"""

    __tablename__ = "friend_notifications"
    __table_args__ = (Index("ix_friend_notifications_user_read", "user_id", "is_read"),)

    id: int | None = Field(default=None, primary_key=True)
    friendship_id: int = Field(
        foreign_key="friendships.id", index=True, ondelete="CASCADE"
    )
    # The recipient
    user_id: str = Field(foreign_key="users.id")
    type: NotificationType = Field(index=True)
    message: str | None = Field(default=None, max_length=500)
    is_read: bool = False
    read_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(UtcAwareDateTime(), nullable=True),
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
