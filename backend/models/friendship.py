import datetime
from enum import Enum

from sqlalchemy import UniqueConstraint, CheckConstraint, Column, Index
from sqlmodel import SQLModel, Field

from models.common import utcnow
from models.types import UtcAwareDateTime


class FriendshipStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"
    blocked = "blocked"


class Friendship(SQLModel, table=True):
    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_friend_pair"),
        CheckConstraint("user_low_id < user_high_id", name="ck_friend_order"),
        CheckConstraint("requester_id <> addressee_id", name="ck_friend_not_self"),
        Index("ix_friendships_last_message_at", "last_message_at"),
    )

    id: int | None = Field(default=None, primary_key=True)

    # Direction of the request
    requester_id: str = Field(foreign_key="users.id", index=True)
    addressee_id: str = Field(foreign_key="users.id", index=True)

    # Canonical pair (always low < high)
    user_low_id: str = Field(foreign_key="users.id")
    user_high_id: str = Field(foreign_key="users.id")

    status: FriendshipStatus = Field(default=FriendshipStatus.pending, index=True)
    requester_message: str | None = Field(default=None, max_length=500)
    reject_reason: str | None = Field(default=None, max_length=500)

    # Per-friendship settings
    alias: str | None = Field(default=None, max_length=100)
    is_starred: bool = False
    is_muted: bool = False
    unread_count: int = 0

    # Set once, the first time the friendship is accepted
    conversation_id: str | None = Field(default=None, index=True)
    last_message_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(UtcAwareDateTime(), nullable=True),
    )

    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    updated_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )

    # Helpers
    @staticmethod
    def canonical_pair(a: str, b: str) -> tuple[str, str]:
        return (a, b) if a < b else (b, a)

    @classmethod
    def request(
        cls, requester_id: str, addressee_id: str, **kwargs
    ) -> "Friendship":
        low, high = cls.canonical_pair(requester_id, addressee_id)
        return cls(
            requester_id=requester_id,
            addressee_id=addressee_id,
            user_low_id=low,
            user_high_id=high,
            **kwargs,
        )

    def other_party(self, user_id: str) -> str:
        return self.addressee_id if user_id == self.requester_id else self.requester_id
