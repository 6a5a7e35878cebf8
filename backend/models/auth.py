"""Identity directory models.

Accounts are owned by the authentication service, the friendship code only
reads them.
"""

import datetime

from sqlmodel import SQLModel, Field, Column
from .common import CamelModel, utcnow
from .types import UtcAwareDateTime


class User(SQLModel, CamelModel, table=True):
    __tablename__ = "users"

    id: str = Field(primary_key=True)
    # Public identifier users share with each other to connect
    uid: str = Field(index=True, unique=True)
    username: str = Field(index=True, unique=True)
    nickname: str | None = None
    avatar_url: str | None = None
    is_active: bool = Field(default=True)
    join_date: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
    last_seen_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(UtcAwareDateTime(), nullable=True),
    )

    @property
    def display_name(self) -> str:
        return self.nickname or self.username

    def __str__(self):
        return self.username
