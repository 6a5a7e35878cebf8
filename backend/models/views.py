"""Request bodies and response views of the friends API (camelCase on the wire)"""

import datetime
from enum import Enum

from pydantic import Field

from models.common import CamelModel
from models.friendship import FriendshipStatus
from models.notification import NotificationType


class RequestDirection(str, Enum):
    received = "received"
    sent = "sent"


class HandleAction(str, Enum):
    accept = "accept"
    decline = "decline"


class UserSummary(CamelModel):
    user_id: str
    uid: str
    username: str
    nickname: str | None = None
    avatar_url: str | None = None
    is_online: bool = False


class UserSearchResult(UserSummary):
    friendship_status: FriendshipStatus | None = None
    friendship_id: int | None = None
    can_send_request: bool


class RequestView(CamelModel):
    id: int
    status: FriendshipStatus
    message: str | None = None
    created_at: datetime.datetime
    user: UserSummary


class FriendView(CamelModel):
    user_id: str
    uid: str
    username: str
    nickname: str | None = None
    display_name: str
    avatar_url: str | None = None
    is_online: bool
    last_seen_at: datetime.datetime | None = None
    friend_since: datetime.datetime
    friendship_id: int
    conversation_id: str | None = None
    is_starred: bool
    is_muted: bool
    unread_count: int = 0
    last_message_at: datetime.datetime | None = None


class NotificationView(CamelModel):
    id: int
    type: NotificationType
    message: str | None = None
    is_read: bool
    read_at: datetime.datetime | None = None
    created_at: datetime.datetime
    from_user: UserSummary


class FriendRequestCreate(CamelModel):
    uid: str
    message: str | None = None


class HandleRequestBody(CamelModel):
    action: str
    message: str | None = None


class FriendSettingsUpdate(CamelModel):
    """Only the fields present in the body are applied"""

    alias: str | None = None
    is_starred: bool | None = None
    is_muted: bool | None = None

    def provided(self) -> dict:
        return self.model_dump(exclude_unset=True)


class OperationResult(CamelModel):
    success: bool = True
    message: str | None = Field(default=None)
