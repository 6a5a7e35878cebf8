"""Models package for the habitpals backend"""

from .common import get_session, CamelModel
from .auth import User
from .conversation import Conversation, ConversationParticipant, Message
from .friendship import Friendship, FriendshipStatus
from .notification import FriendNotification, NotificationType
from .types import UtcAwareDateTime

__all__ = [
    "CamelModel",
    "Conversation",
    "ConversationParticipant",
    "FriendNotification",
    "Friendship",
    "FriendshipStatus",
    "Message",
    "NotificationType",
    "User",
    "UtcAwareDateTime",
    "get_session",
]
