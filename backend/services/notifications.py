import logging

from sqlalchemy import or_
from sqlmodel import Session, select

from models.auth import User
from models.common import utcnow
from models.friendship import Friendship
from models.notification import FriendNotification, NotificationType
from services.errors import NotFound

logger = logging.getLogger("habitpals.notifications")

DEFAULT_MESSAGES = {
    NotificationType.request: "{name} wants to add you as a friend",
    NotificationType.accepted: "{name} accepted your friend request",
    NotificationType.declined: "{name} declined your friend request",
}


def notify(
    session: Session,
    *,
    friendship: Friendship,
    recipient_id: str,
    type: NotificationType,
    actor: User,
    message: str | None = None,
) -> FriendNotification:
    """Append a notification, it's committed with the surrounding transaction"""
    notification = FriendNotification(
        friendship_id=friendship.id,
        user_id=recipient_id,
        type=type,
        message=message or DEFAULT_MESSAGES[type].format(name=actor.display_name),
    )
    session.add(notification)
    logger.debug(
        f"Notify {recipient_id} of {type.value} on friendship {friendship.id}"
    )
    return notification


def purge_for_friendship(session: Session, friendship_id: int) -> int:
    notifications = session.exec(
        select(FriendNotification).where(
            FriendNotification.friendship_id == friendship_id
        )
    ).all()
    for notification in notifications:
        session.delete(notification)
    session.flush()  # before the friendship row they reference
    return len(notifications)


def notifications_with_sender(
    session: Session, *, user_id: str, limit: int, offset: int
) -> list[tuple[FriendNotification, User]]:
    """The user's notifications, newest first, each with the other party"""
    query = (
        select(FriendNotification, User)
        .join(Friendship, Friendship.id == FriendNotification.friendship_id)
        .join(
            User,
            or_(
                User.id == Friendship.requester_id,
                User.id == Friendship.addressee_id,
            ),
        )
        .where(
            FriendNotification.user_id == user_id,
            User.id != user_id,
        )
        .order_by(FriendNotification.created_at.desc(), FriendNotification.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(session.exec(query).all())


def mark_read(session: Session, *, user_id: str, notification_id: int):
    notification = session.get(FriendNotification, notification_id)
    if not notification or notification.user_id != user_id:
        raise NotFound("Notification not found")
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        session.add(notification)
    return notification
