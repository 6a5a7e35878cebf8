import logging
from functools import partial

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

import settings
from models.auth import User
from models.common import utcnow
from models.friendship import Friendship, FriendshipStatus
from models.notification import NotificationType
from models.views import (
    FriendView,
    HandleAction,
    NotificationView,
    RequestDirection,
    RequestView,
    UserSearchResult,
)
from services.conversations import archive_conversation, provision_private_conversation
from services.directory import (
    get_active_user,
    get_active_user_by_uid,
    is_online,
    user_summary,
)
from services.errors import NotFound, SelfReference, ValidationError
from services.lifecycle import FriendshipAction, request_conflict, transition
from services.notifications import (
    mark_read,
    notifications_with_sender,
    notify,
    purge_for_friendship,
)
from services.transaction import listing_retry, unit_of_work

logger = logging.getLogger("habitpals.friendship")


def find_friendship(session: Session, user_id: str, other_id: str) -> Friendship | None:
    """The relationship between two users, whoever started it"""
    low, high = Friendship.canonical_pair(user_id, other_id)
    return session.exec(
        select(Friendship).where(
            Friendship.user_low_id == low,
            Friendship.user_high_id == high,
        )
    ).first()


def _accepted_friendship(session: Session, user_id: str, other_id: str) -> Friendship:
    friendship = find_friendship(session, user_id, other_id)
    if not friendship or friendship.status != FriendshipStatus.accepted:
        raise NotFound("Friendship not found")
    return friendship


def _clean_text(value: str | None, max_length: int, field: str) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if len(value) > max_length:
        raise ValidationError(f"{field} is too long (max {max_length} characters)")
    return value or None


def search_user(session: Session, *, user: User, uid: str) -> UserSearchResult:
    with unit_of_work(
        session, "search_user", actor_id=user.id, target=uid, read_only=True
    ):
        target = get_active_user_by_uid(session, uid)
        if target.id == user.id:
            raise SelfReference()

        friendship = find_friendship(session, user.id, target.id)
        return UserSearchResult(
            **user_summary(target).model_dump(),
            friendship_status=friendship.status if friendship else None,
            friendship_id=friendship.id if friendship else None,
            can_send_request=friendship is None
            or friendship.status in (FriendshipStatus.declined, FriendshipStatus.blocked),
        )


def request_friendship(
    session: Session, *, requester: User, target_uid: str, message: str | None = None
) -> Friendship:
    with unit_of_work(
        session, "send_request", actor_id=requester.id, target=target_uid
    ):
        message = _clean_text(message, settings.MESSAGE_MAX_LENGTH, "Message")
        recipient = get_active_user_by_uid(session, target_uid)
        if recipient.id == requester.id:
            raise SelfReference()

        existing = find_friendship(session, requester.id, recipient.id)
        status = transition(
            existing.status if existing else None, FriendshipAction.request
        )

        friendship = Friendship.request(
            requester.id,
            recipient.id,
            status=status,
            requester_message=message,
        )
        session.add(friendship)
        try:
            session.flush()
        except IntegrityError:
            # Someone created the pair since we looked: report what is there now
            session.rollback()
            existing = find_friendship(session, requester.id, recipient.id)
            if existing is None:
                raise
            logger.info(
                f"Concurrent request between {requester.id} and {recipient.id}, "
                f"pair is {existing.status.value}"
            )
            raise request_conflict(existing.status)

        notify(
            session,
            friendship=friendship,
            recipient_id=recipient.id,
            type=NotificationType.request,
            actor=requester,
            message=message,
        )
        logger.info(
            f"Friend request {friendship.id} sent from {requester.id} to {recipient.id}"
        )
    return friendship


@listing_retry()
def list_requests(
    session: Session, *, user: User, direction: str = RequestDirection.received
) -> list[RequestView]:
    with unit_of_work(
        session, "list_requests", actor_id=user.id, target=direction, read_only=True
    ):
        try:
            direction = RequestDirection(direction)
        except ValueError:
            raise ValidationError("Invalid request type") from None

        if direction == RequestDirection.received:
            query = select(Friendship, User).join(
                User, User.id == Friendship.requester_id
            ).where(Friendship.addressee_id == user.id)
        else:
            query = select(Friendship, User).join(
                User, User.id == Friendship.addressee_id
            ).where(Friendship.requester_id == user.id)

        query = query.where(Friendship.status == FriendshipStatus.pending).order_by(
            Friendship.created_at.desc(), Friendship.id.desc()
        )
        return [
            RequestView(
                id=friendship.id,
                status=friendship.status,
                message=friendship.requester_message,
                created_at=friendship.created_at,
                user=user_summary(other),
            )
            for friendship, other in session.exec(query).all()
        ]


# Effects of answering a request, applied in order inside one transaction


def _claim_pending(
    session: Session,
    *,
    friendship_id: int,
    addressee_id: str,
    status: FriendshipStatus,
    reject_reason: str | None = None,
) -> Friendship | None:
    """Move a pending request to `status` in one conditional UPDATE.

    Only one of two concurrent answers can match the pending row, the other
    one gets None back and must not apply any effect.
    """
    claimed = session.execute(
        update(Friendship)
        .where(
            Friendship.id == friendship_id,
            Friendship.addressee_id == addressee_id,
            Friendship.status == FriendshipStatus.pending,
        )
        .values(status=status, reject_reason=reject_reason, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        return None
    return session.get(Friendship, friendship_id, populate_existing=True)


def _notify_requester(
    session: Session, friendship: Friendship, *, actor: User, message: str | None
):
    notify(
        session,
        friendship=friendship,
        recipient_id=friendship.requester_id,
        type=NotificationType(friendship.status.value),
        actor=actor,
        message=message,
    )


def _open_conversation(session: Session, friendship: Friendship, *, actor: User):
    if friendship.conversation_id:
        return  # provisioned once per friendship
    conversation = provision_private_conversation(
        session,
        created_by=actor.id,
        members=(friendship.requester_id, friendship.addressee_id),
    )
    friendship.conversation_id = conversation.conversation_id
    session.add(friendship)


def handle_request(
    session: Session,
    *,
    user: User,
    friendship_id: int,
    action: str,
    message: str | None = None,
) -> Friendship:
    """Accept or decline a pending request addressed to `user`"""
    with unit_of_work(
        session, "handle_request", actor_id=user.id, target=friendship_id
    ):
        try:
            action = HandleAction(action)
        except ValueError:
            raise ValidationError("Invalid action") from None
        message = _clean_text(message, settings.MESSAGE_MAX_LENGTH, "Message")

        status = transition(FriendshipStatus.pending, FriendshipAction(action.value))
        # Only the addressee can answer, anything else looks like a missing request
        friendship = _claim_pending(
            session,
            friendship_id=friendship_id,
            addressee_id=user.id,
            status=status,
            reject_reason=message if action == HandleAction.decline else None,
        )
        if not friendship:
            raise NotFound("Friend request not found or already handled")

        effects = [partial(_notify_requester, actor=user, message=message)]
        if action == HandleAction.accept:
            effects.append(partial(_open_conversation, actor=user))

        for effect in effects:
            effect(session, friendship)
        session.flush()
        logger.info(f"Friend request {friendship.id} {status.value} by {user.id}")
    return friendship


@listing_retry()
def list_friends(session: Session, *, user: User) -> list[FriendView]:
    with unit_of_work(
        session, "list_friends", actor_id=user.id, read_only=True
    ):
        query = (
            select(Friendship, User)
            .join(
                User,
                or_(
                    and_(
                        Friendship.requester_id == user.id,
                        User.id == Friendship.addressee_id,
                    ),
                    and_(
                        Friendship.addressee_id == user.id,
                        User.id == Friendship.requester_id,
                    ),
                ),
            )
            .where(
                Friendship.status == FriendshipStatus.accepted,
                User.is_active == True,  # noqa: E712
            )
            .order_by(
                Friendship.is_starred.desc(),
                Friendship.last_message_at.desc().nulls_last(),
                User.last_seen_at.desc().nulls_last(),
                Friendship.id,
            )
        )
        return [
            FriendView(
                user_id=friend.id,
                uid=friend.uid,
                username=friend.username,
                nickname=friend.nickname,
                display_name=friendship.alias or friend.display_name,
                avatar_url=friend.avatar_url,
                is_online=is_online(friend.last_seen_at),
                last_seen_at=friend.last_seen_at,
                friend_since=friendship.created_at,
                friendship_id=friendship.id,
                conversation_id=friendship.conversation_id,
                is_starred=friendship.is_starred,
                is_muted=friendship.is_muted,
                unread_count=friendship.unread_count or 0,
                last_message_at=friendship.last_message_at,
            )
            for friendship, friend in session.exec(query).all()
        ]


def unfriend(session: Session, *, user_id: str, other_id: str) -> None:
    with unit_of_work(session, "remove_friend", actor_id=user_id, target=other_id):
        friendship = _accepted_friendship(session, user_id, other_id)
        purged = purge_for_friendship(session, friendship.id)
        if friendship.conversation_id:
            archive_conversation(session, friendship.conversation_id)
        session.delete(friendship)
        logger.info(
            f"Friendship {friendship.id} removed by {user_id} ({purged} notifications)"
        )


def update_settings(
    session: Session, *, user_id: str, other_id: str, changes: dict
) -> Friendship:
    """Partial update of alias/is_starred/is_muted, missing keys are left alone"""
    with unit_of_work(session, "update_settings", actor_id=user_id, target=other_id):
        friendship = _accepted_friendship(session, user_id, other_id)
        if "alias" in changes:
            friendship.alias = _clean_text(
                changes["alias"], settings.ALIAS_MAX_LENGTH, "Alias"
            )
        for flag in ("is_starred", "is_muted"):
            if flag in changes:
                if not isinstance(changes[flag], bool):
                    raise ValidationError(f"{flag} must be true or false")
                setattr(friendship, flag, changes[flag])
        friendship.updated_at = utcnow()
        session.add(friendship)
    return friendship


def _block_existing(session: Session, friendship: Friendship):
    friendship.status = transition(friendship.status, FriendshipAction.block)
    friendship.updated_at = utcnow()
    if friendship.conversation_id:
        archive_conversation(session, friendship.conversation_id)
    session.add(friendship)


def block_user(session: Session, *, user: User, other_id: str) -> Friendship:
    with unit_of_work(session, "block_user", actor_id=user.id, target=other_id):
        if other_id == user.id:
            raise SelfReference("You cannot block yourself")
        get_active_user(session, other_id)
        user_id = user.id

        friendship = find_friendship(session, user_id, other_id)
        if friendship is not None:
            _block_existing(session, friendship)
        else:
            friendship = Friendship.request(
                user_id,
                other_id,
                status=transition(None, FriendshipAction.block),
            )
            session.add(friendship)
            try:
                session.flush()
            except IntegrityError:
                # The pair was created since we looked: block that row instead
                session.rollback()
                friendship = find_friendship(session, user_id, other_id)
                if friendship is None:
                    raise
                logger.info(
                    f"Concurrent write between {user_id} and {other_id}, "
                    f"blocking the {friendship.status.value} pair"
                )
                _block_existing(session, friendship)
        session.flush()
        logger.info(f"{user_id} blocked {other_id}")
    return friendship


@listing_retry()
def list_notifications(
    session: Session, *, user_id: str, limit: int | None = None, offset: int = 0
) -> list[NotificationView]:
    with unit_of_work(
        session, "list_notifications", actor_id=user_id, read_only=True
    ):
        limit = settings.NOTIFICATIONS_PAGE_SIZE if limit is None else limit
        if limit < 1 or offset < 0:
            raise ValidationError("Invalid paging parameters")
        limit = min(limit, settings.NOTIFICATIONS_MAX_PAGE_SIZE)

        rows = notifications_with_sender(
            session, user_id=user_id, limit=limit, offset=offset
        )
        return [
            NotificationView(
                id=notification.id,
                type=notification.type,
                message=notification.message,
                is_read=notification.is_read,
                read_at=notification.read_at,
                created_at=notification.created_at,
                from_user=user_summary(sender),
            )
            for notification, sender in rows
        ]


def mark_notification_read(session: Session, *, user_id: str, notification_id: int):
    with unit_of_work(
        session, "mark_notification_read", actor_id=user_id, target=notification_id
    ):
        mark_read(session, user_id=user_id, notification_id=notification_id)
