import logging

from sqlmodel import Session, select

from models.common import utcnow
from models.conversation import (
    Conversation,
    ConversationParticipant,
    ConversationType,
    Message,
    ParticipantRole,
)
from services.errors import NotFound

logger = logging.getLogger("habitpals.conversations")


def provision_private_conversation(
    session: Session, *, created_by: str, members: tuple[str, str]
) -> Conversation:
    """Create a private conversation with both members as participants.

    Nothing is committed here; a failure leaves the caller's transaction to
    roll back.
    """
    conversation = Conversation(type=ConversationType.private, created_by=created_by)
    session.add(conversation)
    session.flush()  # we need the primary key for the participants

    now = utcnow()
    for user_id in members:
        session.add(
            ConversationParticipant(
                conversation_pk=conversation.id,
                user_id=user_id,
                role=ParticipantRole.member,
                joined_at=now,
            )
        )
    session.flush()
    logger.info(
        f"Provisioned conversation {conversation.conversation_id} for {members}"
    )
    return conversation


def get_conversation(session: Session, conversation_id: str) -> Conversation | None:
    return session.exec(
        select(Conversation).where(Conversation.conversation_id == conversation_id)
    ).first()


def archive_conversation(session: Session, conversation_id: str) -> bool:
    """Mark the conversation inactive, its messages are kept"""
    conversation = get_conversation(session, conversation_id)
    if not conversation:
        logger.warning(f"Conversation {conversation_id} not found, nothing to archive")
        return False
    if conversation.is_active:
        conversation.is_active = False
        conversation.updated_at = utcnow()
        session.add(conversation)
        logger.info(f"Archived conversation {conversation_id}")
    return True


def conversation_history(
    session: Session, *, conversation_id: str, user_id: str
) -> list[Message]:
    """Messages of a conversation, oldest first. Archived ones stay readable."""
    conversation = get_conversation(session, conversation_id)
    if not conversation:
        raise NotFound("Conversation not found")
    participant = session.exec(
        select(ConversationParticipant).where(
            ConversationParticipant.conversation_pk == conversation.id,
            ConversationParticipant.user_id == user_id,
        )
    ).first()
    if not participant:
        raise NotFound("Conversation not found")
    return list(
        session.exec(
            select(Message)
            .where(Message.conversation_pk == conversation.id)
            .order_by(Message.sent_at, Message.id)
        ).all()
    )
