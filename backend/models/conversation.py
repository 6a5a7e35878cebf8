"""Conversation models.

Conversations and messages belong to the chat service; the friendship flow
only provisions private conversations and archives them.
"""

import datetime
import uuid
from enum import Enum

from sqlalchemy import Column, UniqueConstraint, Index
from sqlmodel import SQLModel, Field

from models.common import utcnow
from models.types import UtcAwareDateTime


class ConversationType(str, Enum):
    private = "private"
    group = "group"


class ParticipantRole(str, Enum):
    member = "member"
    admin = "admin"


def new_conversation_id() -> str:
    return str(uuid.uuid4())


class Conversation(SQLModel, table=True):
    __tablename__ = "conversations"

    id: int | None = Field(default=None, primary_key=True)
    conversation_id: str = Field(
        default_factory=new_conversation_id, index=True, unique=True
    )
    type: ConversationType = Field(default=ConversationType.private, index=True)
    created_by: str | None = Field(default=None, foreign_key="users.id")
    is_active: bool = True
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


class ConversationParticipant(SQLModel, table=True):
    __tablename__ = "conversation_participants"
    __table_args__ = (
        UniqueConstraint(
            "conversation_pk", "user_id", name="uq_conversation_participant"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    conversation_pk: int = Field(foreign_key="conversations.id", ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", index=True)
    role: ParticipantRole = Field(default=ParticipantRole.member)
    joined_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )


class Message(SQLModel, table=True):
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_sent", "conversation_pk", "sent_at"),
    )

    id: int | None = Field(default=None, primary_key=True)
    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()), unique=True)
    conversation_pk: int = Field(foreign_key="conversations.id", ondelete="CASCADE")
    sender_id: str | None = Field(default=None, foreign_key="users.id", index=True)
    content: str
    sent_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UtcAwareDateTime(), nullable=False),
    )
