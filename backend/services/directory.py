"""Read-only lookups against the identity directory"""

import datetime
import re

from sqlmodel import Session, select

import settings
from models.auth import User
from models.common import utcnow
from models.views import UserSummary
from services.errors import NotFound, ValidationError

UID_RE = re.compile(r"^[A-Za-z0-9]+$")

# Same message for missing and disabled accounts, don't leak existence
USER_NOT_FOUND = "User not found"


def clean_uid(uid: str | None) -> str:
    uid = (uid or "").strip()
    if not uid:
        raise ValidationError("UID cannot be empty")
    if len(uid) > settings.UID_MAX_LENGTH or not UID_RE.match(uid):
        raise ValidationError("Invalid UID")
    return uid


def get_active_user_by_uid(session: Session, uid: str) -> User:
    user = session.exec(select(User).where(User.uid == clean_uid(uid))).first()
    if not user or not user.is_active:
        raise NotFound(USER_NOT_FOUND)
    return user


def get_active_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise NotFound(USER_NOT_FOUND)
    return user


def is_online(
    last_seen_at: datetime.datetime | None, now: datetime.datetime | None = None
) -> bool:
    if last_seen_at is None:
        return False
    if last_seen_at.tzinfo is None:
        last_seen_at = last_seen_at.replace(tzinfo=datetime.timezone.utc)
    now = now or utcnow()
    window = datetime.timedelta(seconds=settings.ONLINE_WINDOW_SECONDS)
    return now - last_seen_at < window


def user_summary(user: User) -> UserSummary:
    return UserSummary(
        user_id=user.id,
        uid=user.uid,
        username=user.username,
        nickname=user.nickname,
        avatar_url=user.avatar_url,
        is_online=is_online(user.last_seen_at),
    )
