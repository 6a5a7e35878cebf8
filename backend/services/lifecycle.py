"""The friendship state machine.

    (none)  --request-->  pending
    pending --accept-->   accepted
    pending --decline-->  declined
    any     --block-->    blocked

Requests against an existing relationship fail with the conflict matching its
current status; re-requesting after a decline or a block is not allowed.
"""

from enum import Enum

from models.friendship import FriendshipStatus
from services.errors import (
    AlreadyFriends,
    AlreadyPending,
    CannotSend,
    InvalidTransition,
)


class FriendshipAction(str, Enum):
    request = "request"
    accept = "accept"
    decline = "decline"
    block = "block"


_REQUEST_CONFLICTS = {
    FriendshipStatus.pending: AlreadyPending,
    FriendshipStatus.accepted: AlreadyFriends,
    FriendshipStatus.declined: CannotSend,
    FriendshipStatus.blocked: CannotSend,
}

_TRANSITIONS = {
    (None, FriendshipAction.request): FriendshipStatus.pending,
    (FriendshipStatus.pending, FriendshipAction.accept): FriendshipStatus.accepted,
    (FriendshipStatus.pending, FriendshipAction.decline): FriendshipStatus.declined,
}


def transition(
    current: FriendshipStatus | None, action: FriendshipAction
) -> FriendshipStatus:
    """Return the status reached by applying `action`, or raise"""
    if action == FriendshipAction.block:
        return FriendshipStatus.blocked
    if action == FriendshipAction.request and current is not None:
        raise _REQUEST_CONFLICTS[current]()
    try:
        return _TRANSITIONS[(current, action)]
    except KeyError:
        current_name = current.value if current else "none"
        raise InvalidTransition(
            f"Cannot {action.value} a friendship that is {current_name}"
        ) from None


def request_conflict(status: FriendshipStatus) -> Exception:
    """The error a new request gets when a relationship in `status` exists"""
    return _REQUEST_CONFLICTS[status]()
