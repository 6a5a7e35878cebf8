"""Expected failures of the friendship operations.

Each error knows the HTTP status it is rendered with; the app-level handler
turns it into the ``{"success": false, "message": ...}`` envelope.
"""


class FriendshipError(Exception):
    status_code = 500
    default_message = "Friendship operation failed"
    retryable = False

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        self.operation: str | None = None
        self.actor_id: str | None = None
        self.target: str | None = None
        super().__init__(self.message)

    def bind(self, operation: str, actor_id=None, target=None) -> "FriendshipError":
        """Attach the operation context, keeping the innermost one"""
        if self.operation is None:
            self.operation = operation
            self.actor_id = None if actor_id is None else str(actor_id)
            self.target = None if target is None else str(target)
        return self

    def context(self) -> str:
        return f"operation={self.operation} actor={self.actor_id} target={self.target}"


class NotFound(FriendshipError):
    status_code = 404
    default_message = "Not found"


class SelfReference(FriendshipError):
    status_code = 400
    default_message = "You cannot add yourself as a friend"


class ValidationError(FriendshipError):
    status_code = 400
    default_message = "Invalid request"


class AlreadyPending(FriendshipError):
    status_code = 409
    default_message = "A friend request is already pending"


class AlreadyFriends(FriendshipError):
    status_code = 409
    default_message = "You are already friends"


class CannotSend(FriendshipError):
    status_code = 409
    default_message = "Cannot send a friend request to this user"


class InvalidTransition(FriendshipError):
    status_code = 409
    default_message = "This action is not allowed in the current state"


class Unavailable(FriendshipError):
    status_code = 500
    default_message = "Service temporarily unavailable, please retry"
    retryable = True


class Internal(FriendshipError):
    status_code = 500
    default_message = "Internal server error"
