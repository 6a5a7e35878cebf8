from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from models.auth import User
from models.common import get_session, utcnow
from models.views import (
    FriendRequestCreate,
    FriendSettingsUpdate,
    FriendView,
    HandleAction,
    HandleRequestBody,
    NotificationView,
    OperationResult,
    RequestView,
    UserSearchResult,
)
from routes.deps import current_user
from services.friendship import (
    block_user as svc_block_user,
    handle_request as svc_handle_request,
    list_friends as svc_list_friends,
    list_notifications as svc_list_notifications,
    list_requests as svc_list_requests,
    mark_notification_read as svc_mark_notification_read,
    request_friendship as svc_request_friendship,
    search_user as svc_search_user,
    unfriend as svc_unfriend,
    update_settings as svc_update_settings,
)

router = APIRouter(prefix="/friends")


@router.get("/health")
async def health():
    return {
        "success": True,
        "message": "Friends API is up",
        "timestamp": utcnow().isoformat(),
    }


@router.get("/search/{uid}", response_model=UserSearchResult)
async def search_user(
    uid: str,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    """Find a user by public UID, with the current relationship status"""
    return svc_search_user(session, user=user, uid=uid)


@router.post("/request", response_model=OperationResult)
async def send_friend_request(
    payload: FriendRequestCreate,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    svc_request_friendship(
        session, requester=user, target_uid=payload.uid, message=payload.message
    )
    return OperationResult(message="Friend request sent")


@router.get("/requests", response_model=list[RequestView])
async def friend_requests(
    request_type: str = Query("received", alias="type"),
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return svc_list_requests(session, user=user, direction=request_type)


@router.post("/requests/{request_id}/handle", response_model=OperationResult)
async def handle_friend_request(
    request_id: int,
    payload: HandleRequestBody,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    svc_handle_request(
        session,
        user=user,
        friendship_id=request_id,
        action=payload.action,
        message=payload.message,
    )
    accepted = payload.action == HandleAction.accept.value
    return OperationResult(
        message="Friend request accepted" if accepted else "Friend request declined"
    )


@router.get("/notifications", response_model=list[NotificationView])
async def friend_notifications(
    limit: int | None = None,
    offset: int = 0,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    return svc_list_notifications(session, user_id=user.id, limit=limit, offset=offset)


@router.post("/notifications/{notification_id}/read", response_model=OperationResult)
async def read_notification(
    notification_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    svc_mark_notification_read(
        session, user_id=user.id, notification_id=notification_id
    )
    return OperationResult()


@router.get("", response_model=list[FriendView])
async def list_friends(
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    """Friends, starred first then by latest activity"""
    return svc_list_friends(session, user=user)


@router.delete("/{other_user_id}", response_model=OperationResult)
async def remove_friend(
    other_user_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    svc_unfriend(session, user_id=user.id, other_id=other_user_id)
    return OperationResult(message="Friend removed")


@router.patch("/{other_user_id}/settings", response_model=OperationResult)
async def update_friend_settings(
    other_user_id: str,
    payload: FriendSettingsUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    svc_update_settings(
        session, user_id=user.id, other_id=other_user_id, changes=payload.provided()
    )
    return OperationResult(message="Friend settings updated")


@router.post("/{other_user_id}/block", response_model=OperationResult)
async def block_user(
    other_user_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(current_user),
):
    svc_block_user(session, user=user, other_id=other_user_id)
    return OperationResult(message="User blocked")
