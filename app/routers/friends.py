from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.friend import (
    FriendRequestCreate,
    FriendRequestRespond,
    FriendRequestResponse,
    PendingFriendRequestResponse,
    FriendDirectoryEntry,
)
from app.schemas.user import UserSummary
from app.services import friends


router = APIRouter(prefix="/api/friends", tags=["friends"])


@router.post("/request", response_model=FriendRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_friend_request(
    payload: FriendRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return friends.send_friend_request(db, current_user, payload.receiver_id)


@router.get("/pending", response_model=list[PendingFriendRequestResponse])
async def get_pending_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return friends.list_pending_requests(db, current_user)


@router.get("/all", response_model=list[FriendDirectoryEntry])
async def get_user_directory(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return friends.list_directory(db, current_user)


@router.get("", response_model=list[UserSummary])
async def list_friends(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return friends.list_friends(db, current_user)


@router.patch("/{request_id}", response_model=FriendRequestResponse)
async def respond_to_request(
    request_id: int,
    payload: FriendRequestRespond,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return friends.respond_to_friend_request(db, request_id, current_user, payload.action)


@router.delete("/{friend_id}")
async def remove_friend(
    friend_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    friends.remove_friend(db, current_user, friend_id)
    return {"status": "ok"}
