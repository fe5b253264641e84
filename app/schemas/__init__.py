from app.schemas.user import (
    UserCreate,
    UserLogin,
    UserResponse,
    UserSummary,
    TokenResponse,
    RefreshTokenRequest,
)
from app.schemas.friend import FriendRequestCreate, FriendRequestResponse
from app.schemas.post import PostCreate, PostResponse, CommentCreate, CommentResponse
from app.schemas.notification import NotificationResponse
from app.schemas.message import MessageCreate, MessageResponse

__all__ = [
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserSummary",
    "TokenResponse",
    "RefreshTokenRequest",
    "FriendRequestCreate",
    "FriendRequestResponse",
    "PostCreate",
    "PostResponse",
    "CommentCreate",
    "CommentResponse",
    "NotificationResponse",
    "MessageCreate",
    "MessageResponse",
]
