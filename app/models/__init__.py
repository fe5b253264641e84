from app.models.user import User
from app.models.friend import FriendRequest
from app.models.post import Post, PostMedia, Comment
from app.models.notification import Notification
from app.models.message import Message

__all__ = ["User", "FriendRequest", "Post", "PostMedia", "Comment", "Notification", "Message"]
