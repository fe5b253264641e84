from app.routers.auth import router as auth_router
from app.routers.users import router as users_router
from app.routers.friends import router as friends_router
from app.routers.posts import router as posts_router
from app.routers.comments import router as comments_router
from app.routers.notifications import router as notifications_router
from app.routers.messages import router as messages_router, ws_router as messages_ws_router

__all__ = [
    "auth_router",
    "users_router",
    "friends_router",
    "posts_router",
    "comments_router",
    "notifications_router",
    "messages_router",
    "messages_ws_router",
]
