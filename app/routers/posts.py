from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, get_current_user_optional
from app.models.user import User
from app.schemas.post import (
    PostCreate,
    PostUpdate,
    PostResponse,
    FeedResponse,
    LikeToggleResponse,
    BookmarkResponse,
    ShareResponse,
    CommentCreate,
    CommentResponse,
)
from app.services import posts, comments
from app.services.media import MediaStorage, get_media_storage
from app.services.visibility import get_feed

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = posts.create_post(db, current_user, payload)
    return posts.serialize_post(post, current_user)


@router.get("", response_model=FeedResponse)
async def list_feed(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """Feed of the posts visible to the caller, newest first."""
    feed = get_feed(db, current_user, page, limit)
    return {
        "items": [posts.serialize_post(post, current_user) for post in feed["posts"]],
        "pagination": feed["pagination"],
    }


@router.get("/mine", response_model=list[PostResponse])
async def list_my_posts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [posts.serialize_post(p, current_user) for p in posts.list_user_posts(db, current_user)]


@router.get("/bookmarks", response_model=list[PostResponse])
async def list_bookmarked_posts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return [posts.serialize_post(p, current_user) for p in posts.list_bookmarks(db, current_user)]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    post = posts.get_visible_post(db, post_id, current_user)
    return posts.serialize_post(post, current_user)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    payload: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: MediaStorage = Depends(get_media_storage),
):
    post = posts.update_post(db, post_id, current_user, payload, storage)
    return posts.serialize_post(post, current_user)


@router.delete("/{post_id}")
async def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: MediaStorage = Depends(get_media_storage),
):
    posts.delete_post(db, post_id, current_user, storage)
    return {"status": "ok"}


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return posts.toggle_like(db, post_id, current_user)


@router.post("/{post_id}/bookmark", response_model=BookmarkResponse)
async def toggle_bookmark(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return posts.toggle_bookmark(db, post_id, current_user)


@router.get("/{post_id}/bookmark", response_model=BookmarkResponse)
async def get_bookmark_status(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"is_bookmarked": posts.is_bookmarked(db, post_id, current_user)}


@router.post("/{post_id}/share", response_model=ShareResponse)
async def share_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"shares_count": posts.record_share(db, post_id, current_user)}


@router.get("/{post_id}/shares", response_model=ShareResponse)
async def get_share_count(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    return {"shares_count": posts.get_shares_count(db, post_id, current_user)}


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def list_post_comments(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    post_comments = comments.list_comments(db, post_id, current_user)
    return [comments.serialize_comment(c, current_user) for c in post_comments]


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: int,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    comment = comments.add_comment(db, post_id, current_user, payload.content)
    return comments.serialize_comment(comment, current_user)
