"""Post creation, editing, deletion and the like/bookmark/share counters."""

import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.errors import ValidationError, NotFoundError, AuthorizationError
from app.models.post import Post, PostMedia, Comment, VISIBILITIES, MEDIA_TYPES
from app.models.user import User
from app.schemas.post import PostCreate, PostUpdate, MediaItem
from app.services import notifications
from app.services.media import MediaStorage, delete_quietly, storage_id_from_url
from app.services.visibility import contains_user, ensure_can_view, visible_posts_filter

logger = logging.getLogger(__name__)


def serialize_post(post: Post, viewer: Optional[User] = None) -> dict:
    viewer_id = viewer.id if viewer else None
    return {
        "id": post.id,
        "author": post.author,
        "content": post.content or "",
        "visibility": post.visibility,
        "media": post.media,
        "likes_count": len(post.likers),
        "comments_count": len(post.comments),
        "shares_count": post.shares_count or 0,
        "is_liked": contains_user(post.likers, viewer_id),
        "is_bookmarked": contains_user(post.bookmarked_by, viewer_id),
        "created_at": post.created_at,
        "updated_at": post.updated_at,
    }


def get_post(db: Session, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if not post:
        raise NotFoundError("Post not found")
    return post


def get_visible_post(db: Session, post_id: int, viewer: Optional[User]) -> Post:
    post = get_post(db, post_id)
    ensure_can_view(db, post, viewer)
    return post


def ensure_can_modify(post_or_comment, user: User, action: str) -> None:
    if post_or_comment.author_id != user.id and not user.is_admin:
        raise AuthorizationError(f"You don't have permission to {action}")


def _validate_visibility(visibility: str) -> None:
    if visibility not in VISIBILITIES:
        raise ValidationError("Invalid visibility option. Must be 'private', 'public', or 'connections'")


def _build_media(items: list[MediaItem]) -> list[PostMedia]:
    media = []
    for item in items:
        if item.type not in MEDIA_TYPES:
            raise ValidationError(f"Invalid media type: {item.type}")
        media.append(
            PostMedia(
                url=item.url,
                storage_id=item.storage_id or storage_id_from_url(item.url),
                type=item.type,
            )
        )
    return media


def create_post(db: Session, author: User, payload: PostCreate) -> Post:
    content = (payload.content or "").strip()
    if not content and not payload.media:
        raise ValidationError("Post must contain either text content or at least one media item")
    _validate_visibility(payload.visibility)

    post = Post(
        author_id=author.id,
        content=content,
        visibility=payload.visibility,
        media=_build_media(payload.media),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("User %s created post %s (%s)", author.id, post.id, post.visibility)

    notifications.notify_new_post(db, author, post)
    return post


def update_post(db: Session, post_id: int, user: User, payload: PostUpdate, storage: MediaStorage) -> Post:
    post = get_post(db, post_id)
    ensure_can_modify(post, user, "edit this post")

    if payload.visibility is not None:
        _validate_visibility(payload.visibility)
    new_media = _build_media(payload.media)

    to_delete = set(payload.media_to_delete)
    removed = [m for m in post.media if m.storage_id in to_delete]
    removed_ids = [m.storage_id for m in removed]
    content = post.content if payload.content is None else payload.content.strip()
    remaining = len(post.media) - len(removed) + len(new_media)
    if not content and remaining == 0:
        raise ValidationError("Post must contain either text content or at least one media item")

    post.content = content
    if payload.visibility is not None:
        post.visibility = payload.visibility
    for media in removed:
        post.media.remove(media)
    post.media.extend(new_media)
    db.commit()
    db.refresh(post)

    for storage_id in removed_ids:
        delete_quietly(storage, storage_id)
    return post


def delete_post(db: Session, post_id: int, user: User, storage: MediaStorage) -> None:
    post = get_post(db, post_id)
    ensure_can_modify(post, user, "delete this post")

    for media in post.media:
        delete_quietly(storage, media.storage_id)

    for comment in db.query(Comment).filter(Comment.post_id == post.id).all():
        db.delete(comment)
    db.delete(post)
    db.commit()
    logger.info("Post %s deleted by user %s", post_id, user.id)


def toggle_like(db: Session, post_id: int, user: User) -> dict:
    post = get_visible_post(db, post_id, user)
    liked = not contains_user(post.likers, user.id)
    if liked:
        post.likers.append(user)
    else:
        post.likers.remove(user)
    db.commit()
    result = {"likes_count": len(post.likers), "is_liked": liked}

    if liked:
        notifications.notify_post_liked(db, user.id, post)
    return result


def toggle_bookmark(db: Session, post_id: int, user: User) -> dict:
    post = get_visible_post(db, post_id, user)
    bookmarked = not contains_user(post.bookmarked_by, user.id)
    if bookmarked:
        post.bookmarked_by.append(user)
    else:
        post.bookmarked_by.remove(user)
    db.commit()
    return {"is_bookmarked": bookmarked}


def is_bookmarked(db: Session, post_id: int, user: User) -> bool:
    return contains_user(get_visible_post(db, post_id, user).bookmarked_by, user.id)


def list_bookmarks(db: Session, user: User) -> list[Post]:
    """Bookmarked posts the user can still see."""
    return (
        db.query(Post)
        .filter(Post.bookmarked_by.any(User.id == user.id))
        .filter(visible_posts_filter(db, user))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def list_user_posts(db: Session, user: User) -> list[Post]:
    return (
        db.query(Post)
        .filter(Post.author_id == user.id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def record_share(db: Session, post_id: int, user: User) -> int:
    post = get_visible_post(db, post_id, user)
    post.shares_count = (post.shares_count or 0) + 1
    db.commit()
    return post.shares_count


def get_shares_count(db: Session, post_id: int, viewer: Optional[User]) -> int:
    return get_visible_post(db, post_id, viewer).shares_count or 0
