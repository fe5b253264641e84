"""Comments, one level of replies, and comment likes."""

import logging
from typing import Optional
from sqlalchemy.orm import Session
from app.errors import ValidationError, NotFoundError
from app.models.post import Comment
from app.models.user import User
from app.services import notifications
from app.services.posts import get_visible_post, ensure_can_modify
from app.services.visibility import contains_user

logger = logging.getLogger(__name__)


def serialize_comment(comment: Comment, viewer: Optional[User] = None) -> dict:
    return {
        "id": comment.id,
        "author": comment.author,
        "post_id": comment.post_id,
        "content": comment.content,
        "parent_comment_id": comment.parent_comment_id,
        "replies_count": len(comment.replies),
        "likes_count": comment.likes_count or 0,
        "is_liked": contains_user(comment.likers, viewer.id if viewer else None),
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


def _require_content(content: Optional[str], label: str = "Comment") -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError(f"{label} content is required")
    return content


def get_comment(db: Session, comment_id: int) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


def get_visible_comment(db: Session, comment_id: int, viewer: Optional[User]) -> Comment:
    """A comment, provided the viewer can see the post it belongs to."""
    comment = get_comment(db, comment_id)
    get_visible_post(db, comment.post_id, viewer)
    return comment


def add_comment(db: Session, post_id: int, author: User, content: str) -> Comment:
    content = _require_content(content)
    post = get_visible_post(db, post_id, author)

    comment = Comment(author_id=author.id, post_id=post.id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)

    notifications.notify_post_commented(db, author.id, post, content)
    return comment


def add_reply(db: Session, parent_comment_id: int, author: User, content: str) -> Comment:
    content = _require_content(content, "Reply")
    parent = db.query(Comment).filter(Comment.id == parent_comment_id).first()
    if not parent:
        raise NotFoundError("Parent comment not found")
    get_visible_post(db, parent.post_id, author)

    reply = Comment(
        author_id=author.id,
        post_id=parent.post_id,
        content=content,
        parent_comment_id=parent.id,
    )
    db.add(reply)
    db.commit()
    db.refresh(reply)
    return reply


def list_comments(db: Session, post_id: int, viewer: Optional[User]) -> list[Comment]:
    get_visible_post(db, post_id, viewer)
    return (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .filter(Comment.parent_comment_id.is_(None))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .all()
    )


def list_replies(db: Session, comment_id: int, viewer: Optional[User]) -> list[Comment]:
    get_visible_comment(db, comment_id, viewer)
    return (
        db.query(Comment)
        .filter(Comment.parent_comment_id == comment_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )


def toggle_comment_like(db: Session, comment_id: int, user: User) -> dict:
    comment = get_visible_comment(db, comment_id, user)
    liked = not contains_user(comment.likers, user.id)
    if liked:
        comment.likers.append(user)
    else:
        comment.likers.remove(user)
    comment.likes_count = len(comment.likers)
    db.commit()
    return {"likes_count": comment.likes_count, "is_liked": liked}


def update_comment(db: Session, comment_id: int, user: User, content: str) -> Comment:
    comment = get_comment(db, comment_id)
    ensure_can_modify(comment, user, "update this comment")
    comment.content = _require_content(content)
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment_id: int, user: User) -> None:
    """Delete a comment. Its replies are left in place."""
    comment = get_comment(db, comment_id)
    ensure_can_modify(comment, user, "delete this comment")
    db.delete(comment)
    db.commit()
    logger.info("Comment %s deleted by user %s", comment_id, user.id)
