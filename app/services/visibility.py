"""Post visibility decisions and the paginated feed."""

import math
from typing import Iterable, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from app.errors import AuthorizationError
from app.models.friend import FriendRequest
from app.models.post import Post
from app.models.user import User

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


def are_connected(db: Session, a_id: int, b_id: int) -> bool:
    """True when an accepted edge exists between the pair, in either direction."""
    edge = (
        db.query(FriendRequest.id)
        .filter(FriendRequest.status == "accepted")
        .filter(
            or_(
                and_(FriendRequest.sender_id == a_id, FriendRequest.receiver_id == b_id),
                and_(FriendRequest.sender_id == b_id, FriendRequest.receiver_id == a_id),
            )
        )
        .first()
    )
    return edge is not None


def connection_ids(db: Session, user_id: int) -> list[int]:
    edges = (
        db.query(FriendRequest)
        .filter(FriendRequest.status == "accepted")
        .filter(or_(FriendRequest.sender_id == user_id, FriendRequest.receiver_id == user_id))
        .all()
    )
    return [edge.receiver_id if edge.sender_id == user_id else edge.sender_id for edge in edges]


def can_view_post(db: Session, post: Post, viewer: Optional[User]) -> bool:
    if post.visibility == "public":
        return True
    if viewer is None:
        return False
    if post.author_id == viewer.id:
        return True
    if post.visibility == "connections":
        return are_connected(db, viewer.id, post.author_id)
    return False


def ensure_can_view(db: Session, post: Post, viewer: Optional[User]) -> None:
    if can_view_post(db, post, viewer):
        return
    if post.visibility == "connections":
        raise AuthorizationError("You need to be connected with the author to view this post")
    raise AuthorizationError("You are not authorized to view this post")


def contains_user(items: Optional[Iterable], user_id: Optional[int]) -> bool:
    """Membership test over a list of raw user ids or loaded user records."""
    if user_id is None or not items:
        return False
    for item in items:
        item_id = getattr(item, "id", item)
        if item_id is not None and str(item_id) == str(user_id):
            return True
    return False


def normalize_pagination(page: Optional[int], limit: Optional[int]) -> tuple[int, int, int]:
    page = max(1, page or 1)
    limit = max(1, min(MAX_PAGE_SIZE, limit or DEFAULT_PAGE_SIZE))
    return page, limit, (page - 1) * limit


def visible_posts_filter(db: Session, viewer: Optional[User]):
    """SQL condition matching the posts ``viewer`` may see."""
    if viewer is None:
        return Post.visibility == "public"

    conditions = [Post.visibility == "public", Post.author_id == viewer.id]
    partners = connection_ids(db, viewer.id)
    if partners:
        conditions.append(and_(Post.visibility == "connections", Post.author_id.in_(partners)))
    return or_(*conditions)


def feed_query(db: Session, viewer: Optional[User]):
    return db.query(Post).filter(visible_posts_filter(db, viewer))


def get_feed(db: Session, viewer: Optional[User], page: Optional[int] = None, limit: Optional[int] = None) -> dict:
    page, limit, skip = normalize_pagination(page, limit)
    query = feed_query(db, viewer)

    total_posts = query.count()
    total_pages = math.ceil(total_posts / limit)
    posts = (
        query.order_by(Post.created_at.desc(), Post.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return {
        "posts": posts,
        "pagination": {
            "page": page,
            "limit": limit,
            "total_posts": total_posts,
            "total_pages": total_pages,
            "has_next_page": page < total_pages,
        },
    }
